"""Mini README: Owner-scoped orchestration over an injected repository.

Structure:
    * TrackerService - contract setup and closure, entry bookkeeping,
      journey start/finish/edit/delete with reconciliation, and the
      dashboard/report queries.

The service is where ordering guarantees live: a journey's closing edit and
its reconciliation are written inside one ``atomic`` block, so aggregates
read afterwards always see the reconciled wallet. Automatic entries can only
be created, replaced or removed through reconciliation and journey deletion.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional

from ..civil_time import InstantLike, now as civil_now, parse_instant
from ..configuration import get_settings
from ..contracts import Contract, ContractStatus, VehicleType, effective_status
from ..errors import AutomaticEntryError, JourneyStateError, NotFoundError, ReconciliationError, ValidationError
from ..journeys import (
    MigrationReport,
    ReconciliationResult,
    backfill_contract_ids,
    cascade_entry_ids,
    close_journey,
    edit_journey,
    find_open_journey,
    open_journey,
    reconcile_journey,
    relink_legacy_recharges,
)
from ..ledger import Entry, EntryKind, EntryOrigin, Journey, Platform, wallet_balance
from ..logging_utils import get_logger
from ..stats import DailyStats, PeriodReport, ReportRange, daily_stats, group_day_activities, period_report
from ..storage import TrackerRepository

LOGGER = get_logger(__name__)

CONTRACT_EDITABLE_FIELDS = frozenset(
    {
        "contract_value",
        "car_installment",
        "profit_goal",
        "current_odometer",
        "app_balance",
        "vehicle_name",
        "vehicle_plate",
        "contract_end",
    }
)
ENTRY_EDITABLE_FIELDS = frozenset(
    {
        "kind",
        "amount",
        "occurred_at",
        "category",
        "description",
        "platform",
        "discount",
        "price_per_liter",
        "km_recorded",
        "is_recharge",
    }
)


class TrackerService:
    """Apply the driver's actions to a repository for a single owner."""

    def __init__(self, repository: TrackerRepository, owner_id: str) -> None:
        self.repository = repository
        self.owner_id = owner_id

    # Contracts

    def contracts(self) -> List[Contract]:
        return self.repository.list_contracts(self.owner_id)

    def active_contract(self, at: Optional[InstantLike] = None) -> Optional[Contract]:
        """The owner's active or upcoming contract, if any."""

        for contract in self.contracts():
            if effective_status(contract, at) in {ContractStatus.ACTIVE, ContractStatus.FUTURE}:
                return contract
        return None

    def _require_active_contract(self) -> Contract:
        contract = self.active_contract()
        if contract is None:
            raise ValidationError(f"Owner {self.owner_id} has no active contract")
        return contract

    def add_contract(
        self,
        *,
        vehicle_type: VehicleType,
        contract_start: InstantLike,
        contract_end: InstantLike,
        contract_value: float,
        profit_goal: float = 0.0,
        car_installment: float = 0.0,
        current_odometer: float = 0.0,
        app_balance: float = 0.0,
        vehicle_name: str = "",
        vehicle_plate: Optional[str] = None,
    ) -> Contract:
        """Register a new contract; only one may be unfinished at a time."""

        if self.active_contract() is not None:
            raise ValidationError("Finish the current contract before creating a new one")
        start = parse_instant(contract_start)
        end = parse_instant(contract_end)
        _check_contract_terms(vehicle_type, car_installment, start, end)

        contract = Contract(
            contract_id=self.repository.next_id("contract"),
            owner_id=self.owner_id,
            vehicle_type=vehicle_type,
            status=ContractStatus.FUTURE if civil_now() < start else ContractStatus.ACTIVE,
            contract_start=start,
            contract_end=end,
            contract_value=contract_value,
            car_installment=car_installment,
            profit_goal=profit_goal,
            current_odometer=current_odometer,
            app_balance=app_balance,
            vehicle_name=vehicle_name,
            vehicle_plate=vehicle_plate,
        )
        self.repository.save_contract(contract)
        LOGGER.info("Created %s contract %s", vehicle_type.value, contract.contract_id)
        return contract

    def update_contract(self, **changes: Any) -> Contract:
        """Edit balance, odometer or terms of the active contract."""

        contract = self._require_active_contract()
        unsupported = set(changes) - CONTRACT_EDITABLE_FIELDS
        if unsupported:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unsupported))}")
        if "contract_end" in changes:
            changes["contract_end"] = parse_instant(changes["contract_end"])
        updated = replace(contract, **changes)
        _check_contract_terms(
            updated.vehicle_type, updated.car_installment, updated.contract_start, updated.contract_end
        )
        self.repository.save_contract(updated)
        LOGGER.info("Updated contract %s fields=%s", contract.contract_id, sorted(changes))
        return updated

    def close_contract(self, at: Optional[InstantLike] = None) -> Contract:
        """Mark the active contract finished, ending its window now."""

        contract = self._require_active_contract()
        if find_open_journey(self.journeys(contract), contract.contract_id) is not None:
            raise JourneyStateError("Finish the open journey before closing the contract")
        finished = contract.finish(at if at is not None else civil_now())
        self.repository.save_contract(finished)
        return finished

    def delete_contract(self, contract_id: str) -> None:
        """Delete a contract that no entry or journey references."""

        contract = self.repository.get_contract(contract_id)
        if contract.owner_id != self.owner_id:
            raise NotFoundError(f"Contract {contract_id} not found")
        if self.repository.list_entries(contract_id=contract_id) or self.repository.list_journeys(
            contract_id=contract_id
        ):
            raise ValidationError(f"Contract {contract_id} still has entries or journeys")
        self.repository.delete_contract(contract_id)
        LOGGER.info("Deleted contract %s", contract_id)

    # Entries

    def entries(self, contract: Optional[Contract] = None) -> List[Entry]:
        contract = contract or self.active_contract()
        if contract is None:
            return []
        return self.repository.list_entries(self.owner_id, contract.contract_id)

    def _get_owned_entry(self, entry_id: str) -> Entry:
        entry = self.repository.get_entry(entry_id)
        if entry.owner_id != self.owner_id:
            raise NotFoundError(f"Entry {entry_id} not found")
        if entry.is_automatic:
            raise AutomaticEntryError(
                "Automatic entries are managed through their journey; edit or delete the journey instead"
            )
        return entry

    def add_entry(
        self,
        kind: EntryKind,
        amount: float,
        *,
        occurred_at: Optional[InstantLike] = None,
        category: str = "",
        description: str = "",
        platform: Optional[Platform] = None,
        journey_id: Optional[str] = None,
        is_recharge: bool = False,
        origin: Optional[EntryOrigin] = None,
        discount: Optional[float] = None,
        price_per_liter: Optional[float] = None,
        km_recorded: Optional[float] = None,
    ) -> Entry:
        """Record a manual entry against the active contract.

        Recharges made while a journey is open are linked to that journey so
        its reconciliation counts them.
        """

        if origin is EntryOrigin.AUTOMATIC:
            raise AutomaticEntryError("Automatic entries are produced by journey reconciliation only")
        contract = self._require_active_contract()

        if kind is EntryKind.APP_RECHARGE and journey_id is None:
            open_one = find_open_journey(self.journeys(contract), contract.contract_id)
            if open_one is not None:
                journey_id = open_one.journey_id
        if origin is None:
            wallet_credit = kind is EntryKind.APP_RECHARGE or is_recharge
            origin = EntryOrigin.MANUAL_RECHARGE if wallet_credit else EntryOrigin.MANUAL

        entry = Entry(
            entry_id=self.repository.next_id("entry"),
            owner_id=self.owner_id,
            contract_id=contract.contract_id,
            kind=kind,
            amount=amount,
            occurred_at=parse_instant(occurred_at) if occurred_at is not None else civil_now(),
            category=category,
            description=description,
            platform=platform,
            journey_id=journey_id,
            is_recharge=is_recharge,
            origin=origin,
            discount=discount,
            price_per_liter=price_per_liter,
            km_recorded=km_recorded,
        )
        with self.repository.atomic():
            self.repository.save_entry(entry)
            self._reconcile_linked_journey(entry)
        LOGGER.info("Recorded %s entry %s of %.2f", kind.value, entry.entry_id, amount)
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> Entry:
        entry = self._get_owned_entry(entry_id)
        unsupported = set(changes) - ENTRY_EDITABLE_FIELDS
        if unsupported:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unsupported))}")
        if changes.get("occurred_at") is not None:
            changes["occurred_at"] = parse_instant(changes["occurred_at"])
        updated = replace(entry, **changes)
        with self.repository.atomic():
            self.repository.save_entry(updated)
            self._reconcile_linked_journey(entry, updated)
        return updated

    def delete_entry(self, entry_id: str) -> None:
        entry = self._get_owned_entry(entry_id)
        with self.repository.atomic():
            self.repository.delete_entries([entry_id])
            self._reconcile_linked_journey(entry)
        LOGGER.info("Deleted entry %s", entry_id)

    def wallet_balance(self) -> float:
        return wallet_balance(self.entries())

    # Journeys

    def journeys(self, contract: Optional[Contract] = None) -> List[Journey]:
        contract = contract or self.active_contract()
        if contract is None:
            return []
        return self.repository.list_journeys(self.owner_id, contract.contract_id)

    def open_journey(self) -> Optional[Journey]:
        contract = self.active_contract()
        if contract is None:
            return None
        return find_open_journey(self.journeys(contract), contract.contract_id)

    def start_journey(
        self, *, km_start: Optional[float] = None, started_at: Optional[InstantLike] = None
    ) -> Journey:
        contract = self._require_active_contract()
        journey = open_journey(
            contract,
            self.journeys(contract),
            self.repository.next_id("journey"),
            started_at=started_at,
            km_start=km_start,
        )
        return self.repository.save_journey(journey)

    def finish_journey(
        self,
        *,
        km_end: float,
        balance_end: float,
        ended_at: Optional[InstantLike] = None,
    ) -> ReconciliationResult:
        """Close the open journey and reconcile it in one unit."""

        journey = self.open_journey()
        if journey is None:
            raise JourneyStateError("There is no open journey to finish")
        closed = close_journey(journey, km_end=km_end, balance_end=balance_end, ended_at=ended_at)
        with self.repository.atomic():
            self.repository.save_journey(closed)
            return self._reconcile(closed)

    def update_journey(self, journey_id: str, **changes: Any) -> ReconciliationResult:
        """Edit a closed journey and reconcile it again."""

        journey = self._get_owned_journey(journey_id)
        edited = edit_journey(journey, **changes)
        with self.repository.atomic():
            self.repository.save_journey(edited)
            return self._reconcile(edited)

    def delete_journey(self, journey_id: str) -> List[str]:
        """Delete a closed journey together with every entry linked to it."""

        journey = self._get_owned_journey(journey_id)
        if not journey.closed:
            raise JourneyStateError("Finish the journey before deleting it")
        removed = list(cascade_entry_ids(journey_id, self.repository.list_entries(self.owner_id)))
        with self.repository.atomic():
            self.repository.delete_entries(removed)
            self.repository.delete_journey(journey_id)
        LOGGER.info("Deleted journey %s with %s linked entries", journey_id, len(removed))
        return removed

    def _get_owned_journey(self, journey_id: str) -> Journey:
        journey = self.repository.get_journey(journey_id)
        if journey.owner_id != self.owner_id:
            raise NotFoundError(f"Journey {journey_id} not found")
        return journey

    def _reconcile(self, journey: Journey) -> ReconciliationResult:
        if journey.contract_id is None:
            raise ReconciliationError(f"Journey {journey.journey_id} has no owning contract")
        try:
            contract = self.repository.get_contract(journey.contract_id)
        except NotFoundError as error:
            raise ReconciliationError(f"Journey {journey.journey_id} has no owning contract") from error

        result = reconcile_journey(
            journey, contract, self.repository.list_entries(contract_id=contract.contract_id)
        )
        self.repository.delete_entries(result.removed_entry_ids)
        if result.automatic_entry is not None:
            self.repository.save_entry(result.automatic_entry)
        self.repository.save_contract(result.contract)
        return result

    def _reconcile_linked_journey(self, *versions: Entry) -> None:
        """Re-run reconciliation when a recharge of a closed journey changes.

        ``versions`` holds the entry before and after an edit, so a recharge
        that stops being one, or moves to another journey, still refreshes
        the journey it used to credit.
        """

        journey_ids: List[str] = []
        for entry in versions:
            if entry.journey_id is None or not entry.is_wallet_credit:
                continue
            if entry.journey_id not in journey_ids:
                journey_ids.append(entry.journey_id)
        for journey_id in journey_ids:
            try:
                journey = self.repository.get_journey(journey_id)
            except NotFoundError as error:
                raise ValidationError(f"Entry {versions[-1].entry_id} links to unknown journey") from error
            if journey.closed:
                self._reconcile(journey)

    # Migrations

    def migrate_legacy_records(self, at: Optional[InstantLike] = None) -> MigrationReport:
        """Backfill contract ids and relink recharges for this owner, once."""

        contracts = self.contracts()
        entries, journeys, contract_report = backfill_contract_ids(
            contracts,
            self.repository.list_entries(self.owner_id),
            self.repository.list_journeys(self.owner_id),
        )
        entries, relink_report = relink_legacy_recharges(journeys, entries, at=at)
        with self.repository.atomic():
            for journey in journeys:
                self.repository.save_journey(journey)
            for entry in entries:
                self.repository.save_entry(entry)
        return MigrationReport(
            updated_ids=contract_report.updated_ids + relink_report.updated_ids,
            ambiguous_ids=relink_report.ambiguous_ids,
        )

    # Queries

    def report_contract(self) -> Optional[Contract]:
        """Contract shown on reports: the active one, else the most recent."""

        contract = self.active_contract()
        if contract is not None:
            return contract
        contracts = self.contracts()
        return contracts[0] if contracts else None

    def daily_stats(self, day: Optional[InstantLike] = None) -> DailyStats:
        contract = self.active_contract()
        return daily_stats(
            day if day is not None else civil_now(),
            contract,
            self.entries(contract),
            self.journeys(contract),
        )

    def dashboard(self, day: Optional[InstantLike] = None) -> Dict[str, Any]:
        """Everything the home screen needs for ``day``."""

        reference = day if day is not None else civil_now()
        contract = self.active_contract()
        entries = self.entries(contract)
        stats = daily_stats(reference, contract, entries, self.journeys(contract))
        open_one = self.open_journey()
        return {
            "contract": contract.as_dict() if contract else None,
            "stats": stats.as_dict(),
            "wallet_balance": wallet_balance(entries),
            "activities": group_day_activities(reference, entries),
            "open_journey": open_one.as_dict() if open_one else None,
        }

    def period_report(
        self,
        report_range: Optional[ReportRange] = None,
        platform: Optional[Platform] = None,
    ) -> PeriodReport:
        contract = self.report_contract()
        if report_range is None:
            report_range = ReportRange.last_days(get_settings().default_report_days)
        return period_report(
            report_range,
            contract,
            self.entries(contract),
            self.journeys(contract),
            platform=platform,
        )



def _check_contract_terms(
    vehicle_type: VehicleType, car_installment: float, start: InstantLike, end: InstantLike
) -> None:
    if vehicle_type is VehicleType.RENTED and car_installment:
        raise ValidationError("Car installments only apply to owned vehicles")
    if parse_instant(end) <= parse_instant(start):
        raise ValidationError("Contract must end after it starts")
