"""Mini README: Wallet reconciliation for closed journeys.

Structure:
    * automatic_entry_id - deterministic entry id owned by a journey.
    * recharges_in_journey - wallet credits explicitly linked to a journey.
    * ReconciliationResult - derived automatic entry and contract update.
    * reconcile_journey - compute the result for a closed journey.
    * cascade_entry_ids - entries to delete together with a journey.

When a journey closes the wallet credit consumed during the shift is
``balance_start + recharges - balance_end``. A positive amount becomes a
single automatic APP_TAX entry whose id is derived from the journey id, so
running reconciliation again replaces it instead of adding another one. A
zero or negative amount removes any previous automatic entry. Only entries
linked through ``journey_id`` count as recharges; unlinked legacy entries are
handled once by ``journeys.migration``.

The engine never mutates its inputs. Invalid journeys or a missing contract
raise ``ReconciliationError`` before anything is produced.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Tuple

from ..contracts import Contract
from ..errors import ReconciliationError, ValidationError
from ..ledger import Entry, EntryKind, EntryOrigin, Journey
from ..logging_utils import get_logger
from .lifecycle import validate_closed_journey

LOGGER = get_logger(__name__)

AUTOMATIC_ENTRY_NAMESPACE = uuid.UUID("6f1c2b7e-9a43-5d0e-8b2f-3c4d5e6f7a81")
AUTOMATIC_ENTRY_CATEGORY = "App balance used"


def automatic_entry_id(journey_id: str) -> str:
    """Map a journey id to the id of its automatic entry."""

    return str(uuid.uuid5(AUTOMATIC_ENTRY_NAMESPACE, journey_id))


def _belongs_to_journey(entry: Entry, journey_id: str) -> bool:
    return entry.journey_id == journey_id or entry.entry_id == automatic_entry_id(journey_id)


def recharges_in_journey(journey: Journey, contract: Contract, entries: Iterable[Entry]) -> float:
    """Sum the wallet credits linked to ``journey`` within ``contract``."""

    return sum(
        entry.amount
        for entry in entries
        if entry.is_wallet_credit
        and not entry.is_automatic
        and entry.journey_id == journey.journey_id
        and entry.contract_id == contract.contract_id
    )


@dataclass(slots=True, frozen=True)
class ReconciliationResult:
    """Outcome of reconciling one closed journey."""

    journey_id: str
    tax: float
    recharges: float
    automatic_entry: Optional[Entry]
    removed_entry_ids: Tuple[str, ...]
    contract: Contract

    def apply(self, entries: Iterable[Entry]) -> List[Entry]:
        """Merge the result into ``entries`` by id."""

        dropped = set(self.removed_entry_ids)
        if self.automatic_entry is not None:
            dropped.add(self.automatic_entry.entry_id)
        merged = [entry for entry in entries if entry.entry_id not in dropped]
        if self.automatic_entry is not None:
            merged.append(self.automatic_entry)
        return merged


def reconcile_journey(
    journey: Journey,
    contract: Optional[Contract],
    entries: Iterable[Entry],
) -> ReconciliationResult:
    """Derive the automatic wallet entry and contract update for a closed journey."""

    if contract is None:
        raise ReconciliationError(f"Journey {journey.journey_id} has no owning contract")
    if journey.contract_id is not None and journey.contract_id != contract.contract_id:
        raise ReconciliationError(
            f"Journey {journey.journey_id} belongs to contract {journey.contract_id},"
            f" not {contract.contract_id}"
        )
    try:
        validate_closed_journey(journey)
    except ValidationError as error:
        raise ReconciliationError(str(error)) from error

    entries = list(entries)
    recharges = recharges_in_journey(journey, contract, entries)
    balance_end = journey.balance_end if journey.balance_end is not None else 0.0
    tax = round((journey.balance_start + recharges) - balance_end, 2)

    removed = tuple(
        entry.entry_id
        for entry in entries
        if entry.is_automatic and _belongs_to_journey(entry, journey.journey_id)
    )

    automatic_entry: Optional[Entry] = None
    if tax > 0:
        automatic_entry = Entry(
            entry_id=automatic_entry_id(journey.journey_id),
            owner_id=journey.owner_id,
            contract_id=contract.contract_id,
            kind=EntryKind.APP_TAX,
            amount=tax,
            occurred_at=journey.ended_at or journey.started_at,
            category=AUTOMATIC_ENTRY_CATEGORY,
            description=f"Wallet balance consumed during journey {journey.reference_day.isoformat()}",
            journey_id=journey.journey_id,
            is_recharge=False,
            origin=EntryOrigin.AUTOMATIC,
        )

    updated_contract = replace(
        contract,
        current_odometer=journey.km_end if journey.km_end is not None else contract.current_odometer,
        app_balance=balance_end,
    )

    LOGGER.info(
        "Reconciled journey %s: start %.2f + recharges %.2f - end %.2f = %.2f (%s)",
        journey.journey_id,
        journey.balance_start,
        recharges,
        balance_end,
        tax,
        "automatic entry" if automatic_entry else "no automatic entry",
    )
    return ReconciliationResult(
        journey_id=journey.journey_id,
        tax=tax,
        recharges=recharges,
        automatic_entry=automatic_entry,
        removed_entry_ids=removed,
        contract=updated_contract,
    )


def cascade_entry_ids(journey_id: str, entries: Iterable[Entry]) -> Tuple[str, ...]:
    """Ids of every entry that must disappear with ``journey_id``."""

    return tuple(entry.entry_id for entry in entries if _belongs_to_journey(entry, journey_id))
