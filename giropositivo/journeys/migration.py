"""Mini README: One-time migrations for records created before explicit links.

Structure:
    * MigrationReport - ids touched and ids left alone by a migration.
    * backfill_contract_ids - attach contract ids by date window.
    * relink_legacy_recharges - attach unlinked wallet recharges to the
      journey whose time window contains them.

Both helpers return new record lists and a report; they are meant to be run
once by the host and persisted, after which reconciliation only trusts the
explicit ``journey_id`` link.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ..civil_time import InstantLike, now as civil_now, parse_instant
from ..contracts import Contract, ContractStatus
from ..ledger import Entry, Journey
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class MigrationReport:
    """Summary of a migration run."""

    updated_ids: List[str] = field(default_factory=list)
    ambiguous_ids: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.updated_ids)


def _contract_window(contract: Contract) -> Tuple[datetime, Optional[datetime]]:
    start = parse_instant(contract.contract_start)
    if contract.status is ContractStatus.FINISHED:
        return start, parse_instant(contract.contract_end)
    return start, None


def _within(instant: datetime, start: datetime, end: Optional[datetime]) -> bool:
    return start <= instant and (end is None or instant <= end)


def backfill_contract_ids(
    contracts: Sequence[Contract],
    entries: Iterable[Entry],
    journeys: Iterable[Journey],
) -> Tuple[List[Entry], List[Journey], MigrationReport]:
    """Assign a contract to entries and journeys recorded without one.

    Contracts are tried from the earliest start; unfinished contracts are
    treated as open-ended.
    """

    ordered = sorted(contracts, key=lambda contract: parse_instant(contract.contract_start))
    windows = [(contract.contract_id, *_contract_window(contract)) for contract in ordered]
    report = MigrationReport()

    migrated_entries: List[Entry] = []
    for entry in entries:
        if entry.contract_id is None:
            instant = parse_instant(entry.occurred_at)
            match = next((cid for cid, start, end in windows if _within(instant, start, end)), None)
            if match is not None:
                entry = replace(entry, contract_id=match)
                report.updated_ids.append(entry.entry_id)
        migrated_entries.append(entry)

    migrated_journeys: List[Journey] = []
    for journey in journeys:
        if journey.contract_id is None:
            started = parse_instant(journey.started_at)
            ended = parse_instant(journey.ended_at) if journey.ended_at else None
            match = next(
                (
                    cid
                    for cid, start, end in windows
                    if start <= started and (ended is None or end is None or ended <= end)
                ),
                None,
            )
            if match is not None:
                journey = replace(journey, contract_id=match)
                report.updated_ids.append(journey.journey_id)
        migrated_journeys.append(journey)

    if report.changed:
        LOGGER.info("Backfilled contract ids on %s records", len(report.updated_ids))
    return migrated_entries, migrated_journeys, report


def relink_legacy_recharges(
    journeys: Sequence[Journey],
    entries: Iterable[Entry],
    *,
    at: Optional[InstantLike] = None,
) -> Tuple[List[Entry], MigrationReport]:
    """Link unlinked wallet recharges to the journey active when they happened.

    A recharge falling inside more than one journey window is ambiguous and
    stays unlinked; those ids are reported so the host can resolve them.
    """

    reference_now = parse_instant(at) if at is not None else civil_now()
    report = MigrationReport()
    migrated: List[Entry] = []

    for entry in entries:
        if entry.journey_id is not None or entry.is_automatic or not entry.is_wallet_credit:
            migrated.append(entry)
            continue

        instant = parse_instant(entry.occurred_at)
        candidates = [
            journey
            for journey in journeys
            if (entry.contract_id is None or journey.contract_id == entry.contract_id)
            and parse_instant(journey.started_at)
            <= instant
            <= (parse_instant(journey.ended_at) if journey.ended_at else reference_now)
        ]
        if len(candidates) == 1:
            entry = replace(entry, journey_id=candidates[0].journey_id)
            report.updated_ids.append(entry.entry_id)
        elif len(candidates) > 1:
            LOGGER.warning(
                "Recharge %s matches %s journeys; leaving it unlinked",
                entry.entry_id,
                len(candidates),
            )
            report.ambiguous_ids.append(entry.entry_id)
        migrated.append(entry)

    LOGGER.info(
        "Relinked %s legacy recharges (%s ambiguous)",
        len(report.updated_ids),
        len(report.ambiguous_ids),
    )
    return migrated, report
