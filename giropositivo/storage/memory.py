"""Mini README: Dictionary-backed repository.

Structure:
    * InMemoryRepository - keeps contracts, entries and journeys in dicts and
      implements ``atomic`` by snapshotting the dicts and restoring them when
      the block raises.

Records are immutable dataclasses replaced by id, so shallow dict copies are
enough to roll back. Identifiers follow the ``<prefix>_<sequence>`` pattern.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..civil_time import parse_instant
from ..contracts import Contract
from ..errors import NotFoundError
from ..ledger import Entry, Journey
from ..logging_utils import get_logger
from .base import TrackerRepository

LOGGER = get_logger(__name__)


class InMemoryRepository(TrackerRepository):
    """Process-local repository used by tests and the command line."""

    backend_name = "memory"

    def __init__(
        self,
        contracts: Optional[Iterable[Contract]] = None,
        entries: Optional[Iterable[Entry]] = None,
        journeys: Optional[Iterable[Journey]] = None,
    ) -> None:
        super().__init__()
        self._contracts: Dict[str, Contract] = {c.contract_id: c for c in contracts or []}
        self._entries: Dict[str, Entry] = {e.entry_id: e for e in entries or []}
        self._journeys: Dict[str, Journey] = {j.journey_id: j for j in journeys or []}
        self._sequence = 0
        LOGGER.debug(
            "In-memory repository initialised with %s contracts, %s entries, %s journeys",
            len(self._contracts),
            len(self._entries),
            len(self._journeys),
        )

    def next_id(self, prefix: str) -> str:
        """Generate an identifier unused by any stored record."""

        while True:
            self._sequence += 1
            candidate = f"{prefix}_{self._sequence:04d}"
            if not any(candidate in store for store in (self._contracts, self._entries, self._journeys)):
                return candidate

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot: Tuple[Dict[str, Contract], Dict[str, Entry], Dict[str, Journey]] = (
            dict(self._contracts),
            dict(self._entries),
            dict(self._journeys),
        )
        try:
            yield
        except Exception:
            self._contracts, self._entries, self._journeys = snapshot
            LOGGER.warning("Rolled back in-memory changes after a failed operation")
            raise

    # Contracts

    def list_contracts(self, owner_id: Optional[str] = None) -> List[Contract]:
        contracts = [c for c in self._contracts.values() if owner_id is None or c.owner_id == owner_id]
        return sorted(contracts, key=lambda contract: parse_instant(contract.contract_start), reverse=True)

    def get_contract(self, contract_id: str) -> Contract:
        if contract_id not in self._contracts:
            raise NotFoundError(f"Contract {contract_id} not found")
        return self._contracts[contract_id]

    def save_contract(self, contract: Contract) -> Contract:
        self._contracts[contract.contract_id] = contract
        return contract

    def delete_contract(self, contract_id: str) -> None:
        if self._contracts.pop(contract_id, None) is None:
            raise NotFoundError(f"Contract {contract_id} not found")

    # Entries

    def list_entries(
        self, owner_id: Optional[str] = None, contract_id: Optional[str] = None
    ) -> List[Entry]:
        entries = [
            entry
            for entry in self._entries.values()
            if (owner_id is None or entry.owner_id == owner_id)
            and (contract_id is None or entry.contract_id == contract_id)
        ]
        return sorted(
            entries,
            key=lambda entry: (parse_instant(entry.occurred_at), entry.entry_id),
            reverse=True,
        )

    def get_entry(self, entry_id: str) -> Entry:
        if entry_id not in self._entries:
            raise NotFoundError(f"Entry {entry_id} not found")
        return self._entries[entry_id]

    def save_entry(self, entry: Entry) -> Entry:
        self._entries[entry.entry_id] = entry
        return entry

    def delete_entries(self, entry_ids: Iterable[str]) -> None:
        for entry_id in entry_ids:
            self._entries.pop(entry_id, None)

    # Journeys

    def list_journeys(
        self, owner_id: Optional[str] = None, contract_id: Optional[str] = None
    ) -> List[Journey]:
        journeys = [
            journey
            for journey in self._journeys.values()
            if (owner_id is None or journey.owner_id == owner_id)
            and (contract_id is None or journey.contract_id == contract_id)
        ]
        return sorted(
            journeys,
            key=lambda journey: (parse_instant(journey.started_at), journey.journey_id),
            reverse=True,
        )

    def get_journey(self, journey_id: str) -> Journey:
        if journey_id not in self._journeys:
            raise NotFoundError(f"Journey {journey_id} not found")
        return self._journeys[journey_id]

    def save_journey(self, journey: Journey) -> Journey:
        self._journeys[journey.journey_id] = journey
        return journey

    def delete_journey(self, journey_id: str) -> None:
        if self._journeys.pop(journey_id, None) is None:
            raise NotFoundError(f"Journey {journey_id} not found")
