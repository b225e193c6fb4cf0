"""Mini README: Abstract repository describing GiroPositivo persistence.

Structure:
    * TrackerRepository - abstract CRUD interface for contracts, entries and
      journeys, scoped per owner, with an ``atomic`` block for multi-record
      writes.

The core never touches storage directly; hosts inject an implementation
(the in-memory one ships with the package) into ``TrackerService``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable, List, Optional

from ..contracts import Contract
from ..ledger import Entry, Journey
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class TrackerRepository(ABC):
    """Base interface for repository backends."""

    backend_name: str = "generic"

    def __init__(self) -> None:
        LOGGER.debug("Initialising %s repository", self.backend_name)

    @abstractmethod
    def next_id(self, prefix: str) -> str:
        """Return a fresh identifier for a new record."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Context manager grouping writes into an all-or-nothing unit."""

    # Contracts

    @abstractmethod
    def list_contracts(self, owner_id: Optional[str] = None) -> List[Contract]:
        """Return contracts, optionally restricted to one owner."""

    @abstractmethod
    def get_contract(self, contract_id: str) -> Contract:
        """Retrieve a contract or raise ``NotFoundError``."""

    @abstractmethod
    def save_contract(self, contract: Contract) -> Contract:
        """Insert or replace a contract by id."""

    @abstractmethod
    def delete_contract(self, contract_id: str) -> None:
        """Remove a contract."""

    # Entries

    @abstractmethod
    def list_entries(
        self, owner_id: Optional[str] = None, contract_id: Optional[str] = None
    ) -> List[Entry]:
        """Return entries, newest first."""

    @abstractmethod
    def get_entry(self, entry_id: str) -> Entry:
        """Retrieve an entry or raise ``NotFoundError``."""

    @abstractmethod
    def save_entry(self, entry: Entry) -> Entry:
        """Insert or replace an entry by id."""

    @abstractmethod
    def delete_entries(self, entry_ids: Iterable[str]) -> None:
        """Remove entries; unknown ids are ignored."""

    # Journeys

    @abstractmethod
    def list_journeys(
        self, owner_id: Optional[str] = None, contract_id: Optional[str] = None
    ) -> List[Journey]:
        """Return journeys, newest first."""

    @abstractmethod
    def get_journey(self, journey_id: str) -> Journey:
        """Retrieve a journey or raise ``NotFoundError``."""

    @abstractmethod
    def save_journey(self, journey: Journey) -> Journey:
        """Insert or replace a journey by id."""

    @abstractmethod
    def delete_journey(self, journey_id: str) -> None:
        """Remove a journey."""
