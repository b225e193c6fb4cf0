"""Mini README: Monetary entries and work journeys.

Structure:
    * EntryKind / EntryOrigin / Platform - enumerations for ledger entries.
    * Entry - dataclass for a single monetary event.
    * Journey - dataclass for a work shift bounded by odometer and wallet
      snapshots.
    * wallet_balance - wallet credit implied by recharges and app fees.

Entries with ``EntryOrigin.AUTOMATIC`` are produced only by journey
reconciliation. Wallet credits are APP_RECHARGE entries or entries flagged
``is_recharge``; wallet debits are APP_TAX entries that are not recharges.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional

from ..civil_time import minutes_between, parse_instant, to_civil_date
from ..errors import InvalidInputError, ValidationError


class EntryKind(str, Enum):
    """Enumerate the supported entry categories."""

    REVENUE = "REVENUE"
    FUEL = "FUEL"
    APP_TAX = "APP_TAX"
    EXPENSE = "EXPENSE"
    APP_RECHARGE = "APP_RECHARGE"

    @classmethod
    def from_str(cls, value: str) -> "EntryKind":
        """Coerce arbitrary casing into a valid entry kind."""

        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported entry kind: {value}") from error


class EntryOrigin(str, Enum):
    """Who authored an entry."""

    MANUAL = "manual"
    MANUAL_RECHARGE = "manual_recharge"
    AUTOMATIC = "automatic"

    @classmethod
    def from_str(cls, value: str) -> "EntryOrigin":
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported entry origin: {value}") from error


class Platform(str, Enum):
    """Ride-hailing platforms an entry can be tagged with."""

    UBER = "Uber"
    P99 = "99"
    INDRIVE = "inDrive"
    PARTICULAR = "Particular"
    OTHER = "Outro"

    @classmethod
    def from_str(cls, value: str) -> "Platform":
        if isinstance(value, str):
            cleaned = value.strip().lower()
            for member in cls:
                if cleaned in {member.value.lower(), member.name.lower()}:
                    return member
        raise ValueError(f"Unsupported platform: {value}")


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None or value == "" else float(value)


@dataclass(slots=True)
class Entry:
    """A monetary event recorded against a contract."""

    entry_id: str
    owner_id: str
    contract_id: Optional[str]
    kind: EntryKind
    amount: float
    occurred_at: datetime
    category: str = ""
    description: str = ""
    platform: Optional[Platform] = None
    journey_id: Optional[str] = None
    is_recharge: bool = False
    origin: EntryOrigin = EntryOrigin.MANUAL
    discount: Optional[float] = None
    price_per_liter: Optional[float] = None
    km_recorded: Optional[float] = None

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValidationError(f"Entry {self.entry_id} has a negative amount")

    @property
    def is_wallet_credit(self) -> bool:
        """True when the entry tops up the app wallet."""

        return self.kind is EntryKind.APP_RECHARGE or self.is_recharge

    @property
    def is_wallet_debit(self) -> bool:
        return self.kind is EntryKind.APP_TAX and not self.is_recharge

    @property
    def is_automatic(self) -> bool:
        return self.origin is EntryOrigin.AUTOMATIC

    @property
    def civil_date(self) -> date:
        return to_civil_date(self.occurred_at)

    def as_dict(self) -> Dict[str, object]:
        """Export the entry with serialisable values."""

        return {
            "entry_id": self.entry_id,
            "owner_id": self.owner_id,
            "contract_id": self.contract_id,
            "kind": self.kind.value,
            "amount": self.amount,
            "occurred_at": parse_instant(self.occurred_at).isoformat(),
            "category": self.category,
            "description": self.description,
            "platform": self.platform.value if self.platform else None,
            "journey_id": self.journey_id,
            "is_recharge": self.is_recharge,
            "origin": self.origin.value,
            "discount": self.discount,
            "price_per_liter": self.price_per_liter,
            "km_recorded": self.km_recorded,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Entry":
        """Build an entry from a snapshot or API payload."""

        try:
            platform = payload.get("platform")
            origin = payload.get("origin")
            return cls(
                entry_id=str(payload["entry_id"]),
                owner_id=str(payload["owner_id"]),
                contract_id=payload.get("contract_id"),
                kind=EntryKind.from_str(str(payload["kind"])),
                amount=float(payload["amount"]),
                occurred_at=parse_instant(payload["occurred_at"]),
                category=str(payload.get("category") or ""),
                description=str(payload.get("description") or ""),
                platform=Platform.from_str(platform) if platform else None,
                journey_id=payload.get("journey_id"),
                is_recharge=bool(payload.get("is_recharge", False)),
                origin=EntryOrigin.from_str(origin) if origin else EntryOrigin.MANUAL,
                discount=_optional_float(payload.get("discount")),
                price_per_liter=_optional_float(payload.get("price_per_liter")),
                km_recorded=_optional_float(payload.get("km_recorded")),
            )
        except KeyError as error:
            raise ValidationError(f"Entry payload is missing field {error}") from error
        except (TypeError, ValueError) as error:
            if isinstance(error, ValidationError):
                raise
            raise InvalidInputError(f"Invalid entry payload: {error}") from error


@dataclass(slots=True)
class Journey:
    """A work shift bounded by odometer and wallet balance snapshots."""

    journey_id: str
    owner_id: str
    contract_id: Optional[str]
    reference_day: date
    started_at: datetime
    km_start: float
    balance_start: float
    ended_at: Optional[datetime] = None
    km_end: Optional[float] = None
    balance_end: Optional[float] = None
    closed: bool = False

    @property
    def distance(self) -> float:
        """Kilometres driven; zero until the journey is closed."""

        if not self.closed or self.km_end is None:
            return 0.0
        return self.km_end - self.km_start

    @property
    def duration_minutes(self) -> int:
        if not self.closed or self.ended_at is None:
            return 0
        return minutes_between(self.ended_at, self.started_at)

    def as_dict(self) -> Dict[str, object]:
        return {
            "journey_id": self.journey_id,
            "owner_id": self.owner_id,
            "contract_id": self.contract_id,
            "reference_day": self.reference_day.isoformat(),
            "started_at": parse_instant(self.started_at).isoformat(),
            "ended_at": parse_instant(self.ended_at).isoformat() if self.ended_at else None,
            "km_start": self.km_start,
            "km_end": self.km_end,
            "balance_start": self.balance_start,
            "balance_end": self.balance_end,
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Journey":
        """Build a journey from a snapshot or API payload."""

        try:
            started_at = parse_instant(payload["started_at"])
            reference_day = payload.get("reference_day")
            ended_at = payload.get("ended_at")
            return cls(
                journey_id=str(payload["journey_id"]),
                owner_id=str(payload["owner_id"]),
                contract_id=payload.get("contract_id"),
                reference_day=(
                    date.fromisoformat(str(reference_day))
                    if reference_day
                    else to_civil_date(started_at)
                ),
                started_at=started_at,
                ended_at=parse_instant(ended_at) if ended_at else None,
                km_start=float(payload.get("km_start") or 0.0),
                km_end=_optional_float(payload.get("km_end")),
                balance_start=float(payload.get("balance_start") or 0.0),
                balance_end=_optional_float(payload.get("balance_end")),
                closed=bool(payload.get("closed", False)),
            )
        except KeyError as error:
            raise ValidationError(f"Journey payload is missing field {error}") from error
        except (TypeError, ValueError) as error:
            if isinstance(error, ValidationError):
                raise
            raise InvalidInputError(f"Invalid journey payload: {error}") from error


def wallet_balance(entries: Iterable[Entry]) -> float:
    """Recharges minus app fees consumed, as shown on the dashboard."""

    credits = 0.0
    debits = 0.0
    for entry in entries:
        if entry.kind is EntryKind.APP_RECHARGE:
            credits += entry.amount
        elif entry.is_wallet_debit:
            debits += entry.amount
    return credits - debits
