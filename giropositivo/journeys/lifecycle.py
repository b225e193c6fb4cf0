"""Mini README: Journey state transitions.

Structure:
    * find_open_journey - the single open journey of a contract, if any.
    * open_journey - start a shift from the contract's odometer and wallet.
    * close_journey - record the final odometer and wallet balance.
    * edit_journey - amend dates, km or balances of a closed journey.
    * validate_closed_journey - structural checks shared with reconciliation.

A contract has at most one open journey. Open journeys are immutable except
for closing; closed journeys may be edited, after which they must be
reconciled again.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from ..civil_time import InstantLike, now as civil_now, parse_instant, to_civil_date
from ..contracts import Contract
from ..errors import JourneyStateError, ValidationError
from ..ledger import Journey
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "reference_day",
        "started_at",
        "ended_at",
        "km_start",
        "km_end",
        "balance_start",
        "balance_end",
    }
)


def find_open_journey(journeys: Iterable[Journey], contract_id: str) -> Optional[Journey]:
    for journey in journeys:
        if journey.contract_id == contract_id and not journey.closed:
            return journey
    return None


def open_journey(
    contract: Contract,
    journeys: Iterable[Journey],
    journey_id: str,
    *,
    started_at: Optional[InstantLike] = None,
    km_start: Optional[float] = None,
) -> Journey:
    """Create an open journey seeded from the contract's odometer and wallet."""

    existing = find_open_journey(journeys, contract.contract_id)
    if existing is not None:
        raise JourneyStateError(
            f"Contract {contract.contract_id} already has open journey {existing.journey_id}"
        )
    start = parse_instant(started_at) if started_at is not None else civil_now()
    journey = Journey(
        journey_id=journey_id,
        owner_id=contract.owner_id,
        contract_id=contract.contract_id,
        reference_day=to_civil_date(start),
        started_at=start,
        km_start=km_start if km_start is not None else contract.current_odometer,
        balance_start=contract.app_balance or 0.0,
    )
    LOGGER.info(
        "Opened journey %s for contract %s at km %.1f", journey_id, contract.contract_id, journey.km_start
    )
    return journey


def validate_closed_journey(journey: Journey) -> None:
    """Raise ``ValidationError`` when a closed journey is structurally invalid."""

    if not journey.closed:
        raise JourneyStateError(f"Journey {journey.journey_id} is still open")
    if journey.balance_end is None:
        raise ValidationError(f"Journey {journey.journey_id} has no final wallet balance")
    if journey.ended_at is not None and parse_instant(journey.ended_at) < parse_instant(journey.started_at):
        raise ValidationError(f"Journey {journey.journey_id} ends before it starts")
    if journey.km_end is not None and journey.km_end < journey.km_start:
        raise ValidationError(
            f"Journey {journey.journey_id} final km must be greater than or equal to the initial km"
        )


def close_journey(
    journey: Journey,
    *,
    km_end: float,
    balance_end: float,
    ended_at: Optional[InstantLike] = None,
) -> Journey:
    """Return the closed copy of an open journey."""

    if journey.closed:
        raise JourneyStateError(f"Journey {journey.journey_id} is already closed")
    closed = replace(
        journey,
        ended_at=parse_instant(ended_at) if ended_at is not None else civil_now(),
        km_end=km_end,
        balance_end=balance_end,
        closed=True,
    )
    validate_closed_journey(closed)
    LOGGER.info("Closed journey %s at km %.1f", journey.journey_id, km_end)
    return closed


def edit_journey(journey: Journey, **changes: object) -> Journey:
    """Apply edits to a closed journey, rejecting unsupported fields."""

    if not journey.closed:
        raise JourneyStateError(f"Close journey {journey.journey_id} before editing it")
    unsupported = set(changes) - EDITABLE_FIELDS
    if unsupported:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unsupported))}")

    coerced = dict(changes)
    for key in ("started_at", "ended_at"):
        if coerced.get(key) is not None:
            coerced[key] = parse_instant(coerced[key])  # type: ignore[arg-type]
    if coerced.get("reference_day") is not None:
        coerced["reference_day"] = to_civil_date(coerced["reference_day"])  # type: ignore[arg-type]

    edited = replace(journey, **coerced)  # type: ignore[arg-type]
    validate_closed_journey(edited)
    LOGGER.debug("Edited journey %s fields=%s", journey.journey_id, sorted(changes))
    return edited
