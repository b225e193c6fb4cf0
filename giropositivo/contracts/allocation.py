"""Mini README: Proportional contract cost allocation.

Structure:
    * cost_in_period - share of a contract's cost attributable to a range.
    * goal_in_period - the profit goal prorated with the same rules.
    * contract_duration_minutes - window length.

Two accrual models are supported:

    OWNED   The monthly total (maintenance reserve plus installment) accrues
            day by day. Each civil day touched by the clipped range adds
            ``monthly_total / days_in_that_month``, so the daily rate changes
            across month boundaries.
    RENTED  The flat contract value accrues linearly over the whole contract
            duration measured in minutes.

Unparseable dates yield zero and a warning unless strict validation is
requested through ``strict=True`` or the ``strict_inputs`` setting, in which
case ``InvalidInputError`` propagates to the caller.
"""

from __future__ import annotations

from typing import Optional

from ..civil_time import (
    InstantLike,
    days_in_month,
    iter_civil_days,
    minutes_between,
    parse_instant,
)
from ..configuration import get_settings
from ..errors import InvalidInputError
from ..logging_utils import get_logger
from .models import Contract, VehicleType

LOGGER = get_logger(__name__)


def contract_duration_minutes(contract: Contract) -> int:
    """Contract length in minutes, never below one to keep ratios finite."""

    return max(minutes_between(contract.contract_end, contract.contract_start), 1)


def _prorate(
    contract: Contract,
    owned_monthly_amount: float,
    rented_amount: float,
    range_start: InstantLike,
    range_end: InstantLike,
) -> float:
    contract_start = parse_instant(contract.contract_start)
    contract_end = parse_instant(contract.contract_end)
    actual_start = max(parse_instant(range_start), contract_start)
    actual_end = min(parse_instant(range_end), contract_end)

    if actual_start > actual_end:
        return 0.0

    if contract.vehicle_type is VehicleType.OWNED:
        return sum(
            owned_monthly_amount / days_in_month(day)
            for day in iter_civil_days(actual_start, actual_end)
        )

    overlap_minutes = minutes_between(actual_end, actual_start)
    if overlap_minutes <= 0:
        return 0.0
    ratio = overlap_minutes / contract_duration_minutes(contract)
    return rented_amount * ratio


def _guarded(
    label: str,
    contract: Contract,
    owned_monthly_amount: float,
    rented_amount: float,
    range_start: InstantLike,
    range_end: InstantLike,
    strict: Optional[bool],
) -> float:
    strict_mode = get_settings().strict_inputs if strict is None else strict
    try:
        amount = _prorate(contract, owned_monthly_amount, rented_amount, range_start, range_end)
    except InvalidInputError as error:
        if strict_mode:
            raise
        LOGGER.warning(
            "Unable to compute %s for contract %s: %s", label, contract.contract_id, error
        )
        return 0.0
    LOGGER.debug(
        "%s for contract %s between %s and %s -> %.4f",
        label,
        contract.contract_id,
        range_start,
        range_end,
        amount,
    )
    return amount


def cost_in_period(
    contract: Contract,
    range_start: InstantLike,
    range_end: InstantLike,
    *,
    strict: Optional[bool] = None,
) -> float:
    """Return the prorated contract cost for ``[range_start, range_end]``."""

    return _guarded(
        "Cost",
        contract,
        contract.monthly_total,
        contract.contract_value,
        range_start,
        range_end,
        strict,
    )


def goal_in_period(
    contract: Contract,
    range_start: InstantLike,
    range_end: InstantLike,
    *,
    strict: Optional[bool] = None,
) -> float:
    """Return the profit goal prorated exactly like ``cost_in_period``.

    Owned contracts carry a monthly goal, rented contracts a goal for the
    whole contract, mirroring how their costs are expressed.
    """

    goal = contract.profit_goal or 0.0
    return _guarded("Goal", contract, goal, goal, range_start, range_end, strict)
