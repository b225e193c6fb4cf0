"""Mini README: Daily profitability summary.

Structure:
    * GoalStatus - how a day's net profit compares with its target.
    * DailyStats - dataclass returned to dashboards.
    * daily_stats - aggregate one civil day of entries and journeys.
    * group_day_activities - group a day's entries for activity feeds.

The aggregator is a pure function of its inputs. A missing contract is an
expected state for new users and produces zero-valued cost and goal figures
instead of an error.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..civil_time import InstantLike, calendar_days_between, day_bounds, days_in_month, to_civil_date
from ..contracts import Contract, VehicleType, cost_in_period
from ..ledger import Entry, EntryKind, Journey
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)

RECHARGE_GROUP_LABEL = "App balance"
AUTOMATIC_GROUP_LABEL = "Balance used"


class GoalStatus(str, Enum):
    """Badge shown next to the day's result."""

    GOAL_MET = "goal_met"
    IN_THE_BLACK = "in_the_black"
    IN_THE_RED = "in_the_red"


@dataclass(slots=True, frozen=True)
class DailyStats:
    """Summary of a single civil day."""

    revenue: float
    expenses: float
    fuel_cost: float
    fuel_cost_per_km: float
    app_tax_cost: float
    rental_cost: float
    app_balance: float
    net_profit: float
    profit_goal: float
    journey_distance: float
    journey_time_minutes: int
    estimated_daily_contract_cost: float
    discounts: float = 0.0

    @property
    def goal_status(self) -> GoalStatus:
        if self.net_profit >= self.profit_goal:
            return GoalStatus.GOAL_MET
        if self.net_profit >= 0:
            return GoalStatus.IN_THE_BLACK
        return GoalStatus.IN_THE_RED

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = asdict(self)
        payload["goal_status"] = self.goal_status.value
        return payload


@dataclass(slots=True, frozen=True)
class ActivityGroup:
    """Entries of one day folded under a display label."""

    label: str
    kind: EntryKind
    total: float
    count: int
    is_recharge: bool
    automatic: bool


def daily_profit_goal(contract: Contract, day: InstantLike) -> float:
    """Flat daily target derived from the contract goal."""

    goal = contract.profit_goal or 0.0
    if contract.vehicle_type is VehicleType.OWNED:
        return goal / days_in_month(day)
    total_days = max(calendar_days_between(contract.contract_end, contract.contract_start), 1)
    return goal / total_days


def _sum(entries: Iterable[Entry]) -> float:
    return sum(entry.amount for entry in entries)


def daily_stats(
    day: InstantLike,
    contract: Optional[Contract],
    entries: Iterable[Entry],
    journeys: Iterable[Journey],
) -> DailyStats:
    """Aggregate revenue, costs, distance and goal for the civil day of ``day``."""

    civil_day = to_civil_date(day)
    day_entries = [entry for entry in entries if entry.civil_date == civil_day]
    day_journeys = [journey for journey in journeys if journey.reference_day == civil_day]

    revenue = _sum(entry for entry in day_entries if entry.kind is EntryKind.REVENUE)
    expenses = _sum(entry for entry in day_entries if entry.kind is EntryKind.EXPENSE)
    fuel_cost = _sum(entry for entry in day_entries if entry.kind is EntryKind.FUEL)
    app_tax_cost = _sum(entry for entry in day_entries if entry.is_wallet_debit)
    discounts = sum(entry.discount or 0.0 for entry in day_entries)

    journey_distance = sum(journey.distance for journey in day_journeys)
    journey_time_minutes = sum(journey.duration_minutes for journey in day_journeys)

    if contract is None:
        rental_cost = 0.0
        profit_goal = 0.0
        app_balance = 0.0
    else:
        day_start, day_end = day_bounds(civil_day)
        rental_cost = cost_in_period(contract, day_start, day_end)
        profit_goal = daily_profit_goal(contract, civil_day)
        app_balance = contract.app_balance or 0.0

    net_profit = revenue - (rental_cost + fuel_cost + app_tax_cost + expenses)
    LOGGER.debug(
        "Daily stats for %s -> revenue %.2f net %.2f (%s entries, %s journeys)",
        civil_day.isoformat(),
        revenue,
        net_profit,
        len(day_entries),
        len(day_journeys),
    )

    return DailyStats(
        revenue=revenue,
        expenses=expenses,
        fuel_cost=fuel_cost,
        fuel_cost_per_km=fuel_cost / journey_distance if journey_distance > 0 else 0.0,
        app_tax_cost=app_tax_cost,
        rental_cost=rental_cost,
        app_balance=app_balance,
        net_profit=net_profit,
        profit_goal=profit_goal,
        journey_distance=journey_distance,
        journey_time_minutes=journey_time_minutes,
        estimated_daily_contract_cost=rental_cost,
        discounts=discounts,
    )


def group_day_activities(day: InstantLike, entries: Iterable[Entry]) -> List[ActivityGroup]:
    """Fold the day's entries into display groups ordered by total."""

    civil_day = to_civil_date(day)
    groups: Dict[str, Dict[str, object]] = {}
    for entry in entries:
        if entry.civil_date != civil_day:
            continue
        if entry.kind is EntryKind.APP_RECHARGE:
            key, label = "recharge_group", RECHARGE_GROUP_LABEL
        elif entry.is_automatic:
            key, label = "automatic_group", AUTOMATIC_GROUP_LABEL
        else:
            key, label = entry.category, entry.category
        group = groups.setdefault(
            key,
            {
                "label": label,
                "kind": entry.kind,
                "total": 0.0,
                "count": 0,
                "is_recharge": entry.kind is EntryKind.APP_RECHARGE,
                "automatic": entry.is_automatic,
            },
        )
        group["total"] = float(group["total"]) + entry.amount  # type: ignore[arg-type]
        group["count"] = int(group["count"]) + 1  # type: ignore[call-overload]

    activities = [ActivityGroup(**group) for group in groups.values()]  # type: ignore[arg-type]
    return sorted(activities, key=lambda activity: activity.total, reverse=True)
