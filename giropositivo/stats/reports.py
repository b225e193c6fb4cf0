"""Mini README: Period reports over arbitrary ranges.

Structure:
    * ReportRange - instant range with constructors for the usual report
      windows (last N days, custom civil dates, whole contract).
    * PeriodReport - aggregated KPIs returned to report screens.
    * period_report - compute a report for a range, optionally restricted to
      one platform.

Entries are included when their civil date falls between the civil dates of
the range bounds; journeys when they are closed, carry an end instant and
started on an included civil date. The contract cost is computed once for
the whole range. The optional platform filter only narrows revenue and app
fee aggregation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from ..civil_time import InstantLike, day_bounds, now as civil_now, parse_instant, to_civil_date
from ..contracts import Contract, ContractStatus, VehicleType, cost_in_period, goal_in_period
from ..errors import ValidationError
from ..ledger import Entry, EntryKind, Journey, Platform
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class ReportRange:
    """Inclusive instant range covered by a report."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if parse_instant(self.start) > parse_instant(self.end):
            raise ValidationError("Report range must start before it ends")

    @classmethod
    def last_days(cls, days: int, at: Optional[InstantLike] = None) -> "ReportRange":
        """Window ending today and covering ``days`` civil days."""

        if days < 1:
            raise ValidationError("Report windows cover at least one day")
        today = to_civil_date(at if at is not None else civil_now())
        first_day = today - timedelta(days=days - 1)
        return cls(start=day_bounds(first_day)[0], end=day_bounds(today)[1])

    @classmethod
    def custom(cls, start_day: InstantLike, end_day: InstantLike) -> "ReportRange":
        return cls(start=day_bounds(start_day)[0], end=day_bounds(end_day)[1])

    @classmethod
    def for_contract(cls, contract: Contract, at: Optional[InstantLike] = None) -> "ReportRange":
        """Whole-contract window.

        Rented contracts always report up to their scheduled end so the full
        rental cost is visible; owned contracts report up to today unless
        they are already finished.
        """

        start = day_bounds(contract.contract_start)[0]
        if contract.vehicle_type is VehicleType.RENTED or contract.status is ContractStatus.FINISHED:
            end = day_bounds(contract.contract_end)[1]
        else:
            end = day_bounds(at if at is not None else civil_now())[1]
        return cls(start=start, end=end)

    def includes_day(self, day: date) -> bool:
        return to_civil_date(self.start) <= day <= to_civil_date(self.end)


@dataclass(slots=True, frozen=True)
class PeriodReport:
    """Aggregated financial and operational KPIs for a range."""

    range_start: datetime
    range_end: datetime
    platform: Optional[Platform]
    revenue: float
    fuel_cost: float
    app_tax_cost: float
    expenses: float
    contract_cost: float
    total_expenses: float
    net_profit: float
    profit_goal: float
    total_minutes: int
    total_hours: float
    total_distance: float
    total_liters: float
    total_discounts: float
    revenue_per_hour: float
    revenue_per_km: float
    km_per_liter: float
    journey_count: int
    expense_breakdown: Tuple[Tuple[str, float], ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = asdict(self)
        payload["range_start"] = self.range_start.isoformat()
        payload["range_end"] = self.range_end.isoformat()
        payload["platform"] = self.platform.value if self.platform else None
        payload["expense_breakdown"] = [
            {"label": label, "value": value} for label, value in self.expense_breakdown
        ]
        return payload


def _matches_platform(entry: Entry, platform: Optional[Platform]) -> bool:
    return platform is None or entry.platform is platform


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator > 0 else 0.0


def period_report(
    report_range: ReportRange,
    contract: Optional[Contract],
    entries: Iterable[Entry],
    journeys: Iterable[Journey],
    platform: Optional[Platform] = None,
) -> PeriodReport:
    """Aggregate entries and journeys for ``report_range``."""

    range_entries = [entry for entry in entries if report_range.includes_day(entry.civil_date)]
    range_journeys = [
        journey
        for journey in journeys
        if journey.closed
        and journey.ended_at is not None
        and report_range.includes_day(to_civil_date(journey.started_at))
    ]

    revenue = sum(
        entry.amount
        for entry in range_entries
        if entry.kind is EntryKind.REVENUE and _matches_platform(entry, platform)
    )
    fuel_cost = sum(entry.amount for entry in range_entries if entry.kind is EntryKind.FUEL)
    app_tax_cost = sum(
        entry.amount
        for entry in range_entries
        if entry.is_wallet_debit and _matches_platform(entry, platform)
    )
    expenses = sum(entry.amount for entry in range_entries if entry.kind is EntryKind.EXPENSE)

    if contract is None:
        contract_cost = 0.0
        profit_goal = 0.0
    else:
        contract_cost = cost_in_period(contract, report_range.start, report_range.end)
        profit_goal = goal_in_period(contract, report_range.start, report_range.end)

    total_expenses = fuel_cost + app_tax_cost + expenses + contract_cost
    net_profit = revenue - total_expenses

    total_minutes = sum(journey.duration_minutes for journey in range_journeys)
    total_hours = total_minutes / 60
    total_distance = sum(journey.distance for journey in range_journeys)
    total_liters = sum(
        entry.amount / entry.price_per_liter
        for entry in range_entries
        if entry.kind is EntryKind.FUEL and entry.price_per_liter and entry.price_per_liter > 0
    )
    total_discounts = sum(entry.discount or 0.0 for entry in range_entries)

    breakdown: List[Tuple[str, float]] = [
        ("fuel", fuel_cost),
        ("app_tax", app_tax_cost),
        ("expenses", expenses),
        ("contract", contract_cost),
    ]

    LOGGER.debug(
        "Period report %s..%s platform=%s -> revenue %.2f net %.2f",
        report_range.start.isoformat(),
        report_range.end.isoformat(),
        platform.value if platform else "ALL",
        revenue,
        net_profit,
    )

    return PeriodReport(
        range_start=report_range.start,
        range_end=report_range.end,
        platform=platform,
        revenue=revenue,
        fuel_cost=fuel_cost,
        app_tax_cost=app_tax_cost,
        expenses=expenses,
        contract_cost=contract_cost,
        total_expenses=total_expenses,
        net_profit=net_profit,
        profit_goal=profit_goal,
        total_minutes=total_minutes,
        total_hours=total_hours,
        total_distance=total_distance,
        total_liters=total_liters,
        total_discounts=total_discounts,
        revenue_per_hour=_safe_ratio(revenue, total_hours),
        revenue_per_km=_safe_ratio(revenue, total_distance),
        km_per_liter=_safe_ratio(total_distance, total_liters),
        journey_count=len(range_journeys),
        expense_breakdown=tuple((label, value) for label, value in breakdown if value > 0),
    )
