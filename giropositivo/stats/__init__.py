"""Mini README: Daily and period aggregation for GiroPositivo.

``daily`` summarises a single civil day against the contract's daily goal;
``reports`` aggregates KPIs over arbitrary ranges.
"""

from .daily import ActivityGroup, DailyStats, GoalStatus, daily_profit_goal, daily_stats, group_day_activities
from .reports import PeriodReport, ReportRange, period_report

__all__ = [
    "ActivityGroup",
    "DailyStats",
    "GoalStatus",
    "PeriodReport",
    "ReportRange",
    "daily_profit_goal",
    "daily_stats",
    "group_day_activities",
    "period_report",
]
