"""Mini README: Tests for the daily profitability summary.

Structure:
    * a mixed day checks every sum, the prorated rental cost and the goal.
    * recharges never count as spend and open journeys add no distance.
    * a missing contract degrades to zero cost and goal.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from giropositivo.contracts import Contract, VehicleType
from giropositivo.ledger import Entry, EntryKind, EntryOrigin, Journey
from giropositivo.stats import GoalStatus, daily_profit_goal, daily_stats, group_day_activities

SAO_PAULO = ZoneInfo("America/Sao_Paulo")
DAY = date(2023, 2, 10)


def _at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=SAO_PAULO)


def _entry(entry_id: str, kind: EntryKind, amount: float, when: datetime, **extra: object) -> Entry:
    return Entry(
        entry_id=entry_id,
        owner_id="driver",
        contract_id="contract_0001",
        kind=kind,
        amount=amount,
        occurred_at=when,
        category=kind.value.lower(),
        **extra,  # type: ignore[arg-type]
    )


def _contract() -> Contract:
    return Contract(
        contract_id="contract_0001",
        owner_id="driver",
        vehicle_type=VehicleType.OWNED,
        contract_start=datetime(2023, 1, 1, tzinfo=SAO_PAULO),
        contract_end=datetime(2023, 12, 31, 23, 59, tzinfo=SAO_PAULO),
        contract_value=1200.0,
        car_installment=300.0,
        profit_goal=2800.0,
        app_balance=45.0,
    )


def _entries() -> list:
    return [
        _entry("entry_0001", EntryKind.REVENUE, 300.0, _at(11), discount=5.0),
        _entry("entry_0002", EntryKind.FUEL, 50.0, _at(9), price_per_liter=5.0),
        _entry("entry_0003", EntryKind.APP_TAX, 20.0, _at(12)),
        _entry("entry_0004", EntryKind.APP_TAX, 40.0, _at(12), is_recharge=True),
        _entry("entry_0005", EntryKind.APP_RECHARGE, 100.0, _at(8), origin=EntryOrigin.MANUAL_RECHARGE),
        _entry("entry_0006", EntryKind.EXPENSE, 10.0, _at(13)),
        _entry("entry_0007", EntryKind.REVENUE, 999.0, _at(11, day=DAY + timedelta(days=1))),
        _entry("entry_0008", EntryKind.REVENUE, 70.0, datetime(2023, 2, 11, 2, 0, tzinfo=ZoneInfo("UTC"))),
    ]


def _journeys() -> list:
    return [
        Journey(
            journey_id="journey_0001",
            owner_id="driver",
            contract_id="contract_0001",
            reference_day=DAY,
            started_at=_at(8),
            ended_at=_at(12, 30),
            km_start=1000.0,
            km_end=1120.0,
            balance_start=50.0,
            balance_end=40.0,
            closed=True,
        ),
        Journey(
            journey_id="journey_0002",
            owner_id="driver",
            contract_id="contract_0001",
            reference_day=DAY,
            started_at=_at(18),
            km_start=1120.0,
            balance_start=40.0,
        ),
    ]


def test_daily_stats_aggregates_a_mixed_day() -> None:
    """Sums, rental share, distance, time and goal follow the daily rules."""

    stats = daily_stats(DAY, _contract(), _entries(), _journeys())

    # entry_0008 is 23:00 on the 10th in São Paulo.
    assert stats.revenue == pytest.approx(370.0)
    assert stats.fuel_cost == pytest.approx(50.0)
    assert stats.app_tax_cost == pytest.approx(20.0)
    assert stats.expenses == pytest.approx(10.0)
    assert stats.rental_cost == pytest.approx(1500 / 28)
    assert stats.estimated_daily_contract_cost == stats.rental_cost
    assert stats.journey_distance == pytest.approx(120.0)
    assert stats.journey_time_minutes == 270
    assert stats.fuel_cost_per_km == pytest.approx(50.0 / 120.0)
    assert stats.profit_goal == pytest.approx(100.0)
    assert stats.app_balance == pytest.approx(45.0)
    assert stats.discounts == pytest.approx(5.0)
    assert stats.net_profit == stats.revenue - (
        stats.rental_cost + stats.fuel_cost + stats.app_tax_cost + stats.expenses
    )
    assert stats.goal_status is GoalStatus.GOAL_MET


def test_daily_stats_without_contract_returns_zero_costs() -> None:
    """New users without a contract get zero rental cost and goal."""

    stats = daily_stats(DAY, None, [], [])
    assert stats.revenue == 0.0
    assert stats.rental_cost == 0.0
    assert stats.profit_goal == 0.0
    assert stats.net_profit == 0.0
    assert stats.fuel_cost_per_km == 0.0
    assert stats.goal_status is GoalStatus.GOAL_MET


def test_goal_status_thresholds() -> None:
    """Between zero and the goal is in the black; below zero is in the red."""

    stats = daily_stats(DAY, _contract(), [_entry("entry_0001", EntryKind.REVENUE, 60.0, _at(10))], [])
    assert stats.goal_status is GoalStatus.IN_THE_BLACK
    stats = daily_stats(DAY, _contract(), [], [])
    assert stats.goal_status is GoalStatus.IN_THE_RED


def test_rented_daily_goal_divides_by_contract_days() -> None:
    """Rented goals are spread evenly over the contract's calendar days."""

    start = datetime(2024, 3, 1, 8, 0, tzinfo=SAO_PAULO)
    contract = Contract(
        contract_id="contract_0002",
        owner_id="driver",
        vehicle_type=VehicleType.RENTED,
        contract_start=start,
        contract_end=start + timedelta(days=7),
        contract_value=3000.0,
        profit_goal=700.0,
    )
    assert daily_profit_goal(contract, date(2024, 3, 3)) == pytest.approx(100.0)


def test_group_day_activities_folds_recharges_and_automatic_entries() -> None:
    """Recharges and automatic entries get their own groups, sorted by total."""

    entries = _entries() + [
        _entry(
            "entry_0009",
            EntryKind.APP_TAX,
            15.0,
            _at(14),
            origin=EntryOrigin.AUTOMATIC,
            journey_id="journey_0001",
        )
    ]
    groups = group_day_activities(DAY, entries)
    labels = [group.label for group in groups]

    assert labels[0] == "revenue"
    assert groups[0].total == pytest.approx(370.0)
    assert groups[0].count == 2
    assert "App balance" in labels
    assert "Balance used" in labels
    assert [group.total for group in groups] == sorted((group.total for group in groups), reverse=True)
