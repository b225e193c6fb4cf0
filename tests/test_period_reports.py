"""Mini README: Tests for period reports and their KPIs."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from giropositivo.contracts import Contract, ContractStatus, VehicleType
from giropositivo.errors import ValidationError
from giropositivo.ledger import Entry, EntryKind, Journey, Platform
from giropositivo.stats import ReportRange, period_report

SAO_PAULO = ZoneInfo("America/Sao_Paulo")


def _entry(entry_id: str, kind: EntryKind, amount: float, day: int, **extra: object) -> Entry:
    return Entry(
        entry_id=entry_id,
        owner_id="driver",
        contract_id="contract_0001",
        kind=kind,
        amount=amount,
        occurred_at=datetime(2024, 3, day, 12, 0, tzinfo=SAO_PAULO),
        category=kind.value.lower(),
        **extra,  # type: ignore[arg-type]
    )


def _journey(journey_id: str, day: int, km: float, minutes: int, closed: bool = True) -> Journey:
    started = datetime(2024, 3, day, 8, 0, tzinfo=SAO_PAULO)
    return Journey(
        journey_id=journey_id,
        owner_id="driver",
        contract_id="contract_0001",
        reference_day=started.date(),
        started_at=started,
        km_start=1000.0,
        balance_start=50.0,
        ended_at=started + timedelta(minutes=minutes) if closed else None,
        km_end=1000.0 + km if closed else None,
        balance_end=40.0 if closed else None,
        closed=closed,
    )


def _rented_contract() -> Contract:
    start = datetime(2024, 3, 1, 8, 0, tzinfo=SAO_PAULO)
    return Contract(
        contract_id="contract_0001",
        owner_id="driver",
        vehicle_type=VehicleType.RENTED,
        contract_start=start,
        contract_end=start + timedelta(days=7),
        contract_value=3000.0,
        profit_goal=700.0,
    )


def _entries() -> list:
    return [
        _entry("entry_0001", EntryKind.REVENUE, 200.0, 2, platform=Platform.UBER, discount=4.0),
        _entry("entry_0002", EntryKind.REVENUE, 100.0, 3, platform=Platform.P99),
        _entry("entry_0003", EntryKind.FUEL, 60.0, 2, price_per_liter=6.0),
        _entry("entry_0004", EntryKind.FUEL, 20.0, 3),
        _entry("entry_0005", EntryKind.APP_TAX, 30.0, 2, platform=Platform.UBER),
        _entry("entry_0006", EntryKind.APP_TAX, 10.0, 3, platform=Platform.P99),
        _entry("entry_0007", EntryKind.APP_TAX, 50.0, 3, is_recharge=True),
        _entry("entry_0008", EntryKind.APP_RECHARGE, 80.0, 3),
        _entry("entry_0009", EntryKind.EXPENSE, 15.0, 4),
        _entry("entry_0010", EntryKind.REVENUE, 999.0, 20),
    ]


def _journeys() -> list:
    return [
        _journey("journey_0001", 2, km=100.0, minutes=240),
        _journey("journey_0002", 3, km=50.0, minutes=120),
        _journey("journey_0003", 4, km=0.0, minutes=0, closed=False),
        _journey("journey_0004", 25, km=300.0, minutes=60),
    ]


def test_period_report_totals_and_kpis() -> None:
    """A three-day report sums the range and derives its ratios."""

    report_range = ReportRange.custom(date(2024, 3, 2), date(2024, 3, 4))
    report = period_report(report_range, None, _entries(), _journeys())

    assert report.revenue == pytest.approx(300.0)
    assert report.fuel_cost == pytest.approx(80.0)
    assert report.app_tax_cost == pytest.approx(40.0)
    assert report.expenses == pytest.approx(15.0)
    assert report.contract_cost == 0.0
    assert report.total_expenses == pytest.approx(135.0)
    assert report.net_profit == pytest.approx(165.0)
    assert report.journey_count == 2
    assert report.total_minutes == 360
    assert report.total_hours == pytest.approx(6.0)
    assert report.total_distance == pytest.approx(150.0)
    assert report.total_liters == pytest.approx(10.0)
    assert report.total_discounts == pytest.approx(4.0)
    assert report.revenue_per_hour == pytest.approx(50.0)
    assert report.revenue_per_km == pytest.approx(2.0)
    assert report.km_per_liter == pytest.approx(15.0)
    assert dict(report.expense_breakdown) == {"fuel": 80.0, "app_tax": 40.0, "expenses": 15.0}


def test_platform_filter_narrows_revenue_and_app_tax_only() -> None:
    """Fuel and general expenses stay unfiltered when a platform is chosen."""

    report_range = ReportRange.custom(date(2024, 3, 2), date(2024, 3, 4))
    report = period_report(report_range, None, _entries(), _journeys(), platform=Platform.UBER)

    assert report.platform is Platform.UBER
    assert report.revenue == pytest.approx(200.0)
    assert report.app_tax_cost == pytest.approx(30.0)
    assert report.fuel_cost == pytest.approx(80.0)
    assert report.expenses == pytest.approx(15.0)
    assert report.as_dict()["platform"] == "Uber"


def test_contract_cost_is_allocated_once_for_the_range() -> None:
    """Rented costs accrue over the minutes of the range overlapping the contract."""

    contract = _rented_contract()
    report_range = ReportRange.for_contract(contract)
    report = period_report(report_range, contract, [], [])

    assert report.contract_cost == pytest.approx(3000.0)
    assert report.profit_goal == pytest.approx(700.0)
    assert report.net_profit == pytest.approx(-3000.0)
    assert report.revenue_per_hour == 0.0
    assert report.km_per_liter == 0.0
    assert report.expense_breakdown == (("contract", pytest.approx(3000.0)),)


def test_empty_range_has_zero_ratios() -> None:
    """No journeys or litres never divides by zero."""

    report = period_report(ReportRange.custom(date(2024, 4, 1), date(2024, 4, 2)), None, _entries(), [])
    assert report.revenue == 0.0
    assert report.revenue_per_km == 0.0
    assert report.expense_breakdown == ()


def test_report_range_constructors() -> None:
    """Range helpers cover whole civil days and reject inverted ranges."""

    at = datetime(2024, 3, 10, 15, 0, tzinfo=SAO_PAULO)
    last_week = ReportRange.last_days(7, at=at)
    assert last_week.start == datetime(2024, 3, 4, 0, 0, tzinfo=SAO_PAULO)
    assert last_week.end == datetime(2024, 3, 10, 23, 59, 59, 999000, tzinfo=SAO_PAULO)
    assert last_week.includes_day(date(2024, 3, 4))
    assert not last_week.includes_day(date(2024, 3, 11))

    with pytest.raises(ValidationError):
        ReportRange.custom(date(2024, 3, 5), date(2024, 3, 1))
    with pytest.raises(ValidationError):
        ReportRange.last_days(0, at=at)


def test_contract_range_for_owned_contracts_ends_today() -> None:
    """Owned contracts report up to the given day unless finished."""

    owned = Contract(
        contract_id="contract_0002",
        owner_id="driver",
        vehicle_type=VehicleType.OWNED,
        contract_start=datetime(2024, 1, 15, 9, 0, tzinfo=SAO_PAULO),
        contract_end=datetime(2024, 12, 31, 23, 59, tzinfo=SAO_PAULO),
        contract_value=1000.0,
    )
    at = datetime(2024, 3, 10, 15, 0, tzinfo=SAO_PAULO)
    assert ReportRange.for_contract(owned, at=at).end.date() == date(2024, 3, 10)
    assert ReportRange.for_contract(owned, at=at).start == datetime(2024, 1, 15, 0, 0, tzinfo=SAO_PAULO)

    finished = owned.finish(datetime(2024, 2, 20, 18, 0, tzinfo=SAO_PAULO))
    assert finished.status is ContractStatus.FINISHED
    assert ReportRange.for_contract(finished, at=at).end.date() == date(2024, 2, 20)
