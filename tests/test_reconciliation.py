"""Mini README: Tests for the journey wallet reconciliation engine.

Structure:
    * consumed wallet credit becomes one automatic APP_TAX entry.
    * re-running is idempotent and non-positive results remove the entry.
    * manual recharges are never touched.
    * invalid journeys raise before anything is produced.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from giropositivo.contracts import Contract, VehicleType
from giropositivo.errors import ReconciliationError
from giropositivo.journeys import (
    automatic_entry_id,
    cascade_entry_ids,
    reconcile_journey,
    recharges_in_journey,
)
from giropositivo.ledger import Entry, EntryKind, EntryOrigin, Journey

SAO_PAULO = ZoneInfo("America/Sao_Paulo")
STARTED = datetime(2024, 3, 2, 8, 0, tzinfo=SAO_PAULO)
ENDED = datetime(2024, 3, 2, 14, 0, tzinfo=SAO_PAULO)


def _contract() -> Contract:
    return Contract(
        contract_id="contract_0001",
        owner_id="driver",
        vehicle_type=VehicleType.RENTED,
        contract_start=datetime(2024, 3, 1, 8, 0, tzinfo=SAO_PAULO),
        contract_end=datetime(2024, 3, 31, 8, 0, tzinfo=SAO_PAULO),
        contract_value=3000.0,
        current_odometer=1000.0,
        app_balance=50.0,
    )


def _journey(balance_end: float = 60.0, **overrides: object) -> Journey:
    journey = Journey(
        journey_id="journey_0001",
        owner_id="driver",
        contract_id="contract_0001",
        reference_day=date(2024, 3, 2),
        started_at=STARTED,
        ended_at=ENDED,
        km_start=1000.0,
        km_end=1150.0,
        balance_start=50.0,
        balance_end=balance_end,
        closed=True,
    )
    return replace(journey, **overrides)  # type: ignore[arg-type]


def _recharge(entry_id: str = "entry_0001", amount: float = 30.0, **overrides: object) -> Entry:
    entry = Entry(
        entry_id=entry_id,
        owner_id="driver",
        contract_id="contract_0001",
        kind=EntryKind.APP_RECHARGE,
        amount=amount,
        occurred_at=datetime(2024, 3, 2, 10, 0, tzinfo=SAO_PAULO),
        category="recharge",
        journey_id="journey_0001",
        origin=EntryOrigin.MANUAL_RECHARGE,
    )
    return replace(entry, **overrides)  # type: ignore[arg-type]


def test_consumed_balance_creates_one_automatic_entry() -> None:
    """Start 50 plus a linked recharge of 30 ending at 60 means 20 was used."""

    entries = [_recharge()]
    result = reconcile_journey(_journey(), _contract(), entries)

    assert result.recharges == pytest.approx(30.0)
    assert result.tax == pytest.approx(20.0)
    entry = result.automatic_entry
    assert entry is not None
    assert entry.entry_id == automatic_entry_id("journey_0001")
    assert entry.kind is EntryKind.APP_TAX
    assert entry.origin is EntryOrigin.AUTOMATIC
    assert entry.amount == pytest.approx(20.0)
    assert entry.occurred_at == ENDED
    assert entry.journey_id == "journey_0001"
    assert entry.is_recharge is False
    assert result.contract.current_odometer == 1150.0
    assert result.contract.app_balance == 60.0

    merged = result.apply(entries)
    assert [item.entry_id for item in merged] == ["entry_0001", entry.entry_id]


def test_reconciliation_is_idempotent() -> None:
    """Reconciling twice leaves exactly one automatic entry with the same amount."""

    first = reconcile_journey(_journey(), _contract(), [_recharge()])
    entries = first.apply([_recharge()])
    second = reconcile_journey(_journey(), first.contract, entries)
    merged = second.apply(entries)

    automatic = [entry for entry in merged if entry.is_automatic]
    assert len(automatic) == 1
    assert automatic[0].amount == pytest.approx(20.0)
    assert second.removed_entry_ids == (automatic_entry_id("journey_0001"),)


def test_non_positive_tax_removes_previous_entry() -> None:
    """Ending with more credit than available removes the automatic entry."""

    first = reconcile_journey(_journey(), _contract(), [_recharge()])
    entries = first.apply([_recharge()])

    result = reconcile_journey(_journey(balance_end=90.0), _contract(), entries)
    merged = result.apply(entries)

    assert result.tax == pytest.approx(-10.0)
    assert result.automatic_entry is None
    assert not [entry for entry in merged if entry.is_automatic]
    assert [entry.entry_id for entry in merged] == ["entry_0001"]


def test_zero_tax_creates_no_entry() -> None:
    """Balances that exactly net out produce nothing."""

    result = reconcile_journey(_journey(balance_end=80.0), _contract(), [_recharge()])
    assert result.tax == 0.0
    assert result.automatic_entry is None
    assert result.removed_entry_ids == ()


def test_only_linked_credits_of_the_same_contract_count() -> None:
    """Unlinked, foreign-contract and automatic entries are not recharges."""

    entries = [
        _recharge(),
        _recharge("entry_0002", 25.0, journey_id=None),
        _recharge("entry_0003", 40.0, contract_id="contract_0099"),
        _recharge("entry_0004", 5.0, kind=EntryKind.APP_TAX, is_recharge=True),
        _recharge("entry_0005", 12.0, kind=EntryKind.APP_TAX, origin=EntryOrigin.MANUAL),
    ]
    assert recharges_in_journey(_journey(), _contract(), entries) == pytest.approx(35.0)


def test_manual_recharges_survive_reconciliation() -> None:
    """Recharges keep their id, origin and amount after re-running."""

    recharge = _recharge()
    first = reconcile_journey(_journey(), _contract(), [recharge])
    entries = first.apply([recharge])
    second = reconcile_journey(_journey(balance_end=70.0), _contract(), entries)
    merged = second.apply(entries)

    assert recharge in merged
    assert recharge.entry_id not in second.removed_entry_ids
    assert second.automatic_entry is not None
    assert second.automatic_entry.amount == pytest.approx(10.0)


@pytest.mark.parametrize(
    "journey, contract",
    [
        (_journey(closed=False), _contract()),
        (_journey(balance_end=None), _contract()),
        (_journey(km_end=900.0), _contract()),
        (_journey(ended_at=datetime(2024, 3, 2, 7, 0, tzinfo=SAO_PAULO)), _contract()),
        (_journey(contract_id="contract_0099"), _contract()),
        (_journey(), None),
    ],
    ids=["open", "no-final-balance", "km-backwards", "ends-before-start", "other-contract", "no-contract"],
)
def test_invalid_journeys_raise(journey: Journey, contract) -> None:
    """Reconciliation refuses journeys it cannot account for."""

    with pytest.raises(ReconciliationError):
        reconcile_journey(journey, contract, [_recharge()])


def test_cascade_collects_linked_and_automatic_entries() -> None:
    """Deleting a journey takes its automatic entry and linked recharges with it."""

    first = reconcile_journey(_journey(), _contract(), [_recharge()])
    entries = first.apply([_recharge(), _recharge("entry_0002", journey_id="journey_0002")])
    assert set(cascade_entry_ids("journey_0001", entries)) == {
        "entry_0001",
        automatic_entry_id("journey_0001"),
    }
