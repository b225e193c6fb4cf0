"""Mini README: Shared fixtures for the GiroPositivo test-suite.

Structure:
    * snapshot_payload - one driver's rented contract with a closed journey,
      a linked recharge and a revenue entry, in snapshot JSON form.
    * snapshot_file - the same payload written to a temporary file.
"""

from __future__ import annotations

import copy
import json

import pytest

SNAPSHOT = {
    "contracts": [
        {
            "contract_id": "contract_0001",
            "owner_id": "driver",
            "vehicle_type": "RENTED",
            "status": "Ativo",
            "contract_start": "2024-03-01T08:00:00-03:00",
            "contract_end": "2024-03-08T08:00:00-03:00",
            "contract_value": 3000,
            "app_balance": 50,
            "current_odometer": 1000,
        }
    ],
    "entries": [
        {
            "entry_id": "entry_0001",
            "owner_id": "driver",
            "contract_id": "contract_0001",
            "kind": "APP_RECHARGE",
            "amount": 30,
            "occurred_at": "2024-03-02T13:00:00Z",
            "journey_id": "journey_0001",
            "origin": "manual_recharge",
        },
        {
            "entry_id": "entry_0002",
            "owner_id": "driver",
            "contract_id": "contract_0001",
            "kind": "revenue",
            "amount": 100,
            "occurred_at": "2024-03-02T15:00:00Z",
            "platform": "Uber",
        },
    ],
    "journeys": [
        {
            "journey_id": "journey_0001",
            "owner_id": "driver",
            "contract_id": "contract_0001",
            "started_at": "2024-03-02T11:00:00Z",
            "ended_at": "2024-03-02T17:00:00Z",
            "km_start": 1000,
            "km_end": 1150,
            "balance_start": 50,
            "balance_end": 60,
            "closed": True,
        }
    ],
}


@pytest.fixture()
def snapshot_payload() -> dict:
    return copy.deepcopy(SNAPSHOT)


@pytest.fixture()
def snapshot_file(tmp_path, snapshot_payload):
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_payload), encoding="utf-8")
    return path
