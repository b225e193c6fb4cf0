"""Mini README: Journey workflow for GiroPositivo.

Re-exports the lifecycle transitions, the wallet reconciliation engine and
the one-time migrations for legacy records.
"""

from .lifecycle import close_journey, edit_journey, find_open_journey, open_journey, validate_closed_journey
from .migration import MigrationReport, backfill_contract_ids, relink_legacy_recharges
from .reconciliation import (
    ReconciliationResult,
    automatic_entry_id,
    cascade_entry_ids,
    reconcile_journey,
    recharges_in_journey,
)

__all__ = [
    "MigrationReport",
    "ReconciliationResult",
    "automatic_entry_id",
    "backfill_contract_ids",
    "cascade_entry_ids",
    "close_journey",
    "edit_journey",
    "find_open_journey",
    "open_journey",
    "recharges_in_journey",
    "reconcile_journey",
    "relink_legacy_recharges",
    "validate_closed_journey",
]
