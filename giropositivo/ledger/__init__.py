"""Mini README: Ledger records for GiroPositivo.

This package groups the entry and journey records consumed by the
aggregators and the reconciliation engine, plus the wallet balance helper
used by the dashboard.
"""

from .records import Entry, EntryKind, EntryOrigin, Journey, Platform, wallet_balance

__all__ = ["Entry", "EntryKind", "EntryOrigin", "Journey", "Platform", "wallet_balance"]
