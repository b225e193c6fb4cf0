"""Mini README: Application services for GiroPositivo.

Exports ``TrackerService``, the owner-scoped entry point that hosts call instead
of wiring repositories, reconciliation and aggregation together themselves.
"""

from .tracker import TrackerService

__all__ = ["TrackerService"]
