"""Mini README: Core package initializer for GiroPositivo.

GiroPositivo tracks a ride-share driver's revenue, fuel, app fees and work
journeys against a vehicle contract. This module exposes convenience imports
for the most used entry points without pulling in the command line.
"""

from .logging_utils import get_logger
from .services import TrackerService

__all__ = ["TrackerService", "get_logger"]
