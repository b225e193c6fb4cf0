"""Mini README: Vehicle contracts and cost proration.

Exposes the contract record with its enumerations and the allocator that
splits contract cost (and profit goal) across arbitrary date ranges.
"""

from .allocation import contract_duration_minutes, cost_in_period, goal_in_period
from .models import Contract, ContractStatus, VehicleType, effective_status

__all__ = [
    "Contract",
    "ContractStatus",
    "VehicleType",
    "contract_duration_minutes",
    "cost_in_period",
    "effective_status",
    "goal_in_period",
]
