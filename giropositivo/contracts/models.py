"""Mini README: Vehicle contract records and lifecycle helpers.

Structure:
    * VehicleType - RENTED (fixed-term) or OWNED (open-ended monthly) vehicles.
    * ContractStatus - FUTURE, ACTIVE or FINISHED lifecycle markers.
    * Contract - dataclass holding cost terms, goals, odometer and wallet.
    * effective_status - status derived from the stored flag and the clock.

Contracts are plain records; mutations return new instances through
``dataclasses.replace`` so callers decide how to persist them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from ..civil_time import InstantLike, now as civil_now, parse_instant
from ..errors import InvalidInputError, ValidationError
from ..logging_utils import get_logger

LOGGER = get_logger(__name__)


class VehicleType(str, Enum):
    """Enumerate how the vehicle cost accrues."""

    RENTED = "RENTED"
    OWNED = "OWNED"

    @classmethod
    def from_str(cls, value: str) -> "VehicleType":
        """Coerce arbitrary casing into a valid vehicle type."""

        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError) as error:
            raise ValueError(f"Unsupported vehicle type: {value}") from error


class ContractStatus(str, Enum):
    """Lifecycle markers stored on a contract."""

    FUTURE = "Futuro"
    ACTIVE = "Ativo"
    FINISHED = "Finalizado"

    @classmethod
    def from_str(cls, value: str) -> "ContractStatus":
        """Accept either the stored label or the member name."""

        if isinstance(value, str):
            cleaned = value.strip()
            for member in cls:
                if cleaned.lower() in {member.value.lower(), member.name.lower()}:
                    return member
        raise ValueError(f"Unsupported contract status: {value}")


@dataclass(slots=True)
class Contract:
    """Vehicle contract defining cost terms and the validity window."""

    contract_id: str
    owner_id: str
    vehicle_type: VehicleType
    contract_start: datetime
    contract_end: datetime
    contract_value: float
    profit_goal: float = 0.0
    car_installment: float = 0.0
    status: ContractStatus = ContractStatus.ACTIVE
    current_odometer: float = 0.0
    app_balance: float = 0.0
    vehicle_name: str = ""
    vehicle_plate: Optional[str] = None

    @property
    def monthly_total(self) -> float:
        """Monthly accrual for owned vehicles: maintenance reserve plus installment."""

        return self.contract_value + (self.car_installment or 0.0)

    def finish(self, closed_at: InstantLike) -> "Contract":
        """Return a finished copy whose window ends at ``closed_at``."""

        closed = parse_instant(closed_at)
        LOGGER.info("Finishing contract %s at %s", self.contract_id, closed.isoformat())
        return replace(self, status=ContractStatus.FINISHED, contract_end=closed)

    def as_dict(self) -> Dict[str, object]:
        """Export the contract with serialisable values."""

        return {
            "contract_id": self.contract_id,
            "owner_id": self.owner_id,
            "vehicle_type": self.vehicle_type.value,
            "status": self.status.value,
            "contract_start": parse_instant(self.contract_start).isoformat(),
            "contract_end": parse_instant(self.contract_end).isoformat(),
            "contract_value": self.contract_value,
            "car_installment": self.car_installment,
            "profit_goal": self.profit_goal,
            "current_odometer": self.current_odometer,
            "app_balance": self.app_balance,
            "vehicle_name": self.vehicle_name,
            "vehicle_plate": self.vehicle_plate,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "Contract":
        """Build a contract from a snapshot or API payload."""

        try:
            vehicle_type = VehicleType.from_str(str(payload["vehicle_type"]))
            installment = float(payload.get("car_installment") or 0.0)
            if vehicle_type is VehicleType.RENTED and installment:
                raise ValidationError("Car installments only apply to owned vehicles")
            return cls(
                contract_id=str(payload["contract_id"]),
                owner_id=str(payload["owner_id"]),
                vehicle_type=vehicle_type,
                status=ContractStatus.from_str(str(payload.get("status", ContractStatus.ACTIVE.value))),
                contract_start=parse_instant(payload["contract_start"]),
                contract_end=parse_instant(payload["contract_end"]),
                contract_value=float(payload["contract_value"]),
                car_installment=installment,
                profit_goal=float(payload.get("profit_goal") or 0.0),
                current_odometer=float(payload.get("current_odometer") or 0.0),
                app_balance=float(payload.get("app_balance") or 0.0),
                vehicle_name=str(payload.get("vehicle_name") or ""),
                vehicle_plate=payload.get("vehicle_plate"),  # type: ignore[arg-type]
            )
        except KeyError as error:
            raise ValidationError(f"Contract payload is missing field {error}") from error
        except (TypeError, ValueError) as error:
            if isinstance(error, ValidationError):
                raise
            raise InvalidInputError(f"Invalid contract payload: {error}") from error


def effective_status(contract: Contract, at: Optional[InstantLike] = None) -> ContractStatus:
    """Derive the lifecycle status of ``contract`` at the given instant."""

    if contract.status is ContractStatus.FINISHED:
        return ContractStatus.FINISHED

    try:
        reference = parse_instant(at) if at is not None else civil_now()
        start = parse_instant(contract.contract_start)
        end = parse_instant(contract.contract_end)
    except InvalidInputError:
        LOGGER.warning("Contract %s has malformed dates; treating as active", contract.contract_id)
        return ContractStatus.ACTIVE

    if reference < start:
        return ContractStatus.FUTURE
    if reference > end:
        return ContractStatus.FINISHED
    return ContractStatus.ACTIVE
