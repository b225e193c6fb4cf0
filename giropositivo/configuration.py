"""Mini README: Centralised configuration models and helpers for GiroPositivo.

Structure:
    * GiroPositivoSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read the civil timezone used for day
    boundaries, the input validation policy of the cost allocator, and the
    storage backend used by the command line. The configuration is cached so
    the cost of validation is incurred only once per process.
"""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class GiroPositivoSettings(BaseSettings):
    """Runtime configuration for the GiroPositivo core."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    timezone: str = Field(
        "America/Sao_Paulo",
        description="IANA zone used to derive civil dates and day boundaries.",
    )
    strict_inputs: bool = Field(
        False,
        description=(
            "Raise InvalidInputError for unparseable dates in cost allocation"
            " instead of logging a warning and returning zero."
        ),
    )
    storage_backend: str = Field(
        "memory",
        description="Repository backend identifier resolved through the storage registry.",
    )
    log_level: str = Field(
        "INFO",
        description="Root logging level applied by the command line entry point.",
    )
    default_report_days: int = Field(
        30,
        description="Window length used by period reports when no range is supplied.",
        ge=1,
    )

    class Config:
        env_prefix = "GIROPOSITIVO_"
        env_file = ".env"
        case_sensitive = False

    @validator("timezone")
    def _validate_timezone(cls, value: str) -> str:
        """Reject zone names the interpreter cannot resolve."""

        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as error:
            raise ValueError(f"Unknown timezone '{value}'") from error
        return value

    @validator("log_level")
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def zone(self) -> ZoneInfo:
        """Return the configured zone as a ``ZoneInfo`` instance."""

        return ZoneInfo(self.timezone)


@lru_cache()
def get_settings() -> GiroPositivoSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return GiroPositivoSettings()
