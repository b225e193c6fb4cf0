"""Mini README: Exception hierarchy shared by the GiroPositivo core.

Structure:
    * GiroPositivoError - base class for every error raised by the package.
    * InvalidInputError - malformed dates or numbers handed to calculations.
    * ValidationError - invariant violations detected before any state changes.
    * ReconciliationError / JourneyStateError / AutomaticEntryError - refined
      validation failures for the journey workflow.
    * NotFoundError - lookups of unknown records.

Validation errors subclass ``ValueError`` and lookups subclass ``KeyError``
so callers can keep catching the builtin types.
"""

from __future__ import annotations


class GiroPositivoError(Exception):
    """Base class for GiroPositivo errors."""


class InvalidInputError(GiroPositivoError, ValueError):
    """Raised when a date or amount cannot be interpreted."""


class ValidationError(GiroPositivoError, ValueError):
    """Raised when an operation would break a domain invariant."""


class ReconciliationError(ValidationError):
    """Raised when a journey cannot be reconciled against its contract."""


class JourneyStateError(ValidationError):
    """Raised for journey transitions that are not allowed."""


class AutomaticEntryError(ValidationError):
    """Raised when something other than reconciliation touches an automatic entry."""


class NotFoundError(GiroPositivoError, KeyError):
    """Raised when a contract, entry or journey is not registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Record not found"
