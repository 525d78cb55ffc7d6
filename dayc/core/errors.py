from __future__ import annotations

"""Domain-specific exception hierarchy for the DAYC-2 scoring service.

Lookup misses are not exceptions; they come back as ``ValueWithProvenance``
results carrying a note. The classes below cover bad request input and
malformed table data only.
"""

from typing import Any

__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "TableNotFoundError",
    "TableDataError",
    "ValueParseError",
    "ConfigurationError",
]


class DomainError(Exception):
    """Base class for recoverable domain-level errors."""

    status_code: int = 400
    error_code: str = "domain_error"
    default_message: str = "Domain error"

    def __init__(
        self,
        message: str | None = None,
        *,
        detail: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        final_message = message or self.default_message
        super().__init__(final_message)
        self.message = final_message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError, ValueError):
    """Raised when caller-provided scoring input fails validation."""

    error_code = "validation_error"
    default_message = "Invalid scoring input"
    status_code = 400


class NotFoundError(DomainError):
    """Base class for missing domain resources."""

    error_code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class TableNotFoundError(NotFoundError):
    """Raised when a conversion table id is requested but not loaded."""

    error_code = "table_not_found"
    default_message = "Conversion table not found"


class TableDataError(DomainError):
    """Raised when a conversion table file violates the expected shape."""

    error_code = "table_data_error"
    status_code = 500
    default_message = "Conversion table data is malformed"


class ValueParseError(TableDataError, ValueError):
    """Raised when a table cell string cannot be parsed into a numeric value."""

    error_code = "value_parse_error"
    default_message = "Cannot parse table cell"


class ConfigurationError(DomainError):
    """Raised when server-side configuration is invalid or incomplete."""

    error_code = "configuration_error"
    status_code = 500
    default_message = "Invalid system configuration"
