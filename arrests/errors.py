"""Typed failures raised by the arrest log core."""

from __future__ import annotations


class ArrestLogError(Exception):
    """Base class; ``kind`` lets the boundary tell failures apart."""

    kind = "error"

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or message


class ConfigurationError(ArrestLogError):
    """Data source location or a setting is missing or unusable."""

    kind = "configuration"


class ResourceNotFoundError(ArrestLogError):
    """The arrest table does not exist or cannot be read."""

    kind = "not_found"


class TransientQueryError(ArrestLogError):
    """Query execution failed. The request can be retried as-is."""

    kind = "query"


class ValidationError(ArrestLogError):
    kind = "validation"
