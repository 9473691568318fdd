"""
Domain errors raised by the project store, the application manager and
the matching API.

Every error carries the HTTP status it maps to and a short machine code,
so app.main can render all of them through a single exception handler.
Messages are safe to show to the caller — they name ids and fields,
never internals.
"""

from __future__ import annotations

from typing import Any


class MarketplaceError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(MarketplaceError):
    """A project or application id does not resolve."""

    status_code = 404
    code = "not_found"


class ValidationError(MarketplaceError):
    """Required field missing, enum value invalid or malformed range."""

    status_code = 400
    code = "validation_error"


class ForbiddenError(MarketplaceError):
    """The resolved identity may not perform this operation."""

    status_code = 403
    code = "forbidden"


class ConflictError(MarketplaceError):
    """Duplicate application or a concurrent write that lost the race."""

    status_code = 409
    code = "conflict"


class InvalidTransitionError(MarketplaceError):
    """Status change attempted out of a terminal (or unreachable) state."""

    status_code = 409
    code = "invalid_transition"


class StorageError(MarketplaceError):
    """The database failed. Retrying is the transport layer's decision."""

    status_code = 500
    code = "storage_error"
