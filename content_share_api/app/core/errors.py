"""
Error taxonomy shared by the stores, services and API layer.

Services raise these exceptions and the endpoints translate them into
HTTP responses.  Callers can tell "already done" (``Conflict``) from
"target missing" (``NotFound``), "transient storage failure"
(``StorageError``, safe to retry) and "bad input" (``ValidationError``,
not safe to retry unmodified).
"""

from typing import Any, List, Optional


class AppError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or missing required input.  Raised before any mutation."""

    def __init__(self, message: str, errors: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFound(AppError):
    """The referenced entity does not exist."""


class Conflict(AppError):
    """The interaction was already recorded for this user and resource."""


class PermissionDenied(AppError):
    """The acting user may not modify the target entity."""


class StorageError(AppError):
    """The underlying persistence layer failed."""
