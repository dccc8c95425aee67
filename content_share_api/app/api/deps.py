"""
Shared endpoint dependencies and error translation.

The wired ``Services`` live on ``app.state``; endpoints receive them
through ``get_services`` rather than importing module-level objects.
"""

from fastapi import HTTPException, Request, status

from ..core.errors import AppError, Conflict, NotFound, PermissionDenied, StorageError, ValidationError
from ..services import Services

ERROR_STATUS = {
    ValidationError: 422,
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_services(request: Request) -> Services:
    return request.app.state.services


def to_http_exception(exc: AppError) -> HTTPException:
    """Map a domain error onto the HTTP status callers rely on."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if isinstance(exc, ValidationError) and exc.errors:
        return HTTPException(status_code=status_code, detail=exc.errors)
    return HTTPException(status_code=status_code, detail=exc.message)
