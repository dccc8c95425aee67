"""
Information endpoint for API v1.

Returns the service name and version and checks that the datastore
answers.  Used by load balancers and deployment scripts.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from content_share_api.app.api.deps import get_services
from content_share_api.app.core.errors import StorageError
from content_share_api.app.services import Services

router = APIRouter()


@router.get("/health", response_model=Dict[str, Any])
async def health(
    request: Request,
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    try:
        with services.database.cursor() as cursor:
            cursor.execute("SELECT 1").fetchone()
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    return {
        "name": request.app.title,
        "version": request.app.version,
        "status": "ok",
    }
