"""
API endpoints for users.

Registration, lookup (including the interaction back-references) and
the per-user listing of jobs and posts.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from content_share_api.app.api.deps import get_services, to_http_exception
from content_share_api.app.core.errors import AppError
from content_share_api.app.schemas.interaction import ResourceKind
from content_share_api.app.schemas.resource import ResourceRead
from content_share_api.app.schemas.user import UserCreate, UserRead
from content_share_api.app.services import Services

router = APIRouter()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    services: Services = Depends(get_services),
) -> UserRead:
    """Register a new user.  Returns 409 if the email is taken."""
    try:
        return services.users.create(data.model_dump())
    except AppError as e:
        raise to_http_exception(e)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: str,
    services: Services = Depends(get_services),
) -> UserRead:
    try:
        user = services.users.get_by_id(user_id)
    except AppError as e:
        raise to_http_exception(e)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}/jobs", response_model=List[ResourceRead])
async def list_user_jobs(
    user_id: str,
    services: Services = Depends(get_services),
) -> List[ResourceRead]:
    try:
        return await services.resources[ResourceKind.JOB].list_user_resources(user_id)
    except AppError as e:
        raise to_http_exception(e)


@router.get("/{user_id}/posts", response_model=List[ResourceRead])
async def list_user_posts(
    user_id: str,
    services: Services = Depends(get_services),
) -> List[ResourceRead]:
    try:
        return await services.resources[ResourceKind.POST].list_user_resources(user_id)
    except AppError as e:
        raise to_http_exception(e)
