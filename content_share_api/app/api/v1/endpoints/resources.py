"""
API endpoints for jobs and posts.

Both resource kinds expose the same operations, so one router factory
builds a router per ``ResourceKind`` and ``api.v1.router`` mounts it
under ``/jobs`` and ``/posts``.  Reads are public; creating, editing,
deleting, liking and viewing require an acting user.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from content_share_api.app.api.deps import get_services, to_http_exception
from content_share_api.app.core.errors import AppError
from content_share_api.app.core.security import get_current_user
from content_share_api.app.schemas.interaction import InteractionKind, ResourceKind
from content_share_api.app.schemas.pagination import QueryOptions, ResourcePage
from content_share_api.app.schemas.resource import (
    ResourceIn,
    ResourceRead,
    ResourceUpdate,
    SearchQuery,
)
from content_share_api.app.services import Services


def make_router(kind: ResourceKind) -> APIRouter:
    """Build the router for one resource kind."""
    router = APIRouter()
    label = kind.label

    @router.post(
        "/",
        response_model=ResourceRead,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create a {kind.value}",
    )
    async def create_resource(
        data: ResourceIn,
        current_user: dict = Depends(get_current_user),
        services: Services = Depends(get_services),
    ) -> ResourceRead:
        try:
            return await services.resources[kind].create_resource(data.model_dump(), current_user)
        except AppError as e:
            raise to_http_exception(e)

    @router.get("/", response_model=ResourcePage, summary=f"List {kind.table}")
    async def list_resources(
        sort_by: Optional[str] = Query(None, description="e.g. 'likes_count:desc,created_at:asc'"),
        limit: Optional[int] = Query(None),
        page: Optional[int] = Query(None),
        poster_id: Optional[str] = Query(None, description="Only records owned by this user"),
        services: Services = Depends(get_services),
    ) -> ResourcePage:
        options = QueryOptions(sort_by=sort_by, limit=limit, page=page)
        try:
            return await services.resources[kind].list_resources({"poster_id": poster_id}, options)
        except AppError as e:
            raise to_http_exception(e)

    @router.post("/search", response_model=List[ResourceRead], summary=f"Search {kind.table}")
    async def search_resources(
        query: SearchQuery,
        services: Services = Depends(get_services),
    ) -> List[ResourceRead]:
        """Case-sensitive substring search over title and description.

        An empty text returns every record.
        """
        try:
            return await services.resources[kind].search_resources(query.text)
        except AppError as e:
            raise to_http_exception(e)

    @router.get("/{resource_id}", response_model=ResourceRead, summary=f"Get a {kind.value}")
    async def get_resource(
        resource_id: str,
        services: Services = Depends(get_services),
    ) -> ResourceRead:
        try:
            return await services.resources[kind].get_resource(resource_id)
        except AppError as e:
            raise to_http_exception(e)

    @router.patch("/{resource_id}", response_model=ResourceRead, summary=f"Update a {kind.value}")
    async def update_resource(
        resource_id: str,
        data: ResourceUpdate,
        current_user: dict = Depends(get_current_user),
        services: Services = Depends(get_services),
    ) -> ResourceRead:
        """Edit content fields.  Only the owner or an admin may edit."""
        try:
            return await services.resources[kind].update_resource(
                resource_id, data.model_dump(exclude_none=True), current_user
            )
        except AppError as e:
            raise to_http_exception(e)

    @router.delete(
        "/{resource_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete a {kind.value}",
    )
    async def delete_resource(
        resource_id: str,
        current_user: dict = Depends(get_current_user),
        services: Services = Depends(get_services),
    ) -> None:
        try:
            await services.resources[kind].delete_resource(resource_id, current_user)
        except AppError as e:
            raise to_http_exception(e)
        return None

    async def _interact(
        interaction: InteractionKind,
        resource_id: str,
        current_user: dict,
        services: Services,
    ) -> dict:
        try:
            await services.interactions.record(kind, interaction, current_user["user_id"], resource_id)
        except AppError as e:
            raise to_http_exception(e)
        return {"detail": f"{label} {interaction.past_tense}"}

    @router.post("/{resource_id}/like", summary=f"Like a {kind.value}")
    async def like_resource(
        resource_id: str,
        current_user: dict = Depends(get_current_user),
        services: Services = Depends(get_services),
    ) -> dict:
        """Record a like.  409 if already liked, 404 if the record or user is missing."""
        return await _interact(InteractionKind.LIKE, resource_id, current_user, services)

    @router.post("/{resource_id}/view", summary=f"View a {kind.value}")
    async def view_resource(
        resource_id: str,
        current_user: dict = Depends(get_current_user),
        services: Services = Depends(get_services),
    ) -> dict:
        """Record a view.  409 if already viewed, 404 if the record is missing."""
        return await _interact(InteractionKind.VIEW, resource_id, current_user, services)

    return router


jobs_router = make_router(ResourceKind.JOB)
posts_router = make_router(ResourceKind.POST)
