"""
Business logic for jobs and posts.

``ResourceService`` is the thin layer between the endpoints and a
``ResourceStore``.  It turns absence signals into ``NotFound``, checks
ownership for edits and deletes, and forwards listing and search
options unchanged, so both resource kinds return the same paginated
envelope.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.errors import NotFound
from ..core.security import ensure_owner_or_admin
from ..schemas.pagination import QueryOptions, ResourcePage
from ..schemas.resource import ResourceRead
from .resource_store import ResourceStore

logger = logging.getLogger(__name__)


class ResourceService:
    """Service for one resource kind."""

    def __init__(self, store: ResourceStore) -> None:
        self.store = store
        self.kind = store.kind

    async def create_resource(self, payload: Dict[str, Any], current_user: dict) -> ResourceRead:
        """Create a resource owned by the acting user.

        Any ``poster_id`` in the payload is replaced by the acting user.
        """
        data = {**payload, "poster_id": current_user.get("user_id")}
        return self.store.create(data)

    async def list_resources(
        self,
        filter: Optional[Dict[str, Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> ResourcePage:
        return self.store.query(filter or {}, options or QueryOptions())

    async def get_resource(self, resource_id: str) -> ResourceRead:
        resource = self.store.get_by_id(resource_id)
        if resource is None:
            raise NotFound(f"{self.kind.label} not found")
        return resource

    async def search_resources(self, text: Optional[str]) -> List[ResourceRead]:
        results = self.store.search_by_text(text)
        logger.debug("Search %r over %s matched %d", text, self.kind.table, len(results))
        return results

    async def list_user_resources(self, poster_id: str) -> List[ResourceRead]:
        return self.store.list_by_poster(poster_id)

    async def update_resource(self, resource_id: str, body: Dict[str, Any], current_user: dict) -> ResourceRead:
        """Owner or admin edit of content fields."""
        resource = await self.get_resource(resource_id)
        ensure_owner_or_admin(resource.poster_id, current_user)
        return self.store.replace_fields_by_id(resource_id, body)

    async def delete_resource(self, resource_id: str, current_user: dict) -> None:
        """Owner or admin delete.  Raises ``NotFound`` on a second call."""
        resource = await self.get_resource(resource_id)
        ensure_owner_or_admin(resource.poster_id, current_user)
        self.store.delete_by_id(resource_id)
        logger.info("User %s deleted %s %s", current_user.get("user_id"), self.kind.value, resource_id)
