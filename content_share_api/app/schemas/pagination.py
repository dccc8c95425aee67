"""Paginated query options and the envelope returned by list endpoints."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .resource import ResourceRead


class QueryOptions(BaseModel):
    """Sorting and paging options.

    ``sort_by`` takes ``field:asc`` or ``field:desc``; several keys may be
    given separated by commas.  Missing or non-positive ``limit`` and
    ``page`` fall back to the configured defaults.
    """

    sort_by: Optional[str] = Field(None, examples=["likes_count:desc,created_at:asc"])
    limit: Optional[int] = None
    page: Optional[int] = None


class ResourcePage(BaseModel):
    results: List[ResourceRead]
    page: int
    limit: int
    total_pages: int
    total_results: int
