"""
Pydantic models for job and post data.

Both resource kinds share one shape.  ``ResourceBase`` holds the
owner-editable content fields; ``ResourceIn`` is the request body for
creation (the owner comes from the acting user); ``ResourceCreate``
adds ``poster_id`` and is what the store validates; ``ResourceRead``
adds the server-assigned and interaction fields for responses.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class MediaItem(BaseModel):
    """Descriptor of an uploaded file.  Upload itself happens elsewhere."""

    file_type: str = Field(..., examples=["image/png"])
    file_path: str = Field(..., examples=["/uploads/logo.png"])


class ResourceBase(BaseModel):
    title: str = Field(..., examples=["Backend engineer"])
    description: str = Field(..., examples=["Build and run our Python services"])
    tools: List[str] = Field(..., examples=[["python", "fastapi"]])
    tags: List[str] = Field(default_factory=list)
    media: List[MediaItem] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v


class ResourceIn(ResourceBase):
    """Request body for creating a job or post."""


class ResourceCreate(ResourceBase):
    """Full creation payload including the owning user."""

    poster_id: str

    @field_validator("poster_id")
    @classmethod
    def poster_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("poster_id must not be empty")
        return v


class ResourceUpdate(BaseModel):
    """Schema for updating a job or post.

    All fields are optional; only provided fields will be updated.  At
    least one field is required.  Interaction fields and the owner are
    not editable.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    tools: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    media: Optional[List[MediaItem]] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Title must not be empty")
        return v

    @model_validator(mode="after")
    def at_least_one_field(self) -> "ResourceUpdate":
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class ResourceRead(ResourceBase):
    """Schema for reading a job or post from the API."""

    id: str
    poster_id: str
    likes_count: int = 0
    views_count: int = 0
    total_comments: int = 0
    liked_by: List[str] = Field(default_factory=list)
    viewed_by: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: str

    model_config = {
        "from_attributes": True,
    }


class SearchQuery(BaseModel):
    """Body of a search request.  An empty or missing text matches everything."""

    text: Optional[str] = Field(None, examples=["python"])
