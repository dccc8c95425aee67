"""
Pydantic models for user data.

Only the subset of the user record that this service owns is modelled:
identity, contact details, role and the four interaction
back-reference sets.
"""

from typing import List, Literal

from pydantic import BaseModel, Field, field_validator


class UserCreate(BaseModel):
    name: str = Field(..., examples=["Ada Lovelace"])
    email: str = Field(..., examples=["ada@example.com"])
    role: Literal["user", "admin"] = "user"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("Invalid email address")
        return v


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: str
    liked_jobs: List[str] = Field(default_factory=list)
    viewed_jobs: List[str] = Field(default_factory=list)
    liked_posts: List[str] = Field(default_factory=list)
    viewed_posts: List[str] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }
