"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers under a unified
prefix.  Jobs and posts are two instances of the same resource router.
"""

from fastapi import APIRouter

from .endpoints import info, resources, users

router = APIRouter()

router.include_router(resources.jobs_router, prefix="/jobs", tags=["jobs"])
router.include_router(resources.posts_router, prefix="/posts", tags=["posts"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(info.router, prefix="/info", tags=["info"])
