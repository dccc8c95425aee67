"""
Pytest configuration and shared fixtures.
"""

from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

from content_share_api.app.core.config import Settings
from content_share_api.app.core.db import Database
from content_share_api.app.main import create_app
from content_share_api.app.schemas.interaction import ResourceKind
from content_share_api.app.services.interaction_service import InteractionService
from content_share_api.app.services.resource_service import ResourceService
from content_share_api.app.services.resource_store import ResourceStore
from content_share_api.app.services.user_store import UserStore


@pytest.fixture
def database(tmp_path) -> Database:
    """Fresh migrated database in a temporary directory."""
    db = Database(str(tmp_path / "test.db"))
    db.init()
    return db


@pytest.fixture
def job_store(database) -> ResourceStore:
    return ResourceStore(database, ResourceKind.JOB)


@pytest.fixture
def post_store(database) -> ResourceStore:
    return ResourceStore(database, ResourceKind.POST)


@pytest.fixture
def user_store(database) -> UserStore:
    return UserStore(database)


@pytest.fixture
def interactions(job_store, post_store, user_store) -> InteractionService:
    return InteractionService(
        {ResourceKind.JOB: job_store, ResourceKind.POST: post_store},
        user_store,
    )


@pytest.fixture
def job_service(job_store) -> ResourceService:
    return ResourceService(job_store)


@pytest.fixture
def alice(user_store):
    return user_store.create({"name": "Alice", "email": "alice@example.com"})


@pytest.fixture
def bob(user_store):
    return user_store.create({"name": "Bob", "email": "bob@example.com"})


@pytest.fixture
def valid_job_payload(alice) -> Dict[str, Any]:
    """Valid job creation payload owned by Alice."""
    return {
        "poster_id": alice.id,
        "title": "Backend engineer",
        "description": "Build Python services for the recommendations team",
        "tools": ["python", "fastapi"],
        "tags": ["remote"],
        "media": [{"file_type": "image/png", "file_path": "/uploads/logo.png"}],
    }


@pytest.fixture
def job(job_store, valid_job_payload):
    return job_store.create(valid_job_payload)


@pytest.fixture
def post(post_store, alice):
    return post_store.create(
        {
            "poster_id": alice.id,
            "title": "Shipped our new search",
            "description": "Notes on moving search to SQLite",
            "tools": ["sqlite"],
        }
    )


@pytest.fixture
def client(tmp_path):
    """HTTP client against an app backed by a temporary database."""
    settings = Settings(database_url=str(tmp_path / "api.db"), log_level="DEBUG")
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
