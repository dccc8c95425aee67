"""
Service layer.

Stores (``ResourceStore``, ``UserStore``) own persistence for one kind
of record each.  Services (``ResourceService``, ``InteractionService``)
hold business logic and receive the stores they need at construction
time; nothing here reaches for a global connection.
"""

from dataclasses import dataclass
from typing import Dict

from ..core.config import Settings
from ..core.db import Database
from ..schemas.interaction import ResourceKind
from .interaction_service import InteractionService
from .resource_service import ResourceService
from .resource_store import ResourceStore
from .user_store import UserStore


@dataclass
class Services:
    """Everything the API layer needs, wired to one database."""

    database: Database
    users: UserStore
    resources: Dict[ResourceKind, ResourceService]
    interactions: InteractionService


def build_services(settings: Settings) -> Services:
    """Open the datastore, apply migrations and wire stores to services."""
    database = Database(settings.database_url, timeout=settings.db_timeout)
    database.init()
    stores = {
        kind: ResourceStore(
            database,
            kind,
            default_limit=settings.default_page_limit,
            max_limit=settings.max_page_limit,
        )
        for kind in ResourceKind
    }
    users = UserStore(database)
    return Services(
        database=database,
        users=users,
        resources={kind: ResourceService(store) for kind, store in stores.items()},
        interactions=InteractionService(stores, users),
    )
