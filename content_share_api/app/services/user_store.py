"""
Persistence for user records and their interaction back-references.

The four back-reference sets (``liked_jobs``, ``viewed_jobs``,
``liked_posts``, ``viewed_posts``) are rows of ``user_interactions``
keyed by ``(user_id, field, resource_id)``, so adding an id twice is a
no-op at the storage layer.
"""

import logging
import sqlite3
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.db import Database
from ..core.errors import Conflict, ValidationError
from ..schemas.interaction import USER_INTERACTION_FIELDS, AddToSet, PatchResult
from ..schemas.user import UserCreate, UserRead
from .resource_store import utcnow

logger = logging.getLogger(__name__)


def _check_field(field: str) -> None:
    if field not in USER_INTERACTION_FIELDS:
        raise ValueError(f"Unknown interaction field {field!r}")


class UserStore:
    """Storage for users."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def _fetch(self, cursor: sqlite3.Cursor, user_id: str) -> Optional[UserRead]:
        row = cursor.execute(
            "SELECT id, name, email, role, created_at FROM users WHERE id = ?",
            (user_id,),
        ).fetchone()
        if row is None:
            return None
        sets: Dict[str, List[str]] = {field: [] for field in USER_INTERACTION_FIELDS}
        for link in cursor.execute(
            "SELECT field, resource_id FROM user_interactions WHERE user_id = ? ORDER BY rowid",
            (user_id,),
        ).fetchall():
            sets.setdefault(link["field"], []).append(link["resource_id"])
        return UserRead(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=row["role"],
            created_at=row["created_at"],
            **sets,
        )

    def create(self, payload: Dict[str, Any]) -> UserRead:
        """Create a user.  Raises ``ValidationError`` or ``Conflict`` on a taken email."""
        try:
            data = UserCreate.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid user payload",
                errors=e.errors(include_url=False, include_context=False),
            ) from e
        user_id = uuid.uuid4().hex
        with self.database.transaction() as cursor:
            taken = cursor.execute(
                "SELECT 1 FROM users WHERE email = ?", (data.email,)
            ).fetchone()
            if taken:
                raise Conflict(f"Email {data.email} is already registered")
            cursor.execute(
                "INSERT INTO users (id, name, email, role, created_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, data.name, data.email, data.role, utcnow()),
            )
            created = self._fetch(cursor, user_id)
        logger.info("Created user %s", user_id)
        return created

    def get_by_id(self, user_id: str) -> Optional[UserRead]:
        with self.database.cursor() as cursor:
            return self._fetch(cursor, user_id)

    def exists(self, user_id: str) -> bool:
        with self.database.cursor() as cursor:
            row = cursor.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
        return row is not None

    def exists_with_interaction(self, user_id: str, resource_id: str, field: str) -> bool:
        """True iff ``resource_id`` is in the user's ``field`` set."""
        _check_field(field)
        with self.database.cursor() as cursor:
            row = cursor.execute(
                "SELECT 1 FROM user_interactions WHERE user_id = ? AND field = ? AND resource_id = ?",
                (user_id, field, resource_id),
            ).fetchone()
        return row is not None

    def patch_by_id(self, user_id: str, patch: AddToSet) -> Optional[PatchResult[UserRead]]:
        """Atomically add ``patch.value`` to the ``patch.field`` set.

        Returns ``None`` when the user does not exist.  Adding an id
        that is already present leaves the set unchanged and reports
        ``modified=False``.
        """
        _check_field(patch.field)
        if patch.counter is not None:
            raise ValueError("User records have no interaction counters")
        with self.database.transaction() as cursor:
            exists = cursor.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
            if exists is None:
                return None
            cursor.execute(
                "INSERT OR IGNORE INTO user_interactions (user_id, field, resource_id, created_at) "
                "VALUES (?, ?, ?, ?)",
                (user_id, patch.field, patch.value, utcnow()),
            )
            modified = cursor.rowcount == 1
            record = self._fetch(cursor, user_id)
        return PatchResult(record=record, modified=modified)
