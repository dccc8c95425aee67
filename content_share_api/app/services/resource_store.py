"""
Persistence for jobs and posts.

One ``ResourceStore`` instance serves one resource kind; both kinds
share the same table layout.  List-valued content fields (tools, tags,
media) are stored as JSON text.  The ``liked_by`` and ``viewed_by``
sets live in the kind's ``*_interactions`` table, whose primary key
makes membership unique.

Two update paths exist and must stay separate:

* ``patch_by_id`` applies interaction updates (add to set, bump
  counter) inside the database in one ``BEGIN IMMEDIATE`` transaction.
  It never loads the record into memory to modify it, so concurrent
  likes cannot lose updates.
* ``replace_fields_by_id`` is the owner edit path.  It loads the
  record, changes content fields in memory and writes them back.  It
  never touches interaction fields.
"""

import json
import logging
import math
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..core.db import Database
from ..core.errors import NotFound, ValidationError
from ..schemas.interaction import (
    RESOURCE_COUNTER_FIELDS,
    RESOURCE_MEMBER_FIELDS,
    AddToSet,
    PatchResult,
    ResourceKind,
)
from ..schemas.pagination import QueryOptions, ResourcePage
from ..schemas.resource import ResourceCreate, ResourceRead, ResourceUpdate

logger = logging.getLogger(__name__)

RESOURCE_COLUMNS = (
    "id, poster_id, title, description, tools, tags, media, "
    "likes_count, views_count, total_comments, created_at, updated_at"
)
CONTENT_FIELDS = ("title", "description", "tools", "tags", "media")
SORTABLE_FIELDS = {"created_at", "updated_at", "title", "likes_count", "views_count"}
FILTERABLE_FIELDS = {"poster_id"}
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_sort(sort_by: Optional[str]) -> str:
    """Translate ``field:dir[,field:dir]`` into an ORDER BY clause.

    Unknown fields are ignored.  The insertion sequence is always the
    last key so that records created within the same timestamp keep a
    stable order.
    """
    clauses: List[str] = []
    for part in (sort_by or "").split(","):
        part = part.strip()
        if not part:
            continue
        name, _, direction = part.partition(":")
        name = name.strip()
        if name not in SORTABLE_FIELDS:
            continue
        order = "DESC" if direction.strip().lower() == "desc" else "ASC"
        clauses.append(f"{name} {order}")
    if not clauses:
        clauses.append("created_at ASC")
    clauses.append("seq ASC")
    return ", ".join(clauses)


class ResourceStore:
    """Storage for a single resource kind."""

    def __init__(
        self,
        database: Database,
        kind: ResourceKind,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> None:
        self.database = database
        self.kind = kind
        self.table = kind.table
        self.interactions_table = kind.interactions_table
        self.default_limit = default_limit
        self.max_limit = max_limit

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _members(self, cursor: sqlite3.Cursor, resource_ids: List[str]) -> Dict[Tuple[str, str], List[str]]:
        """Fetch set members for many resources in one query, in insertion order."""
        members: Dict[Tuple[str, str], List[str]] = {}
        if not resource_ids:
            return members
        placeholders = ", ".join("?" for _ in resource_ids)
        rows = cursor.execute(
            f"SELECT resource_id, field, user_id FROM {self.interactions_table} "
            f"WHERE resource_id IN ({placeholders}) ORDER BY rowid",
            tuple(resource_ids),
        ).fetchall()
        for row in rows:
            members.setdefault((row["resource_id"], row["field"]), []).append(row["user_id"])
        return members

    def _to_read(self, row: sqlite3.Row, members: Dict[Tuple[str, str], List[str]]) -> ResourceRead:
        return ResourceRead(
            id=row["id"],
            poster_id=row["poster_id"],
            title=row["title"],
            description=row["description"],
            tools=json.loads(row["tools"]),
            tags=json.loads(row["tags"]),
            media=json.loads(row["media"]),
            likes_count=row["likes_count"],
            views_count=row["views_count"],
            total_comments=row["total_comments"],
            liked_by=members.get((row["id"], "liked_by"), []),
            viewed_by=members.get((row["id"], "viewed_by"), []),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _rows_to_read(self, cursor: sqlite3.Cursor, rows: List[sqlite3.Row]) -> List[ResourceRead]:
        members = self._members(cursor, [row["id"] for row in rows])
        return [self._to_read(row, members) for row in rows]

    def _fetch(self, cursor: sqlite3.Cursor, resource_id: str) -> Optional[ResourceRead]:
        row = cursor.execute(
            f"SELECT {RESOURCE_COLUMNS} FROM {self.table} WHERE id = ?",
            (resource_id,),
        ).fetchone()
        if row is None:
            return None
        return self._rows_to_read(cursor, [row])[0]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, payload: Dict[str, Any]) -> ResourceRead:
        """Validate ``payload``, assign id and timestamps, and persist it.

        Raises ``ValidationError`` when ``title``, ``description``,
        ``tools`` or ``poster_id`` is missing or malformed.  Counters
        start at zero and interaction sets start empty regardless of
        what the payload contains.
        """
        try:
            data = ResourceCreate.model_validate(payload)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.kind.value} payload",
                errors=e.errors(include_url=False, include_context=False),
            ) from e

        resource_id = uuid.uuid4().hex
        now = utcnow()
        with self.database.transaction() as cursor:
            cursor.execute(
                f"""
                INSERT INTO {self.table}
                    (id, poster_id, title, description, tools, tags, media,
                     likes_count, views_count, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, 0, 0, ?, ?)
                """,
                (
                    resource_id,
                    data.poster_id,
                    data.title,
                    data.description,
                    json.dumps(data.tools),
                    json.dumps(data.tags),
                    json.dumps([m.model_dump() for m in data.media]),
                    now,
                    now,
                ),
            )
            created = self._fetch(cursor, resource_id)
        logger.info("User %s created %s %s", data.poster_id, self.kind.value, resource_id)
        return created

    def get_by_id(self, resource_id: str) -> Optional[ResourceRead]:
        """Return the resource or ``None`` when it does not exist."""
        with self.database.cursor() as cursor:
            return self._fetch(cursor, resource_id)

    def patch_by_id(self, resource_id: str, patch: AddToSet) -> Optional[PatchResult[ResourceRead]]:
        """Apply an atomic add-to-set patch, optionally bumping a counter.

        The member insert and the counter increment run in the same
        transaction, and the counter only moves when the insert added a
        new row.  ``modified`` is ``False`` when the value was already a
        member.  Returns ``None`` if the resource does not exist.
        """
        if patch.field not in RESOURCE_MEMBER_FIELDS:
            raise ValueError(f"Unknown set field {patch.field!r}")
        if patch.counter is not None and patch.counter not in RESOURCE_COUNTER_FIELDS:
            raise ValueError(f"Unknown counter field {patch.counter!r}")

        with self.database.transaction() as cursor:
            exists = cursor.execute(
                f"SELECT 1 FROM {self.table} WHERE id = ?", (resource_id,)
            ).fetchone()
            if exists is None:
                return None
            cursor.execute(
                f"INSERT OR IGNORE INTO {self.interactions_table} (resource_id, field, user_id) "
                "VALUES (?, ?, ?)",
                (resource_id, patch.field, patch.value),
            )
            modified = cursor.rowcount == 1
            if modified and patch.counter is not None:
                cursor.execute(
                    f"UPDATE {self.table} SET {patch.counter} = {patch.counter} + 1 WHERE id = ?",
                    (resource_id,),
                )
            record = self._fetch(cursor, resource_id)
        return PatchResult(record=record, modified=modified)

    def replace_fields_by_id(self, resource_id: str, body: Dict[str, Any]) -> ResourceRead:
        """Overwrite owner-controlled content fields.

        Loads the full record, applies the provided fields in memory and
        writes the content columns back.  Unknown keys, the owner and
        interaction fields are ignored.  Raises ``NotFound`` if absent
        and ``ValidationError`` if the body is malformed.
        """
        content = {k: v for k, v in body.items() if k in CONTENT_FIELDS}
        try:
            update = ResourceUpdate.model_validate(content)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {self.kind.value} update",
                errors=e.errors(include_url=False, include_context=False),
            ) from e

        with self.database.transaction() as cursor:
            current = self._fetch(cursor, resource_id)
            if current is None:
                raise NotFound(f"{self.kind.label} not found")
            data = current.model_dump()
            data.update(update.model_dump(exclude_none=True))
            merged = ResourceRead.model_validate(data)
            cursor.execute(
                f"""
                UPDATE {self.table}
                SET title = ?, description = ?, tools = ?, tags = ?, media = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    merged.title,
                    merged.description,
                    json.dumps(merged.tools),
                    json.dumps(merged.tags),
                    json.dumps([m.model_dump() for m in merged.media]),
                    utcnow(),
                    resource_id,
                ),
            )
            updated = self._fetch(cursor, resource_id)
        logger.info("Updated %s %s fields %s", self.kind.value, resource_id, sorted(content))
        return updated

    def query(self, filter: Optional[Dict[str, Any]] = None, options: Optional[QueryOptions] = None) -> ResourcePage:
        """Paginated read in the requested order.

        ``filter`` is an equality map over filterable columns; other keys
        are ignored.  Default order is creation order.
        """
        options = options or QueryOptions()
        limit = options.limit if options.limit and options.limit > 0 else self.default_limit
        limit = min(limit, self.max_limit)
        page = options.page if options.page and options.page > 0 else 1

        where: List[str] = []
        params: List[Any] = []
        for key, value in (filter or {}).items():
            if key in FILTERABLE_FIELDS and value is not None:
                where.append(f"{key} = ?")
                params.append(value)
        where_sql = f" WHERE {' AND '.join(where)}" if where else ""

        with self.database.cursor() as cursor:
            total = cursor.execute(
                f"SELECT COUNT(*) AS total FROM {self.table}{where_sql}", tuple(params)
            ).fetchone()["total"]
            rows = cursor.execute(
                f"SELECT {RESOURCE_COLUMNS} FROM {self.table}{where_sql} "
                f"ORDER BY {_parse_sort(options.sort_by)} LIMIT ? OFFSET ?",
                tuple(params) + (limit, (page - 1) * limit),
            ).fetchall()
            results = self._rows_to_read(cursor, rows)

        return ResourcePage(
            results=results,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
            total_results=total,
        )

    def search_by_text(self, text: Optional[str]) -> List[ResourceRead]:
        """Case-sensitive substring match against title or description.

        The text is matched literally, not as a pattern.  An empty or
        missing text matches every record.  Results are unbounded and in
        creation order.
        """
        needle = text or ""
        with self.database.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {RESOURCE_COLUMNS} FROM {self.table} "
                "WHERE instr(title, ?) > 0 OR instr(description, ?) > 0 "
                "ORDER BY created_at ASC, seq ASC",
                (needle, needle),
            ).fetchall()
            return self._rows_to_read(cursor, rows)

    def list_by_poster(self, poster_id: str) -> List[ResourceRead]:
        """All resources owned by ``poster_id`` in creation order."""
        with self.database.cursor() as cursor:
            rows = cursor.execute(
                f"SELECT {RESOURCE_COLUMNS} FROM {self.table} WHERE poster_id = ? "
                "ORDER BY created_at ASC, seq ASC",
                (poster_id,),
            ).fetchall()
            return self._rows_to_read(cursor, rows)

    def delete_by_id(self, resource_id: str) -> None:
        """Delete the resource and its interaction sets.  Raises ``NotFound`` if absent."""
        with self.database.transaction() as cursor:
            cursor.execute(f"DELETE FROM {self.table} WHERE id = ?", (resource_id,))
            if cursor.rowcount == 0:
                raise NotFound(f"{self.kind.label} not found")
        logger.info("Deleted %s %s", self.kind.value, resource_id)
