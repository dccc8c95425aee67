"""
SQLite database integration and simple migration system.

This module provides the ``Database`` handle used by every store.  A
handle knows the database path and the per-call timeout; it opens a
fresh connection for each storage call and closes it afterwards, so
no connection or cursor is shared between concurrent requests.  The
handle is created by ``create_app`` and passed to the stores at
construction time.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple

from .errors import StorageError

logger = logging.getLogger(__name__)


MIGRATIONS: List[Tuple[int, str]] = [
    # Migration 1: Initial schema
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE,
            role TEXT NOT NULL DEFAULT 'user',
            created_at TEXT NOT NULL
        );

        -- Back-references: liked_jobs, viewed_jobs, liked_posts, viewed_posts
        CREATE TABLE IF NOT EXISTS user_interactions (
            user_id TEXT NOT NULL,
            field TEXT NOT NULL,
            resource_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (user_id, field, resource_id),
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS jobs (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            poster_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            tools TEXT NOT NULL,
            tags TEXT NOT NULL DEFAULT '[]',
            media TEXT NOT NULL DEFAULT '[]',
            likes_count INTEGER NOT NULL DEFAULT 0 CHECK (likes_count >= 0),
            views_count INTEGER NOT NULL DEFAULT 0 CHECK (views_count >= 0),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Members of jobs.liked_by / jobs.viewed_by
        CREATE TABLE IF NOT EXISTS job_interactions (
            resource_id TEXT NOT NULL,
            field TEXT NOT NULL,
            user_id TEXT NOT NULL,
            PRIMARY KEY (resource_id, field, user_id),
            FOREIGN KEY(resource_id) REFERENCES jobs(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS posts (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            poster_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            tools TEXT NOT NULL,
            tags TEXT NOT NULL DEFAULT '[]',
            media TEXT NOT NULL DEFAULT '[]',
            likes_count INTEGER NOT NULL DEFAULT 0 CHECK (likes_count >= 0),
            views_count INTEGER NOT NULL DEFAULT 0 CHECK (views_count >= 0),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS post_interactions (
            resource_id TEXT NOT NULL,
            field TEXT NOT NULL,
            user_id TEXT NOT NULL,
            PRIMARY KEY (resource_id, field, user_id),
            FOREIGN KEY(resource_id) REFERENCES posts(id) ON DELETE CASCADE
        );
        """,
    ),
    # Migration 2: indices for owner lookups and default ordering
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_jobs_poster_id ON jobs(poster_id);
        CREATE INDEX IF NOT EXISTS idx_jobs_created_at ON jobs(created_at);
        CREATE INDEX IF NOT EXISTS idx_posts_poster_id ON posts(poster_id);
        CREATE INDEX IF NOT EXISTS idx_posts_created_at ON posts(created_at);
        """,
    ),
    # Migration 3: comment counter, maintained outside this service
    (
        3,
        """
        ALTER TABLE jobs ADD COLUMN total_comments INTEGER NOT NULL DEFAULT 0 CHECK (total_comments >= 0);
        ALTER TABLE posts ADD COLUMN total_comments INTEGER NOT NULL DEFAULT 0 CHECK (total_comments >= 0);
        """,
    ),
]


def resolve_database_path(db_url: str) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are returned as is; relative paths are resolved
    against the project root.
    """
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


class Database:
    """Handle on a single SQLite datastore.

    Every storage call opens its own connection.  ``sqlite3`` errors are
    re-raised as ``StorageError`` so callers never see driver-specific
    exceptions.
    """

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = resolve_database_path(path)
        self.timeout = timeout

    def connect(self) -> sqlite3.Connection:
        """Open a new connection in autocommit mode with rows keyed by column name."""
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
            conn.row_factory = sqlite3.Row
            # Needed per connection for the ON DELETE CASCADE clauses.
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open database {self.path}: {e}") from e
        return conn

    @contextmanager
    def cursor(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor for single-statement work and close the connection on exit."""
        conn = self.connect()
        try:
            yield conn.cursor()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside ``BEGIN IMMEDIATE``.

        The write lock is taken up front, so statements executed inside
        the block are applied atomically with respect to every other
        writer.  Commits on success and rolls back on any exception.
        """
        conn = self.connect()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                yield cursor
            except BaseException:
                conn.rollback()
                raise
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def init(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        with self.cursor() as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) AS version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, sql in MIGRATIONS:
                if version > current_version:
                    logger.info("Applying migration %s to %s", version, self.path)
                    cursor.executescript(sql)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    current_version = version
