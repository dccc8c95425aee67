"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts with no configuration at all.  Tests and embedding
applications build their own ``Settings`` and pass it to
``create_app`` instead of mutating the module-level instance.
"""

import os
from dataclasses import dataclass, field


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "Content Share API"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "1.0.0"))
    debug: bool = field(
        default_factory=lambda: os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    # Optional path of a log file.  Empty means console only.
    log_file: str = field(default_factory=lambda: os.getenv("LOG_FILE", ""))
    # Per-logger overrides, "name=LEVEL" pairs separated by commas.
    log_levels: str = field(default_factory=lambda: os.getenv("LOG_LEVELS", ""))

    # Path of the SQLite database file.  Relative paths are resolved
    # against the project root by ``core.db``.
    database_url: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "content_share.db"))

    # Seconds a storage call may wait on a locked database before
    # failing with ``StorageError``.
    db_timeout: float = field(default_factory=lambda: float(os.getenv("DB_TIMEOUT", "5")))

    default_page_limit: int = field(default_factory=lambda: _env_int("DEFAULT_PAGE_LIMIT", 10))
    max_page_limit: int = field(default_factory=lambda: _env_int("MAX_PAGE_LIMIT", 100))


# Instantiated once at import time.  Environment variables must be set
# before importing this module for them to take effect here.
settings = Settings()
