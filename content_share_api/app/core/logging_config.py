"""
Logging set-up for the API process.

All modules log through ``logging.getLogger(__name__)``.  The root
logger gets one console handler and, when ``LOG_FILE`` is set, one file
handler.  Individual loggers can run at their own level through
``LOG_LEVELS``, e.g.::

    LOG_LEVELS="content_share_api.app.services.interaction_service=DEBUG"

which shows interaction state transitions while everything else stays
at the root level.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed here so repeated ``create_app`` calls do not
# stack duplicates, while handlers added by test runners are left alone.
_HANDLER_MARK = "_content_share_handler"


def _level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def parse_module_levels(spec: Optional[str]) -> Dict[str, int]:
    """Parse ``"logger=LEVEL,logger=LEVEL"`` into a name to level map.

    Entries without ``=`` or with an empty logger name are skipped.
    """
    levels: Dict[str, int] = {}
    for entry in (spec or "").split(","):
        name, sep, level = entry.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        levels[name] = _level(level)
    return levels


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARK, True)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    module_levels: Optional[Dict[str, int]] = None,
) -> None:
    """Configure the root logger and any per-module overrides.

    Handlers are installed on the first call only; levels are applied on
    every call so a new app instance can change them.
    """
    root = logging.getLogger()
    root.setLevel(_level(level))

    for name, module_level in (module_levels or {}).items():
        logging.getLogger(name).setLevel(module_level)

    if any(getattr(h, _HANDLER_MARK, False) for h in root.handlers):
        return

    root.addHandler(_mark(logging.StreamHandler()))
    if logfile:
        path = Path(logfile).resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(_mark(logging.FileHandler(path, encoding="utf-8")))
