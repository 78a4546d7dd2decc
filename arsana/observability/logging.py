"""Logging setup for Arsana.

Modules log through `get_logger(__name__)`. A single root stream handler is
attached on first use; level comes from ARSANA_LOG_LEVEL and
ARSANA_LOG_FORMAT=plain drops the timestamp for collectors that add their own.
"""

from __future__ import annotations

import logging
import os
from typing import Final

_FORMATS: Final[dict[str, str]] = {
    "default": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "plain": "%(name)s - %(levelname)s - %(message)s",
}

# APScheduler logs every job execution at INFO; the registry already does
_QUIET_LOGGERS: Final[tuple[str, ...]] = ("apscheduler.executors", "apscheduler.scheduler")

_configured: bool = False


def _resolve_level(level: str | None = None) -> int:
    level_name = (level or os.getenv("ARSANA_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level: str | None = None) -> None:
    """Attach the root handler (once) and apply the level."""
    global _configured

    resolved = _resolve_level(level)
    root = logging.getLogger()

    if not _configured:
        fmt = _FORMATS.get(os.getenv("ARSANA_LOG_FORMAT", "default"), _FORMATS["default"])
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
        _configured = True

    root.setLevel(resolved)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring logging on first call."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)
