"""Process-wide logging setup shared by the dashboard API and the poller."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_log_level(level: str) -> int:
    """Map a level name such as ``"info"`` to its numeric value, falling back to INFO."""

    resolved = logging.getLevelName(level.strip().upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def configure_logging(*, level: str) -> int:
    """Configure root logging and return the effective numeric level."""

    resolved_level = resolve_log_level(level)
    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)
    return resolved_level
