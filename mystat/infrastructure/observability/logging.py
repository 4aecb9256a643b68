"""Logging utilities for the MyStat client.

This module provides the logging configuration used by the CLI and helpers
for contextual logging inside the library. The library itself never
configures handlers on import; it only obtains named loggers.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator


# ---------------------------------------------------------------------------
# Context variables for structured logging
# ---------------------------------------------------------------------------

_log_context: ContextVar[dict[str, Any]] = ContextVar(
    "log_context", default={})

# Field names whose values must never reach a log line.
_REDACTED_FIELDS = frozenset({"password", "token", "access_token", "authorization"})


class ContextualFormatter(logging.Formatter):
    """Formatter that appends context fields to log messages."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ctx = _log_context.get()
        if not ctx:
            return line
        ctx_str = " ".join(
            f"{k}={'***' if k in _REDACTED_FIELDS else v}"
            for k, v in ctx.items()
        )
        return f"{line} [{ctx_str}]"


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Temporarily add context fields to all log messages.

    Usage::

        with log_context(method="GET", path="reviews/index/list"):
            logger.debug("Sending request")  # message includes context

    Fields are merged with any existing context and restored on exit.
    Context variables are copied into asyncio tasks, so concurrent requests
    do not see each other's fields.
    """
    current = _log_context.get()
    merged = {**current, **fields}
    token = _log_context.set(merged)
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

_configured = False


def configure_logging(
    level: int = logging.INFO,
    third_party_level: int = logging.WARNING,
) -> None:
    """Configure application-wide logging.

    Call this once at startup (CLI main) to set up consistent logging.

    Args:
        level: Log level for application loggers (default INFO).
        third_party_level: Log level for third-party libraries (default WARNING).
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers to avoid duplicates
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ContextualFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root.addHandler(handler)

    # Quieten noisy third-party loggers
    for name in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given name.

    Library loggers get a :class:`logging.NullHandler` until
    :func:`configure_logging` (or the host application) installs real
    handlers, so importing the package never prints anything.
    """
    logger = logging.getLogger(name)
    if not _configured and not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logger


__all__ = [
    "ContextualFormatter",
    "configure_logging",
    "get_logger",
    "log_context",
]
