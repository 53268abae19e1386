"""Process-wide settings for reilly.

Two knobs are read from the environment at import time:

- ``REILLY_DEBUG``: enables extra invariant checks (e.g. the bandit pull
  counter against the per-arm counts) and per-episode debug logging.
- ``REILLY_MAX_WORKERS``: default pool size for parallel sessions.

The log level is read separately by ``reilly.logging`` from
``REILLY_LOG_LEVEL``.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

_DEBUG_ENV_VAR = "REILLY_DEBUG"
_MAX_WORKERS_ENV_VAR = "REILLY_MAX_WORKERS"

_debug_enabled: bool = os.getenv(_DEBUG_ENV_VAR, "0").lower() in (
    "1",
    "true",
    "yes",
    "on",
)


def is_debug_enabled() -> bool:
    """
    Return whether debug mode is currently enabled.

    Debug mode can be toggled via set_debug_enabled(...) or the
    REILLY_DEBUG environment variable.
    """
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """Globally enable or disable debug mode."""
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Context manager to temporarily enable or disable debug mode.

    Example
    -------
    >>> with debug_context(True):
    ...     pass
    """
    global _debug_enabled
    prev = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = prev


def default_max_workers() -> Optional[int]:
    """
    Return the worker count for parallel sessions.

    Reads REILLY_MAX_WORKERS; None lets concurrent.futures pick its own
    default.

    Raises
    ------
    ValueError
        If the variable is set to something other than a positive integer.
    """
    raw = os.getenv(_MAX_WORKERS_ENV_VAR)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"{_MAX_WORKERS_ENV_VAR} must be a positive integer, got {raw!r}"
        ) from None
    if value < 1:
        raise ValueError(f"{_MAX_WORKERS_ENV_VAR} must be >= 1, got {value}")
    return value
