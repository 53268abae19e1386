"""Logging for reilly.

Every module logs through a child of the ``reilly`` package logger. Only
the package logger owns a handler (stderr, ``[LEVEL] name: message``) and
it does not propagate to the root logger, so applications that configure
the root logger never see reilly output twice.

The initial level comes from ``REILLY_LOG_LEVEL`` (default WARNING).
Sessions report runs at INFO and fold progress at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

PACKAGE = "reilly"
LEVEL_ENV_VAR = "REILLY_LOG_LEVEL"
DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown logging level {level!r}")
        return value
    return int(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger for ``name`` inside the reilly namespace.

    Args:
        name: Usually ``__name__``. Names outside the package are prefixed
            with ``reilly.``; None returns the package logger.

    Example:
        >>> get_logger("reilly.sessions").name
        'reilly.sessions'
        >>> get_logger("my_script").name
        'reilly.my_script'
    """
    if name is None or name == PACKAGE:
        return logging.getLogger(PACKAGE)
    if not name.startswith(PACKAGE + "."):
        name = f"{PACKAGE}.{name}"
    return logging.getLogger(name)


def set_log_level(level: int | str) -> None:
    """Set the level of the package logger and its handler.

    Args:
        level: ``logging`` constant or level name such as ``"DEBUG"``.

    Raises:
        ValueError: If ``level`` is an unknown level name.
    """
    level = _coerce_level(level)
    package = get_logger()
    package.setLevel(level)
    for handler in package.handlers:
        handler.setLevel(level)


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the package handler.

    Args:
        level: Logging level (default: WARNING).
        format_string: Record format; defaults to ``[LEVEL] name: message``.
        stream: Destination stream (default: ``sys.stderr``).
    """
    package = get_logger()
    for handler in package.handlers[:]:
        package.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package.addHandler(handler)
    package.propagate = False
    set_log_level(level)


configure_logging(os.getenv(LEVEL_ENV_VAR, "WARNING"))
