"""Logging utilities for costkit.

Every module logs through a child of the ``costkit`` package logger. Only
the package logger owns a handler (stderr by default) and does not
propagate to the root logger; children carry no level of their own, so
``set_log_level`` and ``configure_logging`` also apply to loggers created
after the call.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

_PACKAGE = "costkit"
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def _qualify(name: Optional[str]) -> str:
    if not name or name == _PACKAGE:
        return _PACKAGE
    if name.startswith(_PACKAGE + "."):
        return name
    return f"{_PACKAGE}.{name}"


def _install_handler(
    package: logging.Logger, level: int, stream: TextIO, format_string: str
) -> None:
    for handler in package.handlers[:]:
        package.removeHandler(handler)
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string))
    package.addHandler(handler)
    package.setLevel(level)
    package.propagate = False


def _package_logger() -> logging.Logger:
    package = logging.getLogger(_PACKAGE)
    if not package.handlers:
        _install_handler(package, logging.WARNING, sys.stderr, _DEFAULT_FORMAT)
    return package


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the costkit logger for ``name``, typically ``__name__``.

    Names outside the package are nested under it, so ``get_logger("io")``
    yields ``costkit.io``. With no name the package logger itself is
    returned.

    Example:
        >>> from costkit.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.debug("Evaluating objective")
    """
    package = _package_logger()
    qualified = _qualify(name)
    if qualified == _PACKAGE:
        return package
    return logging.getLogger(qualified)


def set_log_level(level: int | str) -> None:
    """Set the level of costkit log output.

    Args:
        level: Logging level (logging.DEBUG, logging.INFO, etc.) or string
            ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
    """
    level = _coerce_level(level)
    package = _package_logger()
    package.setLevel(level)
    for handler in package.handlers:
        handler.setLevel(level)


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Replace the costkit handler.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses
            ``[LEVEL] name: message``.
        stream: Output stream (default: sys.stderr).
    """
    _install_handler(
        logging.getLogger(_PACKAGE),
        _coerce_level(level),
        stream if stream is not None else sys.stderr,
        format_string or _DEFAULT_FORMAT,
    )


__all__ = ["configure_logging", "get_logger", "set_log_level"]
