"""Debug mode for cost-function evaluation.

While debug mode is on, the default delegations of CostFunction check the
length of every evaluation point before delegating and log each delegation
at DEBUG level. The initial state comes from the COSTKIT_DEBUG environment
variable.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

_DEBUG_ENV_VAR = "COSTKIT_DEBUG"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _flag_from_env(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


_debug_enabled: bool = _flag_from_env(os.getenv(_DEBUG_ENV_VAR))


def is_debug_enabled() -> bool:
    """Return True if delegations are currently validated and traced."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """
    Globally switch debug mode on or off.

    Parameters
    ----------
    enabled:
        New state; overrides whatever COSTKIT_DEBUG selected at import.
    """
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Switch debug mode for the duration of a block, restoring it afterwards.

    Example
    -------
    >>> import numpy as np
    >>> from costkit.optimize import CallableCostFunction
    >>> cost = CallableCostFunction(lambda x: float(x @ x), dim=2)
    >>> with debug_context(True):
    ...     cost.f(np.ones(2))
    2.0
    """
    global _debug_enabled
    previous = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = previous


__all__ = ["debug_context", "is_debug_enabled", "set_debug_enabled"]
