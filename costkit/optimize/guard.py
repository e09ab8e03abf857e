"""Recursion guard for the default delegations of CostFunction.

``f``, ``gradf_into`` and ``compute`` are each implemented in terms of the
others. A subclass that overrides none of the real paths would recurse
forever; the guard turns that into an UnimplementedCostFunctionError.

The mark is held per thread and per instance, so evaluating independent
cost functions from several threads, or nesting one cost function inside
another, never trips it.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from costkit.logging import get_logger

from .core import UnimplementedCostFunctionError

logger = get_logger(__name__)

_state = threading.local()


def _active() -> set[int]:
    active = getattr(_state, "active", None)
    if active is None:
        active = set()
        _state.active = active
    return active


def is_delegating(obj: object) -> bool:
    """Return True if the current thread is inside a default delegation of ``obj``."""
    return id(obj) in _active()


@contextmanager
def delegation_guard(obj: object, operation: str) -> Iterator[None]:
    """Mark ``obj`` as delegating for the duration of the block.

    Parameters
    ----------
    obj:
        The cost function whose default method is delegating.
    operation:
        Name of the entry point, used in the error message.

    Raises
    ------
    UnimplementedCostFunctionError
        If ``obj`` is already delegating in this thread.
    """
    active = _active()
    key = id(obj)
    if key in active:
        cls = type(obj).__name__
        logger.critical(
            "%s.%s re-entered its default delegation; neither f/gradf_into "
            "nor compute is implemented",
            cls,
            operation,
        )
        raise UnimplementedCostFunctionError(
            f"{cls}: RECURSION in default {operation}(); override f and "
            f"gradf_into, or compute"
        )
    active.add(key)
    try:
        yield
    finally:
        active.discard(key)


__all__ = ["delegation_guard", "is_delegating"]
