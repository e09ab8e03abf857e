"""Diagnostics and debugging utilities for costkit."""

from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
