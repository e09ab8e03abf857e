"""Core types, errors and argument checks shared by the cost-function layer."""

from __future__ import annotations

from typing import Callable

import numpy as np

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]

DEFAULT_STEP = 1e-5


class CostFunctionError(Exception):
    """Base class for recoverable cost-function errors."""


class DimensionMismatchError(CostFunctionError, ValueError):
    """A point or gradient buffer does not have the objective's dimension."""


class UnimplementedCostFunctionError(AssertionError):
    """Raised when a subclass provides neither ``f``/``gradf_into`` nor ``compute``.

    The default implementations delegate to each other, so this is a
    programming error and is never handled by the library.
    """


def as_point(x: Array, dim: int) -> Array:
    """Return ``x`` as a 1D float array of length ``dim``."""
    arr = np.asarray(x, dtype=float)
    if arr.ndim != 1:
        raise DimensionMismatchError(
            f"point must be a 1D array, got shape {arr.shape}"
        )
    if arr.size != dim:
        raise DimensionMismatchError(
            f"point has length {arr.size}, expected {dim}"
        )
    return arr


def check_buffer(gradient: Array, dim: int) -> Array:
    """Validate a caller-owned gradient buffer that will be written in place."""
    if not isinstance(gradient, np.ndarray):
        raise TypeError(
            f"gradient buffer must be a numpy array, got {type(gradient).__name__}"
        )
    if gradient.shape != (dim,):
        raise DimensionMismatchError(
            f"gradient buffer has shape {gradient.shape}, expected ({dim},)"
        )
    if not np.issubdtype(gradient.dtype, np.floating):
        raise TypeError(f"gradient buffer must be floating point, got {gradient.dtype}")
    return gradient


__all__ = [
    "Array",
    "Objective",
    "Gradient",
    "DEFAULT_STEP",
    "CostFunctionError",
    "DimensionMismatchError",
    "UnimplementedCostFunctionError",
    "as_point",
    "check_buffer",
]
