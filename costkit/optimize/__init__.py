"""Scalar cost functions with default value/gradient dispatch.

Example
-------
>>> import numpy as np
>>> from costkit.optimize import CallableCostFunction
>>> cost = CallableCostFunction(lambda x: x[0] ** 2 + 3 * x[1], dim=2)
>>> np.round(cost.fdgradf(np.array([2.0, 5.0]), 1e-3), 6).tolist()
[4.0, 3.0]
"""

from .core import (
    DEFAULT_STEP,
    CostFunctionError,
    DimensionMismatchError,
    UnimplementedCostFunctionError,
)
from .cost_function import CostFunction
from .finite_difference import (
    FiniteDifferenceConfig,
    central_difference,
    central_difference_into,
    gradient_error,
)
from .guard import delegation_guard, is_delegating
from .wrappers import CallableCostFunction, CountingCostFunction

__all__ = [
    "CallableCostFunction",
    "CostFunction",
    "CostFunctionError",
    "CountingCostFunction",
    "DEFAULT_STEP",
    "DimensionMismatchError",
    "FiniteDifferenceConfig",
    "UnimplementedCostFunctionError",
    "central_difference",
    "central_difference_into",
    "delegation_guard",
    "gradient_error",
    "is_delegating",
]
