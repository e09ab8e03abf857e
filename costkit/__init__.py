"""costkit - scalar cost functions for gradient-based optimizers."""

__version__ = "0.1.0"

# Diagnostics
from .diagnostics import debug_context, is_debug_enabled, set_debug_enabled

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Cost functions
from .optimize import (
    DEFAULT_STEP,
    CallableCostFunction,
    CostFunction,
    CostFunctionError,
    CountingCostFunction,
    DimensionMismatchError,
    FiniteDifferenceConfig,
    UnimplementedCostFunctionError,
    central_difference,
    central_difference_into,
    gradient_error,
)

# PyTorch integration
from .torch import TorchCostFunction

__all__ = [
    "__version__",
    "CallableCostFunction",
    "CostFunction",
    "CostFunctionError",
    "CountingCostFunction",
    "DEFAULT_STEP",
    "DimensionMismatchError",
    "FiniteDifferenceConfig",
    "TorchCostFunction",
    "UnimplementedCostFunctionError",
    "central_difference",
    "central_difference_into",
    "configure_logging",
    "debug_context",
    "get_logger",
    "gradient_error",
    "is_debug_enabled",
    "set_debug_enabled",
    "set_log_level",
]
