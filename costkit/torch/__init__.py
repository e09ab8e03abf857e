"""PyTorch-backed cost functions for costkit."""

from .autograd import TorchCostFunction
from .utils import as_float_tensor, as_scalar, infer_device

__all__ = ["TorchCostFunction", "as_float_tensor", "as_scalar", "infer_device"]
