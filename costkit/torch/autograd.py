"""Cost functions whose gradient comes from torch autograd."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np
import torch

from costkit.optimize import CostFunction
from costkit.optimize.core import Array

from .utils import as_float_tensor, as_scalar, infer_device


class TorchCostFunction(CostFunction, ABC):
    """
    Cost function defined by a torch expression.

    Subclasses implement :meth:`forward`, mapping a float64 parameter tensor
    of shape (dim,) to a scalar tensor. ``compute`` runs the forward pass
    once and differentiates it with autograd, so a combined value/gradient
    request costs a single evaluation.

    Parameters
    ----------
    dim:
        Number of free parameters.
    device:
        Device the forward pass runs on. Defaults to the CPU.

    Example
    -------
    >>> import numpy as np
    >>> import torch
    >>> class SumOfSquares(TorchCostFunction):
    ...     def forward(self, params):
    ...         return torch.sum(params ** 2)
    >>> SumOfSquares(2).gradf(np.array([1.0, -3.0])).tolist()
    [2.0, -6.0]
    """

    def __init__(self, dim: int, device: Optional[torch.device | str] = None) -> None:
        super().__init__(dim)
        self.device = infer_device(device)

    @abstractmethod
    def forward(self, params: torch.Tensor) -> torch.Tensor:
        """Map a float64 parameter tensor of shape (dim,) to a scalar tensor."""

    def f(self, x: Array) -> float:
        params = as_float_tensor(self.check_point(x), self.device)
        with torch.no_grad():
            value = as_scalar(self.forward(params))
        return float(value.item())

    def gradf_into(self, x: Array, gradient: Array) -> None:
        self.compute(x, gradient, want_value=False)

    def compute(
        self, x: Array, gradient: Optional[Array] = None, want_value: bool = True
    ) -> Optional[float]:
        if gradient is None:
            return self.f(x) if want_value else None
        self.check_gradient(gradient)
        params = as_float_tensor(self.check_point(x), self.device, requires_grad=True)
        value = as_scalar(self.forward(params))
        if value.requires_grad:
            (grad,) = torch.autograd.grad(value, params, allow_unused=True)
        else:
            grad = None
        if grad is None:
            # objective does not depend on the parameters
            gradient[:] = 0.0
        else:
            gradient[:] = grad.detach().cpu().numpy().astype(np.float64, copy=False)
        return float(value.detach().item()) if want_value else None


__all__ = ["TorchCostFunction"]
