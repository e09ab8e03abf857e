"""Adapters that turn plain callables and existing objectives into CostFunctions."""

from __future__ import annotations

from typing import Optional

import numpy as np

from .core import Array, DimensionMismatchError, Gradient, Objective
from .cost_function import CostFunction
from .finite_difference import FiniteDifferenceConfig


class CallableCostFunction(CostFunction):
    """
    Cost function built from a value callable and an optional gradient callable.

    Without ``grad`` the gradient is estimated by central differences using
    ``fd_config``.

    Parameters
    ----------
    fun:
        Objective returning a scalar given a 1D array of length ``dim``.
    dim:
        Number of free parameters.
    grad:
        Optional analytic gradient returning an array of length ``dim``.
    fd_config:
        Finite-difference settings for the fallback gradient.
    reentrant:
        Declare ``fun`` thread-safe, allowing parallel finite differences.
    """

    def __init__(
        self,
        fun: Objective,
        dim: int,
        grad: Optional[Gradient] = None,
        fd_config: Optional[FiniteDifferenceConfig] = None,
        reentrant: bool = False,
    ) -> None:
        super().__init__(dim)
        if not callable(fun):
            raise TypeError("fun must be callable")
        if grad is not None and not callable(grad):
            raise TypeError("grad must be callable")
        self.fun = fun
        self.grad = grad
        self.fd_config = fd_config if fd_config is not None else FiniteDifferenceConfig()
        self.reentrant = bool(reentrant)

    def f(self, x: Array) -> float:
        return float(self.fun(self.check_point(x)))

    def gradf_into(self, x: Array, gradient: Array) -> None:
        self.check_gradient(gradient)
        if self.grad is None:
            self.fdgradf_into(x, gradient, self.fd_config)
            return
        value = np.asarray(self.grad(self.check_point(x)), dtype=float)
        if value.shape != (self.dim,):
            raise DimensionMismatchError(
                f"grad returned shape {value.shape}, expected ({self.dim},)"
            )
        gradient[:] = value


class CountingCostFunction(CostFunction):
    """
    Forward every evaluation to ``inner`` and count them.

    ``nfev`` counts value evaluations and ``njev`` gradient evaluations. A
    combined ``compute`` call counts towards whichever outputs it produced.
    Finite differences taken through this wrapper count ``2 * dim`` value
    evaluations. The counters are not synchronised, so the wrapper is never
    reentrant.
    """

    def __init__(self, inner: CostFunction) -> None:
        if not isinstance(inner, CostFunction):
            raise TypeError(f"inner must be a CostFunction, got {type(inner).__name__}")
        super().__init__(inner.dim)
        self.inner = inner
        self.nfev = 0
        self.njev = 0

    def reset(self) -> None:
        self.nfev = 0
        self.njev = 0

    def f(self, x: Array) -> float:
        self.nfev += 1
        return self.inner.f(x)

    def gradf_into(self, x: Array, gradient: Array) -> None:
        self.njev += 1
        self.inner.gradf_into(x, gradient)

    def compute(
        self, x: Array, gradient: Optional[Array] = None, want_value: bool = True
    ) -> Optional[float]:
        if want_value:
            self.nfev += 1
        if gradient is not None:
            self.njev += 1
        return self.inner.compute(x, gradient, want_value)

    def reported_error(self, value: float) -> float:
        return self.inner.reported_error(value)


__all__ = ["CallableCostFunction", "CountingCostFunction"]
