"""Abstract scalar cost function with default value/gradient dispatch.

A concrete objective overrides whichever of ``f``, ``gradf_into`` and
``compute`` it can evaluate cheaply; the rest is synthesised:

- ``compute`` defaults to calling ``f`` and ``gradf_into`` independently.
- ``f`` and ``gradf_into`` default to calling ``compute``.

Override ``compute`` when the value and gradient share expensive
intermediate work. Override ``f`` alone and use ``fdgradf`` when no
analytic gradient is available.

Example
-------
>>> import numpy as np
>>> from costkit.optimize import CostFunction
>>> class Quadratic(CostFunction):
...     def __init__(self, target):
...         super().__init__(len(target))
...         self.target = np.asarray(target, dtype=float)
...     def compute(self, x, gradient=None, want_value=True):
...         r = np.asarray(x) - self.target
...         if gradient is not None:
...             gradient[:] = 2.0 * r
...         return float(r @ r) if want_value else None
>>> cost = Quadratic([1.0, 2.0])
>>> cost.f(np.array([1.0, 0.0]))
4.0
>>> cost.gradf(np.array([1.0, 0.0])).tolist()
[0.0, -4.0]
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from costkit.diagnostics import is_debug_enabled
from costkit.logging import get_logger

from .core import DEFAULT_STEP, Array, as_point, check_buffer
from .finite_difference import FiniteDifferenceConfig, central_difference_into
from .guard import delegation_guard

logger = get_logger(__name__)

StepLike = Union[float, FiniteDifferenceConfig]


class CostFunction:
    """
    Scalar objective of ``dim`` free parameters.

    Subclasses call ``super().__init__(dim)`` and override at least one
    real evaluation path: ``f`` together with ``gradf_into``, or
    ``compute``. A subclass that overrides neither raises
    UnimplementedCostFunctionError on first use.

    Attributes
    ----------
    reentrant:
        Set to True on subclasses whose ``f`` is thread-safe and free of
        side effects. Only then may finite differences evaluate in parallel.
    """

    reentrant: bool = False

    def __init__(self, dim: int) -> None:
        if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
            raise TypeError(f"dim must be an integer, got {type(dim).__name__}")
        if dim < 1:
            raise ValueError(f"dim must be positive, got {dim}")
        self._dim = int(dim)

    @property
    def dim(self) -> int:
        """Number of free parameters; fixed for the lifetime of the object."""
        return self._dim

    def get_number_of_unknowns(self) -> int:
        return self._dim

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dim={self._dim})"

    def __call__(self, x: Array) -> float:
        return self.f(x)

    def check_point(self, x: Array) -> Array:
        """Return ``x`` as a float array, raising DimensionMismatchError on bad length."""
        return as_point(x, self._dim)

    def check_gradient(self, gradient: Array) -> Array:
        """Validate a caller-owned gradient buffer of length ``dim``."""
        return check_buffer(gradient, self._dim)

    def compute(
        self, x: Array, gradient: Optional[Array] = None, want_value: bool = True
    ) -> Optional[float]:
        """
        Evaluate the value and/or the gradient at ``x``.

        Parameters
        ----------
        x:
            Evaluation point of length ``dim``.
        gradient:
            Buffer of length ``dim`` to fill with the gradient, or None to
            skip the gradient.
        want_value:
            Whether the value is requested.

        Returns
        -------
        float or None
            The value when ``want_value`` is set, otherwise None.
        """
        value = None
        if want_value:
            value = self.f(x)
        if gradient is not None:
            self.gradf_into(x, gradient)
        return value

    def f(self, x: Array) -> float:
        """Value at ``x``. Defaults to ``compute(x, None, True)``."""
        with delegation_guard(self, "f"):
            self._trace("f", x)
            value = self.compute(x, None, True)
        if value is None:
            raise TypeError(f"{type(self).__name__}.compute returned None for a requested value")
        return float(value)

    def gradf_into(self, x: Array, gradient: Array) -> None:
        """Write the gradient at ``x`` into ``gradient``. Defaults to ``compute(x, gradient, False)``."""
        with delegation_guard(self, "gradf_into"):
            self._trace("gradf_into", x)
            self.compute(x, gradient, False)

    def gradf(self, x: Array) -> Array:
        """Return the gradient at ``x`` as a new array."""
        x = self.check_point(x)
        gradient = np.zeros(self._dim, dtype=float)
        self.gradf_into(x, gradient)
        return gradient

    def fdgradf_into(self, x: Array, gradient: Array, step: StepLike = DEFAULT_STEP) -> None:
        """
        Write a central finite-difference estimate of the gradient into ``gradient``.

        Costs ``2 * dim`` evaluations of ``f``. Meant as a fallback and as a
        check on analytic gradients. Errors raised by ``f`` propagate.

        Parameters
        ----------
        x:
            Evaluation point. Not modified.
        gradient:
            Buffer of length ``dim``.
        step:
            Perturbation size, or a FiniteDifferenceConfig.
        """
        config = step if isinstance(step, FiniteDifferenceConfig) else FiniteDifferenceConfig(step=step)
        x = self.check_point(x)
        self.check_gradient(gradient)
        parallel = config.parallel
        if parallel and not self.reentrant:
            logger.warning(
                "%s is not declared reentrant; evaluating finite differences sequentially",
                type(self).__name__,
            )
            parallel = False
        central_difference_into(self.f, x, gradient, config.step, parallel, config.max_workers)

    def fdgradf(self, x: Array, step: StepLike = DEFAULT_STEP) -> Array:
        """Return a central finite-difference gradient estimate as a new array."""
        gradient = np.zeros(self._dim, dtype=float)
        self.fdgradf_into(x, gradient, step)
        return gradient

    def reported_error(self, value: float) -> float:
        """Map a raw cost to the figure shown to users, e.g. an RMS error."""
        return value

    def _trace(self, operation: str, x: Array) -> None:
        if is_debug_enabled():
            self.check_point(x)
            logger.debug("%s: default %s delegating to compute", type(self).__name__, operation)


__all__ = ["CostFunction", "StepLike"]
