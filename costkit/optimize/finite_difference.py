"""Central finite-difference gradients.

The denominator of every difference quotient is recomputed from the actual
perturbed coordinates, ``(x[i] + h) - (x[i] - h)``, rather than ``2h``. When
the perturbation itself rounds, this keeps the quotient consistent with the
points that were really evaluated.
"""

from __future__ import annotations

import math
import numbers
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np

from costkit.logging import get_logger

from .core import DEFAULT_STEP, Array, DimensionMismatchError, Objective, check_buffer

if TYPE_CHECKING:
    from .cost_function import CostFunction

logger = get_logger(__name__)


@dataclass(frozen=True)
class FiniteDifferenceConfig:
    """
    Settings for finite-difference gradient estimates.

    Args:
        step: Perturbation size h. Must be finite and positive.
        parallel: Dispatch the 2n evaluations on a thread pool. Only honoured
            for objectives declared reentrant.
        max_workers: Thread pool size. None lets the executor decide.
    """

    step: float = DEFAULT_STEP
    parallel: bool = False
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate FiniteDifferenceConfig invariants."""
        _check_step(self.step)
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")


def _check_step(step: float) -> None:
    if isinstance(step, bool) or not isinstance(step, numbers.Real):
        raise TypeError(f"step must be a real number, got {type(step).__name__}")
    if not math.isfinite(step) or step <= 0:
        raise ValueError(f"step must be finite and positive, got {step}")


def _sequential(fun: Objective, x: Array, gradient: Array, h: float) -> None:
    tx = x.copy()
    for i in range(x.size):
        tplus = x[i] + h
        tx[i] = tplus
        fplus = float(fun(tx))

        tminus = x[i] - h
        tx[i] = tminus
        fminus = float(fun(tx))

        gradient[i] = (fplus - fminus) / (tplus - tminus)
        tx[i] = x[i]


def _parallel(
    fun: Objective, x: Array, gradient: Array, h: float, max_workers: Optional[int]
) -> None:
    tplus = x + h
    tminus = x - h

    def evaluate(i: int, value: float) -> float:
        tx = x.copy()
        tx[i] = value
        return float(fun(tx))

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        pairs = [
            (pool.submit(evaluate, i, tplus[i]), pool.submit(evaluate, i, tminus[i]))
            for i in range(x.size)
        ]
        try:
            for i, (plus, minus) in enumerate(pairs):
                gradient[i] = (plus.result() - minus.result()) / (tplus[i] - tminus[i])
        except BaseException:
            # cancel evaluations still queued
            pool.shutdown(wait=True, cancel_futures=True)
            raise


def central_difference_into(
    fun: Objective,
    x: Array,
    gradient: Array,
    step: float = DEFAULT_STEP,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> int:
    """Write a central-difference gradient of ``fun`` at ``x`` into ``gradient``.

    Parameters
    ----------
    fun:
        Objective returning a scalar given a 1D array.
    x:
        Point where the gradient is approximated. Never modified.
    gradient:
        Preallocated float array of the same length as ``x``.
    step:
        Perturbation size h.
    parallel:
        Evaluate the perturbed points on a thread pool. ``fun`` must be
        reentrant and free of side effects.
    max_workers:
        Thread pool size when ``parallel`` is set.

    Returns
    -------
    int
        Number of evaluations of ``fun`` (always ``2 * len(x)``).
    """
    _check_step(step)
    x = np.asarray(x, dtype=float)
    if x.ndim != 1:
        raise DimensionMismatchError(f"point must be a 1D array, got shape {x.shape}")
    check_buffer(gradient, x.size)

    if parallel:
        _parallel(fun, x, gradient, float(step), max_workers)
    else:
        _sequential(fun, x, gradient, float(step))
    evals = 2 * x.size
    logger.debug("central difference: %d evaluations (h=%g, parallel=%s)", evals, step, parallel)
    return evals


def central_difference(
    fun: Objective,
    x: Array,
    step: float = DEFAULT_STEP,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    return_evals: bool = False,
) -> Array | tuple[Array, int]:
    """Compute a central-difference gradient approximation.

    Allocates a zero vector of the length of ``x`` and fills it with
    :func:`central_difference_into`.
    """
    x = np.asarray(x, dtype=float)
    grad = np.zeros(x.shape, dtype=float)
    evals = central_difference_into(fun, x, grad, step, parallel, max_workers)
    if return_evals:
        return grad, evals
    return grad


def gradient_error(cost: "CostFunction", x: Array, step: float = DEFAULT_STEP) -> float:
    """Return the largest absolute gap between ``cost.gradf`` and ``cost.fdgradf``.

    Useful to verify a hand-written analytic gradient before handing the
    objective to an optimizer.
    """
    analytic = cost.gradf(x)
    numeric = cost.fdgradf(x, step)
    return float(np.max(np.abs(analytic - numeric)))


__all__ = [
    "FiniteDifferenceConfig",
    "central_difference",
    "central_difference_into",
    "gradient_error",
]
