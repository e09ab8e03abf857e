import math
import threading
import time

import numpy as np
import pytest

from costkit.optimize import (
    CostFunction,
    DimensionMismatchError,
    FiniteDifferenceConfig,
    central_difference,
    central_difference_into,
    gradient_error,
)


class SumOfSquares(CostFunction):
    reentrant = True

    def f(self, x):
        return float(np.sum(np.asarray(x) ** 2))

    def gradf_into(self, x, gradient):
        gradient[:] = 2.0 * np.asarray(x)


class LinearMix(CostFunction):
    """f(x0, x1) = x0**2 + 3*x1, value only."""

    def __init__(self) -> None:
        super().__init__(2)

    def f(self, x):
        return float(x[0] ** 2 + 3 * x[1])


class LogBarrier(CostFunction):
    def f(self, x):
        if np.any(np.asarray(x) <= 0):
            raise ArithmeticError("log barrier undefined outside the positive orthant")
        return float(-np.sum(np.log(x)))


def test_fdgradf_matches_analytic_sum_of_squares(rng: np.random.Generator):
    cost = SumOfSquares(5)
    x = rng.normal(size=5)
    assert np.allclose(cost.fdgradf(x, 1e-4), 2.0 * x, atol=1e-3)


def test_fdgradf_end_to_end_scenario():
    grad = LinearMix().fdgradf([2.0, 5.0], 0.001)
    assert np.allclose(grad, [4.0, 3.0], atol=1e-2)


def test_fdgradf_leaves_point_unchanged(rng: np.random.Generator):
    cost = SumOfSquares(4)
    x = rng.normal(size=4)
    before = x.copy()
    cost.fdgradf(x, 0.1)
    assert np.array_equal(x, before)


def test_perturbations_are_not_compounded():
    seen = []

    def fun(x):
        seen.append(x.copy())
        return 0.0

    x = np.array([1.0, 2.0, 3.0])
    central_difference(fun, x, step=0.5)
    assert len(seen) == 6
    for i, point in enumerate(seen):
        changed = np.flatnonzero(point != x)
        assert changed.tolist() == [i // 2]
    assert seen[0][0] == 1.5
    assert seen[1][0] == 0.5


def test_denominator_uses_perturbed_coordinates():
    # doubles near 1e16 are 2 apart, so x +/- 1.5 round to x +/- 2; the
    # quotient divides by the distance actually evaluated, 4, not by 3
    x = np.array([1e16])
    grad = central_difference(lambda t: float(t[0]), x, step=1.5)
    assert grad[0] == 1.0


def test_central_difference_into_returns_evaluations():
    gradient = np.zeros(3)
    evals = central_difference_into(lambda t: float(np.sum(t)), np.zeros(3), gradient)
    assert evals == 6
    assert np.allclose(gradient, 1.0)


def test_central_difference_return_evals():
    grad, evals = central_difference(lambda t: float(t @ t), np.ones(2), return_evals=True)
    assert evals == 4
    assert np.allclose(grad, 2.0, atol=1e-8)


@pytest.mark.parametrize("step", [0.0, -1e-3, math.inf, math.nan])
def test_invalid_step(step: float):
    with pytest.raises(ValueError):
        central_difference(lambda t: 0.0, np.zeros(1), step=step)
    with pytest.raises(ValueError):
        SumOfSquares(1).fdgradf(np.zeros(1), step)


def test_central_difference_rejects_mismatched_buffer():
    with pytest.raises(DimensionMismatchError):
        central_difference_into(lambda t: 0.0, np.zeros(3), np.zeros(2))
    with pytest.raises(DimensionMismatchError):
        central_difference(lambda t: 0.0, np.zeros((2, 2)))


def test_fdgradf_rejects_wrong_point_length():
    with pytest.raises(DimensionMismatchError):
        SumOfSquares(3).fdgradf(np.zeros(4))


def test_domain_error_propagates():
    cost = LogBarrier(2)
    assert np.allclose(cost.fdgradf(np.array([1.0, 2.0]), 1e-6), [-1.0, -0.5], atol=1e-5)
    with pytest.raises(ArithmeticError):
        cost.fdgradf(np.array([1.0, 1e-9]), 1e-6)


def test_config_validation():
    assert FiniteDifferenceConfig().step == 1e-5
    with pytest.raises(ValueError):
        FiniteDifferenceConfig(step=0.0)
    with pytest.raises(ValueError):
        FiniteDifferenceConfig(max_workers=0)
    with pytest.raises(TypeError):
        FiniteDifferenceConfig(step="1e-3")


def test_parallel_matches_sequential(rng: np.random.Generator):
    cost = SumOfSquares(50)
    x = rng.normal(size=50)
    sequential = cost.fdgradf(x, 1e-4)
    parallel = cost.fdgradf(x, FiniteDifferenceConfig(step=1e-4, parallel=True, max_workers=4))
    assert np.array_equal(sequential, parallel)


def test_parallel_uses_worker_threads():
    threads = set()

    class Recording(SumOfSquares):
        def f(self, x):
            threads.add(threading.get_ident())
            return super().f(x)

    cost = Recording(8)
    cost.fdgradf(np.ones(8), FiniteDifferenceConfig(parallel=True, max_workers=2))
    assert threading.get_ident() not in threads


def test_parallel_request_on_non_reentrant_falls_back(log_stream):
    threads = set()

    class Recording(LinearMix):
        def f(self, x):
            threads.add(threading.get_ident())
            return super().f(x)

    grad = Recording().fdgradf(np.array([2.0, 5.0]), FiniteDifferenceConfig(step=1e-3, parallel=True))
    assert np.allclose(grad, [4.0, 3.0], atol=1e-2)
    assert threads == {threading.get_ident()}
    assert "not declared reentrant" in log_stream.getvalue()


def test_parallel_propagates_errors():
    class Barrier(LogBarrier):
        reentrant = True

    with pytest.raises(ArithmeticError):
        Barrier(3).fdgradf(np.array([1.0, 1.0, 1e-9]), FiniteDifferenceConfig(step=1e-6, parallel=True))


def test_gradient_error_flags_wrong_analytic_gradient():
    class WrongGradient(SumOfSquares):
        def gradf_into(self, x, gradient):
            gradient[:] = np.asarray(x)

    x = np.array([1.0, -2.0])
    assert gradient_error(SumOfSquares(2), x) < 1e-6
    assert gradient_error(WrongGradient(2), x) == pytest.approx(2.0, abs=1e-6)


def test_finite_difference_logs_evaluation_count(log_stream):
    SumOfSquares(3).fdgradf(np.zeros(3))
    assert "central difference: 6 evaluations" in log_stream.getvalue()


@pytest.mark.parametrize("step", [np.float32(1e-3), np.float64(1e-3), np.int64(1), 1])
def test_numpy_scalar_steps_accepted(step):
    x = np.array([1.0, 2.0])
    expected = SumOfSquares(2).gradf(x)
    assert np.allclose(SumOfSquares(2).fdgradf(x, step), expected, atol=1e-5)
    assert np.allclose(central_difference(lambda t: float(t @ t), x, step=step), expected, atol=1e-5)
    assert FiniteDifferenceConfig(step=step).step == step


@pytest.mark.parametrize("step", [True, np.bool_(True), "1e-3", None])
def test_non_real_steps_rejected(step):
    with pytest.raises(TypeError):
        FiniteDifferenceConfig(step=step)
    with pytest.raises(TypeError):
        central_difference(lambda t: 0.0, np.zeros(1), step=step)


def test_parallel_failure_cancels_queued_evaluations():
    calls = []
    lock = threading.Lock()

    class FailsRightOfHalf(CostFunction):
        reentrant = True

        def f(self, x):
            with lock:
                calls.append(x[0])
            if x[0] > 0.5:
                raise ArithmeticError("outside the feasible region")
            time.sleep(0.01)
            return float(np.sum(x))

    dim = 40
    config = FiniteDifferenceConfig(step=1.0, parallel=True, max_workers=1)
    with pytest.raises(ArithmeticError):
        FailsRightOfHalf(dim).fdgradf(np.zeros(dim), config)
    assert len(calls) < 2 * dim
