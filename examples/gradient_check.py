"""
Example: verifying an analytic gradient with finite differences

Defines the Rosenbrock function as a CostFunction that shares work between
value and gradient in ``compute``, checks the analytic gradient against the
central-difference estimate, then drives a few steepest-descent steps the
way an external optimizer would, counting evaluations along the way.
"""

import numpy as np

from costkit import CostFunction, CountingCostFunction, gradient_error


class Rosenbrock(CostFunction):
    """f(x) = sum(100 (x[i+1] - x[i]^2)^2 + (1 - x[i])^2)."""

    def compute(self, x, gradient=None, want_value=True):
        x = self.check_point(x)
        head, tail = x[:-1], x[1:]
        curve = tail - head**2
        if gradient is not None:
            self.check_gradient(gradient)
            gradient[:] = 0.0
            gradient[:-1] = -400.0 * head * curve - 2.0 * (1.0 - head)
            gradient[1:] += 200.0 * curve
        if not want_value:
            return None
        return float(np.sum(100.0 * curve**2 + (1.0 - head) ** 2))


def main():
    cost = Rosenbrock(4)
    x0 = np.array([-1.2, 1.0, -0.5, 0.8])

    print("=" * 60)
    print("Gradient check")
    print("=" * 60)
    print(f"Analytic gradient:   {cost.gradf(x0)}")
    print(f"Finite differences:  {cost.fdgradf(x0, 1e-6)}")
    print(f"Max gradient error:  {gradient_error(cost, x0, 1e-6):.3e}")

    print()
    print("=" * 60)
    print("Steepest descent driven from outside")
    print("=" * 60)
    counted = CountingCostFunction(cost)
    x = x0.copy()
    gradient = np.zeros(counted.dim)
    value = counted.compute(x, gradient)
    for _ in range(200):
        step = 1e-3
        candidate = x - step * gradient
        # halve until the value decreases
        while counted.f(candidate) >= value and step > 1e-12:
            step *= 0.5
            candidate = x - step * gradient
        x = candidate
        value = counted.compute(x, gradient)
    print(f"Final point: {x}")
    print(f"Final value: {counted.reported_error(value):.6f}")
    print(f"Evaluations: nfev={counted.nfev} njev={counted.njev}")


if __name__ == "__main__":
    main()
