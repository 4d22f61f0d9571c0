"""
test_qp.py
----------

Tests for the box-constrained QP subproblem solver.
"""

import itertools

import numpy as np
import pytest

from jndfit.inference.qp import solve_box_qp


def _objective(B, g, d):
    return float(g @ d + 0.5 * d @ B @ d)


def _brute_force(B, g, lower, upper):
    """Enumerate every active set (fine for n <= 3)."""
    n = g.size
    best, best_val = None, np.inf
    for pattern in itertools.product((None, "lo", "hi"), repeat=n):
        d = np.zeros(n)
        fixed = np.array([p is not None for p in pattern])
        for i, p in enumerate(pattern):
            if p == "lo":
                d[i] = lower[i]
            elif p == "hi":
                d[i] = upper[i]
        free = ~fixed
        if np.any(free):
            rhs = -(g[free] + B[np.ix_(free, fixed)] @ d[fixed])
            d[free] = np.linalg.solve(B[np.ix_(free, free)], rhs)
        if np.all(d >= lower - 1e-12) and np.all(d <= upper + 1e-12):
            val = _objective(B, g, d)
            if val < best_val:
                best, best_val = d, val
    return best


class TestSolveBoxQP:
    def test_interior_solution_is_newton_step(self):
        B = np.array([[2.0, 0.5], [0.5, 1.0]])
        g = np.array([0.3, -0.2])
        d = solve_box_qp(B, g, np.full(2, -10.0), np.full(2, 10.0))
        np.testing.assert_allclose(d, -np.linalg.solve(B, g), atol=1e-12)

    def test_active_upper_bound(self):
        B = np.eye(2)
        g = np.array([-4.0, -4.0])
        d = solve_box_qp(B, g, np.array([0.0, 0.0]), np.array([1.0, 3.0]))
        np.testing.assert_allclose(d, [1.0, 3.0])

    def test_zero_width_box_dimension_stays_put(self):
        B = np.eye(2)
        g = np.array([-1.0, 1.0])
        d = solve_box_qp(B, g, np.array([0.0, -5.0]), np.array([0.0, 5.0]))
        np.testing.assert_allclose(d, [0.0, -1.0])

    @pytest.mark.parametrize("seed", range(20))
    def test_matches_brute_force(self, seed):
        rng = np.random.default_rng(seed)
        A = rng.normal(size=(3, 3))
        B = A @ A.T + 0.1 * np.eye(3)
        g = rng.normal(scale=3.0, size=3)
        lower = -rng.uniform(0.0, 1.0, size=3)
        upper = rng.uniform(0.0, 1.0, size=3)

        d = solve_box_qp(B, g, lower, upper)
        expected = _brute_force(B, g, lower, upper)

        assert np.all(d >= lower) and np.all(d <= upper)
        assert _objective(B, g, d) == pytest.approx(
            _objective(B, g, expected), abs=1e-10
        )
