"""
qp.py
-----

Box-constrained convex quadratic programming.

Solves the SQP subproblem

    minimize    g'd + 0.5 d'Bd
    subject to  lower <= d <= upper

for symmetric positive definite B with a primal active-set method.
The start point d = 0 must be feasible (lower <= 0 <= upper), which holds
for SQP steps taken from a point inside the parameter box.
"""

from __future__ import annotations

import numpy as np


def solve_box_qp(
    B: np.ndarray,
    g: np.ndarray,
    lower: np.ndarray,
    upper: np.ndarray,
    *,
    max_iter: int | None = None,
    tol: float = 1e-12,
) -> np.ndarray:
    """
    Minimize g'd + 0.5 d'Bd over the box [lower, upper].

    Parameters
    ----------
    B : np.ndarray, shape (n, n)
        Symmetric positive definite matrix.
    g : np.ndarray, shape (n,)
        Linear term (objective gradient).
    lower, upper : np.ndarray, shape (n,)
        Box with lower <= 0 <= upper.
    max_iter : int, optional
        Active-set iterations (default 10 * n + 10).
    tol : float
        Feasibility / multiplier tolerance.

    Returns
    -------
    np.ndarray, shape (n,)
        Minimizer d (the last feasible iterate if max_iter is hit).

    Notes
    -----
    Working set W holds the components pinned to a bound. Each iteration
    solves the equality-constrained problem on the free components; a step
    that would leave the box is cut at the first blocking bound, which
    joins W. When the full step is feasible, the bound with the most
    negative multiplier leaves W; if none is negative d is optimal.
    """
    g = np.asarray(g, dtype=float)
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    n = g.size
    if max_iter is None:
        max_iter = 10 * n + 10

    d = np.zeros(n)
    # components whose box has zero width never move
    fixed = upper - lower <= tol
    working = fixed.copy()

    for _ in range(max_iter):
        free = ~working
        target = d.copy()
        if np.any(free):
            rhs = -(g[free] + B[np.ix_(free, working)] @ d[working])
            target[free] = np.linalg.solve(B[np.ix_(free, free)], rhs)

        step = target - d
        # fraction of the step that keeps every free component in the box
        t, blocking = 1.0, -1
        for i in np.flatnonzero(free):
            if step[i] > tol and d[i] + step[i] > upper[i]:
                ti = (upper[i] - d[i]) / step[i]
            elif step[i] < -tol and d[i] + step[i] < lower[i]:
                ti = (lower[i] - d[i]) / step[i]
            else:
                continue
            if ti < t:
                t, blocking = ti, i

        if blocking >= 0:
            d = d + t * step
            # pin exactly onto the blocking bound
            d[blocking] = upper[blocking] if step[blocking] > 0 else lower[blocking]
            working[blocking] = True
            continue

        d = np.clip(target, lower, upper)
        grad = g + B @ d
        # multipliers of pinned components: positive means the bound is binding
        candidates = np.flatnonzero(working & ~fixed)
        if candidates.size == 0:
            return d
        at_upper = np.isclose(d[candidates], upper[candidates], rtol=0.0, atol=tol)
        multipliers = np.where(at_upper, -grad[candidates], grad[candidates])
        worst = int(np.argmin(multipliers))
        if multipliers[worst] >= -tol:
            return d
        working[candidates[worst]] = False

    return np.clip(d, lower, upper)
