"""
sqp.py
------

Sequential quadratic programming with box constraints, wrapped in an
augmented Lagrangian loop for general constraints.

Algorithm
---------
Inner loop (box constraints only), from a feasible x:
1. Linearize: f(x) and grad f(x) via jax.value_and_grad.
2. Solve the quadratic subproblem
       min_d  g'd + 0.5 d'Bd   s.t.  lb - x <= d <= ub - x
   exactly (qp.solve_box_qp). B is a damped BFGS approximation of the
   Hessian and stays positive definite.
3. Backtracking Armijo line search on x + t d, t = 1, 1/2, 1/4, ...
   Every trial point stays in the box. Non-finite objective values are
   rejected points: the step is halved.
4. Stop when the objective change and the step both fall below tolerance,
   or the projected gradient vanishes.

Outer loop (only when NonlinearConstraint objects are given): the
Powell-Hestenes-Rockafellar augmented Lagrangian
    f(x) - lam_eq'c_eq(x) + mu/2 |c_eq(x)|^2
         + 1/(2 mu) sum(max(0, lam_in - mu c_in(x))^2 - lam_in^2)
is minimized by the inner loop; multipliers and penalty are then updated
until the constraints hold to `ctol`.

Termination without convergence (iteration cap, time budget, numerical
failure) is reported through FitResult.success = False with the last
finite iterate; nothing is raised.

Connections
-----------
- Objectives come from jndfit.model.likelihood.make_objective.
- Called by jndfit.comparison.fit for every model.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

import jax
import jax.numpy as jnp
import numpy as np

from jndfit.errors import NonFiniteObjectiveError
from jndfit.inference.base import Objective, Optimizer
from jndfit.inference.constraints import Bounds, NonlinearConstraint, most_violated
from jndfit.inference.qp import solve_box_qp
from jndfit.inference.result import FitResult

logger = logging.getLogger(__name__)

# Armijo sufficient-decrease constant
ARMIJO_C1 = 1e-4
# Powell damping threshold for the BFGS update
DAMPING = 0.2


@dataclass
class _InnerResult:
    x: np.ndarray
    f: float
    g: np.ndarray
    converged: bool
    message: str
    n_iter: int


class SQPOptimizer(Optimizer):
    """
    Quasi-Newton SQP minimizer with exact box handling.

    Parameters
    ----------
    config : FitConfig, optional
        Tolerances, iteration cap and time budget.

    Notes
    -----
    - Deterministic: identical objective, bounds and x0 give identical
      results.
    - Gradients are computed with jax.value_and_grad; the objective must
      be JAX-traceable.

    Examples
    --------
    >>> import jax.numpy as jnp
    >>> opt = SQPOptimizer()
    >>> res = opt.minimize(lambda x: jnp.sum((x - 2.0) ** 2), [0.0, 0.0],
    ...                    Bounds([0.0, 0.0], [1.0, 3.0]))
    >>> res.params  # doctest: +SKIP
    array([1., 2.])
    """

    def minimize(
        self,
        objective: Objective,
        x0: Sequence[float],
        bounds: Bounds,
        constraints: Sequence[NonlinearConstraint] = (),
    ) -> FitResult:
        x0 = bounds.check_point(x0)
        constraints = tuple(constraints)
        deadline = (
            time.perf_counter() + self.config.max_time
            if self.config.max_time is not None
            else None
        )
        state = _Counter()
        trace: list[float] = []

        if not constraints:
            vg = jax.jit(jax.value_and_grad(objective))
            inner = self._inner(
                lambda x: vg(jnp.asarray(x)),
                lambda x, f: trace.append(f),
                x0,
                bounds,
                state,
                deadline,
            )
            return FitResult(
                params=inner.x,
                nll=inner.f,
                trace=trace,
                success=inner.converged,
                message=inner.message,
                n_iter=inner.n_iter,
                n_fev=state.nfev,
            )

        return self._augmented_lagrangian(
            objective, constraints, x0, bounds, state, deadline, trace
        )

    # ------------------------------------------------------------------
    # Augmented Lagrangian outer loop
    # ------------------------------------------------------------------

    def _augmented_lagrangian(
        self,
        objective: Objective,
        constraints: tuple[NonlinearConstraint, ...],
        x0: np.ndarray,
        bounds: Bounds,
        state: _Counter,
        deadline: float | None,
        trace: list[float],
    ) -> FitResult:
        cfg = self.config
        eq = [c for c in constraints if c.kind == "eq"]
        ineq = [c for c in constraints if c.kind == "ineq"]

        def c_eq(x):
            if not eq:
                return jnp.zeros(0)
            return jnp.concatenate([c(x) for c in eq])

        def c_in(x):
            if not ineq:
                return jnp.zeros(0)
            return jnp.concatenate([c(x) for c in ineq])

        def penalized(x, lam_eq, lam_in, mu):
            ce, ci = c_eq(x), c_in(x)
            shifted = jnp.maximum(0.0, lam_in - mu * ci)
            return (
                objective(x)
                - jnp.dot(lam_eq, ce)
                + 0.5 * mu * jnp.sum(ce**2)
                + jnp.sum(shifted**2 - lam_in**2) / (2.0 * mu)
            )

        vg = jax.jit(jax.value_and_grad(penalized))
        f_value = jax.jit(objective)
        c_eq_j, c_in_j = jax.jit(c_eq), jax.jit(c_in)

        x = x0
        lam_eq = np.zeros(np.asarray(c_eq_j(jnp.asarray(x0))).size)
        lam_in = np.zeros(np.asarray(c_in_j(jnp.asarray(x0))).size)
        mu = 10.0
        prev_violation = np.inf
        n_iter = 0
        inner = None
        violation = np.inf

        for outer in range(cfg.max_outer_iter):
            le, li, m = jnp.asarray(lam_eq), jnp.asarray(lam_in), mu
            inner = self._inner(
                lambda z, le=le, li=li, m=m: vg(jnp.asarray(z), le, li, m),
                lambda z, _: trace.append(float(f_value(jnp.asarray(z)))),
                x,
                bounds,
                state,
                deadline,
                record_start=outer == 0,
            )
            x = inner.x
            n_iter += inner.n_iter
            ce = np.asarray(c_eq_j(jnp.asarray(x)), dtype=float)
            ci = np.asarray(c_in_j(jnp.asarray(x)), dtype=float)
            violation = max(
                float(np.max(np.abs(ce))) if ce.size else 0.0,
                float(np.max(np.maximum(-ci, 0.0))) if ci.size else 0.0,
            )
            logger.debug(
                "augmented Lagrangian round %d: violation=%.3e mu=%.1e (%s)",
                outer,
                violation,
                mu,
                inner.message,
            )
            if not inner.converged:
                # iteration cap, time budget or numerical failure
                break
            if violation <= cfg.ctol:
                break
            lam_eq = lam_eq - mu * ce
            lam_in = np.maximum(0.0, lam_in - mu * ci)
            if violation > 0.25 * prev_violation:
                mu *= 10.0
            prev_violation = violation

        success = bool(inner.converged and violation <= cfg.ctol)
        message = inner.message
        if inner.converged and violation > cfg.ctol:
            worst, amount = most_violated(constraints, x)
            label = worst.label if worst is not None else "constraints"
            message = f"{label} violated by {amount:.3e}"
        return FitResult(
            params=x,
            nll=float(f_value(jnp.asarray(x))),
            trace=trace,
            success=success,
            message=message,
            n_iter=n_iter,
            n_fev=state.nfev,
            constraint_violation=violation,
        )

    # ------------------------------------------------------------------
    # Bound-constrained SQP inner loop
    # ------------------------------------------------------------------

    def _inner(
        self,
        value_and_grad: Callable[[np.ndarray], tuple],
        on_accept: Callable[[np.ndarray, float], None],
        x0: np.ndarray,
        bounds: Bounds,
        state: _Counter,
        deadline: float | None,
        *,
        record_start: bool = True,
    ) -> _InnerResult:
        cfg = self.config
        lb, ub = bounds.lower, bounds.upper
        n = x0.size

        def evaluate(x):
            f, g = value_and_grad(x)
            state.nfev += 1
            return _finite(f, "objective"), _finite_vector(g, "gradient")

        x = x0.copy()
        try:
            f, g = evaluate(x)
        except NonFiniteObjectiveError as exc:
            return _InnerResult(x, float("nan"), np.zeros(n), False,
                                f"numerical failure: {exc}", 0)
        if record_start:
            on_accept(x, f)

        B = np.eye(n)
        scaled = False

        for it in range(cfg.max_iter):
            if deadline is not None and time.perf_counter() > deadline:
                return _InnerResult(x, f, g, False,
                                    f"time budget of {cfg.max_time}s exceeded", it)

            pg = _projected_gradient(x, g, lb, ub)
            if np.max(np.abs(pg), initial=0.0) <= cfg.gtol:
                return _InnerResult(x, f, g, True,
                                    "converged: projected gradient below gtol", it)

            d = solve_box_qp(B, g, lb - x, ub - x)
            slope = float(g @ d)
            if slope >= 0.0:
                # lost positive definiteness numerically: restart from identity
                B = np.eye(n)
                d = solve_box_qp(B, g, lb - x, ub - x)
                slope = float(g @ d)
                if slope >= 0.0:
                    return _InnerResult(x, f, g, True,
                                        "converged: no descent direction", it)

            accepted = None
            t = 1.0
            for _ in range(cfg.max_line_search):
                x_trial = np.clip(x + t * d, lb, ub)
                try:
                    f_trial, g_trial = evaluate(x_trial)
                except NonFiniteObjectiveError:
                    t *= 0.5
                    continue
                if f_trial <= f + ARMIJO_C1 * t * slope:
                    accepted = (x_trial, f_trial, g_trial)
                    break
                t *= 0.5

            if accepted is None:
                # no decrease left at machine precision counts as stationary
                if abs(slope) <= cfg.ftol * (1.0 + abs(f)) or np.max(
                    np.abs(pg)
                ) <= np.sqrt(cfg.gtol):
                    return _InnerResult(x, f, g, True,
                                        "converged: no further decrease possible", it)
                return _InnerResult(x, f, g, False,
                                    "line search failed to find a finite decrease", it)

            x_new, f_new, g_new = accepted
            s = x_new - x
            y = g_new - g
            if not scaled:
                sy = float(s @ y)
                if sy > 0.0:
                    B = (float(y @ y) / sy) * np.eye(n)
                scaled = True
            B = _damped_bfgs(B, s, y)

            df = f - f_new
            step = float(np.max(np.abs(s)))
            x, f, g = x_new, f_new, g_new
            on_accept(x, f)
            logger.debug("SQP iter %d: f=%.10g step=%.3e t=%.3g", it, f, step, t)

            if abs(df) <= cfg.ftol * (1.0 + abs(f)) and step <= cfg.xtol * (
                1.0 + float(np.max(np.abs(x)))
            ):
                return _InnerResult(x, f, g, True,
                                    "converged: objective change and step below tolerance",
                                    it + 1)

        return _InnerResult(x, f, g, False,
                            f"maximum number of iterations ({cfg.max_iter}) reached",
                            cfg.max_iter)


class _Counter:
    __slots__ = ("nfev",)

    def __init__(self) -> None:
        self.nfev = 0


def _finite(value, what: str) -> float:
    value = float(value)
    if not np.isfinite(value):
        raise NonFiniteObjectiveError(f"{what} evaluated to {value}")
    return value


def _finite_vector(value, what: str) -> np.ndarray:
    value = np.asarray(value, dtype=float)
    if not np.all(np.isfinite(value)):
        raise NonFiniteObjectiveError(f"{what} is not finite")
    return value


def _projected_gradient(
    x: np.ndarray, g: np.ndarray, lb: np.ndarray, ub: np.ndarray
) -> np.ndarray:
    """Gradient with components zeroed where a bound blocks descent."""
    pg = g.copy()
    pg[(x <= lb) & (g > 0)] = 0.0
    pg[(x >= ub) & (g < 0)] = 0.0
    return pg


def _damped_bfgs(B: np.ndarray, s: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Powell-damped BFGS update; keeps B symmetric positive definite."""
    Bs = B @ s
    sBs = float(s @ Bs)
    if sBs <= 1e-16:
        return B
    sy = float(s @ y)
    if sy < DAMPING * sBs:
        theta = (1.0 - DAMPING) * sBs / (sBs - sy)
        r = theta * y + (1.0 - theta) * Bs
    else:
        r = y
    sr = float(s @ r)
    if sr <= 1e-16:
        return B
    B_new = B - np.outer(Bs, Bs) / sBs + np.outer(r, r) / sr
    return 0.5 * (B_new + B_new.T)
