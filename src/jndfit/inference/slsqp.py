"""
slsqp.py
--------

SciPy SLSQP engine.

A reference implementation of sequential least-squares QP, useful to
cross-check SQPOptimizer. Gradients come from JAX; the objective wrapper
clips every point SciPy asks for into the box, so the objective never sees
an out-of-bounds parameter.
"""

from __future__ import annotations

from typing import Sequence

import jax
import jax.numpy as jnp
import numpy as np
from scipy import optimize

from jndfit.errors import NonFiniteObjectiveError
from jndfit.inference.base import Objective, Optimizer
from jndfit.inference.constraints import Bounds, NonlinearConstraint
from jndfit.inference.result import FitResult


class SLSQPOptimizer(Optimizer):
    """
    Minimizer backed by scipy.optimize.minimize(method="SLSQP").

    Notes
    -----
    - Uses config.max_iter and config.ftol; the time budget is not
      enforced inside SciPy.
    - SLSQP cannot back off from a non-finite objective value, so the
      run stops there and reports failure at the last accepted iterate.
    """

    def minimize(
        self,
        objective: Objective,
        x0: Sequence[float],
        bounds: Bounds,
        constraints: Sequence[NonlinearConstraint] = (),
    ) -> FitResult:
        x0 = bounds.check_point(x0)
        vg = jax.jit(jax.value_and_grad(objective))
        f_value = jax.jit(objective)
        trace: list[float] = []
        nfev = 0

        def fun(x):
            nonlocal nfev
            x = bounds.clip(x)
            f, g = vg(jnp.asarray(x))
            nfev += 1
            f = float(f)
            g = np.asarray(g, dtype=float)
            if not (np.isfinite(f) and np.all(np.isfinite(g))):
                raise NonFiniteObjectiveError(
                    f"objective or gradient not finite at {x.tolist()}"
                )
            return f, g

        try:
            f0, _ = fun(x0)
        except NonFiniteObjectiveError:
            return FitResult(
                params=x0,
                nll=float("nan"),
                success=False,
                message="numerical failure: objective at initial point is not finite",
                n_fev=nfev,
            )
        trace.append(f0)
        accepted = {"x": x0, "f": f0}

        def callback(xk):
            x = bounds.clip(xk)
            f = float(f_value(jnp.asarray(x)))
            if np.isfinite(f):
                accepted["x"], accepted["f"] = x, f
                trace.append(f)

        scipy_constraints = [
            {
                "type": c.kind,
                "fun": lambda x, c=c: np.asarray(c(jnp.asarray(bounds.clip(x)))),
                "jac": lambda x, c=c: np.atleast_2d(
                    np.asarray(jax.jacobian(c)(jnp.asarray(bounds.clip(x))))
                ),
            }
            for c in constraints
        ]

        try:
            res = optimize.minimize(
                fun,
                x0,
                jac=True,
                method="SLSQP",
                bounds=optimize.Bounds(bounds.lower, bounds.upper),
                constraints=scipy_constraints,
                callback=callback,
                options={"maxiter": self.config.max_iter, "ftol": self.config.ftol},
            )
        except NonFiniteObjectiveError as exc:
            # SLSQP has no notion of a rejected point; stop at the last accepted iterate
            x = accepted["x"]
            return FitResult(
                params=x,
                nll=accepted["f"],
                trace=trace,
                success=False,
                message=f"numerical failure: {exc}",
                n_iter=len(trace) - 1,
                n_fev=nfev,
                constraint_violation=max(
                    (c.violation(x) for c in constraints), default=0.0
                ),
            )

        x = bounds.clip(res.x)
        f = float(f_value(jnp.asarray(x)))
        success = bool(res.success and np.isfinite(f))
        if not np.isfinite(f):
            x, f = accepted["x"], accepted["f"]
        if trace[-1] != f:
            trace.append(f)
        violation = max(
            (c.violation(x) for c in constraints), default=0.0
        )
        return FitResult(
            params=x,
            nll=f,
            trace=trace,
            success=success,
            message=str(res.message),
            n_iter=int(res.nit),
            n_fev=nfev,
            constraint_violation=violation,
        )
