"""
projected.py
------------

Projected first-order optimizer using Optax.

- Uses gradient steps on the objective, then projects onto the box.
- Defaults to SGD with momentum, but any Optax optimizer can be passed in.
- Stops on objective-change/step tolerances, the iteration cap or the
  time budget.

Slower than SQPOptimizer on these small problems but makes no curvature
assumptions; useful as a cross-check on rough likelihood surfaces.
"""

from __future__ import annotations

import time
from typing import Sequence

import jax
import jax.numpy as jnp
import numpy as np
import optax

from jndfit.config import FitConfig
from jndfit.inference.base import Objective, Optimizer
from jndfit.inference.constraints import Bounds, NonlinearConstraint
from jndfit.inference.result import FitResult


class ProjectedGradientOptimizer(Optimizer):
    """
    Projected gradient descent with an Optax update rule.

    Parameters
    ----------
    config : FitConfig, optional
        max_iter is the number of gradient steps.
    learning_rate : float, default=1e-2
        Learning rate for the default optimizer (SGD with momentum 0.9).
    optimizer : optax.GradientTransformation, optional
        Optax optimizer to use instead of the default.
    log_every : int, default=1
        Record every N steps in the trace (the last step is always
        recorded).

    Notes
    -----
    - Loss function = objective / max(1, |objective(x0)|), so one learning
      rate suits likelihoods summed over any number of trials.
    - The returned point is the best iterate seen; a run that stalls above
      it is reported with success=False.
    - Gradients computed with jax.grad.
    """

    def __init__(
        self,
        config: FitConfig | None = None,
        learning_rate: float = 1e-2,
        optimizer: optax.GradientTransformation | None = None,
        *,
        log_every: int = 1,
    ):
        super().__init__(config)
        self.optimizer = optimizer or optax.sgd(learning_rate=learning_rate, momentum=0.9)
        self.log_every = max(1, int(log_every))

    def minimize(
        self,
        objective: Objective,
        x0: Sequence[float],
        bounds: Bounds,
        constraints: Sequence[NonlinearConstraint] = (),
    ) -> FitResult:
        if constraints:
            raise NotImplementedError(
                "ProjectedGradientOptimizer only supports box constraints"
            )
        cfg = self.config
        x0 = bounds.check_point(x0)
        lower, upper = jnp.asarray(bounds.lower), jnp.asarray(bounds.upper)
        deadline = (
            time.perf_counter() + cfg.max_time if cfg.max_time is not None else None
        )
        f_value = jax.jit(objective)

        params = jnp.asarray(x0)
        f = float(f_value(params))
        nfev = 1
        if not np.isfinite(f):
            return FitResult(
                params=x0,
                nll=float("nan"),
                success=False,
                message="numerical failure: objective at initial point is not finite",
                n_fev=nfev,
            )
        # loss is the objective relative to its starting value
        scale = max(1.0, abs(f))

        @jax.jit
        def step(params, opt_state):
            loss, grads = jax.value_and_grad(lambda p: objective(p) / scale)(params)
            updates, opt_state = self.optimizer.update(grads, opt_state, params)
            params = optax.apply_updates(params, updates)
            # projection keeps every iterate inside the box
            return jnp.clip(params, lower, upper), opt_state, loss

        opt_state = self.optimizer.init(params)
        trace = [f]
        best_x, best_f = np.asarray(params), f
        message = f"maximum number of iterations ({cfg.max_iter}) reached"
        success = False
        n_iter = 0

        for it in range(1, cfg.max_iter + 1):
            if deadline is not None and time.perf_counter() > deadline:
                message = f"time budget of {cfg.max_time}s exceeded"
                break
            new_params, opt_state, _ = step(params, opt_state)
            f_new = float(f_value(new_params))
            nfev += 2
            n_iter = it
            if not np.isfinite(f_new):
                message = "numerical failure: objective is not finite"
                break
            delta = float(jnp.max(jnp.abs(new_params - params)))
            df = abs(f - f_new)
            params, f = new_params, f_new
            if f < best_f:
                best_x, best_f = np.asarray(params), f
            if it % self.log_every == 0:
                trace.append(f)
            if df <= cfg.ftol * (1.0 + abs(f)) and delta <= cfg.xtol * (
                1.0 + float(jnp.max(jnp.abs(params)))
            ):
                if f <= best_f + cfg.ftol * (1.0 + abs(best_f)):
                    success = True
                    message = "converged: objective change and step below tolerance"
                else:
                    # flat region (e.g. fully clamped probabilities) above an earlier iterate
                    message = "stalled at a point worse than an earlier iterate"
                break

        # never report a point worse than the best iterate seen
        x_final, f_final = best_x, best_f
        if trace[-1] != f_final:
            trace.append(f_final)
        return FitResult(
            params=x_final,
            nll=f_final,
            trace=trace,
            success=success,
            message=message,
            n_iter=n_iter,
            n_fev=nfev,
        )
