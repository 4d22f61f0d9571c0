"""
base.py
-------

Abstract base class for optimizers.

All optimizers implement `minimize(objective, x0, bounds)` and return a
FitResult. Subclasses: SQPOptimizer, SLSQPOptimizer,
ProjectedGradientOptimizer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Sequence

import jax.numpy as jnp

from jndfit.config import FitConfig
from jndfit.inference.constraints import Bounds, NonlinearConstraint
from jndfit.inference.result import FitResult

Objective = Callable[[jnp.ndarray], jnp.ndarray]


class Optimizer(ABC):
    """
    Abstract interface for bound-constrained minimizers.

    Parameters
    ----------
    config : FitConfig | None
        Tolerances and budgets. Defaults to FitConfig().

    Methods
    -------
    minimize(objective, x0, bounds, constraints=()) -> FitResult
    """

    def __init__(self, config: FitConfig | None = None):
        self.config = config or FitConfig()

    @abstractmethod
    def minimize(
        self,
        objective: Objective,
        x0: Sequence[float],
        bounds: Bounds,
        constraints: Sequence[NonlinearConstraint] = (),
    ) -> FitResult:
        """
        Minimize `objective` starting at `x0` within `bounds`.

        Parameters
        ----------
        objective : Callable
            JAX-traceable scalar function of the parameter vector.
        x0 : array-like
            Initial point; must lie within bounds.
        bounds : Bounds
            Box constraints. Every evaluated point lies inside.
        constraints : sequence of NonlinearConstraint
            General constraints (engines that cannot handle them raise
            NotImplementedError).

        Returns
        -------
        FitResult

        Raises
        ------
        InvalidParameterError
            If x0 lies outside bounds or has the wrong length.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(config={self.config!r})"
