"""
result.py
---------

FitResult: the outcome of minimizing one objective.

Notes
-----
- The iteration trace is returned explicitly (no optimizer-side history
  state), so fits are independently reproducible and can run in parallel.
- `nll` is the objective value at `params`, which is also `trace[-1]`
  whenever at least one finite evaluation happened.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

import numpy as np


@dataclass(frozen=True)
class FitResult:
    """
    Result of one constrained fit.

    Attributes
    ----------
    params : np.ndarray
        Final (last finite) parameter vector.
    nll : float
        Objective value at params (nan if no finite evaluation happened).
    trace : tuple[float, ...]
        Objective value at the start point and at every accepted iterate.
    success : bool
        True when a convergence criterion was met.
    message : str
        Human-readable termination reason.
    n_iter : int
        Number of optimizer iterations.
    n_fev : int
        Number of objective evaluations.
    param_names : tuple[str, ...]
        Parameter names (empty when the optimizer ran on a bare objective).
    model_name : str | None
        Name of the fitted model, filled in by the comparator.
    """

    params: np.ndarray
    nll: float
    trace: tuple[float, ...] = ()
    success: bool = False
    message: str = ""
    n_iter: int = 0
    n_fev: int = 0
    param_names: tuple[str, ...] = ()
    model_name: str | None = None
    constraint_violation: float = 0.0

    def __post_init__(self):
        params = np.array(self.params, dtype=float)
        params.setflags(write=False)
        object.__setattr__(self, "params", params)
        object.__setattr__(self, "trace", tuple(float(v) for v in self.trace))
        object.__setattr__(self, "nll", float(self.nll))

    @property
    def n_params(self) -> int:
        """Number of fitted parameters."""
        return int(self.params.size)

    @property
    def final_nll(self) -> float:
        """Last value of the trace (nan for an empty trace)."""
        return self.trace[-1] if self.trace else math.nan

    def as_dict(self) -> dict[str, float]:
        """Parameters keyed by name (x0, x1, ... when names are unknown)."""
        names = self.param_names or tuple(f"x{i}" for i in range(self.n_params))
        return {n: float(v) for n, v in zip(names, self.params)}

    def with_model(self, model_name: str, param_names: tuple[str, ...]) -> FitResult:
        """Return a copy labelled with a model and its parameter names."""
        return replace(self, model_name=model_name, param_names=tuple(param_names))
