"""
config.py
---------

Immutable configuration for a single model fit.

A FitConfig is passed explicitly into every fit (and shared between
parallel fits), so it is frozen and validated on construction.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FitConfig:
    """
    Optimizer settings for one fit.

    Attributes
    ----------
    max_iter : int
        Maximum number of SQP iterations (per augmented Lagrangian round
        when general constraints are present).
    ftol : float
        Relative tolerance on the change of the objective between iterates.
    xtol : float
        Relative tolerance on the step length (infinity norm).
    gtol : float
        Tolerance on the projected gradient (infinity norm).
    max_time : float | None
        Wall-clock budget in seconds for one fit. None disables it.
    prob_eps : float
        Predicted probabilities are clamped into [prob_eps, 1 - prob_eps]
        before taking logs.
    max_line_search : int
        Maximum number of backtracking halvings per line search.
    max_outer_iter : int
        Maximum augmented Lagrangian rounds (only used with constraints).
    ctol : float
        Feasibility tolerance for general constraints.

    Examples
    --------
    >>> config = FitConfig(max_iter=500, max_time=10.0)
    """

    max_iter: int = 200
    ftol: float = 1e-10
    xtol: float = 1e-8
    gtol: float = 1e-6
    max_time: float | None = None
    prob_eps: float = 1e-9
    max_line_search: int = 40
    max_outer_iter: int = 20
    ctol: float = 1e-6

    def __post_init__(self):
        """Validate configuration."""
        if self.max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")
        if self.max_line_search <= 0:
            raise ValueError(
                f"max_line_search must be positive, got {self.max_line_search}"
            )
        if self.max_outer_iter <= 0:
            raise ValueError(
                f"max_outer_iter must be positive, got {self.max_outer_iter}"
            )
        for name in ("ftol", "xtol", "gtol", "ctol"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if not 0.0 < self.prob_eps < 0.5:
            raise ValueError(f"prob_eps must lie in (0, 0.5), got {self.prob_eps}")
        if self.max_time is not None and self.max_time <= 0:
            raise ValueError(f"max_time must be positive, got {self.max_time}")
