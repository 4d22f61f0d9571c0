"""
errors.py
---------

Exception and warning types raised by jndfit.

Policy
------
- Malformed input (bounds, initial guesses, data shape, model names)
  fails fast with an exception before any optimization starts.
- Transient numerical problems during optimization are recovered inside
  the optimizer (NonFiniteObjectiveError never escapes it).
- Convergence problems are reported as data (FitResult.success) and, at
  the comparison level, as a ConvergenceFailure warning.
"""

from __future__ import annotations


class JndFitError(Exception):
    """Base class for all jndfit errors."""


class InvalidModelError(JndFitError, KeyError):
    """Requested model name is not one of the known model kinds."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class InvalidParameterError(JndFitError, ValueError):
    """Bounds are malformed or an initial guess lies outside them."""


class InsufficientDataError(JndFitError, ValueError):
    """Dataset has fewer trials than the model has free parameters."""


class NonFiniteObjectiveError(JndFitError, FloatingPointError):
    """Objective (or its gradient) evaluated to NaN or Inf."""


class ConvergenceFailure(RuntimeWarning):
    """Warning category for fits that stopped without converging."""


__all__ = [
    "JndFitError",
    "InvalidModelError",
    "InvalidParameterError",
    "InsufficientDataError",
    "NonFiniteObjectiveError",
    "ConvergenceFailure",
]
