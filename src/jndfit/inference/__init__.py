"""
inference
=========

Optimizers that fit parameter vectors under box constraints.

This subpackage provides different strategies for minimizing a
negative log-likelihood and returning FitResult objects.

Implementations
---------------
- SQPOptimizer : quasi-Newton SQP with an exact box-constrained QP
  subproblem and an augmented Lagrangian loop for general constraints
  (default).
- SLSQPOptimizer : SciPy's SLSQP, for cross-checking.
- ProjectedGradientOptimizer : Optax gradient steps projected onto the box.
"""

from .base import Optimizer
from .constraints import Bounds, NonlinearConstraint
from .projected import ProjectedGradientOptimizer
from .qp import solve_box_qp
from .result import FitResult
from .slsqp import SLSQPOptimizer
from .sqp import SQPOptimizer

# Registry for string-based optimizer selection
OPTIMIZERS = {
    "sqp": SQPOptimizer,
    "slsqp": SLSQPOptimizer,
    "projected": ProjectedGradientOptimizer,
}

__all__ = [
    "Optimizer",
    "Bounds",
    "NonlinearConstraint",
    "FitResult",
    "SQPOptimizer",
    "SLSQPOptimizer",
    "ProjectedGradientOptimizer",
    "solve_box_qp",
    "OPTIMIZERS",
]
