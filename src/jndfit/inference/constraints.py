"""
constraints.py
--------------

Constraint records consumed by the optimizers.

- Bounds: element-wise box lb <= x <= ub.
- NonlinearConstraint: general constraint fun(x) >= 0 ("ineq") or
  fun(x) == 0 ("eq"), handled by the augmented Lagrangian loop of
  SQPOptimizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal, Sequence

import jax.numpy as jnp
import numpy as np

from jndfit.errors import InvalidParameterError


@dataclass(frozen=True)
class Bounds:
    """
    Box constraints lb <= x <= ub.

    Parameters
    ----------
    lower, upper : sequence of float
        Element-wise bounds, same length, finite, lower <= upper.

    Raises
    ------
    InvalidParameterError
        If the bounds are malformed.
    """

    lower: np.ndarray
    upper: np.ndarray

    def __init__(self, lower: Sequence[float], upper: Sequence[float]):
        lb = np.array(lower, dtype=float)
        ub = np.array(upper, dtype=float)
        if lb.ndim != 1 or ub.ndim != 1:
            raise InvalidParameterError("bounds must be 1-D vectors")
        if lb.shape != ub.shape:
            raise InvalidParameterError(
                f"lower and upper bounds differ in length: {lb.size} vs {ub.size}"
            )
        if not (np.all(np.isfinite(lb)) and np.all(np.isfinite(ub))):
            raise InvalidParameterError("bounds must be finite")
        bad = np.flatnonzero(lb > ub)
        if bad.size:
            raise InvalidParameterError(
                f"lower bound exceeds upper bound in dimension(s) {bad.tolist()}"
            )
        lb.setflags(write=False)
        ub.setflags(write=False)
        object.__setattr__(self, "lower", lb)
        object.__setattr__(self, "upper", ub)

    @property
    def size(self) -> int:
        """Number of bounded dimensions."""
        return int(self.lower.size)

    def contains(self, x) -> bool:
        """True if x lies inside the box (inclusive)."""
        x = np.asarray(x, dtype=float)
        return bool(
            x.shape == self.lower.shape
            and np.all(x >= self.lower)
            and np.all(x <= self.upper)
        )

    def clip(self, x) -> np.ndarray:
        """Project x onto the box."""
        return np.clip(np.asarray(x, dtype=float), self.lower, self.upper)

    def check_point(self, x, name: str = "initial guess") -> np.ndarray:
        """
        Validate that x is a finite point inside the box and return it as
        a float array.

        Raises
        ------
        InvalidParameterError
            If x has the wrong length, is non-finite or lies outside.
        """
        x = np.array(x, dtype=float)
        if x.shape != self.lower.shape:
            raise InvalidParameterError(
                f"{name} has length {x.size}, bounds have length {self.size}"
            )
        if not np.all(np.isfinite(x)):
            raise InvalidParameterError(f"{name} must be finite, got {x.tolist()}")
        outside = np.flatnonzero((x < self.lower) | (x > self.upper))
        if outside.size:
            raise InvalidParameterError(
                f"{name} {x.tolist()} lies outside bounds in dimension(s) "
                f"{outside.tolist()}"
            )
        return x

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return bool(
            np.array_equal(self.lower, other.lower)
            and np.array_equal(self.upper, other.upper)
        )

    def __hash__(self) -> int:
        return hash((tuple(self.lower.tolist()), tuple(self.upper.tolist())))


@dataclass(frozen=True)
class NonlinearConstraint:
    """
    General constraint on the parameter vector.

    Attributes
    ----------
    fun : Callable[[jnp.ndarray], jnp.ndarray]
        JAX-traceable function returning a scalar or 1-D array.
    kind : {"ineq", "eq"}
        "ineq" means fun(x) >= 0, "eq" means fun(x) == 0.
    name : str
        Label used when the optimizer reports this constraint as violated.

    Examples
    --------
    >>> # w + g <= 1
    >>> c = NonlinearConstraint(lambda x: 1.0 - x[0] - x[1], kind="ineq")
    """

    fun: Callable[[jnp.ndarray], jnp.ndarray]
    kind: Literal["ineq", "eq"] = "ineq"
    name: str = field(default="", compare=False)

    def __post_init__(self):
        if self.kind not in ("ineq", "eq"):
            raise ValueError(f"kind must be 'ineq' or 'eq', got {self.kind!r}")

    def __call__(self, x: jnp.ndarray) -> jnp.ndarray:
        return jnp.atleast_1d(self.fun(x))

    def violation(self, x) -> float:
        """Largest violation of this constraint at x (0 when satisfied)."""
        c = np.asarray(self(jnp.asarray(x, dtype=float)), dtype=float)
        if self.kind == "eq":
            return float(np.max(np.abs(c))) if c.size else 0.0
        return float(np.max(np.maximum(-c, 0.0))) if c.size else 0.0

    @property
    def label(self) -> str:
        return self.name or f"{self.kind} constraint"


def most_violated(
    constraints: Sequence[NonlinearConstraint], x
) -> tuple[NonlinearConstraint | None, float]:
    """Constraint with the largest violation at x and that violation."""
    worst, amount = None, 0.0
    for c in constraints:
        v = c.violation(x)
        if v > amount:
            worst, amount = c, v
    return worst, amount
