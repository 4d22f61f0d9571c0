"""
spec.py
-------

Model specifications: the closed set of ratio-discrimination models.

Each ModelSpec bundles, as immutable data:
- the probability function (params, ratios) -> p
- parameter names (their count is the model's k in BIC)
- box bounds
- the initial guess used to start optimization

The three models are a tagged variant: MODELS maps a model name to its
spec, and everything downstream (likelihood, optimizer, comparator) is
generic over that spec. There is no subclassing.

Notes
-----
The guess rate g keeps the box [0, 3] even though it is nominally a
probability. Fits may therefore report g > 1.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Literal, Mapping

import jax.numpy as jnp
import numpy as np

from jndfit.errors import InvalidModelError, InvalidParameterError
from jndfit.inference.constraints import Bounds
from jndfit.model import psychometric

ModelName = Literal["NoJND", "IntuitiveJND", "CommonJND"]

ProbabilityFn = Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]


@dataclass(frozen=True)
class ModelSpec:
    """
    Immutable description of one probability model.

    Attributes
    ----------
    name : str
        Model name (key in MODELS).
    probability : Callable
        (params, ratios) -> predicted probability of a correct response.
    param_names : tuple[str, ...]
        Names of the free parameters, in parameter-vector order.
    bounds : Bounds
        Box constraints, one entry per parameter.
    initial_guess : np.ndarray
        Starting point for optimization; must lie within bounds.

    Raises
    ------
    InvalidParameterError
        If bounds or initial guess do not match param_names, or the
        initial guess lies outside the bounds.
    """

    name: str
    probability: ProbabilityFn = field(compare=False)
    param_names: tuple[str, ...]
    bounds: Bounds
    initial_guess: np.ndarray = field(compare=False)

    def __post_init__(self):
        k = len(self.param_names)
        if self.bounds.size != k:
            raise InvalidParameterError(
                f"{self.name}: {k} parameters but bounds of length {self.bounds.size}"
            )
        x0 = self.bounds.check_point(
            self.initial_guess, name=f"{self.name} initial guess"
        )
        x0.setflags(write=False)
        object.__setattr__(self, "initial_guess", x0)

    @property
    def n_params(self) -> int:
        """Number of free parameters (k)."""
        return len(self.param_names)

    def predict(self, params, ratios) -> jnp.ndarray:
        """Predicted probability of a correct response at each ratio."""
        return self.probability(jnp.asarray(params, dtype=float), jnp.asarray(ratios))

    def named(self, params) -> dict[str, float]:
        """Map a parameter vector to {name: value}."""
        params = np.asarray(params, dtype=float)
        return {n: float(v) for n, v in zip(self.param_names, params)}

    def with_initial_guess(self, initial_guess) -> ModelSpec:
        """Return a copy of this spec starting from a different point."""
        return ModelSpec(
            name=self.name,
            probability=self.probability,
            param_names=self.param_names,
            bounds=self.bounds,
            initial_guess=np.asarray(initial_guess, dtype=float),
        )


NO_JND = ModelSpec(
    name="NoJND",
    probability=psychometric.no_jnd,
    param_names=("w", "g"),
    bounds=Bounds([0.0, 0.0], [3.0, 3.0]),
    initial_guess=np.array([0.2, 0.1]),
)

INTUITIVE_JND = ModelSpec(
    name="IntuitiveJND",
    probability=psychometric.intuitive_jnd,
    param_names=("w", "g", "jnd"),
    bounds=Bounds([0.0, 0.0, 0.0], [3.0, 3.0, 3.0]),
    initial_guess=np.array([0.2, 0.1, 0.05]),
)

COMMON_JND = ModelSpec(
    name="CommonJND",
    probability=psychometric.common_jnd,
    param_names=("alpha", "beta", "g"),
    bounds=Bounds([0.0, 0.0, 0.0], [3.0, 40.0, 3.0]),
    initial_guess=np.array([1.0, 2.0, 0.1]),
)

# Registry for string-based model selection (read-only)
MODELS: Mapping[str, ModelSpec] = MappingProxyType(
    {spec.name: spec for spec in (NO_JND, INTUITIVE_JND, COMMON_JND)}
)

MODEL_NAMES: tuple[str, ...] = tuple(MODELS)


def get_model_spec(name: str | ModelSpec) -> ModelSpec:
    """
    Look up a model specification by name.

    Parameters
    ----------
    name : str or ModelSpec
        One of MODEL_NAMES. A ModelSpec is returned unchanged.

    Returns
    -------
    ModelSpec

    Raises
    ------
    InvalidModelError
        If the name is not a known model.
    """
    if isinstance(name, ModelSpec):
        return name
    try:
        return MODELS[name]
    except (KeyError, TypeError):
        raise InvalidModelError(
            f"unknown model {name!r}; expected one of {list(MODEL_NAMES)}"
        ) from None
