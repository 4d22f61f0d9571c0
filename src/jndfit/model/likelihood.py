"""
likelihood.py
-------------

Bernoulli negative log-likelihood of binary outcomes under a ModelSpec.

    NLL(theta) = -sum_i [ y_i log p_i + (1 - y_i) log(1 - p_i) ]

with p_i = spec.probability(theta, r_i) clamped into [eps, 1 - eps] so that
predictions at (or beyond) 0 and 1 never produce -Inf/NaN. The optimizer
relies on this clamp near boundary-fitting parameter regions.

Connections
-----------
- make_objective / make_value_and_grad close over a spec and a TrialData
  and return jitted functions of the parameter vector alone; these are
  what the optimizers minimize.
"""

from __future__ import annotations

from typing import Callable

import jax
import jax.numpy as jnp

from jndfit.data.dataset import TrialData
from jndfit.model.spec import ModelSpec

DEFAULT_EPS = 1e-9


def bernoulli_nll(
    p: jnp.ndarray, outcomes: jnp.ndarray, eps: float = DEFAULT_EPS
) -> jnp.ndarray:
    """
    Negative log-likelihood of binary outcomes given probabilities.

    Parameters
    ----------
    p : jnp.ndarray
        Predicted probabilities of outcome 1 (clamped internally).
    outcomes : jnp.ndarray
        Observed 0/1 outcomes.
    eps : float
        Clamp width.

    Returns
    -------
    jnp.ndarray
        Scalar NLL (>= 0).
    """
    p = jnp.clip(p, eps, 1.0 - eps)
    return -jnp.sum(outcomes * jnp.log(p) + (1.0 - outcomes) * jnp.log1p(-p))


def negative_log_likelihood(
    spec: ModelSpec, params, data: TrialData, eps: float = DEFAULT_EPS
) -> jnp.ndarray:
    """
    NLL of a dataset under one model at parameters `params`.

    Parameters
    ----------
    spec : ModelSpec
    params : array-like, shape (spec.n_params,)
    data : TrialData
        Not modified.
    eps : float, default=1e-9

    Returns
    -------
    jnp.ndarray
        Scalar NLL.
    """
    ratios, outcomes = data.to_jax()
    p = spec.probability(jnp.asarray(params, dtype=float), ratios)
    return bernoulli_nll(p, outcomes, eps)


def make_objective(
    spec: ModelSpec, data: TrialData, eps: float = DEFAULT_EPS
) -> Callable[[jnp.ndarray], jnp.ndarray]:
    """Return a jitted function params -> NLL for a fixed spec and dataset."""
    ratios, outcomes = data.to_jax()

    def objective(params):
        return bernoulli_nll(spec.probability(params, ratios), outcomes, eps)

    return jax.jit(objective)


def make_value_and_grad(
    spec: ModelSpec, data: TrialData, eps: float = DEFAULT_EPS
) -> Callable[[jnp.ndarray], tuple[jnp.ndarray, jnp.ndarray]]:
    """Return a jitted function params -> (NLL, dNLL/dparams)."""
    ratios, outcomes = data.to_jax()

    def objective(params):
        return bernoulli_nll(spec.probability(params, ratios), outcomes, eps)

    return jax.jit(jax.value_and_grad(objective))
