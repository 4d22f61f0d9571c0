"""
simulate.py
-----------

Synthetic trial data generated from a model with known parameters.

- simulate_trials : Bernoulli outcomes drawn with jax.random.
- expected_count_trials : deterministic "low-noise" data whose correct
  count at each ratio is round(p * n_per_ratio); fitting it recovers the
  generating parameters up to rounding.

Examples
--------
>>> import jax.random as jr
>>> data = simulate_trials("NoJND", [0.3, 0.1], [1.1, 1.5, 2.0] * 50,
...                        key=jr.PRNGKey(0))
>>> len(data)
150
"""

from __future__ import annotations

from typing import Any, Sequence

import jax.numpy as jnp
import jax.random as jr
import numpy as np

from jndfit.data.dataset import TrialData
from jndfit.model.spec import ModelSpec, get_model_spec
from jndfit.utils.rng import seed


def _probabilities(spec: ModelSpec, params, ratios) -> np.ndarray:
    p = np.asarray(spec.predict(params, ratios), dtype=float)
    # g > 1 can push the blend outside [0, 1]
    return np.clip(p, 0.0, 1.0)


def simulate_trials(
    model: str | ModelSpec,
    params: Sequence[float],
    ratios: Sequence[float],
    *,
    key: Any,
) -> TrialData:
    """
    Draw one Bernoulli outcome per ratio from a model.

    Parameters
    ----------
    model : str or ModelSpec
    params : sequence of float
        Generating parameters (in the model's parameter order).
    ratios : sequence of float
        Stimulus ratio of every trial.
    key : jax.random.PRNGKey or int
        An int is turned into a key with utils.rng.seed.

    Returns
    -------
    TrialData
    """
    spec = get_model_spec(model)
    ratios = np.asarray(ratios, dtype=float)
    p = _probabilities(spec, params, ratios)
    if isinstance(key, int):
        key = seed(key)
    outcomes = jr.bernoulli(key, jnp.asarray(p))
    return TrialData(ratios, np.asarray(outcomes, dtype=int))


def expected_count_trials(
    model: str | ModelSpec,
    params: Sequence[float],
    ratios: Sequence[float],
    n_per_ratio: int,
) -> TrialData:
    """
    Deterministic dataset matching the model's expected accuracy.

    For each ratio, round(p * n_per_ratio) trials are correct and the rest
    incorrect.

    Parameters
    ----------
    model : str or ModelSpec
    params : sequence of float
    ratios : sequence of float
        Distinct ratios to present.
    n_per_ratio : int
        Trials per ratio.

    Returns
    -------
    TrialData
        len == len(ratios) * n_per_ratio, grouped by ratio.
    """
    if n_per_ratio <= 0:
        raise ValueError(f"n_per_ratio must be positive, got {n_per_ratio}")
    spec = get_model_spec(model)
    ratios = np.asarray(ratios, dtype=float)
    n_correct = np.rint(_probabilities(spec, params, ratios) * n_per_ratio).astype(int)

    all_ratios = np.repeat(ratios, n_per_ratio)
    outcomes = np.zeros(all_ratios.size, dtype=int)
    for i, k in enumerate(n_correct):
        start = i * n_per_ratio
        outcomes[start : start + k] = 1
    return TrialData(all_ratios, outcomes)
