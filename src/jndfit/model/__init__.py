"""
jndfit.model
============

Model-layer API: everything model-related in one place.

Includes
--------
- Probability functions (no_jnd, intuitive_jnd, common_jnd) and their
  un-blended psychometric curves
- ModelSpec and the MODELS registry
- Likelihood (negative_log_likelihood, make_objective)

All functions use JAX arrays (jax.numpy as jnp) for autodiff.

Typical usage
-------------
    from jndfit.model import MODELS, get_model_spec, negative_log_likelihood
"""

from .likelihood import (
    bernoulli_nll,
    make_objective,
    make_value_and_grad,
    negative_log_likelihood,
)
from .psychometric import (
    common_jnd,
    common_jnd_psychometric,
    guess_blend,
    intuitive_jnd,
    intuitive_jnd_psychometric,
    no_jnd,
    no_jnd_psychometric,
)
from .spec import (
    COMMON_JND,
    INTUITIVE_JND,
    MODEL_NAMES,
    MODELS,
    NO_JND,
    ModelName,
    ModelSpec,
    get_model_spec,
)

__all__ = [
    # Specs
    "ModelSpec",
    "ModelName",
    "MODELS",
    "MODEL_NAMES",
    "NO_JND",
    "INTUITIVE_JND",
    "COMMON_JND",
    "get_model_spec",
    # Probability functions
    "no_jnd",
    "intuitive_jnd",
    "common_jnd",
    "no_jnd_psychometric",
    "intuitive_jnd_psychometric",
    "common_jnd_psychometric",
    "guess_blend",
    # Likelihood
    "bernoulli_nll",
    "negative_log_likelihood",
    "make_objective",
    "make_value_and_grad",
]
