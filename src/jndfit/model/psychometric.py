"""
psychometric.py
---------------

Probability models for ratio discrimination.

Each model maps a parameter vector and stimulus ratio(s) r to the
probability of a correct response. Three variants:

- NoJND:
    p = Phi((r - 1) / (w * sqrt(1 + r^2)))
- IntuitiveJND (ratios within the JND are at chance):
    p = Phi(((r - jnd) - 1) / (w * sqrt(1 + (r - jnd)^2)))   if r > 1 + jnd
    p = 0.5                                                  otherwise
- CommonJND (Weibull):
    p = 1 - 0.5 * exp(-(r / alpha)^beta)

Every model is then blended with a guess rate g:
    p_final = (1 - g) * p + g / 2

Notes
-----
- All functions use jax.numpy so the likelihood is differentiable.
- The scale parameters (w, alpha) are floored at MIN_SCALE: their lower
  bound 0 is reachable by the optimizer and must not produce NaN/Inf.
- The Weibull exponent (r / alpha)^beta is capped at exp(MAX_EXPONENT).
- g is not clipped to [0, 1]; the blended value may leave [0, 1] when
  g > 1 and the likelihood clamps it.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax.scipy.stats import norm

MIN_SCALE = 1e-6
# exp(50) ~ 5e21: exp(-exp(50)) is already 0 in float64
MAX_EXPONENT = 50.0


def guess_blend(p: jnp.ndarray, g: jnp.ndarray | float) -> jnp.ndarray:
    """Blend a psychometric value with chance responding at guess rate g."""
    return (1.0 - g) * p + 0.5 * g


def _ratio_discriminability(r: jnp.ndarray, w: jnp.ndarray | float) -> jnp.ndarray:
    w = jnp.maximum(w, MIN_SCALE)
    return (r - 1.0) / (w * jnp.sqrt(1.0 + r**2))


def no_jnd_psychometric(w, r) -> jnp.ndarray:
    """
    Un-blended NoJND psychometric function.

    Parameters
    ----------
    w : float
        Weber-fraction-like discriminability parameter.
    r : jnp.ndarray
        Stimulus ratio(s).

    Returns
    -------
    jnp.ndarray
        Phi((r - 1) / (w * sqrt(1 + r^2)))
    """
    r = jnp.asarray(r)
    return norm.cdf(_ratio_discriminability(r, w))


def intuitive_jnd_psychometric(w, jnd, r) -> jnp.ndarray:
    """
    Un-blended IntuitiveJND psychometric function.

    Ratios at or below 1 + jnd give exactly 0.5; above it the NoJND curve
    is evaluated at the JND-shifted ratio r - jnd.
    """
    r = jnp.asarray(r)
    shifted = r - jnd
    above = norm.cdf(_ratio_discriminability(shifted, w))
    return jnp.where(r > 1.0 + jnd, above, 0.5)


def common_jnd_psychometric(alpha, beta, r) -> jnp.ndarray:
    """
    Un-blended CommonJND (Weibull) psychometric function.

    p = 1 - 0.5 * exp(-(r / alpha)^beta)
    """
    r = jnp.asarray(r)
    alpha = jnp.maximum(alpha, MIN_SCALE)
    # (r / alpha)^beta in log space, capped so exp() and its gradient stay finite
    log_power = jnp.minimum(beta * jnp.log(r / alpha), MAX_EXPONENT)
    return 1.0 - 0.5 * jnp.exp(-jnp.exp(log_power))


# ----------------------------------------------------------------------
# Blended probability functions: (params, ratios) -> p
# ----------------------------------------------------------------------


def no_jnd(params: jnp.ndarray, r: jnp.ndarray) -> jnp.ndarray:
    """NoJND probability of a correct response. params = (w, g)."""
    w, g = params[0], params[1]
    return guess_blend(no_jnd_psychometric(w, r), g)


def intuitive_jnd(params: jnp.ndarray, r: jnp.ndarray) -> jnp.ndarray:
    """IntuitiveJND probability of a correct response. params = (w, g, jnd)."""
    w, g, jnd = params[0], params[1], params[2]
    return guess_blend(intuitive_jnd_psychometric(w, jnd, r), g)


def common_jnd(params: jnp.ndarray, r: jnp.ndarray) -> jnp.ndarray:
    """CommonJND probability of a correct response. params = (alpha, beta, g)."""
    alpha, beta, g = params[0], params[1], params[2]
    return guess_blend(common_jnd_psychometric(alpha, beta, r), g)
