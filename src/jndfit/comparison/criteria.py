"""
criteria.py
-----------

Information criteria for comparing fitted models.

    BIC = 2 * NLL + k * ln(n)
    AIC = 2 * NLL + 2 * k

Lower is better for both.
"""

from __future__ import annotations

import math


def bic(nll: float, n_params: int, n_trials: int) -> float:
    """
    Bayesian Information Criterion.

    Parameters
    ----------
    nll : float
        Final negative log-likelihood.
    n_params : int
        Number of free parameters (k).
    n_trials : int
        Number of trials (n), must be positive.

    Examples
    --------
    >>> round(bic(50.0, 2, 200), 2)
    110.6
    """
    if n_trials <= 0:
        raise ValueError(f"n_trials must be positive, got {n_trials}")
    return 2.0 * float(nll) + n_params * math.log(n_trials)


def aic(nll: float, n_params: int) -> float:
    """Akaike Information Criterion."""
    return 2.0 * float(nll) + 2.0 * n_params
