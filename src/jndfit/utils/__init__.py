"""
utils
=====

Shared utility functions and helpers for jndfit.

This subpackage provides:
- rng : random number handling for reproducibility.
- simulate : synthetic datasets from a model with known parameters.
"""

from .rng import seed, split
from .simulate import expected_count_trials, simulate_trials

__all__ = [
    # rng
    "seed",
    "split",
    # simulate
    "simulate_trials",
    "expected_count_trials",
]
