"""
Central pytest configuration for this project.

This file is automatically discovered by pytest and is intended for:

- **Fixtures**: reusable objects or setup logic shared across multiple test files.
- **Pytest hooks**: project-wide customizations of pytest behavior.

Notes
-----
- Contributors should install the package in editable mode
  (`pip install -e .[test]`) so that imports are resolved consistently in
  local dev and CI environments.
- Keep this file focused on test setup. Do not add application logic here.
"""

import jax.random as jr
import numpy as np
import pytest

import jndfit  # noqa: F401  (enables 64-bit JAX before any array is built)
from jndfit.data import TrialData
from jndfit.utils import expected_count_trials, simulate_trials


@pytest.fixture
def ratio_grid():
    """Evenly spaced ratios above 1 (where accuracy should rise)."""
    return np.linspace(1.0, 3.0, 21)


@pytest.fixture
def no_jnd_truth():
    """Generating parameters (w, g) for NoJND recovery tests."""
    return np.array([0.25, 0.2])


@pytest.fixture
def no_jnd_data(no_jnd_truth):
    """Low-noise NoJND dataset (expected counts, 2000 trials per ratio)."""
    return expected_count_trials(
        "NoJND", no_jnd_truth, np.linspace(1.05, 3.0, 40), n_per_ratio=2000
    )


@pytest.fixture
def noisy_data():
    """A modest Bernoulli dataset drawn from CommonJND."""
    ratios = np.tile(np.linspace(0.6, 2.8, 12), 25)
    return simulate_trials("CommonJND", [1.3, 3.0, 0.15], ratios, key=jr.PRNGKey(7))


@pytest.fixture
def tiny_data():
    """Two trials: enough for NoJND, too few for the 3-parameter models."""
    return TrialData([1.2, 2.0], [0, 1])
