"""
test_likelihood.py
------------------

Tests for the Bernoulli negative log-likelihood.
"""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from jndfit.data import TrialData
from jndfit.model import (
    MODELS,
    NO_JND,
    bernoulli_nll,
    make_objective,
    make_value_and_grad,
    negative_log_likelihood,
)


class TestBernoulliNLL:
    def test_matches_manual_computation(self):
        p = jnp.array([0.9, 0.2, 0.6])
        y = jnp.array([1.0, 0.0, 0.0])
        expected = -(np.log(0.9) + np.log(0.8) + np.log(0.4))
        assert float(bernoulli_nll(p, y)) == pytest.approx(expected)

    @pytest.mark.parametrize("seed", range(5))
    def test_non_negative(self, seed):
        rng = np.random.default_rng(seed)
        p = jnp.asarray(rng.uniform(0.0, 1.0, size=50))
        y = jnp.asarray(rng.integers(0, 2, size=50), dtype=float)
        assert float(bernoulli_nll(p, y)) >= 0.0

    def test_clamps_certain_predictions(self):
        """p = 0 / 1 / outside [0, 1] stays finite thanks to the clamp."""
        p = jnp.array([0.0, 1.0, -0.5, 1.5])
        y = jnp.array([1.0, 0.0, 1.0, 0.0])
        value = float(bernoulli_nll(p, y, eps=1e-9))
        assert np.isfinite(value)
        assert value == pytest.approx(-4 * np.log(1e-9), rel=1e-6)


class TestNegativeLogLikelihood:
    def test_does_not_mutate_data(self, noisy_data):
        ratios, outcomes = noisy_data.to_numpy()
        before = (ratios.copy(), outcomes.copy())
        negative_log_likelihood(MODELS["CommonJND"], [1.3, 3.0, 0.15], noisy_data)
        np.testing.assert_array_equal(noisy_data.ratios, before[0])
        np.testing.assert_array_equal(noisy_data.outcomes, before[1])

    def test_deterministic(self, noisy_data):
        spec = MODELS["IntuitiveJND"]
        a = negative_log_likelihood(spec, [0.3, 0.1, 0.2], noisy_data)
        b = negative_log_likelihood(spec, [0.3, 0.1, 0.2], noisy_data)
        assert float(a) == float(b)

    def test_objective_matches_direct_evaluation(self, noisy_data):
        spec = MODELS["NoJND"]
        objective = make_objective(spec, noisy_data)
        theta = jnp.array([0.4, 0.05])
        assert float(objective(theta)) == pytest.approx(
            float(negative_log_likelihood(spec, theta, noisy_data))
        )

    def test_value_and_grad_matches_finite_differences(self, noisy_data):
        spec = MODELS["CommonJND"]
        vg = make_value_and_grad(spec, noisy_data)
        objective = make_objective(spec, noisy_data)
        theta = jnp.array([1.2, 2.5, 0.2])
        _, grad = vg(theta)
        h = 1e-6
        fd = [
            (objective(theta.at[i].add(h)) - objective(theta.at[i].add(-h))) / (2 * h)
            for i in range(3)
        ]
        np.testing.assert_allclose(np.asarray(grad), np.asarray(fd), rtol=1e-4, atol=1e-4)

    def test_chance_model_nll(self):
        """With g = 1 every prediction is 0.5: NLL = n log 2."""
        data = TrialData([1.1, 1.5, 2.0, 2.5], [1, 0, 1, 1])
        value = float(negative_log_likelihood(NO_JND, [0.3, 1.0], data))
        assert value == pytest.approx(4 * np.log(2.0))

    @pytest.mark.parametrize("name", list(MODELS))
    def test_finite_at_corners_of_the_box(self, name, noisy_data):
        spec = MODELS[name]
        objective = make_objective(spec, noisy_data)
        for theta in (spec.bounds.lower, spec.bounds.upper):
            value = objective(jnp.asarray(theta))
            grad = jax.grad(objective)(jnp.asarray(theta))
            assert np.isfinite(float(value))
            assert np.all(np.isfinite(np.asarray(grad)))
