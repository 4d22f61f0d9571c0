"""
test_recovery.py
----------------

Parameter recovery: fitting a model to low-noise data generated by the
same model returns the generating parameters.

Datasets use expected counts (round(p * n) correct trials per ratio), so
the only deviation from the model is rounding.
"""

import jax.random as jr
import numpy as np
import pytest

from jndfit.comparison import compare_models, fit
from jndfit.model import MODELS, negative_log_likelihood
from jndfit.utils import expected_count_trials, simulate_trials


def _assert_recovered(result, truth, rtol=0.05):
    assert result.success, result.message
    np.testing.assert_allclose(result.params, truth, rtol=rtol)


class TestRecovery:
    def test_no_jnd(self, no_jnd_data, no_jnd_truth):
        result = fit("NoJND", no_jnd_data)
        _assert_recovered(result, no_jnd_truth)
        # at least as good as the generating parameters
        true_nll = float(negative_log_likelihood(MODELS["NoJND"], no_jnd_truth, no_jnd_data))
        assert result.nll <= true_nll + 1e-6

    def test_common_jnd(self):
        truth = np.array([1.4, 4.0, 0.1])
        data = expected_count_trials(
            "CommonJND", truth, np.linspace(0.5, 3.0, 40), n_per_ratio=2000
        )
        result = fit("CommonJND", data)
        _assert_recovered(result, truth)

    def test_intuitive_jnd(self):
        truth = np.array([0.25, 0.1, 0.32])
        data = expected_count_trials(
            "IntuitiveJND", truth, np.linspace(1.0, 3.0, 41), n_per_ratio=2000
        )
        result = fit("IntuitiveJND", data, init_params=[0.22, 0.12, 0.28])
        assert MODELS["IntuitiveJND"].bounds.contains(result.params)
        np.testing.assert_allclose(result.params, truth, rtol=0.05)

    def test_nll_near_theoretical_minimum(self, no_jnd_data):
        """Best achievable NLL is the entropy of the observed proportions."""
        result = fit("NoJND", no_jnd_data)
        ratios, outcomes = no_jnd_data.to_numpy()
        entropy = 0.0
        for r in np.unique(ratios):
            y = outcomes[ratios == r]
            q = y.mean()
            if 0.0 < q < 1.0:
                entropy -= y.size * (q * np.log(q) + (1 - q) * np.log(1 - q))
        assert result.nll >= entropy - 1e-6
        assert result.nll <= entropy * (1 + 1e-3)


class TestSelection:
    def test_generating_model_wins_on_large_sample(self):
        """CommonJND data over a wide ratio range is best explained by CommonJND."""
        ratios = np.tile(np.linspace(0.4, 3.0, 27), 150)
        data = simulate_trials("CommonJND", [1.2, 6.0, 0.05], ratios, key=jr.PRNGKey(3))
        report = compare_models(data)
        assert report.best == "CommonJND"

    @pytest.mark.parametrize("n_jobs", [1, 3])
    def test_reproducible(self, no_jnd_data, n_jobs):
        a = compare_models(no_jnd_data, n_jobs=n_jobs)
        b = compare_models(no_jnd_data, n_jobs=n_jobs)
        for name in a:
            np.testing.assert_array_equal(a[name].fit.params, b[name].fit.params)
            assert a[name].fit.trace == b[name].fit.trace


class TestSimulation:
    def test_int_seed_matches_key(self):
        from jndfit.utils import seed

        ratios = np.tile(np.linspace(1.0, 2.5, 6), 10)
        a = simulate_trials("NoJND", [0.3, 0.1], ratios, key=3)
        b = simulate_trials("NoJND", [0.3, 0.1], ratios, key=seed(3))
        np.testing.assert_array_equal(a.outcomes, b.outcomes)

    def test_split_keys_give_independent_sessions(self):
        from jndfit.utils import seed, split

        k1, k2 = split(seed(0))
        ratios = np.tile(np.linspace(1.0, 2.5, 6), 50)
        a = simulate_trials("NoJND", [0.3, 0.1], ratios, key=k1)
        b = simulate_trials("NoJND", [0.3, 0.1], ratios, key=k2)
        assert not np.array_equal(a.outcomes, b.outcomes)
