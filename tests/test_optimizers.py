"""
test_optimizers.py
------------------

Cross-checks between the optimizer engines.
"""

import jax.numpy as jnp
import numpy as np
import optax
import pytest

from jndfit.config import FitConfig
from jndfit.inference import (
    OPTIMIZERS,
    Bounds,
    NonlinearConstraint,
    ProjectedGradientOptimizer,
    SLSQPOptimizer,
    SQPOptimizer,
)
from jndfit.model import COMMON_JND, NO_JND, make_objective
from jndfit.utils import expected_count_trials


def quadratic(x):
    return jnp.sum((x - 2.0) ** 2)


def nan_beyond_one_and_a_half(x):
    return jnp.where(x[0] > 1.5, jnp.nan, jnp.sum((x - 2.0) ** 2))


class TestRegistry:
    def test_registry_contents(self):
        assert OPTIMIZERS["sqp"] is SQPOptimizer
        assert OPTIMIZERS["slsqp"] is SLSQPOptimizer
        assert OPTIMIZERS["projected"] is ProjectedGradientOptimizer

    @pytest.mark.parametrize("name", list(OPTIMIZERS))
    def test_default_config(self, name):
        assert OPTIMIZERS[name]().config == FitConfig()


class TestSLSQP:
    def test_quadratic_with_active_bound(self):
        res = SLSQPOptimizer().minimize(
            quadratic, [0.0, 0.0], Bounds([0.0, 0.0], [1.0, 3.0])
        )
        assert res.success
        np.testing.assert_allclose(res.params, [1.0, 2.0], atol=1e-6)
        assert res.trace[-1] == res.nll

    def test_inequality_constraint(self):
        con = NonlinearConstraint(lambda x: 1.0 - x[0] - x[1], kind="ineq")
        res = SLSQPOptimizer().minimize(
            quadratic, [0.0, 0.0], Bounds([0.0, 0.0], [3.0, 3.0]), constraints=[con]
        )
        assert res.success
        np.testing.assert_allclose(res.params, [0.5, 0.5], atol=1e-5)

    def test_agrees_with_sqp_on_likelihood(self, no_jnd_data):
        objective = make_objective(NO_JND, no_jnd_data)
        sqp = SQPOptimizer().minimize(objective, NO_JND.initial_guess, NO_JND.bounds)
        slsqp = SLSQPOptimizer().minimize(
            objective, NO_JND.initial_guess, NO_JND.bounds
        )
        assert sqp.success and slsqp.success
        np.testing.assert_allclose(sqp.params, slsqp.params, atol=1e-3)
        assert sqp.nll <= slsqp.nll + 1e-3

    def test_non_finite_start(self):
        res = SLSQPOptimizer().minimize(
            nan_beyond_one_and_a_half, [2.0, 2.0], Bounds([0.0, 0.0], [3.0, 3.0])
        )
        assert not res.success
        assert "numerical failure" in res.message
        np.testing.assert_array_equal(res.params, [2.0, 2.0])
        assert res.trace == ()

    def test_non_finite_region_is_never_reported_as_converged(self):
        """A NaN step stops the run at the last finite accepted iterate."""
        res = SLSQPOptimizer().minimize(
            nan_beyond_one_and_a_half, [0.0, 0.0], Bounds([0.0, 0.0], [3.0, 3.0])
        )
        assert all(np.isfinite(v) for v in res.trace)
        assert np.isfinite(res.nll)
        assert res.trace[-1] == res.nll
        assert res.params[0] <= 1.5
        if res.success:
            np.testing.assert_allclose(res.params, [1.5, 2.0], atol=1e-5)
        else:
            assert "numerical failure" in res.message


class TestProjectedGradient:
    def test_quadratic_with_active_bound(self):
        opt = ProjectedGradientOptimizer(FitConfig(max_iter=5000), learning_rate=1e-2)
        res = opt.minimize(quadratic, [0.0, 0.0], Bounds([0.0, 0.0], [1.0, 3.0]))
        assert res.success, res.message
        np.testing.assert_allclose(res.params, [1.0, 2.0], atol=1e-5)

    def test_custom_optax_optimizer_stays_in_bounds(self):
        bounds = Bounds([0.0, 0.0], [1.0, 3.0])
        opt = ProjectedGradientOptimizer(
            FitConfig(max_iter=50), optimizer=optax.adam(learning_rate=0.5)
        )
        res = opt.minimize(quadratic, [0.0, 0.0], bounds)
        assert bounds.contains(res.params)
        assert res.nll < float(quadratic(jnp.zeros(2)))

    def test_rejects_general_constraints(self):
        con = NonlinearConstraint(lambda x: x[0], kind="ineq")
        with pytest.raises(NotImplementedError):
            ProjectedGradientOptimizer().minimize(
                quadratic, [0.0, 0.0], Bounds([0.0, 0.0], [1.0, 1.0]), [con]
            )

    def test_stall_above_start_is_not_converged(self):
        """A flat region worse than x0 stops the run without success."""

        def objective(x):
            return jnp.where(x[0] > 0.5, 10.0, (x[0] - 2.0) ** 2)

        opt = ProjectedGradientOptimizer(optimizer=optax.sgd(learning_rate=1.0))
        res = opt.minimize(objective, [0.0], Bounds([0.0], [3.0]))
        assert not res.success
        assert "stalled" in res.message
        np.testing.assert_array_equal(res.params, [0.0])
        assert res.nll == pytest.approx(4.0)
        assert res.trace[-1] == res.nll

    def test_common_jnd_fit_never_worse_than_start(self):
        data = expected_count_trials(
            "CommonJND", [1.4, 4.0, 0.1], np.linspace(0.5, 3.0, 12), n_per_ratio=50
        )
        objective = make_objective(COMMON_JND, data)
        start = float(objective(jnp.asarray(COMMON_JND.initial_guess)))
        res = ProjectedGradientOptimizer(FitConfig(max_iter=2000)).minimize(
            objective, COMMON_JND.initial_guess, COMMON_JND.bounds
        )
        assert res.trace[0] == pytest.approx(start)
        assert res.nll <= start
        assert res.nll == min(res.trace)
        assert res.nll == pytest.approx(float(objective(jnp.asarray(res.params))))
        if res.success:
            sqp = SQPOptimizer().minimize(
                objective, COMMON_JND.initial_guess, COMMON_JND.bounds
            )
            assert res.nll == pytest.approx(sqp.nll, rel=1e-3)

    def test_counts_evaluations(self):
        opt = ProjectedGradientOptimizer(FitConfig(max_iter=7))
        res = opt.minimize(quadratic, [0.0, 0.0], Bounds([0.0, 0.0], [3.0, 3.0]))
        assert res.n_iter == 7
        assert res.n_fev == 1 + 2 * 7

    def test_time_budget_before_first_step(self):
        opt = ProjectedGradientOptimizer(FitConfig(max_time=1e-9))
        res = opt.minimize(quadratic, [0.0, 0.0], Bounds([0.0, 0.0], [3.0, 3.0]))
        assert not res.success
        assert "time budget" in res.message
        assert res.n_iter == 0
        assert res.n_fev == 1
