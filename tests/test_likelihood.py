import numpy as np
import pytest
import scipy.stats

from mlemodels.likelihood import GaussianLikelihood, log_likelihood


class TestLogLikelihood:
    def test_matches_normal_logpdf(self, small_dataset):
        beta = small_dataset.true_coefficients
        expected = scipy.stats.norm.logpdf(
            small_dataset.y, loc=small_dataset.X @ beta, scale=0.3
        ).sum()
        result = float(log_likelihood(beta, 0.3, small_dataset))
        assert result == pytest.approx(expected, rel=1e-10)

    def test_evaluable_away_from_optimum(self, small_dataset):
        beta = np.zeros(small_dataset.n_features)
        value = float(log_likelihood(beta, 5.0, small_dataset))
        assert np.isfinite(value)
        assert value < float(
            log_likelihood(small_dataset.true_coefficients, 0.3, small_dataset)
        )

    def test_does_not_modify_dataset(self, small_dataset):
        X_before = small_dataset.X.copy()
        log_likelihood(np.ones(small_dataset.n_features), 1.0, small_dataset)
        np.testing.assert_array_equal(small_dataset.X, X_before)


class TestGaussianLikelihood:
    def test_packing(self, small_dataset):
        objective = GaussianLikelihood(small_dataset)
        assert objective.n_params == small_dataset.n_features + 1

        theta = np.append(small_dataset.true_coefficients, 0.3)
        beta, sigma = objective.split(theta)
        np.testing.assert_array_equal(beta, small_dataset.true_coefficients)
        assert sigma == 0.3

        assert float(objective(theta)) == pytest.approx(
            float(log_likelihood(beta, 0.3, small_dataset)), rel=1e-12
        )

    def test_bounds_only_on_noise_scale(self, small_dataset):
        lower, upper = GaussianLikelihood(small_dataset).bounds
        assert lower[-1] == 0.0
        assert np.all(np.isneginf(lower[:-1]))
        assert np.all(np.isposinf(upper))

    def test_initial_params_feasible(self, small_dataset):
        theta0 = GaussianLikelihood(small_dataset).initial_params()
        np.testing.assert_array_equal(theta0[:-1], 0.0)
        assert theta0[-1] >= 1.0

    def test_differentiable_with_jax(self, small_dataset):
        import jax

        objective = GaussianLikelihood(small_dataset)
        theta = np.append(small_dataset.true_coefficients, 0.3)
        grad = np.asarray(jax.grad(objective)(theta))

        # d/dsigma = -n/sigma + RSS/sigma^3
        resid = small_dataset.y - small_dataset.X @ small_dataset.true_coefficients
        n = small_dataset.n_samples
        expected = -n / 0.3 + resid @ resid / 0.3**3
        assert grad[-1] == pytest.approx(expected, rel=1e-8)
