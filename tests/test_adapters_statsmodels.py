import numpy as np
import pytest

from mlemodels import fit_ols
from mlemodels.adapters.statsmodels import GaussianMLE, GaussianMLEResults


@pytest.fixture(scope="module")
def fitted_results(small_dataset):
    return GaussianMLE(small_dataset.y, small_dataset.X).fit()


class TestGaussianMLE:
    def test_default_names(self, small_dataset):
        model = GaussianMLE(small_dataset.y, small_dataset.X)
        assert model.nobs == small_dataset.n_samples
        assert model.exog_names[0] == "x0"
        assert len(model.exog_names) == small_dataset.n_features

    def test_names_from_dataframe(self, small_dataset):
        pd = pytest.importorskip("pandas")
        exog = pd.DataFrame(
            small_dataset.X, columns=[f"col{i}" for i in range(small_dataset.n_features)]
        )
        model = GaussianMLE(small_dataset.y, exog)
        assert model.exog_names[:2] == ["col0", "col1"]

    def test_fit_returns_results(self, fitted_results):
        assert isinstance(fitted_results, GaussianMLEResults)
        assert fitted_results.converged


class TestGaussianMLEResults:
    def test_params_match_ols(self, small_dataset, fitted_results):
        ols = fit_ols(small_dataset)
        np.testing.assert_allclose(fitted_results.params, ols.coefficients, atol=1e-6)

    def test_scale_is_ml_variance(self, small_dataset, fitted_results):
        resid = small_dataset.y - small_dataset.X @ fitted_results.params
        assert fitted_results.scale == pytest.approx(np.mean(resid**2), rel=1e-5)

    def test_llf_matches_ols(self, small_dataset, fitted_results):
        ols = fit_ols(small_dataset)
        assert fitted_results.llf == pytest.approx(ols.log_likelihood, rel=1e-8)

    def test_cov_params_matches_bse(self, fitted_results):
        cov = fitted_results.cov_params()
        assert cov.shape == (16, 16)
        np.testing.assert_allclose(np.sqrt(np.diag(cov)), fitted_results.bse)

    def test_summary_lists_every_regressor(self, fitted_results):
        text = fitted_results.summary()
        assert "Gaussian MLE" in text
        assert "x15" in text
        assert "sigma" in text
