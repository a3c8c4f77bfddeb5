import numpy as np

from numpy.typing import ArrayLike, NDArray
from typing import Sequence

from mlemodels._solvers import DEFAULT_MAX_ITER, DEFAULT_TOL
from mlemodels.inference import comparison_table
from mlemodels.mle import GaussianMLERegression


class GaussianMLE:
    """
    Gaussian linear model with the statsmodels ``Model(endog, exog).fit()`` call shape.

    `exog` is used as given, so it must carry its own constant column.
    Column names are taken from a DataFrame `exog` unless `exog_names` is given.
    """

    def __init__(
        self,
        endog: ArrayLike,
        exog: ArrayLike,
        exog_names: Sequence[str] | None = None,
    ):
        self.endog = np.asarray(endog, dtype=np.float64)
        self.exog = np.asarray(exog, dtype=np.float64)
        if exog_names is None:
            exog_names = getattr(exog, "columns", None)
        if exog_names is None:
            exog_names = [f"x{i}" for i in range(self.exog.shape[1])]
        self.exog_names = list(exog_names)

    @property
    def nobs(self) -> int:
        return len(self.endog)

    def fit(
        self, maxiter: int = DEFAULT_MAX_ITER, tol: float = DEFAULT_TOL
    ) -> "GaussianMLEResults":
        estimator = GaussianMLERegression(fit_intercept=False, max_iter=maxiter, tol=tol)
        estimator.fit(self.exog, self.endog)
        return GaussianMLEResults(self, estimator)


class GaussianMLEResults:
    """Read-only view of a fitted GaussianMLERegression, statsmodels naming."""

    def __init__(self, model: GaussianMLE, estimator: GaussianMLERegression):
        self.model = model
        self.estimator = estimator

    @property
    def params(self) -> NDArray[np.float64]:
        return self.estimator.coef_

    @property
    def bse(self) -> NDArray[np.float64]:
        return self.estimator.bse_

    @property
    def llf(self) -> float:
        return self.estimator.loglik_

    @property
    def scale(self) -> float:
        # ML variance RSS / n
        return self.estimator.sigma_**2

    @property
    def converged(self) -> bool:
        return self.estimator.converged_

    def cov_params(self) -> NDArray[np.float64]:
        """Coefficient block of the inverse negated Hessian (noise scale dropped)."""
        k = len(self.params)
        return np.linalg.inv(-self.estimator.hessian_)[:k, :k]

    def summary(self) -> str:
        return comparison_table(
            {"Gaussian MLE": self.estimator.result_}, names=self.model.exog_names
        )
