import numpy as np
import scipy.linalg

from numpy.typing import ArrayLike, NDArray
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_is_fitted, validate_data
from typing import Self, cast

from mlemodels._utils import Dataset, EstimationResult
from mlemodels.exceptions import InvalidDimensionError, SingularMatrixError
from mlemodels.inference import wald_conf_int, wald_pvalues


class OLSRegression(RegressorMixin, BaseEstimator):
    """
    Ordinary least squares via the normal equations.

    Coefficients solve ``(X'X) b = X'y``. Standard errors are the homoskedastic
    ``sqrt(diag(s^2 (X'X)^-1))`` with ``s^2 = RSS / (n - p)``.

    Parameters
    ----------
    fit_intercept : bool, default=True
        Whether to fit an intercept. The intercept column is appended last.

    Attributes
    ----------
    coef_ : ndarray of shape (n_features,)
        The coefficients of the features.
    intercept_ : float
        Fitted intercept. Set to 0.0 if `fit_intercept=False`.
    bse_ : ndarray of shape (n_features,)
        Standard errors for the coefficient estimates.
    intercept_bse_ : float
        Standard error for the intercept. NaN if `fit_intercept=False`.
    pvalues_ : ndarray of shape (n_features,)
        Wald p-values for the coefficients.
    intercept_pvalue_ : float
        Wald p-value for the intercept.
    sigma_ : float
        Residual standard error ``sqrt(RSS / (n - p))``.
    loglik_ : float
        Gaussian log-likelihood at the estimates with variance ``RSS / n``.
    result_ : EstimationResult
        Full parameter vector (intercept last) and inference.
    n_features_in_ : int
        Number of features seen during `fit`.
    feature_names_in_ : ndarray of shape (n_features_in_,)
        Names of features seen during `fit`. Defined only when X has feature
        names that are all strings.

    Examples
    --------
    >>> from mlemodels import OLSRegression, generate
    >>> data = generate(N=200, T=5, seed=0)
    >>> model = OLSRegression(fit_intercept=False).fit(data.X, data.y)
    >>> model.coef_.shape
    (16,)
    """

    def __init__(self, fit_intercept: bool = True) -> None:
        self.fit_intercept = fit_intercept

    def fit(self, X: ArrayLike, y: ArrayLike) -> Self:
        """
        Fit the model.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Feature matrix.
        y : array-like of shape (n_samples,)
            Target values.

        Returns
        -------
        self : OLSRegression
            Fitted estimator.
        """
        X, y = validate_data(
            self, X, y, dtype=np.float64, y_numeric=True, ensure_min_samples=2
        )
        X = cast(NDArray[np.float64], X)  # for mypy
        y = cast(NDArray[np.float64], y)

        if self.fit_intercept:
            X = np.column_stack([X, np.ones(X.shape[0])])

        result = ols_estimate(X, y)
        self.result_ = result

        pvalues = wald_pvalues(result.coefficients, result.standard_errors)
        if self.fit_intercept:
            self.coef_ = result.coefficients[:-1]
            self.intercept_ = result.coefficients[-1]
            self.bse_ = result.standard_errors[:-1]
            self.intercept_bse_ = result.standard_errors[-1]
            self.pvalues_ = pvalues[:-1]
            self.intercept_pvalue_ = pvalues[-1]
        else:
            self.coef_ = result.coefficients
            self.intercept_ = 0.0
            self.bse_ = result.standard_errors
            self.intercept_bse_ = np.nan
            self.pvalues_ = pvalues
            self.intercept_pvalue_ = np.nan

        self.sigma_ = result.noise_scale_estimate
        self.loglik_ = result.log_likelihood
        return self

    def predict(self, X: ArrayLike) -> NDArray[np.float64]:
        """Return fitted values."""
        check_is_fitted(self)
        X = validate_data(self, X, dtype=np.float64, reset=False)
        X = cast(NDArray[np.float64], X)  # for mypy
        return X @ self.coef_ + self.intercept_

    def conf_int(self, alpha: float = 0.05) -> NDArray[np.float64]:
        """
        Wald confidence intervals for the coefficients.

        Returns
        -------
        ndarray, shape(n_features, 2)
            Column 0: lower bounds, Column 1: upper bounds
            Includes intercept as last row if `fit_intercept=True`.
        """
        check_is_fitted(self)
        return wald_conf_int(
            self.result_.coefficients, self.result_.standard_errors, alpha
        )


def fit_ols(dataset: Dataset) -> EstimationResult:
    """Closed-form OLS on a generated dataset (its design carries the intercept)."""
    return ols_estimate(dataset.X, dataset.y)


def ols_estimate(X: NDArray[np.float64], y: NDArray[np.float64]) -> EstimationResult:
    """
    Solve the normal equations and compute homoskedastic standard errors.

    Raises
    ------
    InvalidDimensionError
        If there are no more observations than regressors.
    SingularMatrixError
        If `X` is rank deficient.
    """
    n, k = X.shape
    if n <= k:
        raise InvalidDimensionError(
            f"Number of observations ({n}) must exceed number of regressors ({k})"
        )
    if np.linalg.matrix_rank(X) < k:
        raise SingularMatrixError("X'X is singular: the design is rank deficient")

    XtX = X.T @ X
    try:
        cho = scipy.linalg.cho_factor(XtX)
    except scipy.linalg.LinAlgError as e:
        raise SingularMatrixError("X'X is not positive definite") from e

    beta = scipy.linalg.cho_solve(cho, X.T @ y)
    resid = y - X @ beta
    rss = float(resid @ resid)

    s2 = rss / (n - k)
    XtX_inv = scipy.linalg.cho_solve(cho, np.eye(k))
    bse = np.sqrt(np.diag(s2 * XtX_inv))

    # concentrated log-likelihood, variance at its ML value RSS/n
    loglik = -0.5 * n * (np.log(2.0 * np.pi * rss / n) + 1.0)

    return EstimationResult(
        coefficients=beta,
        noise_scale_estimate=float(np.sqrt(s2)),
        standard_errors=bse,
        log_likelihood=float(loglik),
    )
