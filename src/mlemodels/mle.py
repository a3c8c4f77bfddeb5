import numpy as np

from numpy.typing import ArrayLike, NDArray
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils.validation import check_is_fitted, validate_data
from typing import Callable, Literal, Self, Sequence, cast

from mlemodels._solvers import DEFAULT_MAX_ITER, DEFAULT_TOL, maximize
from mlemodels._utils import (
    Dataset,
    EstimationResult,
    OptimizerResult,
    SolverStatus,
)
from mlemodels.exceptions import InvalidDimensionError, SolverFailureError
from mlemodels.inference import (
    standard_errors_from_curvature,
    wald_conf_int,
    wald_pvalues,
)
from mlemodels.likelihood import GaussianLikelihood


class GaussianMLERegression(RegressorMixin, BaseEstimator):
    """
    Linear regression fitted by numerically maximizing the Gaussian likelihood.

    The log-likelihood over ``theta = [b, sigma]`` is handed to scipy's
    ``trust-constr`` solver with ``sigma >= 0``; gradients and Hessians come
    from jax automatic differentiation. Standard errors are the square roots of
    the diagonal of the inverse negated Hessian at the optimum.

    Parameters
    ----------
    solver : {'trust-constr'}, default='trust-constr'
        Optimization algorithm. Only 'trust-constr' is currently supported.
    max_iter : int, default=1000
        Maximum number of solver iterations
    tol : float, default=1e-8
        Gradient and step tolerance for the solver
    fit_intercept : bool, default=True
        Whether to fit intercept. The intercept column is appended last.
    constraints : sequence of callable, default=()
        Equality constraints `c(theta) == 0` on the packed parameter vector
        (intercept last among the coefficients, sigma at the end). Each must be
        written with `jax.numpy`. With constraints, standard errors come from
        the Hessian of the Lagrangian and a `LagrangianHessianWarning` is
        issued.

    Attributes
    ----------
    coef_ : ndarray of shape (n_features,)
        The coefficients of the features.
    intercept_ : float
        Fitted intercept. Set to 0.0 if `fit_intercept=False`.
    sigma_ : float
        Maximum-likelihood noise scale ``sqrt(RSS / n)``.
    loglik_ : float
        Maximized log-likelihood.
    n_iter_ : int
        Number of iterations the solver ran.
    converged_ : bool
        Always True on a fitted model; non-optimal terminations raise.
    status_ : SolverStatus
        Solver termination status.
    hessian_ : ndarray of shape (n_params, n_params)
        Hessian of the log-likelihood (or Lagrangian) at the optimum.
    bse_ : ndarray of shape (n_features,)
        Wald standard errors for the coefficient estimates.
    intercept_bse_ : float
        Wald standard error for the intercept.
    sigma_bse_ : float
        Standard error of the noise scale.
    pvalues_ : ndarray of shape (n_features,)
        Wald p-values for the coefficients.
    intercept_pvalue_ : float
        Wald p-value for the intercept.
    result_ : EstimationResult
        Full parameter vector (intercept last) and inference.
    n_features_in_ : int
        Number of features seen during `fit`.
    feature_names_in_ : ndarray of shape (n_features_in_,)
        Names of features seen during `fit`. Defined only when X has feature
        names that are all strings.
    """

    def __init__(
        self,
        solver: Literal["trust-constr"] = "trust-constr",
        max_iter: int = DEFAULT_MAX_ITER,
        tol: float = DEFAULT_TOL,
        fit_intercept: bool = True,
        constraints: Sequence[Callable] = (),
    ) -> None:
        self.solver = solver
        self.max_iter = max_iter
        self.tol = tol
        self.fit_intercept = fit_intercept
        self.constraints = constraints

    def fit(self, X: ArrayLike, y: ArrayLike) -> Self:
        """
        Fit the model by maximum likelihood.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Feature matrix.
        y : array-like of shape (n_samples,)
            Target values.

        Returns
        -------
        self : GaussianMLERegression
            Fitted estimator.

        Raises
        ------
        SolverFailureError
            If the solver does not report an optimal solution.
        """
        X, y = self._validate_input(X, y)
        if self.fit_intercept:
            X = np.column_stack([X, np.ones(X.shape[0])])

        # true parameters are unknown for user data
        dataset = Dataset(
            X=X,
            y=y,
            true_coefficients=np.full(X.shape[1], np.nan),
            true_noise_scale=np.nan,
        )
        opt = _solve(dataset, self.tol, self.max_iter, self.constraints)
        result = _to_estimation_result(opt)

        self.result_ = result
        self.n_iter_ = opt.n_iter
        self.status_ = opt.status
        self.converged_ = opt.status is SolverStatus.OPTIMAL
        self.hessian_ = opt.curvature.hessian

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
        self.sigma_bse_ = result.noise_scale_standard_error
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

    def _validate_input(
        self, X: ArrayLike, y: ArrayLike
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Validate parameters and inputs"""
        if self.solver != "trust-constr":
            raise ValueError(
                f"solver='{self.solver}' is not supported. "
                "Only 'trust-constr' is currently implemented."
            )
        if self.max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")
        if self.tol < 0:
            raise ValueError(f"tol must be non-negative, got {self.tol}")
        X, y = validate_data(
            self, X, y, dtype=np.float64, y_numeric=True, ensure_min_samples=2
        )
        X = cast(NDArray[np.float64], X)  # for mypy
        y = cast(NDArray[np.float64], y)
        return X, y


def fit_mle(
    dataset: Dataset,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
    constraints: Sequence[Callable] = (),
) -> EstimationResult:
    """
    Maximum-likelihood fit of a generated dataset (its design carries the intercept).

    Parameters
    ----------
    dataset : Dataset
        Sample to fit; not modified.
    tol : float, default=1e-8
        Solver tolerance
    max_iter : int, default=1000
        Maximum number of solver iterations
    constraints : sequence of callable, default=()
        Equality constraints `c(theta) == 0` on ``theta = [b, sigma]``.

    Returns
    -------
    EstimationResult
        Coefficients, noise scale, standard errors from the negated inverse
        Hessian and the maximized log-likelihood.

    Raises
    ------
    SolverFailureError
        If the solver status is anything but optimal.
    SingularHessianError
        If the curvature at the optimum cannot be inverted.
    """
    opt = _solve(dataset, tol, max_iter, constraints)
    return _to_estimation_result(opt)


def _solve(
    dataset: Dataset,
    tol: float,
    max_iter: int,
    constraints: Sequence[Callable],
) -> OptimizerResult:
    """Run the optimizer on the Gaussian log-likelihood; raise unless optimal."""
    if dataset.n_samples <= dataset.n_features:
        raise InvalidDimensionError(
            f"Number of observations ({dataset.n_samples}) must exceed "
            f"number of regressors ({dataset.n_features})"
        )
    objective = GaussianLikelihood(dataset)
    opt = maximize(
        objective,
        n_params=objective.n_params,
        bounds=objective.bounds,
        tol=tol,
        max_iter=max_iter,
        constraints=constraints,
        x0=objective.initial_params(),
    )
    if opt.status is not SolverStatus.OPTIMAL:
        raise SolverFailureError(
            f"Solver terminated with status '{opt.status.value}' after "
            f"{opt.n_iter} iterations: {opt.message}",
            status=opt.status,
        )
    return opt


def _to_estimation_result(opt: OptimizerResult) -> EstimationResult:
    bse = standard_errors_from_curvature(opt.curvature, is_maximization=True)
    return EstimationResult(
        coefficients=opt.params[:-1],
        noise_scale_estimate=float(opt.params[-1]),
        standard_errors=bse[:-1],
        log_likelihood=opt.objective_value,
        noise_scale_standard_error=float(bse[-1]),
    )
