import warnings

import numpy as np
import scipy.stats

from numpy.typing import ArrayLike, NDArray
from typing import Mapping, Sequence

from mlemodels._utils import CurvatureInfo, EstimationResult
from mlemodels.exceptions import LagrangianHessianWarning, SingularHessianError


def standard_errors_from_hessian(
    hessian: ArrayLike, is_maximization: bool = True
) -> NDArray[np.float64]:
    """
    Standard errors from the curvature of a log-likelihood.

    Parameters
    ----------
    hessian : array-like of shape (n_params, n_params)
        Hessian of the objective at its optimum.
    is_maximization : bool, default=True
        Whether the objective was maximized. The Hessian at a maximum is
        negative semi-definite, so it is negated before inversion.

    Returns
    -------
    ndarray of shape (n_params,)
        Square roots of the diagonal of the inverse (negated) Hessian.

    Raises
    ------
    SingularHessianError
        If the matrix is not square and finite, is rank deficient, or yields a
        non-positive variance.
    """
    H = np.asarray(hessian, dtype=np.float64)
    if H.ndim != 2 or H.shape[0] != H.shape[1]:
        raise SingularHessianError(f"Hessian must be square, got shape {H.shape}")
    if not np.all(np.isfinite(H)):
        raise SingularHessianError("Hessian contains non-finite values")
    if is_maximization:
        H = -H

    if np.linalg.matrix_rank(H) < H.shape[0]:
        raise SingularHessianError("Hessian is singular")
    try:
        cov = np.linalg.inv(H)
    except np.linalg.LinAlgError as e:
        raise SingularHessianError("Hessian is singular") from e

    var = np.diag(cov)
    if np.any(var <= 0):
        raise SingularHessianError(
            "Hessian is not definite at the optimum; variances must be positive"
        )
    return np.sqrt(var)


def standard_errors_from_curvature(
    curvature: CurvatureInfo, is_maximization: bool = True
) -> NDArray[np.float64]:
    """
    `standard_errors_from_hessian` for an optimizer's CurvatureInfo.

    Warns with `LagrangianHessianWarning` if the curvature belongs to the
    Lagrangian of a constrained problem.
    """
    if curvature.is_lagrangian:
        warnings.warn(
            "Standard errors are derived from the Hessian of the Lagrangian; "
            "with active constraints they mix constraint and likelihood curvature.",
            LagrangianHessianWarning,
            stacklevel=2,
        )
    return standard_errors_from_hessian(curvature.hessian, is_maximization)


def compare(
    result_a: EstimationResult, result_b: EstimationResult, tolerance: float
) -> bool:
    """
    True if two fits agree within relative `tolerance`.

    Compares coefficients, noise scale estimates and standard errors.
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")
    pairs = [
        (result_a.coefficients, result_b.coefficients),
        (result_a.noise_scale_estimate, result_b.noise_scale_estimate),
        (result_a.standard_errors, result_b.standard_errors),
    ]
    for a, b in pairs:
        a, b = np.asarray(a), np.asarray(b)
        if a.shape != b.shape:
            return False
        if not np.allclose(a, b, rtol=tolerance, atol=0.0):
            return False
    return True


def wald_pvalues(
    coefficients: ArrayLike, standard_errors: ArrayLike
) -> NDArray[np.float64]:
    """Two-sided Wald p-values for H0: coefficient == 0."""
    z = np.asarray(coefficients) / np.asarray(standard_errors)
    return 2 * scipy.stats.norm.sf(np.abs(z))


def wald_conf_int(
    coefficients: ArrayLike, standard_errors: ArrayLike, alpha: float = 0.05
) -> NDArray[np.float64]:
    """Wald confidence intervals, shape (n_features, 2)."""
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")
    beta = np.asarray(coefficients, dtype=np.float64)
    z = scipy.stats.norm.ppf(1 - alpha / 2)
    bse = np.asarray(standard_errors, dtype=np.float64)
    return np.column_stack([beta - z * bse, beta + z * bse])


def _fmtval(x: float, width: int = 10) -> str:
    """Format a number: scientific notation for extreme values."""
    if x is None or np.isnan(x):
        return f"{'NaN':>{width}}"
    if x == 0:
        return f"{0.0:{width}.4f}"
    if abs(x) < 0.0001 or abs(x) >= 1e6:
        return f"{x:{width}.3e}"
    return f"{x:{width}.4f}"


def _check_results(
    results: Mapping[str, EstimationResult], names: Sequence[str] | None
) -> list[str]:
    if not results:
        raise ValueError("results must contain at least one EstimationResult")
    n_features = {len(r.coefficients) for r in results.values()}
    if len(n_features) != 1:
        raise ValueError("All results must have the same number of coefficients")
    k = n_features.pop()
    if names is None:
        return [f"x{i}" for i in range(k)]
    if len(names) != k:
        raise ValueError(f"Expected {k} names, got {len(names)}")
    return list(names)


def comparison_table(
    results: Mapping[str, EstimationResult],
    names: Sequence[str] | None = None,
) -> str:
    """
    Side-by-side text table of coefficient estimates and standard errors.

    Parameters
    ----------
    results : mapping of str to EstimationResult
        Fits keyed by estimator label, e.g. ``{"OLS": ..., "MLE": ...}``.
    names : sequence of str, default=None
        Coefficient names. Defaults to ``x0, x1, ...``.
    """
    names = _check_results(results, names)
    labels = list(results)
    width = 12 + 22 * len(labels)

    lines: list[str] = []
    lines.append("Estimator Comparison".center(width))
    lines.append("=" * width)
    lines.append(
        f"{'':>12}" + "".join(f"{label[:20]:>22}" for label in labels)
    )
    lines.append(f"{'':>12}" + f"{'coef':>11}{'std err':>11}" * len(labels))
    lines.append("-" * width)

    for i, name in enumerate(names):
        row = f"{name[:12]:>12}"
        for label in labels:
            r = results[label]
            row += f" {_fmtval(r.coefficients[i])} {_fmtval(r.standard_errors[i])}"
        lines.append(row)

    lines.append("-" * width)
    row = f"{'sigma':>12}"
    for label in labels:
        r = results[label]
        row += f" {_fmtval(r.noise_scale_estimate)} {_fmtval(r.noise_scale_standard_error)}"
    lines.append(row)
    row = f"{'loglik':>12}"
    for label in labels:
        row += f" {results[label].log_likelihood:>21.3f}"
    lines.append(row)
    lines.append("=" * width)
    return "\n".join(lines)


def comparison_frame(
    results: Mapping[str, EstimationResult],
    names: Sequence[str] | None = None,
):
    """Return the comparison as a pandas DataFrame with (estimator, stat) columns."""
    try:
        import pandas as pd
    except ImportError as e:
        raise ImportError("pandas is required for comparison_frame()") from e

    names = _check_results(results, names)
    columns = {}
    for label, r in results.items():
        columns[(label, "coef")] = list(r.coefficients) + [r.noise_scale_estimate]
        sigma_se = (
            np.nan
            if r.noise_scale_standard_error is None
            else r.noise_scale_standard_error
        )
        columns[(label, "std err")] = list(r.standard_errors) + [sigma_se]
    return pd.DataFrame(columns, index=names + ["sigma"])
