import logging

import numpy as np
import scipy.optimize

from numpy.typing import NDArray
from typing import Callable, Sequence

from mlemodels._autodiff import differentiate, jacobian, weighted_hessian
from mlemodels._utils import CurvatureInfo, OptimizerResult, SolverStatus

logger = logging.getLogger(__name__)

DEFAULT_TOL = 1e-8
DEFAULT_MAX_ITER = 1000


def maximize(
    objective: Callable,
    n_params: int,
    bounds: tuple[NDArray[np.float64], NDArray[np.float64]] | None = None,
    tol: float = DEFAULT_TOL,
    max_iter: int = DEFAULT_MAX_ITER,
    constraints: Sequence[Callable] = (),
    x0: NDArray[np.float64] | None = None,
) -> OptimizerResult:
    """
    Maximize a scalar jax objective with scipy's trust-region interior point.

    Parameters
    ----------
    objective : Callable
        Function `objective(theta)` built from `jax.numpy`; differentiated with
        `jax.grad` and `jax.hessian`.
    n_params : int
        Length of the parameter vector
    bounds : tuple of ndarray, default=None
        (lower, upper) bounds per parameter, `+-inf` for free parameters.
    tol : float, default=1e-8
        Gradient and step tolerance handed to the solver
    max_iter : int, default=1000
        Maximum number of solver iterations
    constraints : sequence of Callable, default=()
        Equality constraints `c(theta) == 0`, each built from `jax.numpy`.
    x0 : ndarray, default=None
        Starting point. Zeros moved strictly inside `bounds` if not given.

    Returns
    -------
    OptimizerResult
        Optimum, objective value, curvature and solver status. The curvature is
        the Hessian of the objective, or of the Lagrangian
        `objective + lambda . c` when constraints are given.
    """
    if x0 is None:
        x0 = _interior_start(n_params, bounds)
    else:
        x0 = np.asarray(x0, dtype=np.float64)
    # scipy minimizes, so hand it the negated objective
    neg = differentiate(objective, sign=-1.0)

    scipy_bounds = None
    if bounds is not None:
        lower, upper = bounds
        scipy_bounds = scipy.optimize.Bounds(lower, upper, keep_feasible=True)

    scipy_constraints = [
        scipy.optimize.NonlinearConstraint(
            _as_numpy(c), 0.0, 0.0, jac=jacobian(c), hess=weighted_hessian(c)
        )
        for c in constraints
    ]

    logger.debug(
        "trust-constr: %d params, %d constraints, tol=%g, max_iter=%d",
        n_params,
        len(scipy_constraints),
        tol,
        max_iter,
    )
    res = scipy.optimize.minimize(
        neg.value,
        x0,
        method="trust-constr",
        jac=neg.gradient,
        hess=neg.hessian,
        bounds=scipy_bounds,
        constraints=scipy_constraints,
        options={
            "gtol": tol,
            "xtol": tol,
            "barrier_tol": tol,
            "maxiter": max_iter,
        },
    )

    params = np.asarray(res.x, dtype=np.float64)
    objective_value = -float(res.fun)
    hessian = -neg.hessian(params)
    is_lagrangian = False
    if constraints:
        hessian = hessian + _constraint_curvature(objective, constraints, params)
        is_lagrangian = True

    status = _status(
        res,
        params,
        objective_value,
        hessian,
        bool(constraints),
        tol,
        gradient=-neg.gradient(params),
        bounds=bounds,
    )
    logger.debug(
        "trust-constr finished after %d iterations: %s (%s)",
        res.nit,
        status.value,
        res.message,
    )

    return OptimizerResult(
        params=params,
        objective_value=objective_value,
        curvature=CurvatureInfo(hessian=hessian, is_lagrangian=is_lagrangian),
        status=status,
        n_iter=int(res.nit),
        message=str(res.message),
    )


def _interior_start(
    n_params: int,
    bounds: tuple[NDArray[np.float64], NDArray[np.float64]] | None,
) -> NDArray[np.float64]:
    """Zeros, moved strictly inside any finite bound they touch or violate."""
    x0 = np.zeros(n_params)
    if bounds is None:
        return x0
    lower = np.broadcast_to(np.asarray(bounds[0], dtype=np.float64), x0.shape)
    upper = np.broadcast_to(np.asarray(bounds[1], dtype=np.float64), x0.shape)

    boxed = np.isfinite(lower) & np.isfinite(upper)
    x0 = np.where(np.isfinite(lower) & (x0 <= lower), lower + 1.0, x0)
    x0 = np.where(np.isfinite(upper) & (x0 >= upper), upper - 1.0, x0)
    # a box narrower than 2 gets its midpoint
    narrow = boxed & ((x0 <= lower) | (x0 >= upper))
    return np.where(narrow, 0.5 * (lower + upper), x0)


def _as_numpy(c: Callable) -> Callable[[NDArray[np.float64]], NDArray[np.float64]]:
    return lambda theta: np.atleast_1d(np.asarray(c(theta), dtype=np.float64))


def _constraint_curvature(
    objective: Callable,
    constraints: Sequence[Callable],
    params: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Sum of lambda_i * hess(c_i) at `params`.

    Multipliers solve the stationarity condition grad f + J' lambda = 0 in the
    least-squares sense.
    """
    grad = differentiate(objective).gradient(params)
    curvature = np.zeros((len(params), len(params)))
    jacs = [jacobian(c)(params) for c in constraints]
    J = np.vstack(jacs)
    lam, *_ = np.linalg.lstsq(J.T, -grad, rcond=None)

    offset = 0
    for c, jac in zip(constraints, jacs):
        m = jac.shape[0]
        curvature += weighted_hessian(c)(params, lam[offset : offset + m])
        offset += m
    return curvature


def _status(
    res: scipy.optimize.OptimizeResult,
    params: NDArray[np.float64],
    objective_value: float,
    hessian: NDArray[np.float64],
    constrained: bool,
    tol: float,
    gradient: NDArray[np.float64] | None = None,
    bounds: tuple[NDArray[np.float64], NDArray[np.float64]] | None = None,
) -> SolverStatus:
    """
    Map a scipy trust-constr result onto SolverStatus.

    Without equality constraints a claimed convergence is only accepted if the
    objective gradient, with components pushing against an active bound
    dropped, is below `sqrt(tol)` relative to the objective scale.
    """
    if not (
        np.all(np.isfinite(params))
        and np.isfinite(objective_value)
        and np.all(np.isfinite(hessian))
    ):
        return SolverStatus.NUMERICAL_FAILURE
    if constrained and res.constr_violation > np.sqrt(tol):
        return SolverStatus.INFEASIBLE
    if res.status in (1, 2):
        if gradient is not None and not constrained:
            g = _projected_gradient(gradient, params, bounds, tol)
            if np.max(np.abs(g), initial=0.0) > np.sqrt(tol) * max(
                1.0, abs(objective_value)
            ):
                return SolverStatus.NUMERICAL_FAILURE
        return SolverStatus.OPTIMAL
    if res.status == 0:
        return SolverStatus.ITERATION_LIMIT_REACHED
    return SolverStatus.NUMERICAL_FAILURE


def _projected_gradient(
    gradient: NDArray[np.float64],
    params: NDArray[np.float64],
    bounds: tuple[NDArray[np.float64], NDArray[np.float64]] | None,
    tol: float,
) -> NDArray[np.float64]:
    """Objective gradient with components blocked by an active bound zeroed."""
    g = np.asarray(gradient, dtype=np.float64).copy()
    if bounds is None:
        return g
    lower, upper = (np.asarray(b, dtype=np.float64) for b in bounds)
    slack = np.sqrt(tol)
    at_lower = np.isfinite(lower) & (params - lower <= slack) & (g < 0)
    at_upper = np.isfinite(upper) & (upper - params <= slack) & (g > 0)
    g[at_lower | at_upper] = 0.0
    return g
