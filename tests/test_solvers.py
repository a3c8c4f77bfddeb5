import jax.numpy as jnp
import numpy as np
import pytest
import scipy.optimize

from mlemodels import GaussianLikelihood, SolverStatus, fit_ols, generate, maximize
from mlemodels._solvers import _interior_start, _status


def concave_quadratic(theta):
    return -((theta[0] - 1.0) ** 2) - 2.0 * (theta[1] + 0.5) ** 2


class TestMaximize:
    def test_unconstrained_quadratic(self):
        result = maximize(concave_quadratic, n_params=2, tol=1e-10)

        assert result.status is SolverStatus.OPTIMAL
        np.testing.assert_allclose(result.params, [1.0, -0.5], atol=1e-6)
        assert result.objective_value == pytest.approx(0.0, abs=1e-10)
        np.testing.assert_allclose(
            result.curvature.hessian, [[-2.0, 0.0], [0.0, -4.0]], atol=1e-10
        )
        assert not result.curvature.is_lagrangian
        assert result.n_iter >= 1

    def test_bounds_respected(self):
        def objective(theta):
            return -((theta[0] - 3.0) ** 2)

        result = maximize(
            objective,
            n_params=1,
            bounds=(np.array([0.0]), np.array([np.inf])),
            x0=np.array([1.0]),
        )
        assert result.status is SolverStatus.OPTIMAL
        # barrier shrunk to tol, so the interior optimum is not biased
        assert result.params[0] == pytest.approx(3.0, abs=1e-7)

    def test_active_lower_bound(self):
        def objective(theta):
            return -((theta[0] + 1.0) ** 2)

        result = maximize(
            objective,
            n_params=1,
            bounds=(np.array([0.0]), np.array([np.inf])),
            x0=np.array([2.0]),
        )
        assert result.status is SolverStatus.OPTIMAL
        assert 0.0 <= result.params[0] < 1e-6

    def test_default_start_inside_bounds(self):
        def objective(theta):
            return jnp.log(theta[0]) - 0.5 * theta[0]

        result = maximize(
            objective, n_params=1, bounds=(np.array([0.0]), np.array([np.inf]))
        )
        assert result.status is SolverStatus.OPTIMAL
        assert result.params[0] == pytest.approx(2.0, abs=1e-6)

    def test_likelihood_without_start_point(self):
        dataset = generate(N=40, T=2, seed=0)
        objective = GaussianLikelihood(dataset)
        result = maximize(
            objective, n_params=objective.n_params, bounds=objective.bounds
        )
        assert result.status is SolverStatus.OPTIMAL
        np.testing.assert_allclose(
            result.params[:-1], fit_ols(dataset).coefficients, atol=1e-5
        )
        assert result.params[-1] > 0

    def test_linear_constraint(self):
        result = maximize(
            concave_quadratic,
            n_params=2,
            constraints=[lambda theta: theta[0] + theta[1]],
        )
        assert result.status is SolverStatus.OPTIMAL
        np.testing.assert_allclose(result.params, [2 / 3, -2 / 3], atol=1e-5)
        # linear constraints add no curvature
        assert result.curvature.is_lagrangian
        np.testing.assert_allclose(
            result.curvature.hessian, [[-2.0, 0.0], [0.0, -4.0]], atol=1e-6
        )

    def test_nonlinear_constraint_lagrangian_hessian(self):
        """On the unit circle the Lagrangian picks up the constraint curvature."""

        def objective(theta):
            return -((theta[0] - 2.0) ** 2) - theta[1] ** 2

        def on_circle(theta):
            return jnp.sum(theta**2) - 1.0

        result = maximize(
            objective,
            n_params=2,
            constraints=[on_circle],
            x0=np.array([0.5, 0.5]),
        )
        assert result.status is SolverStatus.OPTIMAL
        np.testing.assert_allclose(result.params, [1.0, 0.0], atol=1e-5)
        # lambda = -1, so -2 I + (-1) * 2 I
        np.testing.assert_allclose(
            result.curvature.hessian, [[-4.0, 0.0], [0.0, -4.0]], atol=1e-4
        )

    def test_iteration_limit(self):
        result = maximize(
            concave_quadratic, n_params=2, max_iter=1, x0=np.array([50.0, 50.0])
        )
        assert result.status is SolverStatus.ITERATION_LIMIT_REACHED


class TestStatusMapping:
    @pytest.fixture
    def finite(self):
        return np.zeros(2), 0.0, -np.eye(2)

    @pytest.mark.parametrize(
        "scipy_status, expected",
        [
            (1, SolverStatus.OPTIMAL),
            (2, SolverStatus.OPTIMAL),
            (0, SolverStatus.ITERATION_LIMIT_REACHED),
            (3, SolverStatus.NUMERICAL_FAILURE),
        ],
    )
    def test_scipy_status(self, finite, scipy_status, expected):
        res = scipy.optimize.OptimizeResult(status=scipy_status, constr_violation=0.0)
        assert _status(res, *finite, constrained=False, tol=1e-8) is expected

    def test_constraint_violation_is_infeasible(self, finite):
        res = scipy.optimize.OptimizeResult(status=1, constr_violation=0.5)
        assert _status(res, *finite, constrained=True, tol=1e-8) is (
            SolverStatus.INFEASIBLE
        )

    def test_non_finite_is_numerical_failure(self):
        res = scipy.optimize.OptimizeResult(status=1, constr_violation=0.0)
        params = np.array([np.nan, 0.0])
        assert _status(res, params, 0.0, -np.eye(2), False, 1e-8) is (
            SolverStatus.NUMERICAL_FAILURE
        )
        assert _status(res, np.zeros(2), -np.inf, -np.eye(2), False, 1e-8) is (
            SolverStatus.NUMERICAL_FAILURE
        )

    def test_claimed_convergence_off_stationary_point(self, finite):
        res = scipy.optimize.OptimizeResult(status=1, constr_violation=0.0)
        status = _status(
            res, *finite, constrained=False, tol=1e-8, gradient=np.array([0.0, 1e-2])
        )
        assert status is SolverStatus.NUMERICAL_FAILURE

    def test_gradient_into_active_bound_is_ignored(self):
        res = scipy.optimize.OptimizeResult(status=1, constr_violation=0.0)
        bounds = (np.array([0.0, -np.inf]), np.array([np.inf, np.inf]))
        status = _status(
            res,
            np.array([1e-9, 0.0]),
            0.0,
            -np.eye(2),
            constrained=False,
            tol=1e-8,
            gradient=np.array([-2.0, 0.0]),
            bounds=bounds,
        )
        assert status is SolverStatus.OPTIMAL


class TestInteriorStart:
    def test_zeros_without_bounds(self):
        np.testing.assert_array_equal(_interior_start(3, None), np.zeros(3))

    def test_moves_off_finite_bounds(self):
        lower = np.array([-np.inf, 0.0, -np.inf, 0.5])
        upper = np.array([np.inf, np.inf, -2.0, 1.0])
        x0 = _interior_start(4, (lower, upper))
        np.testing.assert_allclose(x0, [0.0, 1.0, -3.0, 0.75])
