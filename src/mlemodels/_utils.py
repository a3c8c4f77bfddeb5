import numpy as np

from dataclasses import dataclass
from enum import Enum
from numpy.typing import NDArray


@dataclass(frozen=True)
class Dataset:
    """Synthetic linear-Gaussian regression sample"""

    X: NDArray[np.float64]  # (n_samples, n_features) design, intercept column first
    y: NDArray[np.float64]  # (n_samples,) response
    true_coefficients: NDArray[np.float64]  # (n_features,)
    true_noise_scale: float

    @property
    def n_samples(self) -> int:
        return self.X.shape[0]

    @property
    def n_features(self) -> int:
        return self.X.shape[1]


@dataclass(frozen=True)
class EstimationResult:
    """Output of a single OLS or MLE fit"""

    coefficients: NDArray[np.float64]  # (n_features,)
    noise_scale_estimate: float
    standard_errors: NDArray[np.float64]  # (n_features,) coefficient SEs only
    log_likelihood: float
    noise_scale_standard_error: float | None = None  # MLE only


@dataclass(frozen=True)
class CurvatureInfo:
    """Curvature of the maximized objective at the optimum"""

    hessian: NDArray[np.float64]  # (n_params, n_params), coefficients then noise scale
    is_lagrangian: bool = False  # True when equality constraints were active


class SolverStatus(Enum):
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    NUMERICAL_FAILURE = "numerical_failure"


@dataclass(frozen=True)
class OptimizerResult:
    """Output from the nonlinear optimizer"""

    params: NDArray[np.float64]  # (n_params,) optimal parameter vector
    objective_value: float  # maximized objective
    curvature: CurvatureInfo
    status: SolverStatus
    n_iter: int
    message: str = ""
