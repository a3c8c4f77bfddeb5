from mlemodels._utils import (
    CurvatureInfo,
    Dataset,
    EstimationResult,
    OptimizerResult,
    SolverStatus,
)
from mlemodels._solvers import maximize
from mlemodels.data import TRUE_COEFFICIENTS, TRUE_NOISE_SCALE, generate
from mlemodels.exceptions import (
    InvalidDimensionError,
    LagrangianHessianWarning,
    MLEModelsError,
    SingularHessianError,
    SingularMatrixError,
    SolverFailureError,
)
from mlemodels.inference import (
    compare,
    comparison_frame,
    comparison_table,
    standard_errors_from_curvature,
    standard_errors_from_hessian,
)
from mlemodels.likelihood import GaussianLikelihood, log_likelihood
from mlemodels.mle import GaussianMLERegression, fit_mle
from mlemodels.ols import OLSRegression, fit_ols

__all__ = [
    "CurvatureInfo",
    "Dataset",
    "EstimationResult",
    "GaussianLikelihood",
    "GaussianMLERegression",
    "InvalidDimensionError",
    "LagrangianHessianWarning",
    "MLEModelsError",
    "OLSRegression",
    "OptimizerResult",
    "SingularHessianError",
    "SingularMatrixError",
    "SolverFailureError",
    "SolverStatus",
    "TRUE_COEFFICIENTS",
    "TRUE_NOISE_SCALE",
    "compare",
    "comparison_frame",
    "comparison_table",
    "fit_mle",
    "fit_ols",
    "generate",
    "log_likelihood",
    "maximize",
    "standard_errors_from_curvature",
    "standard_errors_from_hessian",
]
