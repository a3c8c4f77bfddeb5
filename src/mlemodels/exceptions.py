import numpy as np


class MLEModelsError(Exception):
    """Base class for errors raised by mlemodels."""


class InvalidDimensionError(MLEModelsError, ValueError):
    """Sample dimensions leave the regression under-identified."""


class SingularMatrixError(MLEModelsError, np.linalg.LinAlgError):
    """X'X cannot be inverted (rank-deficient design)."""


class SolverFailureError(MLEModelsError, RuntimeError):
    """The optimizer terminated without an optimal solution."""

    def __init__(self, message: str, status=None) -> None:
        super().__init__(message)
        self.status = status


class SingularHessianError(MLEModelsError, np.linalg.LinAlgError):
    """The curvature matrix cannot be turned into a covariance matrix."""


class LagrangianHessianWarning(UserWarning):
    """
    Standard errors were derived from the Hessian of a Lagrangian.

    With active constraints the curvature mixes the constraint terms with the
    log-likelihood, so the resulting standard errors are not the usual
    inverse-information ones.
    """
