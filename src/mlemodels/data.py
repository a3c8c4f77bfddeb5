import numpy as np

from numpy.typing import NDArray

from mlemodels._utils import Dataset
from mlemodels.exceptions import InvalidDimensionError

N_FEATURES = 16
TRUE_NOISE_SCALE = 0.3
TRUE_COEFFICIENTS = np.array([2.15] + [0.10, 0.50, 0.10, 0.75, 1.2] * 3)


def generate(N: int, T: int, seed: int) -> Dataset:
    """
    Generate a synthetic linear regression sample with `N * T` observations.

    The design has an intercept column followed by 15 regressors that cycle
    through five distributions:

    - standard normal
    - uniform on [0, 1)
    - normal with mean 1 and scale 2
    - uniform on [-2, 2)
    - ``0.6 * z + 0.8 * e`` where ``z`` is the standard normal regressor of the
      same block, so the design carries some collinearity

    The response is ``y = X @ TRUE_COEFFICIENTS + eps`` with
    ``eps ~ Normal(0, TRUE_NOISE_SCALE)``.

    Parameters
    ----------
    N : int
        Number of units.
    T : int
        Number of observations per unit.
    seed : int
        Seed for `numpy.random.default_rng`. Identical inputs give
        bit-identical datasets.

    Returns
    -------
    Dataset
        Read-only design, response and the true parameters.

    Raises
    ------
    InvalidDimensionError
        If `N` or `T` is not positive, or `N * T` does not exceed the number
        of regressors.
    """
    if int(N) != N or N <= 0:
        raise InvalidDimensionError(f"N must be a positive integer, got {N}")
    if int(T) != T or T <= 0:
        raise InvalidDimensionError(f"T must be a positive integer, got {T}")
    n_samples = int(N) * int(T)
    if n_samples <= N_FEATURES:
        raise InvalidDimensionError(
            f"N*T={n_samples} must exceed the number of regressors ({N_FEATURES})"
        )

    rng = np.random.default_rng(seed)

    X = np.empty((n_samples, N_FEATURES), dtype=np.float64)
    X[:, 0] = 1.0
    for start in range(1, N_FEATURES, 5):
        X[:, start : start + 5] = _regressor_block(rng, n_samples)

    eps = rng.normal(0.0, TRUE_NOISE_SCALE, size=n_samples)
    y = X @ TRUE_COEFFICIENTS + eps

    beta = TRUE_COEFFICIENTS.copy()
    for arr in (X, y, beta):
        arr.setflags(write=False)

    return Dataset(
        X=X,
        y=y,
        true_coefficients=beta,
        true_noise_scale=TRUE_NOISE_SCALE,
    )


def _regressor_block(rng: np.random.Generator, n: int) -> NDArray[np.float64]:
    """Draw one block of five heterogeneous regressors."""
    z = rng.standard_normal(n)
    return np.column_stack(
        [
            z,
            rng.uniform(0.0, 1.0, n),
            rng.normal(1.0, 2.0, n),
            rng.uniform(-2.0, 2.0, n),
            0.6 * z + 0.8 * rng.standard_normal(n),
        ]
    )
