import jax.numpy as jnp
import numpy as np

from numpy.typing import ArrayLike, NDArray

from mlemodels import _autodiff  # noqa: F401  (enables float64 in jax)
from mlemodels._utils import Dataset


def log_likelihood(coefficients: ArrayLike, noise_scale, dataset: Dataset):
    """
    Gaussian log-likelihood of the linear model.

    L(b, s) = (n/2) log(1 / (2 pi s^2)) - sum_i (y_i - x_i b)^2 / (2 s^2)

    Written with `jax.numpy` so the optimizer can differentiate it. Returns a
    0-d jax array; wrap in `float` for a Python scalar.
    """
    X = jnp.asarray(dataset.X)
    y = jnp.asarray(dataset.y)
    n = y.shape[0]
    resid = y - X @ jnp.asarray(coefficients)
    s2 = jnp.asarray(noise_scale) ** 2
    return 0.5 * n * jnp.log(1.0 / (2.0 * jnp.pi * s2)) - jnp.sum(resid**2) / (
        2.0 * s2
    )


class GaussianLikelihood:
    """
    Log-likelihood objective over the packed vector ``theta = [b, s]``.

    The dataset is held by reference and never modified. The noise scale is
    the last entry of `theta` and is bounded below by zero; the coefficients
    are free.
    """

    def __init__(self, dataset: Dataset) -> None:
        self.dataset = dataset

    @property
    def n_params(self) -> int:
        return self.dataset.n_features + 1

    @property
    def bounds(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        lower = np.full(self.n_params, -np.inf)
        upper = np.full(self.n_params, np.inf)
        lower[-1] = 0.0
        return lower, upper

    def split(self, theta: ArrayLike):
        """Split `theta` into (coefficients, noise_scale)."""
        return theta[:-1], theta[-1]

    def initial_params(self) -> NDArray[np.float64]:
        """Zero coefficients and the standard deviation of y, floored at one."""
        theta = np.zeros(self.n_params, dtype=np.float64)
        theta[-1] = max(float(np.std(self.dataset.y)), 1.0)
        return theta

    def __call__(self, theta):
        coefficients, noise_scale = self.split(theta)
        return log_likelihood(coefficients, noise_scale, self.dataset)

    def __repr__(self) -> str:
        return (
            f"<GaussianLikelihood: nobs={self.dataset.n_samples}, "
            f"k={self.dataset.n_features}>"
        )
