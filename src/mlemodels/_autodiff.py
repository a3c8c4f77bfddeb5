import jax

# float64 before any array is created; the Hessians here have entries of
# order n / sigma^2 and float32 loses the standard errors.
jax.config.update("jax_enable_x64", True)

import jax.numpy as jnp  # noqa: E402
import numpy as np  # noqa: E402

from dataclasses import dataclass  # noqa: E402
from numpy.typing import NDArray  # noqa: E402
from typing import Callable  # noqa: E402


@dataclass(frozen=True)
class Derivatives:
    """NumPy-facing value, gradient and Hessian of a scalar jax function"""

    value: Callable[[NDArray[np.float64]], float]
    gradient: Callable[[NDArray[np.float64]], NDArray[np.float64]]
    hessian: Callable[[NDArray[np.float64]], NDArray[np.float64]]


def differentiate(fn: Callable, sign: float = 1.0) -> Derivatives:
    """
    Build jitted value, gradient and Hessian callables for `sign * fn`.

    `fn` must map a 1-d parameter vector to a scalar using `jax.numpy`.
    Inputs and outputs of the returned callables are NumPy float64.
    """

    def signed(theta):
        return sign * fn(theta)

    value = jax.jit(signed)
    gradient = jax.jit(jax.grad(signed))
    hessian = jax.jit(jax.hessian(signed))

    return Derivatives(
        value=lambda theta: float(value(jnp.array(theta, dtype=jnp.float64))),
        gradient=lambda theta: np.array(
            gradient(jnp.array(theta, dtype=jnp.float64)), dtype=np.float64
        ),
        hessian=lambda theta: np.array(
            hessian(jnp.array(theta, dtype=jnp.float64)), dtype=np.float64
        ),
    )


def jacobian(fn: Callable) -> Callable[[NDArray[np.float64]], NDArray[np.float64]]:
    """Jitted Jacobian of a vector-valued jax function, as a 2-d NumPy array."""
    jac = jax.jit(jax.jacfwd(lambda theta: jnp.atleast_1d(fn(theta))))
    return lambda theta: np.atleast_2d(
        np.array(jac(jnp.array(theta, dtype=jnp.float64)), dtype=np.float64)
    )


def weighted_hessian(
    fn: Callable,
) -> Callable[[NDArray[np.float64], NDArray[np.float64]], NDArray[np.float64]]:
    """Jitted `sum_i v_i * hess(fn_i)(theta)` for a vector-valued jax function."""

    def weighted(theta, v):
        return jnp.dot(v, jnp.atleast_1d(fn(theta)))

    hess = jax.jit(jax.hessian(weighted, argnums=0))
    return lambda theta, v: np.array(
        hess(
            jnp.array(theta, dtype=jnp.float64), jnp.array(v, dtype=jnp.float64)
        ),
        dtype=np.float64,
    )
