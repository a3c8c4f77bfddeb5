import numpy as np
import pytest

from mlemodels import fit_mle, fit_ols, generate


@pytest.fixture(scope="session")
def dataset():
    """The reference sample: 2000 units, 5 periods, 16 regressors."""
    return generate(N=2000, T=5, seed=1234)


@pytest.fixture(scope="session")
def small_dataset():
    return generate(N=100, T=5, seed=7)


@pytest.fixture(scope="session")
def ols_result(dataset):
    return fit_ols(dataset)


@pytest.fixture(scope="session")
def mle_result(dataset):
    return fit_mle(dataset)


@pytest.fixture
def spd_hessian():
    """A symmetric positive-definite 3x3 matrix."""
    return np.array(
        [
            [4.0, 1.0, 0.5],
            [1.0, 3.0, 0.2],
            [0.5, 0.2, 2.0],
        ]
    )
