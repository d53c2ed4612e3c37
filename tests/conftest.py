import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def random_matrix(rng):
    return rng.uniform(-100.0, 100.0, size=(30, 12))
