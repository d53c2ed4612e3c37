from __future__ import annotations
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Optional, Tuple, Literal
import math

from .exceptions import ConfigurationError

SVDBackend = Literal["auto", "numpy", "randomized"]

'''
Data classes that hold the hyperparameters of the different solvers. 
Every config is validated once, when it is constructed.
'''

@dataclass
class BaseConfig:
    svd_backend: SVDBackend = "numpy"
    random_state: Optional[int] = None
    check_finite: bool = True

    def __post_init__(self):
        if self.svd_backend not in ("auto", "numpy", "randomized"):
            raise ConfigurationError(f"Unknown svd_backend: {self.svd_backend!r}")

@dataclass
class PCAConfig(BaseConfig):
    # <= 1.0: fraction of variance to keep, > 1.0: number of components
    n_components: float = 1.0

    def __post_init__(self):
        super().__post_init__()
        if isinstance(self.n_components, bool) or not isinstance(self.n_components, Real):
            raise ConfigurationError(f"`n_components` must be a number, got {self.n_components!r}")
        if not math.isfinite(self.n_components) or self.n_components <= 0:
            raise ConfigurationError(f"`n_components` must be greater than 0, got {self.n_components}")

    @property
    def is_variance_target(self) -> bool:
        return self.n_components <= 1.0

@dataclass(frozen=True)
class RPCAConfig:
    '''
    Hyperparameters of the ADMM robust PCA solver. 

    lambda_: sparsity regularization weight, default 1/sqrt(max(N, M)). 
    mu: augmented Lagrangian penalty, default 10 * lambda_. 
    tolerance: stop once ||X - L - S||_F / ||X||_F drops below this. 
    max_iterations: hard bound on the number of ADMM updates. 

    Use RPCAConfig.from_shape to get the shape-dependent defaults.
    '''
    lambda_: float
    mu: float
    tolerance: float = 1e-6
    max_iterations: int = 1000
    check_finite: bool = True

    def __post_init__(self):
        for name in ("lambda_", "mu", "tolerance"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigurationError(f"`{name}` must be a number, got {value!r}")
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"`{name}` must be greater than 0, got {value}")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, Integral):
            raise ConfigurationError(f"`max_iterations` must be an integer, got {self.max_iterations!r}")
        if self.max_iterations < 1:
            raise ConfigurationError(f"`max_iterations` cannot be {self.max_iterations}, must be at least 1")

    @classmethod
    def from_shape(
        cls,
        shape: Tuple[int, int],
        *,
        lambda_: Optional[float] = None,
        mu: Optional[float] = None,
        tolerance: float = 1e-6,
        max_iterations: int = 1000,
        check_finite: bool = True,
    ) -> "RPCAConfig":
        '''
        Build a config for an N x M matrix, filling lambda_ and mu from 
        the shape unless they are given.
        '''
        if len(shape) != 2 or min(shape) < 1:
            raise ConfigurationError(f"shape must describe a non-empty N x M matrix, got {shape}")
        if lambda_ is None:
            lambda_ = 1.0 / math.sqrt(max(shape))
        if mu is None and isinstance(lambda_, Real):
            mu = 10.0 * lambda_
        return cls(
            lambda_=lambda_,
            mu=mu,
            tolerance=tolerance,
            max_iterations=max_iterations,
            check_finite=check_finite,
        )
