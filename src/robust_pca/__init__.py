from .BaseConfig import BaseConfig, PCAConfig, RPCAConfig
from .DecompositionSolver import DecompositionSolver
from .PCA import PCA, pca, select_n_components
from .RobustPCA import RobustPCA, robust_pca
from .LowRankSparseDataGenerator import LowRankSparseDataGenerator, rank_one
from .exceptions import (
    DecompositionError,
    ConfigurationError,
    ShapeError,
    DegenerateInputError,
    NumericalError,
    NotFittedError,
)
from .utils import (
    frobenius_norm,
    sign,
    soft_threshold,
    singular_value_shrinkage,
    covariance_matrix,
    laplace_expansion,
)

__version__ = "0.1.0"
