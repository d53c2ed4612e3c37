from __future__ import annotations
import logging
import numpy as np
from numpy.typing import NDArray, ArrayLike

from .BaseConfig import PCAConfig
from .DecompositionSolver import DecompositionSolver
from .exceptions import DegenerateInputError, ShapeError
from .utils import validate_matrix, truncated_svd, svd, frobenius_norm

logger = logging.getLogger(__name__)

'''
Principal component analysis by mean-centering and SVD. 
The number of retained components is chosen either as a fraction of the 
explained variance or as an explicit count.
'''

def select_n_components(ratio_cumsum: NDArray, n_components: float) -> int:
    '''
    Number of leading components to keep. 

    n_components == 1.0 keeps everything. A fraction below 1.0 keeps the 
    shortest prefix whose cumulative explained variance ratio strictly 
    exceeds it, or all components when no prefix does (the cumulative sum 
    may stop just short of 1.0 in floating point). A count above 1.0 is 
    truncated to an integer and clamped to the available rank.
    '''
    r = len(ratio_cumsum)
    if n_components == 1.0:
        return r
    if n_components < 1.0:
        # first index whose cumulative ratio is > n_components
        idx = int(np.searchsorted(ratio_cumsum, n_components, side="right"))
        return min(idx + 1, r)
    return min(int(n_components), r)


class PCA(DecompositionSolver):
    '''
    PCA estimator. After fit(), components() holds the retained left singular 
    vectors of the centered data scaled by their singular values (N x k).
    '''
    def __init__(self, config: PCAConfig = None):
        super().__init__(config if config is not None else PCAConfig())
        self._mean = None
        self._components = None
        self._Vt = None
        self._s = None
        self._explained_variance = None
        self._explained_variance_ratio = None
        self.n_components_ = None

    def fit(self, X: ArrayLike):
        '''
        Fits mean and reduced basis of the N x M observation matrix X.
        '''
        cfg: PCAConfig = self.config  # type: ignore
        X = validate_matrix(X, check_finite=cfg.check_finite)
        n, m = X.shape
        if n < 2:
            raise ShapeError("PCA needs at least two observations (rows) to estimate variance.")
        r = min(n, m)

        mean = X.mean(axis=0)
        B = X - mean

        # randomized SVD only ever returns the requested count, so the
        # total variance comes from the Frobenius norm of B instead
        if cfg.is_variance_target or cfg.svd_backend == "numpy":
            U, s, Vt = svd(B)
            total_var = np.sum(s ** 2) / (n - 1)
        else:
            U, s, Vt = truncated_svd(B, int(cfg.n_components), cfg.svd_backend, cfg.random_state)
            total_var = frobenius_norm(B) ** 2 / (n - 1)

        # centered data at rounding level of X counts as constant
        tiny = 10 * np.finfo(np.float64).eps * np.abs(X).max() * np.sqrt(n * m)
        if total_var == 0.0 or np.sqrt(total_var * (n - 1)) <= tiny:
            raise DegenerateInputError("All columns of X are constant; explained variance is undefined.")

        explained_variance = s ** 2 / (n - 1)
        explained_variance_ratio = explained_variance / total_var
        ratio_cumsum = np.cumsum(explained_variance_ratio)

        k = select_n_components(ratio_cumsum, cfg.n_components)

        self._mean = mean
        self._s = s[:k]
        self._Vt = Vt[:k, :]
        self._components = U[:, :k] * s[:k]
        self._explained_variance = explained_variance[:k]
        self._explained_variance_ratio = explained_variance_ratio[:k]
        self.n_components_ = k

        logger.info(
            "PCA kept %d of %d components (%.4f of variance).", k, r, float(ratio_cumsum[k - 1])
        )
        self._fitted = True
        return self

    def mean(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._mean)

    def components(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._components)

    def basis(self) -> NDArray:
        """Right singular vectors of the retained components, M x k."""
        self._check_fitted()
        return self._readonly(self._Vt.T)

    def singular_values(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._s)

    def explained_variance(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._explained_variance)

    def explained_variance_ratio(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._explained_variance_ratio)

    def transform(self, X: ArrayLike) -> NDArray:
        '''
        Projects rows of X onto the retained basis.
        '''
        self._check_fitted()
        X = validate_matrix(X, check_finite=self.config.check_finite)
        if X.shape[1] != self._mean.shape[0]:
            raise ShapeError(
                f"X has {X.shape[1]} columns but PCA was fitted on {self._mean.shape[0]}"
            )
        return (X - self._mean) @ self._Vt.T

    def predict(self) -> NDArray:
        '''
        Rank-k reconstruction of the training matrix.
        '''
        self._check_fitted()
        return self._components @ self._Vt + self._mean


def pca(X: ArrayLike, n_components: float = 1.0, **kwargs) -> PCA:
    """Fit a PCA with PCAConfig(n_components=n_components, **kwargs)."""
    return PCA(PCAConfig(n_components=n_components, **kwargs)).fit(X)
