from __future__ import annotations
from typing import Optional
import logging
import numpy as np
from numpy.typing import NDArray, ArrayLike

from .BaseConfig import RPCAConfig
from .DecompositionSolver import DecompositionSolver
from .exceptions import NumericalError
from .utils import validate_matrix, frobenius_norm, soft_threshold, singular_value_shrinkage

logger = logging.getLogger(__name__)

'''
Robust PCA (principal component pursuit) via ADMM, from: 
Candes, Li, Ma, Wright. "Robust Principal Component Analysis?" 
Journal of the ACM 58.3 (2011). 

Solves min ||L||_* + lambda ||S||_1 subject to X = L + S.
'''

class RobustPCA(DecompositionSolver):
    '''
    Splits X into a low-rank part L and a sparse part S. 
    If no config is given, RPCAConfig.from_shape(X.shape) is used.
    '''
    def __init__(self, config: Optional[RPCAConfig] = None):
        super().__init__(config)
        self._L = None
        self._S = None
        self._history = None
        self.hyperparameters_ = None
        self.n_iter_ = None
        self.converged_ = None
        self.residual_ = None

    def fit(self, X: ArrayLike):
        '''
        Runs the ADMM loop until the normalized primal residual is below 
        tolerance or max_iterations updates have been made. Running out of 
        iterations is not an error; check converged_.
        '''
        check_finite = self.config.check_finite if self.config is not None else True
        X = validate_matrix(X, check_finite=check_finite)
        cfg = self.config if self.config is not None else RPCAConfig.from_shape(X.shape)
        self.hyperparameters_ = cfg

        normX = frobenius_norm(X)
        if not np.isfinite(normX):
            raise NumericalError("Frobenius norm of X is not finite")
        if normX == 0.0:
            logger.info("Input matrix is all zeros; returning L = S = 0.")
            self._set_result(np.zeros_like(X), np.zeros_like(X), [], converged=True, residual=0.0)
            return self

        L = np.zeros_like(X)
        S = np.zeros_like(X)
        Y = np.zeros_like(X)
        inv_mu = 1.0 / cfg.mu
        history = []
        err = np.inf

        for i in range(cfg.max_iterations):
            # ADMM step, update L then S using the fresh L
            L = singular_value_shrinkage(inv_mu, X - S + inv_mu * Y)
            S = soft_threshold(cfg.lambda_ * inv_mu, X - L + inv_mu * Y)

            # dual ascent on the augmented Lagrangian multiplier
            Z = X - L - S
            Y = Y + cfg.mu * Z

            err = frobenius_norm(Z) / normX
            if not np.isfinite(err):
                raise NumericalError(f"ADMM residual became non-finite at iteration {i + 1}")
            history.append(err)
            logger.debug("iter %d: residual %.3e", i + 1, err)

            if err < cfg.tolerance:
                break

        converged = err < cfg.tolerance
        if converged:
            logger.info("Robust PCA converged after %d iterations (residual %.3e).", len(history), err)
        else:
            logger.warning(
                "Robust PCA stopped after max_iterations=%d without reaching tolerance %.1e (residual %.3e).",
                cfg.max_iterations, cfg.tolerance, err,
            )
        self._set_result(L, S, history, converged=converged, residual=float(err))
        return self

    def _set_result(self, L: NDArray, S: NDArray, history, *, converged: bool, residual: float):
        self._L, self._S = L, S
        self._history = np.asarray(history, dtype=np.float64)
        self.n_iter_ = len(history)
        self.converged_ = converged
        self.residual_ = residual
        self._fitted = True

    def L(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._L)

    def S(self) -> NDArray:
        self._check_fitted()
        return self._readonly(self._S)

    def residual_history(self) -> NDArray:
        """Normalized primal residual ||X - L - S|| / ||X|| after each iteration."""
        self._check_fitted()
        return self._readonly(self._history)

    def predict(self) -> NDArray:
        self._check_fitted()
        return self._L.copy()


def robust_pca(X: ArrayLike, config: Optional[RPCAConfig] = None) -> RobustPCA:
    """Fit a RobustPCA on X, with shape-derived defaults when config is None."""
    return RobustPCA(config).fit(X)
