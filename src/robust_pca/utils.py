# decomposition primitives
from __future__ import annotations
from typing import Optional, Tuple, Literal
import logging
import numpy as np
from numpy.typing import NDArray, ArrayLike
from scipy.linalg import svd as dense_svd
from scipy.linalg import LinAlgError
from sklearn.utils.extmath import randomized_svd as skl_randomized_svd

from .exceptions import ConfigurationError, NumericalError, ShapeError

logger = logging.getLogger(__name__)

SVDBackend = Literal["auto", "numpy", "randomized"]

def validate_matrix(X: ArrayLike, name: str = "X", *, check_finite: bool = True) -> NDArray:
    '''
    Coerce X to a 2D float64 array and reject empty or non-finite input.
    '''
    Xw = np.asarray(X, dtype=np.float64)
    if Xw.ndim != 2:
        raise ShapeError(f"{name} must be a 2D matrix, got ndim={Xw.ndim}")
    if Xw.shape[0] < 1 or Xw.shape[1] < 1:
        raise ShapeError(f"{name} must be non-empty, got shape {Xw.shape}")
    if check_finite and not np.all(np.isfinite(Xw)):
        raise NumericalError(f"{name} contains NaN or Inf entries")
    return Xw

def _check_tau(tau: float) -> float:
    tau = float(tau)
    if not np.isfinite(tau) or tau < 0:
        raise ConfigurationError(f"Threshold tau must be a finite value >= 0, got {tau}")
    return tau

def frobenius_norm(X: NDArray) -> float:
    X = np.asarray(X, dtype=np.float64)
    if X.size == 0:
        return 0.0
    # scale by the largest entry so squaring cannot overflow
    amax = np.max(np.abs(X))
    if amax == 0.0 or not np.isfinite(amax):
        return float(amax)
    return float(amax * np.sqrt(np.sum(np.square(X / amax))))

def sign(X: NDArray) -> NDArray:
    '''
    Element-wise sign: 1 where X > 0, -1 where X < 0, 0 where X == 0 exactly.
    '''
    X = np.asarray(X, dtype=np.float64)
    out = np.zeros_like(X)
    out[X > 0] = 1.0
    out[X < 0] = -1.0
    return out

def soft_threshold(tau: float, X: NDArray) -> NDArray:
    '''
    Element-wise shrinkage operator So(tau, X) = sign(X) * max(|X| - tau, 0). 
    Proximal operator of tau * ||X||_1.
    '''
    tau = _check_tau(tau)
    X = np.asarray(X, dtype=np.float64)
    return sign(X) * np.maximum(np.abs(X) - tau, 0.0)

def svd(M: NDArray) -> Tuple[NDArray, NDArray, NDArray]:
    '''
    Thin dense SVD, M = U @ diag(s) @ Vt with s in descending order. 
    Non-finite input and LAPACK failures surface as NumericalError.
    '''
    M = np.asarray(M, dtype=np.float64)
    if not np.all(np.isfinite(M)):
        raise NumericalError(f"Cannot take the SVD of a matrix with NaN or Inf entries, shape {M.shape}")
    try:
        U, s, Vt = dense_svd(M, full_matrices=False)
    except (LinAlgError, np.linalg.LinAlgError) as e:
        raise NumericalError(f"SVD did not converge on matrix of shape {M.shape}") from e
    return U, s, Vt

def singular_value_shrinkage(tau: float, X: NDArray) -> NDArray:
    '''
    Shrinkage operator for singular values, Do(tau, X) = U So(tau, S) Vt. 
    Proximal operator of tau * ||X||_* (nuclear norm).
    '''
    tau = _check_tau(tau)
    X = np.asarray(X, dtype=np.float64)
    U, s, Vt = svd(X)
    s_shrunk = soft_threshold(tau, s)
    # drop the zeroed tail before the products
    keep = int(np.count_nonzero(s_shrunk))
    if keep == 0:
        return np.zeros(X.shape, dtype=np.float64)
    return (U[:, :keep] * s_shrunk[:keep]) @ Vt[:keep, :]

def truncated_svd(
    M: NDArray, rank: Optional[int], backend: SVDBackend = "auto", random_state: Optional[int] = None
) -> Tuple[NDArray, NDArray, NDArray]:
    m, n = M.shape
    k = min(rank or min(m, n), min(m, n))
    if backend == "auto":
        backend = "randomized" if (max(m, n) > 500 and k < min(m, n)//2) else "numpy"
    if backend == "randomized":
        U, s, Vt = skl_randomized_svd(M, n_components=k, random_state=random_state)
        return U[:, :k], s[:k], Vt[:k, :]
    if backend != "numpy":
        raise ConfigurationError(f"Unknown svd_backend: {backend}")
    U, s, Vt = svd(M)
    return U[:, :k], s[:k], Vt[:k, :]

def covariance_matrix(B: NDArray) -> NDArray:
    '''
    Sample covariance of the columns of an already centered matrix B 
    (rows are observations): B^T B / (n - 1), an M x M matrix. 
    This is the feature covariance, not the N x N Gram matrix B B^T / (n - 1) 
    of the observations.
    '''
    n = B.shape[0]
    if n < 2:
        raise ShapeError("Covariance needs at least two observations (rows).")
    return B.T @ B / (n - 1)

def laplace_expansion(X: NDArray) -> float:
    '''
    Determinant by cofactor expansion along the first row. 
    Exponential cost; only meant for small matrices and cross-checks.
    '''
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2 or X.shape[0] != X.shape[1]:
        raise ShapeError(f"Cannot perform Laplace expansion on non-square matrix of shape {X.shape}")
    n = X.shape[0]
    if n == 0:
        raise ShapeError("Cannot perform Laplace expansion on an empty matrix")
    if n == 1:
        return float(X[0, 0])
    if n == 2:
        return float(X[0, 0] * X[1, 1] - X[0, 1] * X[1, 0])

    # TODO: expand along the row or column with the most zeros
    det = 0.0
    for j in range(n):
        if X[0, j] == 0.0:
            continue
        minor = np.delete(np.delete(X, 0, axis=0), j, axis=1)
        cofactor = -1.0 if j % 2 else 1.0
        det += cofactor * X[0, j] * laplace_expansion(minor)
    return det
