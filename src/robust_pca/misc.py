# error metrics for comparing estimates against ground truth
from __future__ import annotations
import numpy as np
from numpy.typing import NDArray

from .utils import frobenius_norm

def frob_error(A: NDArray, B: NDArray) -> float:
    return frobenius_norm(np.asarray(A) - np.asarray(B))

def relative_error(A: NDArray, B: NDArray) -> float:
    '''
    ||A - B||_F / ||B||_F, with B the reference.
    '''
    denom = frobenius_norm(np.asarray(B))
    if denom == 0.0:
        raise ValueError("Reference matrix has zero norm; relative error is undefined.")
    return frob_error(A, B) / denom

def max_error(A: NDArray, B: NDArray) -> float:
    return float(np.max(np.abs(np.asarray(A) - np.asarray(B))))

def support_overlap(S: NDArray, S0: NDArray, atol: float = 1e-6) -> float:
    '''
    Fraction of the non-zero entries of S0 that are also non-zero in S.
    '''
    true_support = np.abs(S0) > 0
    n_true = np.count_nonzero(true_support)
    if n_true == 0:
        return 1.0
    found = np.abs(S) > atol
    return float(np.count_nonzero(found & true_support) / n_true)

def effective_rank(s: NDArray, tol: float = 1e-8) -> int:
    '''
    Number of singular values above tol relative to the largest one.
    '''
    s = np.asarray(s)
    if s.size == 0 or s.max() == 0:
        return 0
    return int(np.count_nonzero(s > tol * s.max()))
