from __future__ import annotations
import numpy as np
from pymanopt.manifolds import Stiefel


class LowRankSparseDataGenerator:
    '''
    Generator for robust PCA experiments.
    
    Builds X = L0 + S0 (+ noise) where L0 is a rank-d matrix with random
    orthonormal singular vectors and S0 has a fixed fraction of large
    entries at random positions.
    '''
    def __init__(self, n, m=None, d=1, sparsity=0.05, outlier_magnitude=50.0, seed=0,
                 sv_distribution='constant', sv_params=None, scale=10.0, sigma=0.0):
        """Initialize generator with matrix dimensions and corruption parameters.
        
        Args:
            n (int): Number of rows
            m (int): Number of columns (default: n)
            d (int): Rank of the low-rank part
            sparsity (float): Fraction of entries corrupted in S0 (default: 0.05)
            outlier_magnitude (float): Absolute value of each corrupted entry (default: 50.0)
            seed (int): Random seed (default: 0)
            sv_distribution (str): Type of singular value distribution 
                                 ('constant', 'uniform', 'exponential')
            sv_params (dict): Parameters for singular value generation
            scale (float): Multiplier applied to the singular values (default: 10.0)
            sigma (float): Standard deviation of dense Gaussian noise (default: 0.0)
        """
        m = n if m is None else m
        if d < 1 or d > min(n, m):
            raise ValueError(f"Bad rank d={d} for a {n} x {m} matrix")
        if not 0.0 <= sparsity <= 1.0:
            raise ValueError(f"sparsity must be in [0, 1], got {sparsity}")
        self.n = n
        self.m = m
        self.d = d
        self.sparsity = sparsity
        self.outlier_magnitude = outlier_magnitude
        self.seed = seed
        self.sv_distribution = sv_distribution
        self.sv_params = sv_params or {}
        self.scale = scale
        self.sigma = sigma
        np.random.seed(seed)

        self.s = self.scale * self._gen_singular_values()
        self.U = self._gen_orthonormal(self.n)
        self.V = self._gen_orthonormal(self.m)
        self.L0 = self._construct_matrix(self.U, self.V, self.s)
        self.S0 = self._gen_sparse_matrix()

    def _gen_orthonormal(self, rows):
        """Random point on the Stiefel manifold St(rows, d)."""
        point = Stiefel(rows, self.d).random_point()
        return np.asarray(point).reshape(rows, self.d)

    def _construct_matrix(self, U, V, s):
        """Construct matrix from its SVD components."""
        return (U * s) @ V.T

    def _gen_sparse_matrix(self):
        """Corrupt a random subset of entries with +/- outlier_magnitude."""
        size = self.n * self.m
        n_outliers = int(round(self.sparsity * size))
        S0 = np.zeros(size)
        idx = np.random.choice(size, size=n_outliers, replace=False)
        S0[idx] = self.outlier_magnitude * np.random.choice([-1.0, 1.0], size=n_outliers)
        return S0.reshape(self.n, self.m)

    def generate_sample(self):
        """Generate an observed matrix and its ground truth.
            
        Returns:
            tuple: (X, L0, S0) where X = L0 + S0 + noise
        """
        noise = np.zeros((self.n, self.m))
        if self.sigma > 0:
            noise = np.random.normal(0, self.sigma, size=(self.n, self.m))
        X = self.L0 + self.S0 + noise
        return X, self.L0, self.S0

    @property
    def support(self):
        """Boolean mask of the corrupted entries."""
        return self.S0 != 0

    def _gen_singular_values(self):
        """Generate singular values according to specified distribution."""
        if self.sv_distribution == 'constant':
            return np.ones(self.d)
        elif self.sv_distribution == 'uniform':
            low = self.sv_params.get('low', 0.5)
            high = self.sv_params.get('high', 1.0)
            return np.sort(np.random.uniform(low=low, high=high, size=self.d))[::-1]
        elif self.sv_distribution == 'exponential':
            base = self.sv_params.get('base', 0.9)
            return np.power(base, np.arange(self.d))
        else:
            raise ValueError(f"Unknown distribution: {self.sv_distribution}")


def rank_one(n, m=None, scale=10.0, seed=None):
    '''
    scale * u v^T for random unit vectors u, v.
    '''
    m = n if m is None else m
    if seed is not None:
        np.random.seed(seed)
    u = np.random.normal(size=n)
    v = np.random.normal(size=m)
    return scale * np.outer(u / np.linalg.norm(u), v / np.linalg.norm(v))
