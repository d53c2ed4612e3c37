"""
Tests for the numerical primitives: norms, sign, shrinkage operators,
SVD wrapper and the small linear-algebra helpers.
"""

import numpy as np
import pytest
from scipy.linalg import LinAlgError

import robust_pca.utils as utils_module
from robust_pca import pca
from robust_pca.utils import (
    covariance_matrix,
    frobenius_norm,
    laplace_expansion,
    sign,
    singular_value_shrinkage,
    soft_threshold,
    svd,
    truncated_svd,
    validate_matrix,
)
from robust_pca.exceptions import ConfigurationError, NumericalError, ShapeError


class TestNormAndSign:

    def test_frobenius_norm_matches_numpy(self, random_matrix):
        assert frobenius_norm(random_matrix) == pytest.approx(np.linalg.norm(random_matrix, 'fro'))

    def test_frobenius_norm_no_overflow(self):
        X = np.full((3, 4), 1e160)
        assert frobenius_norm(X) == pytest.approx(1e160 * np.sqrt(12))

    def test_frobenius_norm_nan(self):
        assert np.isnan(frobenius_norm(np.array([[1.0, np.nan]])))

    def test_frobenius_norm_zero(self):
        assert frobenius_norm(np.zeros((3, 4))) == 0.0

    def test_sign_exact_zero(self):
        X = np.array([[2.0, -3.0], [0.0, 1e-300]])
        np.testing.assert_array_equal(sign(X), [[1.0, -1.0], [0.0, 1.0]])

    def test_sign_negative_zero(self):
        assert sign(np.array([[-0.0]]))[0, 0] == 0.0


class TestSoftThreshold:

    @pytest.mark.parametrize("v, expected", [
        (0.0, 0.0),
        (1.5, 0.0),     # v == tau
        (3.0, 1.5),     # v == 2 tau
        (-3.0, -1.5),   # v == -2 tau
        (0.7, 0.0),
    ])
    def test_scalar_cases(self, v, expected):
        tau = 1.5
        assert soft_threshold(tau, np.array([[v]]))[0, 0] == pytest.approx(expected)

    def test_elementwise_not_first_hit(self):
        """Every entry is shrunk on its own, not by the first positive entry."""
        X = np.array([[5.0, -4.0, 0.5], [0.0, 2.0, -0.2]])
        expected = np.array([[4.0, -3.0, 0.0], [0.0, 1.0, 0.0]])
        np.testing.assert_allclose(soft_threshold(1.0, X), expected)

    def test_matches_formula(self, random_matrix):
        tau = 20.0
        expected = np.sign(random_matrix) * np.maximum(np.abs(random_matrix) - tau, 0)
        np.testing.assert_allclose(soft_threshold(tau, random_matrix), expected)

    def test_tau_zero_is_identity(self, random_matrix):
        np.testing.assert_array_equal(soft_threshold(0.0, random_matrix), random_matrix)

    def test_negative_tau_rejected(self):
        with pytest.raises(ConfigurationError):
            soft_threshold(-1.0, np.ones((2, 2)))


class TestSingularValueShrinkage:

    def test_tau_zero_is_identity(self, random_matrix):
        np.testing.assert_allclose(singular_value_shrinkage(0.0, random_matrix), random_matrix, atol=1e-9)

    def test_tau_zero_rank_deficient(self, rng):
        X = np.outer(rng.standard_normal(8), rng.standard_normal(5))
        np.testing.assert_allclose(singular_value_shrinkage(0.0, X), X, atol=1e-9)

    def test_shrinks_singular_values(self, random_matrix):
        tau = 50.0
        s = np.linalg.svd(random_matrix, compute_uv=False)
        s_out = np.linalg.svd(singular_value_shrinkage(tau, random_matrix), compute_uv=False)
        np.testing.assert_allclose(s_out, np.maximum(s - tau, 0.0), atol=1e-8)

    def test_large_tau_gives_zero(self, random_matrix):
        tau = np.linalg.norm(random_matrix, 2) + 1.0
        out = singular_value_shrinkage(tau, random_matrix)
        assert out.shape == random_matrix.shape
        assert not np.any(out)


class TestSVD:

    def test_reconstruction(self, random_matrix):
        U, s, Vt = svd(random_matrix)
        assert U.shape == (30, 12) and s.shape == (12,) and Vt.shape == (12, 12)
        assert np.all(np.diff(s) <= 0)
        np.testing.assert_allclose((U * s) @ Vt, random_matrix, atol=1e-9)

    def test_non_finite_raises(self):
        X = np.ones((3, 3))
        X[1, 1] = np.nan
        with pytest.raises(NumericalError):
            svd(X)

    def test_lapack_failure_raises(self, monkeypatch, random_matrix):
        def failing_svd(*args, **kwargs):
            raise LinAlgError("SVD did not converge")
        monkeypatch.setattr(utils_module, "dense_svd", failing_svd)
        with pytest.raises(NumericalError):
            svd(random_matrix)
        with pytest.raises(NumericalError):
            pca(random_matrix)

    def test_shape_errors_are_not_numerical(self):
        with pytest.raises(ValueError) as info:
            svd(np.ones(3))
        assert not isinstance(info.value, NumericalError)

    def test_truncated_numpy(self, random_matrix):
        U, s, Vt = truncated_svd(random_matrix, 3, backend="numpy")
        assert U.shape == (30, 3) and s.shape == (3,) and Vt.shape == (3, 12)

    def test_truncated_randomized_matches_leading_values(self, rng):
        X = rng.standard_normal((60, 8)) @ rng.standard_normal((8, 40))
        _, s, _ = truncated_svd(X, 4, backend="randomized", random_state=0)
        s_full = np.linalg.svd(X, compute_uv=False)
        np.testing.assert_allclose(s, s_full[:4], rtol=1e-6)

    def test_unknown_backend(self, random_matrix):
        with pytest.raises(ConfigurationError):
            truncated_svd(random_matrix, 2, backend="svds")


class TestValidateMatrix:

    def test_coerces_lists(self):
        X = validate_matrix([[1, 2], [3, 4]])
        assert X.dtype == np.float64 and X.shape == (2, 2)

    @pytest.mark.parametrize("bad", [np.ones(3), np.ones((2, 2, 2)), np.ones((0, 3)), np.ones((3, 0))])
    def test_bad_shapes(self, bad):
        with pytest.raises(ShapeError):
            validate_matrix(bad)

    def test_inf_rejected(self):
        with pytest.raises(NumericalError):
            validate_matrix(np.array([[1.0, np.inf]]))

    def test_inf_allowed_without_check(self):
        X = validate_matrix(np.array([[1.0, np.inf]]), check_finite=False)
        assert np.isinf(X[0, 1])


class TestHelpers:

    def test_covariance_matches_numpy(self, random_matrix):
        B = random_matrix - random_matrix.mean(axis=0)
        np.testing.assert_allclose(covariance_matrix(B), np.cov(random_matrix, rowvar=False))

    def test_covariance_is_column_covariance(self, random_matrix):
        B = random_matrix - random_matrix.mean(axis=0)
        assert covariance_matrix(B).shape == (12, 12)

    def test_covariance_needs_two_rows(self):
        with pytest.raises(ShapeError):
            covariance_matrix(np.ones((1, 3)))

    def test_laplace_matches_det(self, rng):
        for n in (1, 2, 3, 5):
            A = rng.standard_normal((n, n))
            assert laplace_expansion(A) == pytest.approx(np.linalg.det(A), rel=1e-9, abs=1e-12)

    def test_laplace_known_value(self):
        x = np.array([[1., 2., 3.], [3., 1., 2.], [2., 3., 1.]])
        assert laplace_expansion(x) == pytest.approx(18.0)

    def test_laplace_non_square(self):
        with pytest.raises(ShapeError):
            laplace_expansion(np.ones((2, 3)))
