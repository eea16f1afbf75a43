"""Tests for the leaf structured matrices.

Tests diagonal scaling, permutation gather/scatter, Householder reflections and dense matrices, including their dense forms and construction errors.
"""

import copy

import jax
import jax.numpy as jnp
import pytest
from jax import Array

from structured_rnn import (
    COMPLEX,
    REAL,
    DegenerateInput,
    DenseMatrix,
    DiagonalMatrix,
    DimensionMismatch,
    InvalidParameter,
    PermutationMatrix,
    ReflectionMatrix,
    ScalarDomain,
    UnsupportedOperation,
    Vector,
)

jax.config.update("jax_platform_name", "cpu")
jax.config.update("jax_enable_x64", True)

# Tolerances
RTOL = 1e-6
ATOL = 1e-6

DOMAINS = [REAL, COMPLEX]
SIZES = [1, 7, 64]


@pytest.fixture
def key() -> Array:
    """Random key for tests."""
    return jax.random.PRNGKey(42)


class TestDiagonal:
    """Test diagonal matrices."""

    @pytest.mark.parametrize("domain", DOMAINS)
    def test_forward_is_elementwise_product(
        self, domain: ScalarDomain, key: Array
    ) -> None:
        """Test applying D matches multiplying by its factor vector."""
        k1, k2 = jax.random.split(key)
        diag = DiagonalMatrix.random(k1, 1000, 1.0, domain)
        factors = Vector(diag.factors)
        v = Vector.random(k2, 1000, 1000.0, domain)
        u = v.dup()

        v *= diag
        u *= factors
        assert jnp.array_equal(v.array, u.array)
        assert v.norm("min") == u.norm("min")
        assert v.norm("L1") == u.norm("L1")

    @pytest.mark.parametrize("domain", DOMAINS)
    def test_inverse_undoes_forward(self, domain: ScalarDomain, key: Array) -> None:
        k1, k2 = jax.random.split(key)
        diag = DiagonalMatrix.random(k1, 64, 1.0, domain)
        v = Vector.random(k2, 64, 5.0, domain)
        w = v * diag / diag
        assert jnp.allclose(w.array, v.array, rtol=RTOL, atol=ATOL)

    def test_identity(self, key: Array) -> None:
        v = Vector.random(key, 10, 1.0, COMPLEX)
        w = v * DiagonalMatrix.identity(10)
        assert jnp.array_equal(w.array, v.array)

    def test_phases_are_unit_modulus(self, key: Array) -> None:
        diag = DiagonalMatrix.phases(key, 32)
        assert diag.domain == COMPLEX
        assert jnp.allclose(jnp.abs(diag.factors), 1.0, rtol=RTOL, atol=ATOL)

    def test_zero_factor_inverse(self) -> None:
        """Test inverse with a zero factor fails without touching the vector."""
        diag = DiagonalMatrix([1.0, 0.0, 2.0])
        assert not diag.invertible
        v = Vector([1.0, 2.0, 3.0])
        v *= diag
        assert jnp.array_equal(v.array, jnp.array([1.0, 0.0, 6.0]))
        with pytest.raises(DegenerateInput):
            v /= diag
        assert jnp.array_equal(v.array, jnp.array([1.0, 0.0, 6.0]))

    def test_dense(self) -> None:
        diag = DiagonalMatrix([1.0, -2.0, 3.0])
        assert jnp.array_equal(diag.to_dense(), jnp.diag(jnp.array([1.0, -2.0, 3.0])))

    def test_complex_diagonal_on_real_vector(self) -> None:
        diag = DiagonalMatrix([1.0j, 1.0])
        with pytest.raises(UnsupportedOperation):
            Vector([1.0, 2.0]) * diag

    def test_real_diagonal_on_complex_vector(self) -> None:
        diag = DiagonalMatrix([2.0, 3.0])
        v = Vector([1.0j, 1.0]) * diag
        assert v.domain == COMPLEX
        assert jnp.allclose(v.array, jnp.array([2.0j, 3.0]))


class TestPermutation:
    """Test permutation matrices."""

    def test_forward_gathers(self, key: Array) -> None:
        """Test out[i] == in[perm[i]] for every index."""
        k1, k2 = jax.random.split(key)
        perm = PermutationMatrix.random(k1, 1000)
        v = Vector.random(k2, 1000, 0.01)
        w = v * perm

        for i in range(w.length):
            assert w[i] == v[perm.permute(i)]
        assert jnp.isclose(w.norm("L1"), v.norm("L1"), rtol=RTOL, atol=ATOL)
        assert w.norm("Linf") == v.norm("Linf")
        assert w.norm("min") == v.norm("min")

    def test_inverse_scatters(self) -> None:
        perm = PermutationMatrix([2, 0, 1])
        v = Vector([10.0, 20.0, 30.0])
        assert jnp.array_equal((v * perm).array, jnp.array([30.0, 10.0, 20.0]))
        assert jnp.array_equal((v / perm).array, jnp.array([20.0, 30.0, 10.0]))

    @pytest.mark.parametrize("size", SIZES)
    @pytest.mark.parametrize("domain", DOMAINS)
    def test_round_trips_are_exact(
        self, size: int, domain: ScalarDomain, key: Array
    ) -> None:
        k1, k2 = jax.random.split(key)
        perm = PermutationMatrix.random(k1, size)
        v = Vector.random(k2, size, 3.0, domain)
        assert jnp.array_equal((v / perm * perm).array, v.array)
        assert jnp.array_equal((v * perm / perm).array, v.array)

    def test_inverse_permute(self, key: Array) -> None:
        perm = PermutationMatrix.random(key, 50)
        for i in range(50):
            assert perm.inverse_permute(perm.permute(i)) == i
        v = Vector.random(key, 50)
        assert jnp.array_equal((v * perm.inverse()).array, (v / perm).array)

    def test_dense_is_permutation_matrix(self, key: Array) -> None:
        perm = PermutationMatrix.random(key, 6)
        dense = perm.to_dense()
        assert jnp.array_equal(dense @ dense.T, jnp.eye(6))
        assert jnp.array_equal(jnp.argmax(dense, axis=1), perm.indices)

    def test_random_is_bijection(self, key: Array) -> None:
        perm = PermutationMatrix.random(key, 100)
        assert jnp.array_equal(jnp.sort(perm.indices), jnp.arange(100))

    @pytest.mark.parametrize("indices", [[0, 0, 2], [1, 2, 3], [-1, 0, 1]])
    def test_rejects_non_bijection(self, indices: list[int]) -> None:
        with pytest.raises(InvalidParameter):
            PermutationMatrix(indices)

    def test_rejects_float_indices(self) -> None:
        with pytest.raises(InvalidParameter):
            PermutationMatrix([0.0, 1.0])

    def test_index_out_of_range(self) -> None:
        """Test index lookups reject positions outside [0, size)."""
        perm = PermutationMatrix([2, 0, 1])
        assert perm.permute(2) == 1
        assert perm.inverse_permute(2) == 0
        for i in (3, -1):
            with pytest.raises(IndexError):
                perm.permute(i)
            with pytest.raises(IndexError):
                perm.inverse_permute(i)


class TestReflection:
    """Test Householder reflections."""

    @pytest.mark.parametrize("domain", DOMAINS)
    def test_involution(self, domain: ScalarDomain, key: Array) -> None:
        """Test applying a reflection twice recovers the vector."""
        k1, k2 = jax.random.split(key)
        refl = ReflectionMatrix.random(k1, 1000, 1.0, domain)
        same = ReflectionMatrix(Vector(refl.vector))
        assert (Vector(refl.vector) - Vector(same.vector)).norm("L1") < 1e-4

        v = Vector.random(k2, 1000, 1000.0, domain)
        w = v.dup()
        v *= refl
        v *= same
        v -= w
        assert v.norm("L2") < 1e-4

    @pytest.mark.parametrize("domain", DOMAINS)
    def test_inverse_equals_forward(self, domain: ScalarDomain, key: Array) -> None:
        k1, k2 = jax.random.split(key)
        refl = ReflectionMatrix.random(k1, 32, 1.0, domain)
        v = Vector.random(k2, 32, 1.0, domain)
        assert jnp.allclose((v * refl).array, (v / refl).array, rtol=RTOL, atol=ATOL)

    @pytest.mark.parametrize("domain", DOMAINS)
    def test_dense_householder_form(self, domain: ScalarDomain, key: Array) -> None:
        """Test the rank-1 application matches I - 2 u u^H / (u^H u)."""
        refl = ReflectionMatrix.random(key, 8, 1.0, domain)
        u = refl.vector
        expected = jnp.eye(8) - 2.0 * jnp.outer(u, jnp.conj(u)) / jnp.vdot(u, u)
        dense = refl.to_dense()
        assert jnp.allclose(dense, expected, rtol=RTOL, atol=ATOL)
        assert jnp.allclose(dense @ jnp.conj(dense.T), jnp.eye(8), rtol=RTOL, atol=ATOL)

    def test_reflects_its_own_vector(self) -> None:
        refl = ReflectionMatrix([1.0, 2.0, 2.0])
        v = Vector([1.0, 2.0, 2.0]) * refl
        expected = jnp.array([-1.0, -2.0, -2.0])
        assert jnp.allclose(v.array, expected, rtol=RTOL, atol=ATOL)
        assert jnp.isclose(refl.inv_sq_norm, 1.0 / 9.0)

    def test_from_index(self) -> None:
        refl = ReflectionMatrix.from_index(4, 2)
        v = Vector([1.0, 2.0, 3.0, 4.0]) * refl
        assert jnp.allclose(v.array, jnp.array([1.0, 2.0, -3.0, 4.0]))

    def test_zero_vector_is_degenerate(self) -> None:
        with pytest.raises(DegenerateInput):
            ReflectionMatrix(jnp.zeros(5))
        with pytest.raises(DegenerateInput):
            ReflectionMatrix.random(jax.random.PRNGKey(0), 5, 0.0)

    def test_negative_bound(self, key: Array) -> None:
        with pytest.raises(InvalidParameter):
            ReflectionMatrix.random(key, 5, -1.0)


class TestDense:
    """Test explicit dense matrices."""

    def test_forward(self) -> None:
        dense = DenseMatrix(
            [
                [1.0, 0.0, 0.0, 0.0],
                [0.0, 0.0, 2.0, 0.0],
                [0.0, 0.5, 0.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )
        v = Vector([38.50, 13.64, 90.01, 27.42])
        v *= dense
        assert jnp.allclose(v.array, jnp.array([38.50, 180.02, 6.82, 27.42]))

    def test_rectangular(self, key: Array) -> None:
        dense = DenseMatrix.random(key, (3, 5))
        v = Vector.random(key, 5)
        w = dense @ v
        assert w.length == 3
        assert jnp.allclose(w.array, dense.matrix @ v.array, rtol=RTOL, atol=ATOL)

    def test_inverse_unsupported(self) -> None:
        dense = DenseMatrix(jnp.eye(3))
        v = Vector([1.0, 2.0, 3.0])
        with pytest.raises(UnsupportedOperation):
            v /= dense


class TestCommon:
    """Test behaviour shared by all leaves."""

    def test_size_mismatch(self, key: Array) -> None:
        v = Vector.random(key, 5)
        for matrix in (
            DiagonalMatrix.identity(4),
            PermutationMatrix.identity(4),
            ReflectionMatrix.from_index(4),
        ):
            with pytest.raises(DimensionMismatch):
                v *= matrix
            with pytest.raises(DimensionMismatch):
                v /= matrix

    def test_add_matrix_unsupported(self) -> None:
        v = Vector([1.0, 2.0])
        with pytest.raises(UnsupportedOperation):
            v += DiagonalMatrix.identity(2)

    def test_copies_are_deep(self, key: Array) -> None:
        diag = DiagonalMatrix.random(key, 5)
        for dup in (diag.copy(), copy.deepcopy(diag)):
            assert dup is not diag
            assert jnp.array_equal(dup.factors, diag.factors)

    def test_application_leaves_matrix_unchanged(self, key: Array) -> None:
        refl = ReflectionMatrix.random(key, 16, 1.0, COMPLEX)
        before = refl.vector
        v = Vector.random(key, 16, 1.0, COMPLEX)
        v *= refl
        v /= refl
        assert jnp.array_equal(refl.vector, before)
