"""Leaf structured matrices with $O(n)$ storage and application.

+----------------+---------------+---------------+---------------+
| Matrix         | Storage       | Apply         | Inverse       |
+================+===============+===============+===============+
| Diagonal       | $O(n)$        | $O(n)$        | $O(n)$        |
+----------------+---------------+---------------+---------------+
| Permutation    | $O(n)$        | $O(n)$        | $O(n)$        |
+----------------+---------------+---------------+---------------+
| Reflection     | $O(n)$        | $O(n)$        | $O(n)$        |
|                |               | (rank-1)      | (involution)  |
+----------------+---------------+---------------+---------------+
| Dense          | $O(mn)$       | $O(mn)$       | --            |
+----------------+---------------+---------------+---------------+
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, override

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ..domain import COMPLEX, REAL, ScalarDomain, check_bound, domain_of
from ..errors import DegenerateInput, InvalidParameter, UnsupportedOperation
from .base import StructuredMatrix, check_size, parameter_array

if TYPE_CHECKING:
    from ..vector import Vector

logger = logging.getLogger(__name__)


class DiagonalMatrix(StructuredMatrix):
    """Elementwise scaling $D = \\text{diag}(d_1, \\ldots, d_n)$.

    Properties:
        - Forward multiplies by the factors, inverse divides by them
        - Invertible iff no factor is zero; zero factors are accepted but the inverse is then refused with `DegenerateInput`
    """

    def __init__(
        self, factors: Vector | ArrayLike, domain: ScalarDomain | None = None
    ):
        self._factors, self._domain = parameter_array(factors, domain)
        self._invertible = bool(jnp.all(self._factors != 0))
        if not self._invertible:
            logger.warning(
                "Diagonal matrix of size %d has zero factors; its inverse is undefined",
                self._factors.shape[0],
            )

    @classmethod
    def identity(cls, size: int, domain: ScalarDomain = REAL) -> DiagonalMatrix:
        check_size(size)
        return cls(jnp.ones(size, dtype=domain.dtype), domain)

    @classmethod
    def random(
        cls, key: Array, size: int, bound: float = 1.0, domain: ScalarDomain = REAL
    ) -> DiagonalMatrix:
        """Factors drawn uniformly in ``[-bound, bound)`` (per component)."""
        check_size(size)
        return cls(domain.uniform(key, (size,), bound), domain)

    @classmethod
    def phases(cls, key: Array, size: int, bound: float = jnp.pi) -> DiagonalMatrix:
        """Unit-modulus factors $e^{i\\theta_k}$ with $\\theta_k$ uniform in ``[-bound, bound)``.

        The result is unitary.
        """
        check_size(size)
        theta = REAL.uniform(key, (size,), bound)
        return cls(jnp.exp(1j * theta), COMPLEX)

    @property
    def factors(self) -> Array:
        return self._factors

    @property
    def invertible(self) -> bool:
        return self._invertible

    @property
    @override
    def shape(self) -> tuple[int, int]:
        n = self._factors.shape[0]
        return n, n

    @property
    @override
    def domain(self) -> ScalarDomain:
        return self._domain

    @override
    def matvec(self, x: Array) -> Array:
        return x * self._factors

    @override
    def inverse_matvec(self, x: Array) -> Array:
        if not self._invertible:
            raise DegenerateInput("Cannot invert a diagonal matrix with zero factors")
        return x / self._factors

    @override
    def to_dense(self) -> Array:
        return jnp.diag(self._factors)


class PermutationMatrix(StructuredMatrix):
    """Index bijection $\\sigma$ with forward gather ``out[i] = in[perm[i]]`` and inverse scatter ``out[perm[i]] = in[i]``.

    Permutations carry no scalar parameters, so their domain is `Real` and they act on vectors of either domain.
    """

    def __init__(self, perm: Sequence | ArrayLike):
        indices = jnp.asarray(perm)
        if indices.ndim != 1:
            raise InvalidParameter(
                f"Permutation must be one-dimensional, got shape {indices.shape}"
            )
        if indices.shape[0] > 0 and not jnp.issubdtype(indices.dtype, jnp.integer):
            raise InvalidParameter(
                f"Permutation indices must be integers, got {indices.dtype}"
            )
        indices = indices.astype(jnp.int32)
        n = indices.shape[0]
        expected = jnp.arange(n, dtype=jnp.int32)
        if not bool(jnp.array_equal(jnp.sort(indices), expected)):
            raise InvalidParameter(f"Indices are not a bijection over [0, {n})")
        self._indices = indices
        self._inverse_indices = jnp.argsort(indices).astype(jnp.int32)

    @classmethod
    def identity(cls, size: int) -> PermutationMatrix:
        check_size(size)
        return cls(jnp.arange(size, dtype=jnp.int32))

    @classmethod
    def random(cls, key: Array, size: int) -> PermutationMatrix:
        """Uniformly shuffled bijection."""
        check_size(size)
        return cls(jax.random.permutation(key, size).astype(jnp.int32))

    @property
    def indices(self) -> Array:
        return self._indices

    def _check_index(self, i: int) -> int:
        n = self._indices.shape[0]
        if not 0 <= i < n:
            raise IndexError(f"index {i} out of range for permutation of size {n}")
        return i

    def permute(self, i: int) -> int:
        """Source index read by output position ``i``."""
        return int(self._indices[self._check_index(i)])

    def inverse_permute(self, i: int) -> int:
        """Output position that reads source index ``i``."""
        return int(self._inverse_indices[self._check_index(i)])

    def inverse(self) -> PermutationMatrix:
        return PermutationMatrix(self._inverse_indices)

    @property
    @override
    def shape(self) -> tuple[int, int]:
        n = self._indices.shape[0]
        return n, n

    @property
    @override
    def domain(self) -> ScalarDomain:
        return REAL

    @override
    def matvec(self, x: Array) -> Array:
        return x[self._indices]

    @override
    def inverse_matvec(self, x: Array) -> Array:
        return x[self._inverse_indices]


class ReflectionMatrix(StructuredMatrix):
    """Householder reflector $R = I - 2 \\frac{u u^H}{u^H u}$.

    Application is a rank-1 update,

    $$R v = v - 2 \\, \\frac{\\langle v, u \\rangle}{u^H u} \\, u, \\qquad \\langle v, u \\rangle = \\sum_i v_i \\bar u_i,$$

    so it costs $O(n)$. Reflections are involutions, hence the inverse is the forward map.
    """

    def __init__(
        self, vector: Vector | ArrayLike, domain: ScalarDomain | None = None
    ):
        u, self._domain = parameter_array(vector, domain)
        sq_norm = jnp.real(jnp.sum(u * self._domain.conjugate(u)))
        if not bool(sq_norm > 0) or not bool(jnp.isfinite(sq_norm)):
            raise DegenerateInput(
                "Reflection vector must have a finite, nonzero norm"
            )
        self._vector = u
        self._inv_sq_norm = 1.0 / sq_norm

    @classmethod
    def from_index(
        cls, size: int, index: int = 0, domain: ScalarDomain = REAL
    ) -> ReflectionMatrix:
        """Reflection through the standard basis vector $e_{index}$, negating that coordinate."""
        check_size(size)
        if not 0 <= index < size:
            raise InvalidParameter(f"index {index} out of range for size {size}")
        return cls(jnp.zeros(size, dtype=domain.dtype).at[index].set(1), domain)

    @classmethod
    def random(
        cls, key: Array, size: int, bound: float = 1.0, domain: ScalarDomain = REAL
    ) -> ReflectionMatrix:
        check_bound(bound)
        if bound == 0:
            raise DegenerateInput(
                "A zero random bound yields a zero reflection vector"
            )
        check_size(size)
        return cls(domain.uniform(key, (size,), bound), domain)

    @property
    def vector(self) -> Array:
        return self._vector

    @property
    def inv_sq_norm(self) -> Array:
        """$1 / (u^H u)$."""
        return self._inv_sq_norm

    @property
    @override
    def shape(self) -> tuple[int, int]:
        n = self._vector.shape[0]
        return n, n

    @property
    @override
    def domain(self) -> ScalarDomain:
        return self._domain

    @override
    def matvec(self, x: Array) -> Array:
        s = jnp.sum(x * self._domain.conjugate(self._vector))
        return x - (2.0 * self._inv_sq_norm * s) * self._vector

    @override
    def inverse_matvec(self, x: Array) -> Array:
        return self.matvec(x)


class DenseMatrix(StructuredMatrix):
    """An explicit $m \\times n$ matrix.

    Provided for layers that need an unconstrained transform next to the structured ones. Only forward application is defined; dense inversion is out of scope.
    """

    def __init__(self, matrix: ArrayLike, domain: ScalarDomain | None = None):
        source = jnp.asarray(matrix)
        inferred = domain_of(source)
        if domain is None:
            domain = inferred
        elif not domain.includes(inferred):
            raise InvalidParameter(f"Complex entries cannot define a {domain} matrix")
        if source.ndim != 2:
            raise InvalidParameter(
                f"Dense matrix must be two-dimensional, got shape {source.shape}"
            )
        self._matrix = jnp.array(source, dtype=domain.dtype, copy=True)
        self._domain = domain

    @classmethod
    def random(
        cls,
        key: Array,
        shape: tuple[int, int],
        bound: float = 1.0,
        domain: ScalarDomain = REAL,
    ) -> DenseMatrix:
        return cls(domain.uniform(key, shape, bound), domain)

    @property
    def matrix(self) -> Array:
        return self._matrix

    @property
    @override
    def shape(self) -> tuple[int, int]:
        m, n = self._matrix.shape
        return m, n

    @property
    @override
    def domain(self) -> ScalarDomain:
        return self._domain

    @override
    def matvec(self, x: Array) -> Array:
        return self._matrix @ x

    @override
    def inverse_matvec(self, x: Array) -> Array:
        raise UnsupportedOperation("Inverse of a dense matrix is not implemented")

    @override
    def to_dense(self) -> Array:
        return self._matrix
