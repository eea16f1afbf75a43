"""A compact unitary parametrization built from structured primitives.

`UnitaryMatrix` chains eight cheap stages into one $n \\times n$ transform,

$$U = D_2 \\, R_1 \\, F^{-1} \\, D_1 \\, P \\, R_0 \\, F \\, D_0,$$

where the $D_k$ are unit-modulus diagonals, the $R_k$ Householder reflections, $P$ a permutation and $F$ the orthonormal DFT. Each stage is unitary, so $U$ is unitary, while storage is $O(n)$ and application $O(n \\log n)$ instead of $O(n^2)$ for a dense unitary matrix.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import override

import jax
import jax.numpy as jnp
from jax import Array

from ..domain import COMPLEX, ScalarDomain
from ..errors import DimensionMismatch, InvalidParameter, UnsupportedOperation
from .base import StructuredMatrix, check_size
from .elementary import DiagonalMatrix, PermutationMatrix, ReflectionMatrix
from .fourier import FourierMatrix

logger = logging.getLogger(__name__)


class UnitaryMatrix(StructuredMatrix):
    """Fixed-template composition of diagonal, reflection, permutation and Fourier stages.

    Forward application runs, in place on the working array,

    ``D0 -> F -> R0 -> P -> D1 -> F^-1 -> R1 -> D2``

    and the inverse runs the exact mirror, undoing each stage in reverse order.

    Properties:
        - Defined only over the complex domain; real stages are rejected at construction
        - $O(n)$ parameters: three diagonals, two reflection vectors, one permutation
        - Exactly invertible as a composition of invertible stages
    """

    def __init__(
        self,
        diagonals: Sequence[DiagonalMatrix],
        reflections: Sequence[ReflectionMatrix],
        permutation: PermutationMatrix,
    ):
        if len(diagonals) != 3:
            raise InvalidParameter(f"Expected 3 diagonal stages, got {len(diagonals)}")
        if len(reflections) != 2:
            raise InvalidParameter(
                f"Expected 2 reflection stages, got {len(reflections)}"
            )
        for stage in (*diagonals, *reflections):
            if not stage.domain.is_complex:
                raise UnsupportedOperation(
                    "Unitary matrix can only be built from complex stages"
                )
        size = permutation.size
        sizes = {stage.size for stage in (*diagonals, *reflections)}
        if sizes != {size}:
            raise DimensionMismatch(
                f"All unitary stages must have size {size}, got sizes {sorted(sizes | {size})}"
            )
        self._diagonals = tuple(diagonals)
        self._reflections = tuple(reflections)
        self._permutation = permutation
        self._fourier = FourierMatrix(size, norm="ortho")

    @classmethod
    def random(
        cls,
        key: Array,
        size: int,
        bound: float = jnp.pi,
        domain: ScalarDomain = COMPLEX,
    ) -> UnitaryMatrix:
        """Draw every stage from one key.

        Args:
            key: Random key, split once per stage
            size: Dimension $n$
            bound: Diagonal phases are uniform in ``[-bound, bound)``; reflection vectors have real and imaginary parts uniform in the same range
            domain: Must be `Complex`; present so that real-domain requests fail here rather than on first use
        """
        if not domain.is_complex:
            raise UnsupportedOperation(
                "Unitary matrix can only be defined over complex scalars"
            )
        check_size(size)
        keys = jax.random.split(key, 6)
        diagonals = [DiagonalMatrix.phases(k, size, bound) for k in keys[:3]]
        reflections = [
            ReflectionMatrix.random(k, size, bound, COMPLEX) for k in keys[3:5]
        ]
        permutation = PermutationMatrix.random(keys[5], size)
        logger.debug("Drew unitary matrix of size %d", size)
        return cls(diagonals, reflections, permutation)

    @classmethod
    def identity(cls, size: int) -> UnitaryMatrix:
        """Deterministic chain with unit diagonals and the identity permutation.

        A Householder reflection is never the identity, so both reflections go through $e_0$. The result is a fixed unitary matrix, not the identity matrix.
        """
        check_size(size)
        diagonals = [DiagonalMatrix.identity(size, COMPLEX) for _ in range(3)]
        reflections = [ReflectionMatrix.from_index(size, 0, COMPLEX) for _ in range(2)]
        return cls(diagonals, reflections, PermutationMatrix.identity(size))

    @property
    def diagonals(self) -> tuple[DiagonalMatrix, ...]:
        return self._diagonals

    @property
    def reflections(self) -> tuple[ReflectionMatrix, ...]:
        return self._reflections

    @property
    def permutation(self) -> PermutationMatrix:
        return self._permutation

    @property
    def fourier(self) -> FourierMatrix:
        return self._fourier

    @property
    @override
    def shape(self) -> tuple[int, int]:
        return self._permutation.shape

    @property
    @override
    def domain(self) -> ScalarDomain:
        return COMPLEX

    @override
    def matvec(self, x: Array) -> Array:
        d0, d1, d2 = self._diagonals
        r0, r1 = self._reflections
        x = d0.matvec(x)
        x = self._fourier.matvec(x)
        x = r0.matvec(x)
        x = self._permutation.matvec(x)
        x = d1.matvec(x)
        x = self._fourier.inverse_matvec(x)
        x = r1.matvec(x)
        return d2.matvec(x)

    @override
    def inverse_matvec(self, x: Array) -> Array:
        d0, d1, d2 = self._diagonals
        r0, r1 = self._reflections
        x = d2.inverse_matvec(x)
        x = r1.inverse_matvec(x)
        x = self._fourier.matvec(x)
        x = d1.inverse_matvec(x)
        x = self._permutation.inverse_matvec(x)
        x = r0.inverse_matvec(x)
        x = self._fourier.inverse_matvec(x)
        return d0.inverse_matvec(x)
