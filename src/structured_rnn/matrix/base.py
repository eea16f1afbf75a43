"""The capability shared by every structured matrix kind.

A structured matrix never stores its dense entries. It exposes pure array-level forward and inverse applications, a declared shape, and the scalar domain its parameters live in. Validation of operands (domain, length, squareness) happens once, in `structured_rnn.apply`, before these functions run.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from ..domain import ScalarDomain, domain_of
from ..errors import DimensionMismatch, InvalidParameter

if TYPE_CHECKING:
    from ..vector import Vector


def parameter_array(
    values: Vector | ArrayLike, domain: ScalarDomain | None = None
) -> tuple[Array, ScalarDomain]:
    """Coerce matrix parameters to a one-dimensional array and its domain."""
    from ..vector import Vector

    if isinstance(values, Vector):
        source = values.array
        inferred = values.domain
    else:
        source = jnp.asarray(values)
        inferred = domain_of(source)
    if domain is None:
        domain = inferred
    elif not domain.includes(inferred):
        raise InvalidParameter(f"Complex parameters cannot define a {domain} matrix")
    if source.ndim != 1:
        raise DimensionMismatch(
            f"Matrix parameters must be one-dimensional, got shape {source.shape}"
        )
    return jnp.array(source, dtype=domain.dtype, copy=True), domain


def check_size(size: int) -> None:
    if size < 0:
        raise InvalidParameter(f"size must be >= 0, got {size}")


class StructuredMatrix(ABC):
    """A linear transform represented by a compact parametrization.

    In practice, subclasses implement `matvec` and `inverse_matvec` on flat arrays in $O(n)$ or $O(n \\log n)$ time; vectors reach them through ``v *= M`` and ``v /= M``.

    In theory, each subclass is a family of invertible (or, for rectangular block matrices, merely linear) maps $\\mathbb{F}^{n_{in}} \\to \\mathbb{F}^{n_{out}}$ over the field of its `domain`.

    Matrices are immutable once constructed: applying them never changes their parameters.
    """

    @property
    @abstractmethod
    def shape(self) -> tuple[int, int]:
        """``(size_out, size_in)``."""

    @property
    @abstractmethod
    def domain(self) -> ScalarDomain:
        """Smallest domain containing every parameter of the matrix."""

    @abstractmethod
    def matvec(self, x: Array) -> Array:
        """Forward application to an array of length `size_in`."""

    @abstractmethod
    def inverse_matvec(self, x: Array) -> Array:
        """Inverse application to an array of length `size_out`."""

    @property
    def size_in(self) -> int:
        return self.shape[1]

    @property
    def size_out(self) -> int:
        return self.shape[0]

    @property
    def size(self) -> int:
        """Length of the vectors the matrix accepts."""
        return self.size_in

    @property
    def is_square(self) -> bool:
        return self.size_in == self.size_out

    def to_dense(self) -> Array:
        """Materialize the dense matrix by applying `matvec` to every basis vector.

        Costs $O(n)$ applications; meant for inspection and tests.
        """
        eye = jnp.eye(self.size_in, dtype=self.domain.dtype)
        return jax.vmap(self.matvec, in_axes=1, out_axes=1)(eye)

    def copy(self) -> Any:
        """Deep copy sharing no state with the original."""
        return copy.deepcopy(self)

    def __matmul__(self, vector: Vector) -> Vector:
        return vector * self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(shape={self.shape}, domain={self.domain})"
