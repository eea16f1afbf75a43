"""Dense, fixed-length, mutable vectors over a scalar domain.

A `Vector` wraps a one-dimensional JAX array. JAX arrays are immutable, so every in-place operator computes the new array first and only then rebinds the storage: a failed operation never leaves a vector half-updated.

Structured matrices act on vectors through the in-place operators:

- ``v *= M`` applies ``M`` forward,
- ``v /= M`` applies the inverse of ``M``,

and ``M @ v`` returns the forward application as a new vector. The same operators with a vector or a scalar operand act elementwise.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, Literal

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from .apply import apply
from .domain import REAL, ScalarDomain, check_bound, domain_of
from .errors import DimensionMismatch, InvalidParameter, UnsupportedOperation
from .matrix.base import StructuredMatrix

type NormMethod = Literal[
    "L0", "L1", "L2", "Linf", "min", "sparse", "manhattan", "euclidean", "max"
]

type Operand = Vector | StructuredMatrix | complex | float | int | Array


def _is_scalar(value: Any) -> bool:
    """Python, NumPy and zero-dimensional JAX scalars alike."""
    return jnp.ndim(value) == 0


class Vector:
    """A dense vector that exclusively owns its storage.

    Copies (`dup`, ``Vector(other)``, `copy.deepcopy`) never alias the original.

    Properties:
        - Fixed length, set at construction
        - Elementwise arithmetic against vectors and scalars of an included domain
        - Forward and inverse application of any `StructuredMatrix`
    """

    __slots__ = ("_array", "_domain")

    _array: Array
    _domain: ScalarDomain

    def __init__(
        self,
        values: Vector | Sequence[Any] | ArrayLike,
        domain: ScalarDomain | None = None,
    ):
        if isinstance(values, Vector):
            source = values.array
        else:
            source = jnp.asarray(values)
        if domain is None:
            domain = domain_of(source)
        elif not domain.includes(domain_of(source)):
            raise InvalidParameter(f"Complex values cannot populate a {domain} vector")
        if source.ndim != 1:
            raise DimensionMismatch(
                f"Vector expects one-dimensional values, got shape {source.shape}"
            )
        self._array = jnp.array(source, dtype=domain.dtype, copy=True)
        self._domain = domain

    # Constructors

    @classmethod
    def zeros(cls, length: int, domain: ScalarDomain = REAL) -> Vector:
        if length < 0:
            raise InvalidParameter(f"length must be >= 0, got {length}")
        return cls(jnp.zeros(length, dtype=domain.dtype), domain)

    @classmethod
    def random(
        cls, key: Array, length: int, bound: float = 1.0, domain: ScalarDomain = REAL
    ) -> Vector:
        """Vector with entries drawn uniformly in ``[-bound, bound)``.

        Complex vectors draw real and imaginary parts independently. A zero bound gives the zero vector.
        """
        check_bound(bound)
        if length < 0:
            raise InvalidParameter(f"length must be >= 0, got {length}")
        return cls(domain.uniform(key, (length,), bound), domain)

    def dup(self) -> Vector:
        """Independent deep copy."""
        return Vector(self)

    def __copy__(self) -> Vector:
        return self.dup()

    def __deepcopy__(self, memo: dict[int, Any]) -> Vector:
        return self.dup()

    # Basic access

    @property
    def array(self) -> Array:
        """The current contents. JAX arrays are immutable, so this never aliases mutable state."""
        return self._array

    @property
    def domain(self) -> ScalarDomain:
        return self._domain

    @property
    def length(self) -> int:
        return self._array.shape[0]

    def __len__(self) -> int:
        return self.length

    def _check_index(self, i: int) -> int:
        n = self.length
        if not -n <= i < n:
            raise IndexError(f"index {i} out of range for vector of length {n}")
        return i % n

    def __getitem__(self, i: int) -> Array:
        return self._array[self._check_index(i)]

    def __setitem__(self, i: int, value: ArrayLike) -> None:
        if not _is_scalar(value):
            raise DimensionMismatch(
                f"Cannot store a value of shape {jnp.shape(value)} in a vector element"
            )
        if not self._domain.includes(domain_of(value)):
            raise UnsupportedOperation(
                f"Cannot store a complex value in a {self._domain} vector"
            )
        index = self._check_index(i)
        self._array = self._array.at[index].set(self._domain.cast(value))

    def __iter__(self) -> Iterator[Array]:
        return iter(self._array)

    def __repr__(self) -> str:
        return f"Vector({self._array}, domain={self._domain})"

    # Arithmetic

    def _coerce(self, other: Vector | ArrayLike) -> Array:
        """Validate an elementwise operand and return it as an array."""
        if isinstance(other, Vector):
            if other.length != self.length:
                raise DimensionMismatch(
                    f"Vector-Vector dimension mismatch: {self.length} != {other.length}"
                )
            values = other.array
        elif _is_scalar(other):
            values = jnp.asarray(other)
        else:
            values = jnp.asarray(other)
            if values.shape != (self.length,):
                raise DimensionMismatch(
                    f"Expected {self.length} elements, got shape {values.shape}"
                )
        if not self._domain.includes(domain_of(values)):
            raise UnsupportedOperation(
                f"Complex operand cannot be combined into a {self._domain} vector"
            )
        return values

    def __iadd__(self, other: Operand) -> Vector:
        if isinstance(other, StructuredMatrix):
            raise UnsupportedOperation("Matrices can only be applied with *= and /=")
        self._array = self._domain.cast(self._array + self._coerce(other))
        return self

    def __isub__(self, other: Operand) -> Vector:
        if isinstance(other, StructuredMatrix):
            raise UnsupportedOperation("Matrices can only be applied with *= and /=")
        self._array = self._domain.cast(self._array - self._coerce(other))
        return self

    def __imul__(self, other: Operand) -> Vector:
        match other:
            case StructuredMatrix():
                result = apply(other, self._array, self._domain)
            case _:
                result = self._array * self._coerce(other)
        self._array = self._domain.cast(result)
        return self

    def __itruediv__(self, other: Operand) -> Vector:
        match other:
            case StructuredMatrix():
                result = apply(other, self._array, self._domain, inverse=True)
            case _:
                result = self._array / self._coerce(other)
        self._array = self._domain.cast(result)
        return self

    def __add__(self, other: Operand) -> Vector:
        res = self.dup()
        res += other
        return res

    def __sub__(self, other: Operand) -> Vector:
        res = self.dup()
        res -= other
        return res

    def __mul__(self, other: Operand) -> Vector:
        res = self.dup()
        res *= other
        return res

    def __truediv__(self, other: Operand) -> Vector:
        res = self.dup()
        res /= other
        return res

    def __radd__(self, other: complex | float | int) -> Vector:
        return self + other

    def __rmul__(self, other: complex | float | int) -> Vector:
        return self * other

    def __neg__(self) -> Vector:
        return self * -1

    # Reductions

    def sum(self) -> Array:
        return jnp.sum(self._array)

    def dot(self, other: Vector | ArrayLike) -> Array:
        """Unconjugated dot product $\\sum_i v_i u_i$."""
        return jnp.sum(self._array * self._coerce(other))

    def conjdot(self, other: Vector | ArrayLike) -> Array:
        """Conjugated dot product $\\sum_i v_i \\bar u_i$.

        Identical to `dot` on the real domain.
        """
        values = self._coerce(other)
        return jnp.sum(self._array * self._domain.conjugate(values))

    def conjmult(self, other: Vector | ArrayLike) -> None:
        """In place elementwise $v_i \\leftarrow v_i \\bar u_i$."""
        values = self._coerce(other)
        self._array = self._domain.cast(self._array * self._domain.conjugate(values))

    def norm(self, method: NormMethod = "L2") -> Array:
        """Norm of the vector.

        Args:
            method: One of ``L0`` (count of nonzero entries), ``L1`` (sum of magnitudes), ``L2`` (Euclidean), ``Linf`` (largest magnitude) or ``min`` (smallest magnitude). The aliases ``sparse``, ``manhattan``, ``euclidean`` and ``max`` are accepted too.

        Returns:
            A real scalar; zero for an empty vector.

        Raises:
            UnsupportedOperation: For an unknown method.
        """
        mags = self._domain.abs(self._array)
        match method:
            case "L0" | "sparse":
                return jnp.count_nonzero(self._array)
            case "L1" | "manhattan":
                return jnp.sum(mags)
            case "L2" | "euclidean":
                return jnp.sqrt(jnp.sum(mags**2))
            case "Linf" | "max":
                return jnp.max(mags, initial=0.0)
            case "min":
                if self.length == 0:
                    return jnp.zeros((), dtype=mags.dtype)
                return jnp.min(mags)
            case _:
                raise UnsupportedOperation(
                    f"Norm method '{method}' is not implemented. Use one of L0, L1, L2, Linf, min."
                )

    def allclose(
        self, other: Vector | ArrayLike, rtol: float = 1e-5, atol: float = 1e-8
    ) -> bool:
        values = self._coerce(other)
        return bool(jnp.allclose(self._array, values, rtol=rtol, atol=atol))

