"""Scalar domains over which vectors and structured matrices are defined.

A domain bundles the element dtype with the few scalar capabilities the structured matrices rely on: a zero, magnitudes, conjugation and random draws. There are exactly two domains, `Real` and `Complex`. The complex domain includes the real one, so a real-valued transform may act on a complex vector but never the reverse.

Dtypes are resolved lazily through JAX, so the precision follows ``jax_enable_x64`` at call time:

+----------+-------------+---------------+
| Domain   | Default     | With x64      |
+==========+=============+===============+
| Real     | float32     | float64       |
+----------+-------------+---------------+
| Complex  | complex64   | complex128    |
+----------+-------------+---------------+
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, override

import jax
import jax.numpy as jnp
from jax import Array

from .errors import InvalidParameter


def check_bound(bound: float) -> None:
    """Reject negative random bounds."""
    if bound < 0:
        raise InvalidParameter(f"random bound must be >= 0, got {bound}")


class ScalarDomain(ABC):
    """Capabilities of an element type.

    Instances are stateless and compare equal by kind, so ``Real() == REAL`` and pattern matching with ``case Complex():`` both work.
    """

    @property
    @abstractmethod
    def dtype(self) -> Any:
        """Canonical JAX dtype for elements of this domain."""

    @property
    @abstractmethod
    def is_complex(self) -> bool:
        """Whether elements carry an imaginary part."""

    @abstractmethod
    def conjugate(self, x: Array) -> Array:
        """Complex conjugate (identity on the real domain)."""

    @abstractmethod
    def uniform(self, key: Array, shape: tuple[int, ...], bound: float) -> Array:
        """Draw elements uniformly in ``[-bound, bound)`` (per component)."""

    def zero(self) -> Array:
        return jnp.zeros((), dtype=self.dtype)

    def abs(self, x: Array) -> Array:
        """Elementwise magnitude, always real."""
        return jnp.abs(x)

    def cast(self, x: Any) -> Array:
        return jnp.asarray(x, dtype=self.dtype)

    def includes(self, other: ScalarDomain) -> bool:
        """Whether values of ``other`` embed into this domain."""
        return self.is_complex or not other.is_complex

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ScalarDomain) and type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Real(ScalarDomain):
    """Real scalars."""

    @property
    @override
    def dtype(self) -> Any:
        return jax.dtypes.canonicalize_dtype(jnp.float64)

    @property
    @override
    def is_complex(self) -> bool:
        return False

    @override
    def conjugate(self, x: Array) -> Array:
        return x

    @override
    def uniform(self, key: Array, shape: tuple[int, ...], bound: float) -> Array:
        check_bound(bound)
        return jax.random.uniform(
            key, shape, dtype=self.dtype, minval=-bound, maxval=bound
        )


class Complex(ScalarDomain):
    """Complex scalars, with independent uniform real and imaginary parts for random draws."""

    @property
    @override
    def dtype(self) -> Any:
        return jax.dtypes.canonicalize_dtype(jnp.complex128)

    @property
    @override
    def is_complex(self) -> bool:
        return True

    @override
    def conjugate(self, x: Array) -> Array:
        return jnp.conj(x)

    @override
    def uniform(self, key: Array, shape: tuple[int, ...], bound: float) -> Array:
        check_bound(bound)
        key_re, key_im = jax.random.split(key)
        real_dtype = REAL.dtype
        re = jax.random.uniform(
            key_re, shape, dtype=real_dtype, minval=-bound, maxval=bound
        )
        im = jax.random.uniform(
            key_im, shape, dtype=real_dtype, minval=-bound, maxval=bound
        )
        return jax.lax.complex(re, im).astype(self.dtype)


REAL = Real()
COMPLEX = Complex()


def domain_of(values: Any) -> ScalarDomain:
    """Infer the domain of an array or array-like from its dtype."""
    dtype = values.dtype if hasattr(values, "dtype") else jnp.asarray(values).dtype
    if jnp.issubdtype(dtype, jnp.complexfloating):
        return COMPLEX
    return REAL


def join(*domains: ScalarDomain) -> ScalarDomain:
    """Smallest domain including all of ``domains``."""
    if any(domain.is_complex for domain in domains):
        return COMPLEX
    return REAL
