"""The discrete Fourier transform as an implicit structured matrix.

A `FourierMatrix` stores no entries, only a compiled execution plan: a pair of jitted FFT callables for its size. Plans are cached per ``(size, norm)``, so every Fourier matrix of a given size reuses one compilation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache, partial
from typing import Any, Literal, override

import jax
import jax.numpy as jnp
from jax import Array

from ..domain import COMPLEX, ScalarDomain
from ..errors import InvalidParameter, UnsupportedOperation
from .base import StructuredMatrix

logger = logging.getLogger(__name__)

type FourierNorm = Literal["backward", "ortho"]


@dataclass(frozen=True)
class FourierPlan:
    """Compiled forward and inverse transforms for one size."""

    size: int
    norm: FourierNorm
    forward: Callable[[Array], Array]
    inverse: Callable[[Array], Array]


@lru_cache(maxsize=None)
def fourier_plan(size: int, norm: FourierNorm = "backward") -> FourierPlan:
    """Build (once) the plan for transforms of length ``size``."""
    logger.debug("Building FFT plan for size %d (norm=%s)", size, norm)
    return FourierPlan(
        size=size,
        norm=norm,
        forward=jax.jit(partial(jnp.fft.fft, norm=norm)),
        inverse=jax.jit(partial(jnp.fft.ifft, norm=norm)),
    )


class FourierMatrix(StructuredMatrix):
    """The DFT matrix $F_{jk} = \\omega^{jk}$, $\\omega = e^{-2\\pi i / n}$, applied by FFT in $O(n \\log n)$.

    Properties:
        - Forward is the FFT, inverse the inverse FFT
        - ``norm="backward"`` leaves the forward transform unscaled and divides the inverse by $n$
        - ``norm="ortho"`` scales both by $1/\\sqrt{n}$, making the matrix unitary
        - Defined only over the complex domain
        - Fastest when the size is a power of two
    """

    def __init__(
        self,
        size: int,
        norm: FourierNorm = "backward",
        domain: ScalarDomain = COMPLEX,
    ):
        if not domain.is_complex:
            raise UnsupportedOperation(
                "Fourier transform can only be defined over complex scalars"
            )
        if size < 1:
            raise InvalidParameter(f"Fourier size must be >= 1, got {size}")
        if norm not in ("backward", "ortho"):
            raise InvalidParameter(f"Unknown Fourier normalization '{norm}'")
        if size & (size - 1):
            logger.warning("Fourier size %d is not a power of two", size)
        self._plan = fourier_plan(size, norm)

    @property
    def norm(self) -> FourierNorm:
        return self._plan.norm

    @property
    def plan(self) -> FourierPlan:
        return self._plan

    @property
    @override
    def shape(self) -> tuple[int, int]:
        return self._plan.size, self._plan.size

    @property
    @override
    def domain(self) -> ScalarDomain:
        return COMPLEX

    @override
    def matvec(self, x: Array) -> Array:
        return self._plan.forward(x)

    @override
    def inverse_matvec(self, x: Array) -> Array:
        return self._plan.inverse(x)

    def __deepcopy__(self, memo: dict[int, Any]) -> FourierMatrix:
        # Plans are immutable compiled callables; reuse the cached one.
        return FourierMatrix(self._plan.size, self._plan.norm)
