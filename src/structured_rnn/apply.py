"""Routing of vector-against-matrix applications.

`apply` is the single boundary every ``v *= M`` and ``v /= M`` passes through. It resolves the matrix kind at runtime, so callers holding only a `StructuredMatrix` handle get the same checks as callers holding a concrete kind:

1. domain compatibility (complex-only transforms refuse real vectors),
2. squareness, for inverses,
3. vector length against the matrix shape,

and only then runs the pure array-level application.
"""

from __future__ import annotations

from jax import Array

from .domain import ScalarDomain
from .errors import DimensionMismatch, UnsupportedOperation
from .matrix.base import StructuredMatrix
from .matrix.block import BlockMatrix
from .matrix.elementary import DenseMatrix
from .matrix.fourier import FourierMatrix
from .matrix.unitary import UnitaryMatrix


def check_compatible(matrix: StructuredMatrix, domain: ScalarDomain) -> None:
    """Raise `UnsupportedOperation` unless ``matrix`` can act on vectors of ``domain``."""
    name = type(matrix).__name__
    match matrix:
        case FourierMatrix() | UnitaryMatrix() if not domain.is_complex:
            raise UnsupportedOperation(
                f"{name} can only be applied to complex vectors, as this is what it returns"
            )
        case BlockMatrix() if not domain.includes(matrix.domain):
            raise UnsupportedOperation(
                f"{name} contains complex blocks and cannot act on a {domain} vector"
            )
        case _ if not domain.includes(matrix.domain):
            raise UnsupportedOperation(
                f"Complex {name} cannot act on a {domain} vector"
            )


def check_invertible(matrix: StructuredMatrix) -> None:
    match matrix:
        case BlockMatrix(rectangular=True):
            raise UnsupportedOperation(
                "Inverse of a rectangular block matrix is not defined"
            )
        case DenseMatrix():
            raise UnsupportedOperation("Inverse of a dense matrix is not implemented")
        case _ if not matrix.is_square:
            raise UnsupportedOperation(
                f"Inverse of a non-square {type(matrix).__name__} is not defined"
            )


def apply(
    matrix: StructuredMatrix, x: Array, domain: ScalarDomain, inverse: bool = False
) -> Array:
    """Apply ``matrix`` (or its inverse) to the contents ``x`` of a vector over ``domain``.

    Raises:
        UnsupportedOperation: Incompatible domain, or inverse of a non-invertible kind
        DimensionMismatch: ``x`` does not match the matrix size
        DegenerateInput: Inverse of a diagonal matrix with zero factors
    """
    check_compatible(matrix, domain)
    if inverse:
        check_invertible(matrix)
    expected = matrix.size_out if inverse else matrix.size_in
    if x.shape[0] != expected:
        raise DimensionMismatch(
            f"Vector of length {x.shape[0]} does not match "
            f"{type(matrix).__name__} of shape {matrix.shape}"
        )
    if inverse:
        return matrix.inverse_matvec(x)
    return matrix.matvec(x)


def apply_inverse(matrix: StructuredMatrix, x: Array, domain: ScalarDomain) -> Array:
    return apply(matrix, x, domain, inverse=True)
