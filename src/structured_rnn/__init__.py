"""Structured linear algebra for recurrent layers.

Vectors over a real or complex scalar domain, and compact structured matrices (diagonal, permutation, Householder reflection, Fourier, a composed unitary, and block composites) that act on them in $O(n)$ to $O(n \\log n)$ time without ever forming a dense matrix.
"""

from .apply import apply, apply_inverse, check_compatible
from .domain import COMPLEX, REAL, Complex, Real, ScalarDomain, domain_of
from .errors import (
    DegenerateInput,
    DimensionMismatch,
    InvalidParameter,
    StructuredMatrixError,
    UnsupportedOperation,
)
from .keys import KeyStream
from .matrix import (
    BlockMatrix,
    DenseMatrix,
    DiagonalMatrix,
    FourierMatrix,
    PermutationMatrix,
    ReflectionMatrix,
    StructuredMatrix,
    UnitaryMatrix,
)
from .vector import NormMethod, Vector

__all__ = [
    "COMPLEX",
    "REAL",
    "BlockMatrix",
    "Complex",
    "DegenerateInput",
    "DenseMatrix",
    "DiagonalMatrix",
    "DimensionMismatch",
    "FourierMatrix",
    "InvalidParameter",
    "KeyStream",
    "NormMethod",
    "PermutationMatrix",
    "Real",
    "ReflectionMatrix",
    "ScalarDomain",
    "StructuredMatrix",
    "StructuredMatrixError",
    "UnitaryMatrix",
    "UnsupportedOperation",
    "Vector",
    "apply",
    "apply_inverse",
    "check_compatible",
    "domain_of",
]
