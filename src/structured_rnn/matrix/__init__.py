from .base import StructuredMatrix
from .block import BlockMatrix
from .elementary import DenseMatrix, DiagonalMatrix, PermutationMatrix, ReflectionMatrix
from .fourier import FourierMatrix, FourierPlan, fourier_plan
from .unitary import UnitaryMatrix

__all__ = [
    "BlockMatrix",
    "DenseMatrix",
    "DiagonalMatrix",
    "FourierMatrix",
    "FourierPlan",
    "PermutationMatrix",
    "ReflectionMatrix",
    "StructuredMatrix",
    "UnitaryMatrix",
    "fourier_plan",
]
