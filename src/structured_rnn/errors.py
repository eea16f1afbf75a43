"""Error taxonomy for structured vectors and matrices.

Each error also derives from the builtin exception a caller would expect, so code written against ``ValueError`` or ``TypeError`` keeps working.
"""


class StructuredMatrixError(Exception):
    """Base class for every error raised by this package."""


class DimensionMismatch(StructuredMatrixError, ValueError):
    """Vector lengths disagree, or a vector does not match a matrix size."""


class InvalidParameter(StructuredMatrixError, ValueError):
    """Malformed construction arguments, e.g. a negative random bound or a non-bijective permutation."""


class UnsupportedOperation(StructuredMatrixError, TypeError):
    """The operation is not defined for these operands.

    Raised for complex-only transforms applied to real vectors, inverses of rectangular matrices, and unknown norm methods.
    """


class DegenerateInput(StructuredMatrixError, ValueError):
    """The parameters make the transform (or its inverse) undefined."""
