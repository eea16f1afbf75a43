"""Block-structured composites of smaller structured matrices.

A `BlockMatrix` arranges $k$ square blocks of common size $b$ along the diagonal of a larger transform and wraps them in an input permutation $P$ and an output permutation $Q$:

$$B = Q \\, \\text{blockdiag}(B_0, \\ldots, B_{k-1}) \\, P.$$

When the input is longer than the output, the extra input blocks fold cyclically onto the output blocks and their contributions are summed, which yields rectangular transforms with more columns than rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import override

import jax
import jax.numpy as jnp
from jax import Array

from ..domain import ScalarDomain, join
from ..errors import InvalidParameter, UnsupportedOperation
from .base import StructuredMatrix
from .elementary import PermutationMatrix

logger = logging.getLogger(__name__)


class BlockMatrix(StructuredMatrix):
    """Independently-typed square blocks with outer index permutations.

    Forward application permutes the input by $P$, applies block $k$ to the $k$-th slice of length $b$, and for a rectangular layout adds block ``k + j * blocks_out`` applied to its own slice onto output slice $k$ for every $j$ with ``k + j * blocks_out < blocks_in``. The concatenated result is permuted by $Q$.

    Properties:
        - ``size_in`` and ``size_out`` are multiples of the block size, with ``size_out <= size_in``
        - One block per input slice: ``len(blocks) == size_in // b``
        - The inverse exists only for square layouts (``size_in == size_out``); it undoes $Q$, inverts each block on its slice, then undoes $P$
    """

    def __init__(
        self,
        blocks: Sequence[StructuredMatrix],
        size_in: int,
        size_out: int | None = None,
        input_permutation: PermutationMatrix | None = None,
        output_permutation: PermutationMatrix | None = None,
    ):
        if size_out is None:
            size_out = size_in
        if not blocks:
            raise InvalidParameter("Block matrix needs at least one block")
        size_blocks = blocks[0].size
        for block in blocks:
            if not block.is_square or block.size != size_blocks:
                raise InvalidParameter(
                    f"Blocks must be square with a common size {size_blocks}, got shape {block.shape}"
                )
        if size_blocks < 1:
            raise InvalidParameter("Block size must be >= 1")
        if size_in % size_blocks or size_out % size_blocks:
            raise InvalidParameter(
                f"Sizes ({size_in}, {size_out}) must be multiples of the block size {size_blocks}"
            )
        if size_out > size_in:
            raise InvalidParameter(
                f"Output size {size_out} cannot exceed input size {size_in}"
            )
        if len(blocks) != size_in // size_blocks:
            raise InvalidParameter(
                f"Expected {size_in // size_blocks} blocks for input size {size_in}, got {len(blocks)}"
            )

        if input_permutation is None:
            input_permutation = PermutationMatrix.identity(size_in)
        if output_permutation is None:
            output_permutation = PermutationMatrix.identity(size_out)
        if input_permutation.size != size_in:
            raise InvalidParameter(
                f"Input permutation has size {input_permutation.size}, expected {size_in}"
            )
        if output_permutation.size != size_out:
            raise InvalidParameter(
                f"Output permutation has size {output_permutation.size}, expected {size_out}"
            )

        self._blocks = tuple(blocks)
        self._size_in = size_in
        self._size_out = size_out
        self._size_blocks = size_blocks
        self._input_permutation = input_permutation
        self._output_permutation = output_permutation
        logger.debug(
            "Assembled %dx%d block matrix from %d blocks of size %d",
            size_out,
            size_in,
            len(blocks),
            size_blocks,
        )

    @classmethod
    def random_permutations(
        cls,
        key: Array,
        blocks: Sequence[StructuredMatrix],
        size_in: int,
        size_out: int | None = None,
    ) -> BlockMatrix:
        """Block matrix with uniformly drawn input and output permutations."""
        if size_out is None:
            size_out = size_in
        key_in, key_out = jax.random.split(key)
        return cls(
            blocks,
            size_in,
            size_out,
            PermutationMatrix.random(key_in, size_in),
            PermutationMatrix.random(key_out, size_out),
        )

    @property
    def blocks(self) -> tuple[StructuredMatrix, ...]:
        return self._blocks

    @property
    def size_blocks(self) -> int:
        return self._size_blocks

    @property
    def blocks_in(self) -> int:
        return self._size_in // self._size_blocks

    @property
    def blocks_out(self) -> int:
        return self._size_out // self._size_blocks

    @property
    def rectangular(self) -> bool:
        return self._size_in != self._size_out

    @property
    def input_permutation(self) -> PermutationMatrix:
        return self._input_permutation

    @property
    def output_permutation(self) -> PermutationMatrix:
        return self._output_permutation

    @property
    @override
    def shape(self) -> tuple[int, int]:
        return self._size_out, self._size_in

    @property
    @override
    def domain(self) -> ScalarDomain:
        return join(*(block.domain for block in self._blocks))

    def _slice(self, x: Array, index: int) -> Array:
        b = self._size_blocks
        return x[index * b : (index + 1) * b]

    @override
    def matvec(self, x: Array) -> Array:
        x = self._input_permutation.matvec(x)
        blocks_in, blocks_out = self.blocks_in, self.blocks_out
        out: list[Array] = []
        for b in range(blocks_out):
            s = self._blocks[b].matvec(self._slice(x, b))
            # Extra input blocks fold cyclically onto output block b
            index = b + blocks_out
            while index < blocks_in:
                s = s + self._blocks[index].matvec(self._slice(x, index))
                index += blocks_out
            out.append(s)
        return self._output_permutation.matvec(jnp.concatenate(out))

    @override
    def inverse_matvec(self, x: Array) -> Array:
        if self.rectangular:
            raise UnsupportedOperation(
                "Inverse of a rectangular block matrix is not defined"
            )
        x = self._output_permutation.inverse_matvec(x)
        out = [
            block.inverse_matvec(self._slice(x, b))
            for b, block in enumerate(self._blocks)
        ]
        return self._input_permutation.inverse_matvec(jnp.concatenate(out))
