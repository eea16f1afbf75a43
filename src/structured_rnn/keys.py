"""An owned source of JAX random keys.

Random constructors in this package always take an explicit key. `KeyStream` is a small convenience for call sites that need many keys in sequence, such as building a whole network of random matrices.
"""

from __future__ import annotations

import logging
import time

import jax
from jax import Array

logger = logging.getLogger(__name__)


class KeyStream:
    """Hands out fresh subkeys from a single owned key.

    Each instance owns its state, so independent construction sites never share a generator.
    """

    def __init__(self, seed: int | Array = 0):
        if isinstance(seed, int):
            self._key = jax.random.PRNGKey(seed)
        else:
            self._key = seed

    @classmethod
    def from_time(cls) -> KeyStream:
        """Seed from the wall clock in milliseconds."""
        seed = int(time.time() * 1000) % (2**32)
        logger.debug("Seeding key stream from wall clock: %d", seed)
        return cls(seed)

    def next(self) -> Array:
        """Return a fresh subkey and advance the stream."""
        self._key, subkey = jax.random.split(self._key)
        return subkey

    def split(self, num: int) -> list[Array]:
        """Return ``num`` fresh subkeys."""
        return [self.next() for _ in range(num)]

    def __iter__(self):
        return self

    def __next__(self) -> Array:
        return self.next()
