"""
Reseedable random key stream for Bayesian fits.

JAX has no global random state: every sampler run needs an explicit
PRNG key. KeyStream holds the current key and hands out fresh subkeys,
so a caller who wants reproducible posteriors creates (or reseeds) one
stream and passes it to every fit.

Usage:
    rng = KeyStream(123)
    a = fitmodel(..., Ridge(), rng=rng)
    rng.seed(123)
    b = fitmodel(..., Ridge(), rng=rng)   # identical draws to `a`
"""

from __future__ import annotations

import numpy as np
from jax import random


class KeyStream:
    """
    A splittable stream of JAX PRNG keys.

    Not thread-safe; share a stream only between sequential fits.
    """

    def __init__(self, seed: int | None = None):
        self._seed = 0
        self._key = None
        self.seed(seed)

    def seed(self, seed: int | None = None) -> None:
        """Reset the stream. None draws a seed from OS entropy."""
        if seed is None:
            seed = int(np.random.SeedSequence().generate_state(1)[0])
        self._seed = int(seed)
        self._key = random.PRNGKey(self._seed)

    @property
    def initial_seed(self) -> int:
        """Seed the stream was last (re)seeded with."""
        return self._seed

    def next_key(self):
        """Split off and return a fresh key, advancing the stream."""
        self._key, subkey = random.split(self._key)
        return subkey

    def __repr__(self) -> str:
        return f"KeyStream(seed={self._seed})"


def resolve_rng(rng: KeyStream | int | None) -> KeyStream:
    """Resolve an rng argument to a KeyStream instance."""
    if isinstance(rng, KeyStream):
        return rng
    if rng is None or (isinstance(rng, (int, np.integer)) and not isinstance(rng, bool)):
        return KeyStream(None if rng is None else int(rng))
    raise TypeError(f"rng must be KeyStream, int or None, got {type(rng).__name__}")
