"""Utilities that centralise the project's randomness handling."""

from __future__ import annotations

import hashlib
import json
import os
from typing import Optional

import numpy as np

_GLOBAL_SEED: Optional[int] = None
_GLOBAL_SEED_SEQUENCE: np.random.SeedSequence = np.random.SeedSequence()
_GLOBAL_GENERATOR: np.random.Generator = np.random.Generator(np.random.PCG64())


def seed_everything(seed: Optional[int]) -> int:
    """Reseed the shared NumPy generator and return the seed in use.

    When *seed* is None a value derived from :func:`os.urandom` is used, which
    keeps the generator valid but does not guarantee reproducibility.
    """

    global _GLOBAL_SEED, _GLOBAL_SEED_SEQUENCE, _GLOBAL_GENERATOR

    if seed is None:
        seed = int.from_bytes(os.urandom(8), "big")

    _GLOBAL_SEED = int(seed)
    _GLOBAL_SEED_SEQUENCE = np.random.SeedSequence(_GLOBAL_SEED)
    _GLOBAL_GENERATOR = np.random.Generator(np.random.PCG64(_GLOBAL_SEED_SEQUENCE))
    return _GLOBAL_SEED


def current_seed() -> Optional[int]:
    return _GLOBAL_SEED


def global_rng() -> np.random.Generator:
    """Return the shared NumPy generator used across the project."""

    return _GLOBAL_GENERATOR


def spawn_generator(seed: Optional[int] = None) -> np.random.Generator:
    """Return an independent generator.

    With an explicit *seed* the generator is reproducible on its own; otherwise
    it is a child of the global seed sequence.
    """

    if seed is not None:
        return np.random.Generator(np.random.PCG64(np.random.SeedSequence(seed)))
    child = _GLOBAL_SEED_SEQUENCE.spawn(1)[0]
    return np.random.Generator(np.random.PCG64(child))


def generator_state_digest(generator: np.random.Generator) -> str:
    """Return a SHA256 digest of ``generator``'s internal state."""

    state = generator.bit_generator.state
    return hashlib.sha256(json.dumps(state, sort_keys=True).encode("utf8")).hexdigest()


__all__ = [
    "current_seed",
    "generator_state_digest",
    "global_rng",
    "seed_everything",
    "spawn_generator",
]
