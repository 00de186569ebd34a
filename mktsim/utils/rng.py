"""Seeded random number helpers."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np
from numpy.random import Generator


@dataclass
class RNGManager:
    """Manage deterministic RNG streams.

    Each named stream is an independent generator derived from ``seed`` and the
    stream name, so adding draws to one component never shifts another. With
    ``seed=None`` the root entropy comes from the operating system.
    """

    seed: Optional[int] = None
    _entropy: int = field(init=False)
    _streams: Dict[str, Generator] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        if self.seed is None:
            self._entropy = int(np.random.SeedSequence().entropy)
        else:
            self._entropy = int(self.seed)

    def generator(self, name: str) -> Generator:
        """Return a deterministic generator identified by ``name``."""

        if name not in self._streams:
            namespace = int.from_bytes(hashlib.sha256(name.encode("utf-8")).digest()[:8], "little")
            seq = np.random.SeedSequence([self._entropy, namespace & 0xFFFFFFFF, namespace >> 32])
            self._streams[name] = np.random.default_rng(seq)
        return self._streams[name]


def uniform(rng: Generator, low: float, high: float) -> float:
    """Sample a float uniformly from ``[low, high)``."""

    return float(rng.uniform(low, high))


__all__ = ["RNGManager", "uniform"]
