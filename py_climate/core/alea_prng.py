"""
Seeded Alea pseudo-random generator.

Johannes Baagøe's Alea algorithm: small, fast and reproducible across
platforms for a given seed string, which keeps generated grids stable.
"""

import math
from typing import Tuple

import numpy as np


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Alea's string hash, stateful across calls."""

    def __init__(self):
        self.n = 0xEFC8249D

    def __call__(self, data) -> float:
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * 0x100000000  # 2^32
        return _uint32(self.n) * 2.3283064365386963e-10  # 2^-32


class AleaPRNG:
    """Alea generator seeded from a string or number."""

    def __init__(self, seed):
        mash = _Mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        self.s0 = (self.s0 - mash(seed)) % 1
        self.s1 = (self.s1 - mash(seed)) % 1
        self.s2 = (self.s2 - mash(seed)) % 1

    def random(self) -> float:
        """Next number in [0, 1)."""
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Next number in [low, high)."""
        return low + (high - low) * self.random()

    def unit_vector(self) -> np.ndarray:
        """Uniformly distributed point on the unit sphere."""
        z = self.uniform(-1.0, 1.0)
        phi = self.uniform(0.0, 2 * math.pi)
        r = math.sqrt(1 - z * z)
        return np.array([r * math.cos(phi), r * math.sin(phi), z])

    def jitter(self, amplitude: float) -> Tuple[float, float]:
        """Pair of offsets in [-amplitude, amplitude)."""
        return (
            self.uniform(-amplitude, amplitude),
            self.uniform(-amplitude, amplitude),
        )
