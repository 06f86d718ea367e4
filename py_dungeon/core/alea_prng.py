"""
Alea pseudo-random generator.

Based on Johannes Baagøe's Alea algorithm. Layouts are reproducible per
seed string: room scatter, room sizes, anchor counts and loop corridor
sampling all draw from one instance owned by each layout generator.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """Seedable Alea generator producing floats in [0, 1)."""

    def __init__(self, seed):
        """Initialize with a seed string, number or sequence of those."""
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            for char in str(data):
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Next float in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def rand(self, n: int) -> int:
        """Integer in [0, n); 0 when n is 0."""
        if n < 0:
            raise ValueError(f"rand() bound must be non-negative, got {n}")
        return int(self.random() * n)

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        """k distinct elements drawn uniformly (partial Fisher-Yates)."""
        pool = list(seq)
        if not 0 <= k <= len(pool):
            raise ValueError(f"Sample size {k} out of range for {len(pool)} items")
        for i in range(k):
            j = i + self.rand(len(pool) - i)
            pool[i], pool[j] = pool[j], pool[i]
        return pool[:k]
