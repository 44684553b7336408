"""Pseudorandom 64-bit integers for sampling decisions.

Draws come from the Mersenne Twister (MT19937) provided by :mod:`random`: a
period of 2**19937 - 1 and equidistribution in up to 623 dimensions, which is
what keeps the kept-trace volume in line with the configured sample rate. A
linear congruential generator would not.

Each thread gets its own generator so that sequential reuse across the traces
handled by a thread needs no locking.
"""
import random
import threading
from typing import Optional


class Rand64(object):
    """Seeded source of unsigned 64-bit integers."""

    __slots__ = ("_random", "seed")

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        # None seeds from OS entropy
        self._random = random.Random(seed)

    def next_u64(self) -> int:
        """Return an integer uniformly distributed over [0, 2**64 - 1]."""
        return self._random.getrandbits(64)

    def __repr__(self):
        return f"Rand64(seed={self.seed!r})"


_loc = threading.local()


def get_rand64(seed: Optional[int] = None) -> Rand64:
    """Return the generator bound to the current thread, creating it on first use.

    A configured seed is combined with the thread identity, so threads sharing a
    seed still draw distinct sequences.
    """
    gen = getattr(_loc, "rand64", None)
    if gen is None:
        gen = Rand64(None if seed is None else hash((seed, threading.get_ident())))
        _loc.rand64 = gen
    return gen


def reset_rand64() -> None:
    """Drop the current thread's generator; the next ``get_rand64`` call creates a new one."""
    _loc.rand64 = None
