"""
32-bit xorshift PRNG used by every stage of realm generation.

The generator works on the raw 32-bit state word, so a given seed yields the
same stream bit-for-bit on every platform. Python's random and NumPy's random
must not be used in generation code.
"""

import math
from typing import MutableSequence, Sequence, TypeVar

from ..utils.random import mix_seed
from .errors import PreconditionError

T = TypeVar("T")

_UINT32_MASK = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0


def _uint32(n: int) -> int:
    """Convert to unsigned 32-bit integer."""
    return int(n) & _UINT32_MASK


class XorShift32:
    """
    Marsaglia xorshift generator with the (13, 17, 5) shift triple.

    A zero state is the fixed point of the recurrence, so a seed whose low
    32 bits are all zero is remapped to 1.
    """

    def __init__(self, seed: int):
        """Initialize from an integer seed (only the low 32 bits are used)."""
        self.state = _uint32(seed) or 1
        self.call_count = 0

    def next_uint32(self) -> int:
        """Advance the state and return it as an unsigned 32-bit integer."""
        self.call_count += 1
        x = self.state
        x = (x ^ (x << 13)) & _UINT32_MASK
        x ^= x >> 17
        x = (x ^ (x << 5)) & _UINT32_MASK
        self.state = x
        return x

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        return self.next_uint32() / _TWO_POW_32

    def next_int(self, max_exclusive: int) -> int:
        """Return a uniform integer in [0, max_exclusive)."""
        if max_exclusive <= 0:
            raise PreconditionError(f"max_exclusive must be > 0, got {max_exclusive}")
        return math.floor(self.random() * max_exclusive)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.next_int(len(seq))]

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Fisher-Yates shuffle in place, walking from the last element down."""
        for i in range(len(items) - 1, 0, -1):
            j = self.next_int(i + 1)
            items[i], items[j] = items[j], items[i]

    def shuffled_indices(self, count: int) -> list:
        """Return a random permutation of range(count)."""
        order = list(range(count))
        self.shuffle(order)
        return order


def salted_prng(seed: int, *salts: int) -> XorShift32:
    """Create a fresh PRNG for one generation stage."""
    return XorShift32(mix_seed(seed, *salts))
