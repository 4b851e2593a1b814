"""
Pseudo-Random Source
====================

Seeded uniform generator used by the sampling engine.

The default generator is MT19937 (Mersenne Twister) from NumPy's legacy
``RandomState``, so two instances built from the same seed produce
bit-identical sequences. Unseeded instances draw their seed
from a process-wide counter, so successive ``PseudoRandom.create()`` calls
differ from each other while a whole program run stays reproducible.

Example:
    >>> rng = PseudoRandom.create(42)
    >>> u = rng.next_double()                 # [0, 1)
    >>> x = rng.next_double(Interval(2.0, 5.0, upper_kind=BoundKind.OPEN))
"""

from __future__ import annotations

import itertools
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

import numpy as np

from ..exceptions import InvalidInputError

_default_seeds = itertools.count(1)

_TWO_POW_32 = 4294967296.0
_TWO_POW_53 = 9007199254740992.0
_TWO_POW_26 = 67108864.0


class BoundKind(Enum):
    """Whether an interval endpoint belongs to the interval."""

    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class Interval:
    """
    A real interval with independently open or closed endpoints.

    Args:
        lower: Lower endpoint (finite)
        upper: Upper endpoint (finite, >= lower)
        lower_kind: Whether ``lower`` is included
        upper_kind: Whether ``upper`` is included
    """

    lower: float
    upper: float
    lower_kind: BoundKind = BoundKind.CLOSED
    upper_kind: BoundKind = BoundKind.CLOSED

    def __post_init__(self):
        if not (math.isfinite(self.lower) and math.isfinite(self.upper)):
            raise InvalidInputError(
                f"interval bounds must be finite, got [{self.lower}, {self.upper}]"
            )
        if self.lower > self.upper:
            raise InvalidInputError(
                f"interval lower bound {self.lower} exceeds upper bound {self.upper}"
            )

    @property
    def is_degenerate(self) -> bool:
        return self.lower == self.upper

    def contains(self, x: float) -> bool:
        """Check membership honoring the endpoint kinds."""
        if self.lower_kind is BoundKind.CLOSED:
            above = x >= self.lower
        else:
            above = x > self.lower
        if self.upper_kind is BoundKind.CLOSED:
            below = x <= self.upper
        else:
            below = x < self.upper
        return above and below

    def __str__(self) -> str:
        left = "[" if self.lower_kind is BoundKind.CLOSED else "("
        right = "]" if self.upper_kind is BoundKind.CLOSED else ")"
        return f"{left}{self.lower}, {self.upper}{right}"


class PseudoRandom(ABC):
    """
    Base class for deterministic uniform generators.

    Subclasses supply :meth:`next_uint32` and :meth:`permutation`; every other
    draw is derived from ``next_uint32`` unless a subclass overrides it.
    An instance is owned by exactly one consumer and is not thread-safe.
    """

    def __init__(self, seed: int):
        self.seed = seed

    @classmethod
    def create(cls, seed: Optional[int] = None) -> "PseudoRandom":
        """
        Build the default generator.

        Args:
            seed: Explicit seed; ``None`` takes the next value of the
                process-wide default seed counter.
        """
        if seed is None:
            seed = next(_default_seeds)
        return MersenneTwister(seed)

    @abstractmethod
    def next_uint32(self) -> int:
        """Next uniformly distributed 32-bit unsigned integer."""

    @abstractmethod
    def permutation(self, n: int) -> List[int]:
        """A uniformly random permutation of ``range(n)``."""

    def next_bytes(self, count: int) -> bytes:
        """Return ``count`` random bytes."""
        if count < 0:
            raise InvalidInputError(f"byte count must be non-negative, got {count}")
        out = bytearray()
        while len(out) < count:
            out.extend(self.next_uint32().to_bytes(4, "little"))
        return bytes(out[:count])

    def next_single(self, interval: Optional[Interval] = None) -> float:
        """
        Single-precision draw in [0, 1), or inside ``interval`` when given.

        The result is rounded to float32 precision.
        """
        if interval is not None:
            return self._draw_in(interval, self.next_single, np.float32)
        while True:
            value = np.float32(self.next_uint32() / _TWO_POW_32)
            # Rounding to float32 can land exactly on 1
            if value < 1.0:
                return float(value)

    def next_double(self, interval: Optional[Interval] = None) -> float:
        """
        Double-precision draw in [0, 1) with 53 random bits.

        With ``interval`` the draw is mapped into the interval and redrawn
        until it satisfies the interval's endpoint kinds.
        """
        if interval is not None:
            return self._draw_in(interval, self.next_double, float)
        a = self.next_uint32() >> 5
        b = self.next_uint32() >> 6
        return (a * _TWO_POW_26 + b) / _TWO_POW_53

    def next_double_greater_than_0(self) -> float:
        """Draw in (0, 1)."""
        while True:
            value = self.next_double()
            if value > 0.0:
                return value

    def _draw_in(self, interval: Interval, draw, cast) -> float:
        if interval.is_degenerate:
            if interval.lower_kind is BoundKind.CLOSED and interval.upper_kind is BoundKind.CLOSED:
                return interval.lower
            raise InvalidInputError(f"interval {interval} is empty")
        lower, upper = cast(interval.lower), cast(interval.upper)
        while True:
            u = cast(draw())
            value = float(u * upper + (cast(1.0) - u) * lower)
            if interval.contains(value):
                return value


class MersenneTwister(PseudoRandom):
    """
    MT19937 generator backed by NumPy's legacy ``RandomState``.

    Integer seeds go through ``init_genrand``, so the stream matches any
    other MT19937 implementation seeded the same way.
    """

    def __init__(self, seed: int):
        super().__init__(seed)
        self._state = np.random.RandomState(seed & 0xFFFFFFFF)

    def next_uint32(self) -> int:
        return int(self._state.randint(0, 2**32, dtype=np.uint32))

    def next_double(self, interval: Optional[Interval] = None) -> float:
        if interval is not None:
            return self._draw_in(interval, self.next_double, float)
        return float(self._state.random_sample())

    def permutation(self, n: int) -> List[int]:
        return self._state.permutation(n).tolist()

    def __repr__(self) -> str:
        return f"MersenneTwister(seed={self.seed})"
