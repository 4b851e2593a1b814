"""
Sampling Engine
===============

Draws one sampling pass (Monte Carlo or Latin Hypercube) across several
independent distributed values.

Each draw is an immutable :class:`ScenarioDraw` holding the sampled value of
every random parameter and the scenario probability ``1 / N``.

Latin Hypercube sampling splits [0, 1) into N equal strata and gives every
dimension its own random permutation of strata, so each one-dimensional
marginal uses every stratum exactly once.

Example:
    >>> engine = SamplingEngine(values, sample_count=100,
    ...                         method=SamplingMethod.LATIN_HYPERCUBE, seed=42)
    >>> for draw in engine.draws():
    ...     print(draw.probability, draw.values["demand"])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterator, List, Mapping, Optional, Sequence, Union

from ..exceptions import AbortedError, InvalidInputError
from .config import SamplingMethod
from .prng import BoundKind, Interval, PseudoRandom
from .values import DistributedValue

logger = logging.getLogger(__name__)

Key = Union[str, int]


@dataclass(frozen=True)
class ScenarioDraw:
    """
    One scenario: its ordinal, probability and the value of every parameter.

    Attributes:
        index: 0-based scenario ordinal within the pass
        probability: Scenario probability
        values: Read-only mapping from parameter name to sampled value
    """

    index: int
    probability: float
    values: Mapping[Key, float]

    def __getitem__(self, key: Key) -> float:
        return self.values[key]


def value_key(value: DistributedValue, position: int) -> Key:
    """Key of a distributed value inside a draw: its name, else its position."""
    return value.name if value.name is not None else position


class SamplingEngine:
    """
    Monte Carlo / Latin Hypercube sampler over independent distributed values.

    Args:
        values: Distributed values, one per sampled dimension
        sample_count: Number of samples N (> 0)
        method: MONTE_CARLO or LATIN_HYPERCUBE
        seed: PRNG seed; ``None`` takes the process-wide default counter
        query_abort: Polled inside unbounded rejection samplers

    Raises:
        InvalidInputError: Non-positive sample count, a method other than the
            two sampling methods, or Latin Hypercube over a distribution that
            needs more than one uniform per draw
    """

    def __init__(
        self,
        values: Sequence[DistributedValue],
        sample_count: int,
        method: SamplingMethod,
        seed: Optional[int] = None,
        query_abort: Optional[Callable[[], bool]] = None,
    ):
        if sample_count <= 0:
            raise InvalidInputError(f"sample count must be positive, got {sample_count}")
        if method not in (SamplingMethod.MONTE_CARLO, SamplingMethod.LATIN_HYPERCUBE):
            raise InvalidInputError(f"sampling engine cannot run method {method}")
        if method is SamplingMethod.LATIN_HYPERCUBE:
            for value in values:
                if not value.distribution.supports_latin_hypercube:
                    raise InvalidInputError(
                        f"{type(value.distribution).__name__} of {value.name!r} does not "
                        "support Latin Hypercube sampling"
                    )

        self.values = list(values)
        self.sample_count = int(sample_count)
        self.method = method
        self._query_abort = query_abort
        self._rng = PseudoRandom.create(seed)
        self.seed = self._rng.seed
        self._keys = [value_key(v, i) for i, v in enumerate(self.values)]

        logger.info(
            "Samples: %d, distributions: %d, method: %s",
            self.sample_count,
            len(self.values),
            self.method,
        )

        self._permutations: List[List[int]] = []
        if method is SamplingMethod.LATIN_HYPERCUBE:
            self._permutations = [self._rng.permutation(self.sample_count) for _ in self.values]

    @property
    def permutations(self) -> List[List[int]]:
        """Per-dimension sample-index to stratum-index maps (Latin Hypercube only)."""
        return [list(p) for p in self._permutations]

    def stratum(self, index: int) -> Interval:
        """The ``index``-th stratum of [0, 1]; only the last one is closed on the right."""
        n = self.sample_count
        upper_kind = BoundKind.CLOSED if index == n - 1 else BoundKind.OPEN
        return Interval(index / n, (index + 1) / n, BoundKind.CLOSED, upper_kind)

    def draws(self) -> Iterator[ScenarioDraw]:
        """
        Yield the N draws of one pass.

        Calling this again continues the same random stream.
        """
        probability = 1.0 / self.sample_count
        for i in range(self.sample_count):
            if self._query_abort is not None and self._query_abort():
                raise AbortedError("Sampling aborted", scenarios_completed=i)
            sampled = {}
            for d, value in enumerate(self.values):
                if self.method is SamplingMethod.LATIN_HYPERCUBE:
                    u = self._rng.next_double(self.stratum(self._permutations[d][i]))
                    sampled[self._keys[d]] = float(value.distribution.sample(u))
                else:
                    sampled[self._keys[d]] = float(
                        value.draw(self._rng.next_double, self._query_abort)
                    )
            yield ScenarioDraw(i, probability, MappingProxyType(sampled))
