"""
Distributed Values
==================

A distributed value binds one distribution to a random parameter of the
model. It carries a ``current_sample`` slot that the scenario generator
overwrites once per scenario and, for discrete distributions, a finite list
of :class:`Scenario` (probability, value) pairs that can be enumerated
exactly.

Example:
    >>> demand = ExplicitScenariosValue("demand")
    >>> demand.add_scenario(0.3, 80.0)
    >>> demand.add_scenario(0.7, 120.0)
    >>> demand.finalize()
    >>> demand.scenario_count
    2
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from ..exceptions import InvalidInputError, ModelDataError
from .distributions import (
    BinomialDistribution,
    DiscreteUniformDistribution,
    Distribution,
    ScenariosDistribution,
)
from .numerics import equals_one, greater_than_one

# Scenario-count sentinel for distributions without a finite scenario list
MAX_SCENARIO_COUNT = 2**31 - 1

# Tolerance on the running and final sums of explicit scenario probabilities
ROUNDOFF_TOLERANCE = 1e-4


def is_valid_scenario_value(value: float) -> bool:
    """True if ``value`` can be the value of a scenario (finite, not NaN)."""
    return math.isfinite(value)


@dataclass(frozen=True)
class Scenario:
    """
    One (probability, value) realization of a random parameter.

    Args:
        probability: Probability in (0, 1]
        value: Finite value
    """

    probability: float
    value: float

    def __post_init__(self):
        if not (0.0 < self.probability <= 1.0):
            raise InvalidInputError(
                f"scenario probability must be in (0, 1], got {self.probability}"
            )
        if not is_valid_scenario_value(self.value):
            raise InvalidInputError(f"scenario value must be finite, got {self.value}")

    def __str__(self) -> str:
        return f"p = {self.probability:g}, v = {self.value:g}"


class DistributedValue:
    """
    Mutable holder binding a distribution to a random parameter.

    Values whose distribution has no finite scenario list report
    ``MAX_SCENARIO_COUNT`` and can only be sampled.

    Args:
        distribution: The distribution the parameter follows
        name: Name of the random parameter (used as the key in scenario draws)
    """

    def __init__(self, distribution: Distribution, name: Optional[str] = None):
        self._distribution = distribution
        self.name = name
        self.current_sample = math.nan

    @property
    def distribution(self) -> Distribution:
        return self._distribution

    @property
    def scenario_count(self) -> int:
        return MAX_SCENARIO_COUNT

    @property
    def is_enumerable(self) -> bool:
        return self.scenario_count < MAX_SCENARIO_COUNT

    def scenarios(self) -> Iterator[Scenario]:
        """
        Enumerate the (probability, value) pairs of this value.

        Raises:
            ModelDataError: If the distribution has no finite scenario list
        """
        raise ModelDataError(
            f"random parameter {self.name!r} with {type(self.distribution).__name__} "
            "cannot be enumerated; sampling is required"
        )

    def draw(
        self,
        next_uniform: Callable[[], float],
        query_abort: Optional[Callable[[], bool]] = None,
    ) -> float:
        """Sample the distribution from a uniform stream."""
        return self.distribution.sample_stream(next_uniform, query_abort)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, distribution={self.distribution!r})"


class UnivariateValue(DistributedValue):
    """Distributed value over a continuous or unbounded discrete distribution."""


class DiscreteUniformValue(DistributedValue):
    """Distributed value over the integers of a discrete uniform distribution."""

    def __init__(self, distribution: DiscreteUniformDistribution, name: Optional[str] = None):
        super().__init__(distribution, name)

    @property
    def scenario_count(self) -> int:
        return min(self.distribution.count, MAX_SCENARIO_COUNT)

    def scenarios(self) -> Iterator[Scenario]:
        dist = self.distribution
        probability = 1.0 / dist.count
        for value in range(dist.low, dist.high + 1):
            yield Scenario(probability, float(value))


class BinomialValue(DistributedValue):
    """
    Distributed value over a binomial distribution with ``n + 1`` scenarios.

    Scenario probabilities are built by the mass recurrence from both ends
    toward the middle, so the order is 0, n, 1, n - 1, ...
    """

    def __init__(self, distribution: BinomialDistribution, name: Optional[str] = None):
        super().__init__(distribution, name)

    @property
    def _degenerate(self) -> bool:
        return self.distribution.success_probability in (0.0, 1.0)

    @property
    def scenario_count(self) -> int:
        if self._degenerate:
            return 1
        return min(self.distribution.n_trials + 1, MAX_SCENARIO_COUNT)

    def scenarios(self) -> Iterator[Scenario]:
        n = self.distribution.n_trials
        p = self.distribution.success_probability
        if self._degenerate:
            yield Scenario(1.0, float(n) if p == 1.0 else 0.0)
            return

        q = 1.0 - p
        from_start = q**n
        from_end = p**n
        if from_start <= 0.0 or from_end <= 0.0:
            raise ModelDataError(
                f"cannot enumerate binomial scenarios for {self.name!r}: probability of "
                f"{n if from_start > 0.0 else 0} successes underflows"
            )
        yield Scenario(from_start, 0.0)
        yield Scenario(from_end, float(n))

        middle = math.ceil(n / 2.0)
        for k in range(1, middle):
            from_start *= p * (n - k + 1) / (q * k)
            from_end *= q * (n - k + 1) / (p * k)
            yield Scenario(from_start, float(k))
            yield Scenario(from_end, float(n - k))
        if n % 2 == 0:
            from_start *= p * (n - middle + 1) / (q * middle)
            yield Scenario(from_start, float(middle))

    def __str__(self) -> str:
        dist = self.distribution
        return f"Number of trials = {dist.n_trials}, Success probability = {dist.success_probability}"


class ExplicitScenariosValue(DistributedValue):
    """
    Distributed value given by an explicit list of scenarios.

    Scenarios are added one at a time; the running probability sum may never
    exceed one and must equal one (both within ``ROUNDOFF_TOLERANCE``) when
    :meth:`finalize` is called. The distribution is available only after
    finalization.

    Example:
        >>> value = ExplicitScenariosValue.from_pairs("d", [(0.5, 1.0), (0.5, 2.0)])
        >>> [s.value for s in value.scenarios()]
        [1.0, 2.0]
    """

    def __init__(self, name: Optional[str] = None):
        super().__init__(None, name)
        self._scenarios: List[Scenario] = []
        self._probability_sum = 0.0

    @classmethod
    def from_pairs(
        cls, name: Optional[str], pairs: Iterable[Tuple[float, float]]
    ) -> "ExplicitScenariosValue":
        """Build and finalize a value from (probability, value) pairs."""
        value = cls(name)
        for probability, outcome in pairs:
            value.add_scenario(probability, outcome)
        value.finalize()
        return value

    @property
    def distribution(self) -> ScenariosDistribution:
        if self._distribution is None:
            raise ModelDataError(f"scenarios of {self.name!r} have not been finalized")
        return self._distribution

    @property
    def is_finalized(self) -> bool:
        return self._distribution is not None

    @property
    def probability_sum(self) -> float:
        return self._probability_sum

    @property
    def scenario_count(self) -> int:
        return len(self._scenarios)

    def add_scenario(self, probability: float, value: float) -> None:
        """
        Append one scenario.

        Raises:
            InvalidInputError: If the pair itself is invalid
            ModelDataError: If the running probability sum exceeds one
        """
        if self.is_finalized:
            raise ModelDataError(f"scenarios of {self.name!r} are already finalized")
        scenario = Scenario(probability, value)
        self._scenarios.append(scenario)
        self._probability_sum += scenario.probability
        if greater_than_one(self._probability_sum, ROUNDOFF_TOLERANCE):
            raise ModelDataError(
                f"sum of scenario probabilities for {self.name!r} exceeds one "
                f"({self._probability_sum:g})"
            )

    def finalize(self) -> None:
        """
        Check that the probabilities sum to one and build the distribution.

        Raises:
            ModelDataError: If the sum is not within tolerance of one
        """
        if not equals_one(self._probability_sum, ROUNDOFF_TOLERANCE):
            raise ModelDataError(
                f"scenario probabilities for {self.name!r} sum to "
                f"{self._probability_sum:g}, not one"
            )
        self._distribution = ScenariosDistribution(
            values=[s.value for s in self._scenarios],
            probabilities=[s.probability for s in self._scenarios],
        )

    def scenarios(self) -> Iterator[Scenario]:
        return iter(list(self._scenarios))

    def to_string(self, max_count: int = 5) -> str:
        parts = []
        for i, scenario in enumerate(self._scenarios, start=1):
            if i > max_count:
                parts.append("...")
                break
            parts.append(f"[{i}]: {scenario}")
        return f"Count = {self.scenario_count}, [{', '.join(parts)}]"

    def __str__(self) -> str:
        return self.to_string()


def distributed_value(distribution: Distribution, name: Optional[str] = None) -> DistributedValue:
    """
    Wrap a distribution in the matching distributed-value type.

    Example:
        >>> value = distributed_value(DiscreteUniformDistribution(1, 3), "d")
        >>> value.scenario_count
        3
    """
    if isinstance(distribution, DiscreteUniformDistribution):
        return DiscreteUniformValue(distribution, name)
    if isinstance(distribution, BinomialDistribution):
        return BinomialValue(distribution, name)
    if isinstance(distribution, ScenariosDistribution):
        return ExplicitScenariosValue.from_pairs(
            name, zip(distribution.probabilities.tolist(), distribution.values.tolist())
        )
    return UnivariateValue(distribution, name)
