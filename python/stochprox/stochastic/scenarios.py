"""
Scenario Generation
===================

Turns the distributed values of one solve into a finite, weighted sequence
of scenarios.

When the product of the values' scenario counts stays under the directive's
threshold, every combination is enumerated exactly (a depth-first cross
product). Otherwise a :class:`SamplingEngine` draws Monte Carlo or Latin
Hypercube samples with probability ``1 / N`` each.

Example:
    >>> gen = ScenarioGenerator([demand, price])
    >>> gen.scenario_count, gen.sampling_needed
    (6, False)
    >>> for draw in gen.scenarios():
    ...     print(draw.probability, dict(draw.values))
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Union

from ..exceptions import AbortedError, InvalidInputError, ModelDataError
from .config import SamplingMethod, SamplingParameters, StochasticDirective
from .sampling import Key, SamplingEngine, ScenarioDraw, value_key
from .values import MAX_SCENARIO_COUNT, DistributedValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cancelled:
    """Pull outcome: the abort predicate fired before the next scenario."""

    scenarios_completed: int


@dataclass(frozen=True)
class Done:
    """Pull outcome: every scenario has been produced."""

    scenarios_completed: int


Outcome = Union[ScenarioDraw, Cancelled, Done]


def saturating_product(counts: Sequence[int], limit: int = MAX_SCENARIO_COUNT) -> int:
    """Product of ``counts`` that saturates at ``limit`` instead of growing past it."""
    product = 1
    for count in counts:
        product *= count
        if product >= limit:
            return limit
    return product


def enumerate_scenarios(values: Sequence[DistributedValue]) -> Iterator[ScenarioDraw]:
    """
    Enumerate every combination of the values' explicit scenarios.

    The probability of a combination is the product of its parts. The order
    is depth first with the last value varying fastest. Each call starts from
    scratch, so two calls yield identical sequences. With no values there is
    a single scenario of probability one.

    Raises:
        ModelDataError: If a value cannot be enumerated
    """
    keys = [value_key(v, i) for i, v in enumerate(values)]
    tables = [list(v.scenarios()) for v in values]
    ordinal = itertools.count()

    def expand(depth: int, probability: float, chosen: Dict[Key, float]) -> Iterator[ScenarioDraw]:
        if depth == len(tables):
            yield ScenarioDraw(next(ordinal), probability, MappingProxyType(dict(chosen)))
            return
        for scenario in tables[depth]:
            chosen[keys[depth]] = scenario.value
            yield from expand(depth + 1, probability * scenario.probability, chosen)
        chosen.pop(keys[depth], None)

    yield from expand(0, 1.0, {})


class ScenarioStream:
    """
    Pull-based view over one pass of scenarios.

    :meth:`pull` returns a :class:`ScenarioDraw`, :class:`Cancelled` or
    :class:`Done`. Iterating the stream yields draws and raises
    :class:`AbortedError` on cancellation. Every produced draw is also
    written into the ``current_sample`` of its distributed values.
    """

    def __init__(
        self,
        source: Iterator[ScenarioDraw],
        values: Sequence[DistributedValue],
        query_abort: Optional[Callable[[], bool]] = None,
    ):
        self._source = source
        self._values = list(values)
        self._keys = [value_key(v, i) for i, v in enumerate(self._values)]
        self._query_abort = query_abort
        self._finished: Optional[Union[Cancelled, Done]] = None
        self.scenarios_completed = 0

    def pull(self) -> Outcome:
        if self._finished is not None:
            return self._finished
        if self._query_abort is not None and self._query_abort():
            self._finished = Cancelled(self.scenarios_completed)
            return self._finished
        try:
            draw = next(self._source)
        except StopIteration:
            self._finished = Done(self.scenarios_completed)
            return self._finished
        except AbortedError:
            self._finished = Cancelled(self.scenarios_completed)
            return self._finished

        for key, value in zip(self._keys, self._values):
            value.current_sample = draw.values[key]
        self.scenarios_completed += 1
        return draw

    def __iter__(self) -> Iterator[ScenarioDraw]:
        while True:
            outcome = self.pull()
            if isinstance(outcome, Cancelled):
                raise AbortedError(
                    "Scenario generation aborted",
                    scenarios_completed=outcome.scenarios_completed,
                )
            if isinstance(outcome, Done):
                return
            yield outcome


class ScenarioGenerator:
    """
    Decide between enumeration and sampling and drive scenario production.

    Args:
        values: Distributed values of the solve; names must be unique
        sampling: Sampling options (defaults: automatic method and count,
            default seed)
        directive: Stochastic directive (default threshold 500)
        query_abort: Polled before each scenario and inside rejection loops

    Example:
        >>> gen = ScenarioGenerator(values, SamplingParameters(random_seed=7))
        >>> first = [d.values for d in gen.scenarios()]
        >>> again = [d.values for d in gen.scenarios()]   # start over: identical
        >>> first == again
        True
    """

    def __init__(
        self,
        values: Sequence[DistributedValue],
        sampling: Optional[SamplingParameters] = None,
        directive: Optional[StochasticDirective] = None,
        query_abort: Optional[Callable[[], bool]] = None,
    ):
        self.values: List[DistributedValue] = list(values)
        keys = [value_key(v, i) for i, v in enumerate(self.values)]
        if len(set(keys)) != len(keys):
            raise InvalidInputError(f"random parameter names must be unique, got {keys}")
        self.sampling = sampling if sampling is not None else SamplingParameters()
        self.directive = directive if directive is not None else StochasticDirective()
        self.query_abort = query_abort
        self._engine: Optional[SamplingEngine] = None

    @property
    def scenario_count(self) -> int:
        """Exact number of scenario combinations, saturated at ``MAX_SCENARIO_COUNT``."""
        return saturating_product([v.scenario_count for v in self.values])

    @property
    def sampling_needed(self) -> bool:
        return self.scenario_count > self.directive.scenario_threshold

    @property
    def sampling_method(self) -> SamplingMethod:
        """
        The method used for this solve; NO_SAMPLING when enumerating.

        Raises:
            ModelDataError: If sampling is needed but NO_SAMPLING was requested
        """
        if not self.sampling_needed:
            return SamplingMethod.NO_SAMPLING
        if self.sampling.sampling_method is SamplingMethod.NO_SAMPLING:
            raise ModelDataError(
                f"{self.scenario_count} scenarios exceed the limit of "
                f"{self.directive.scenario_threshold} and sampling is disabled"
            )
        supports_lhs = all(v.distribution.supports_latin_hypercube for v in self.values)
        return self.sampling.resolve_method(supports_lhs)

    @property
    def sample_count(self) -> int:
        """Number of scenarios a full pass produces."""
        if not self.sampling_needed:
            return self.scenario_count
        return self.sampling.resolve_sample_count(self.sampling_method)

    @property
    def random_seed(self) -> int:
        return self.sampling.effective_seed

    def stream(self, start_over: bool = True) -> ScenarioStream:
        """
        Open a pull-based pass over the scenarios.

        Args:
            start_over: Rebuild the sampling engine from the seed so the same
                samples recur; ``False`` continues the previous engine
        """
        if self.sampling_needed:
            method = self.sampling_method
            if start_over or self._engine is None:
                logger.debug(
                    "Sampling %d of %d scenarios with %s, seed %d",
                    self.sample_count,
                    self.scenario_count,
                    method,
                    self.random_seed,
                )
                self._engine = SamplingEngine(
                    self.values,
                    self.sample_count,
                    method,
                    seed=self.random_seed,
                    query_abort=self.query_abort,
                )
            source = self._engine.draws()
        else:
            logger.debug("Enumerating %d scenarios", self.scenario_count)
            source = enumerate_scenarios(self.values)
        return ScenarioStream(source, self.values, self.query_abort)

    def scenarios(self, start_over: bool = True) -> Iterator[ScenarioDraw]:
        """
        Iterate the scenarios of one pass.

        Raises:
            AbortedError: If the abort predicate fires
        """
        return iter(self.stream(start_over))
