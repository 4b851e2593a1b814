"""
Sampling and Stochastic Directive Configuration
===============================================

Options that control how scenarios are produced for one solve.

Both option sets can be built directly or from the loose ``params``
dictionaries accepted by :func:`stochprox.solve`:

    >>> sampling = SamplingParameters.from_params({"method": "monte_carlo", "seed": 7})
    >>> directive = StochasticDirective.from_params({"max_scenarios": 1000})
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from ..exceptions import InvalidInputError

DEFAULT_RANDOM_SEED = 123456
DEFAULT_MAX_SCENARIOS_BEFORE_SAMPLING = 500
DEFAULT_LATIN_HYPERCUBE_SAMPLES = 100
DEFAULT_MONTE_CARLO_SAMPLES = 300


class SamplingMethod(Enum):
    """
    How scenarios are sampled when exact enumeration is too large.

    Attributes:
        AUTOMATIC: Latin Hypercube when every distribution supports it
        NO_SAMPLING: Never sample; fail if enumeration is too large
        MONTE_CARLO: Independent draws
        LATIN_HYPERCUBE: Stratified draws, one per stratum per dimension
    """

    AUTOMATIC = "automatic"
    NO_SAMPLING = "no_sampling"
    MONTE_CARLO = "monte_carlo"
    LATIN_HYPERCUBE = "latin_hypercube"

    def __str__(self) -> str:
        return self.value


class DecompositionType(Enum):
    """Decomposition requested for the solve; recorded but not applied."""

    AUTOMATIC = "automatic"
    DISABLED = "disabled"
    ENABLED = "enabled"

    def __str__(self) -> str:
        return self.value


def _parse_enum(enum_cls, value: Any, name: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        for member in enum_cls:
            if member.value == key or member.name.lower() == key:
                return member
    raise InvalidInputError(
        f"unknown {name} {value!r}; expected one of {[m.value for m in enum_cls]}"
    )


def _lookup(params: Dict[str, Any], keys: Iterable[str], default: Any) -> Any:
    for key in keys:
        if key in params:
            return params[key]
    return default


@dataclass
class SamplingParameters:
    """
    Sampling options.

    Args:
        sample_count: Number of samples; 0 picks a default for the method
        sampling_method: Method, or AUTOMATIC
        random_seed: Seed; 0 uses the fixed ``DEFAULT_RANDOM_SEED`` so an
            unseeded solve is still reproducible
    """

    sample_count: int = 0
    sampling_method: Union[SamplingMethod, str] = SamplingMethod.AUTOMATIC
    random_seed: int = 0

    def __post_init__(self):
        self.sampling_method = _parse_enum(SamplingMethod, self.sampling_method, "sampling method")
        if int(self.sample_count) != self.sample_count or self.sample_count < 0:
            raise InvalidInputError(
                f"sample count must be a non-negative integer, got {self.sample_count}"
            )
        if int(self.random_seed) != self.random_seed:
            raise InvalidInputError(f"random seed must be an integer, got {self.random_seed}")
        self.sample_count = int(self.sample_count)
        self.random_seed = int(self.random_seed)

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]] = None) -> "SamplingParameters":
        params = params or {}
        return cls(
            sample_count=_lookup(params, ("sample_count", "n_samples"), 0),
            sampling_method=_lookup(
                params, ("sampling_method", "method"), SamplingMethod.AUTOMATIC
            ),
            random_seed=_lookup(params, ("random_seed", "seed"), 0),
        )

    @property
    def effective_seed(self) -> int:
        return self.random_seed if self.random_seed != 0 else DEFAULT_RANDOM_SEED

    def resolve_method(self, supports_latin_hypercube: bool) -> SamplingMethod:
        """
        Resolve AUTOMATIC to a concrete sampling method.

        Args:
            supports_latin_hypercube: Whether every sampled distribution needs
                exactly one uniform per draw
        """
        if self.sampling_method is SamplingMethod.AUTOMATIC:
            if supports_latin_hypercube:
                return SamplingMethod.LATIN_HYPERCUBE
            return SamplingMethod.MONTE_CARLO
        return self.sampling_method

    def resolve_sample_count(self, method: SamplingMethod) -> int:
        if self.sample_count > 0:
            return self.sample_count
        if method is SamplingMethod.MONTE_CARLO:
            return DEFAULT_MONTE_CARLO_SAMPLES
        return DEFAULT_LATIN_HYPERCUBE_SAMPLES


@dataclass
class StochasticDirective:
    """
    Solve-level options for stochastic models.

    Args:
        maximum_scenario_count_before_sampling: Enumerate exactly while the
            scenario count stays at or below this; -1 means the default (500)
        decomposition_type: Requested decomposition (recorded only)
    """

    maximum_scenario_count_before_sampling: int = -1
    decomposition_type: Union[DecompositionType, str] = DecompositionType.AUTOMATIC

    def __post_init__(self):
        self.decomposition_type = _parse_enum(
            DecompositionType, self.decomposition_type, "decomposition type"
        )
        threshold = self.maximum_scenario_count_before_sampling
        if int(threshold) != threshold or (threshold <= 0 and threshold != -1):
            raise InvalidInputError(
                "maximum scenario count before sampling must be a positive integer "
                f"or -1, got {threshold}"
            )
        self.maximum_scenario_count_before_sampling = int(threshold)

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]] = None) -> "StochasticDirective":
        params = params or {}
        return cls(
            maximum_scenario_count_before_sampling=_lookup(
                params, ("maximum_scenario_count_before_sampling", "max_scenarios"), -1
            ),
            decomposition_type=_lookup(
                params, ("decomposition_type", "decomposition"), DecompositionType.AUTOMATIC
            ),
        )

    @property
    def scenario_threshold(self) -> int:
        threshold = self.maximum_scenario_count_before_sampling
        if threshold == -1:
            return DEFAULT_MAX_SCENARIOS_BEFORE_SAMPLING
        return threshold
