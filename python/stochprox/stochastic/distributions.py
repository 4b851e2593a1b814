"""
Probability Distributions for Stochastic Programming
=====================================================

Univariate distributions that random parameters are bound to.

Every distribution exposes its moments, ``density``, ``cumulative_density``
and ``quantile``, and a sampler fed by uniform draws. Most samplers need a
single uniform and are plain inverse-CDF lookups, which is what Latin
Hypercube sampling requires. The binomial rejection sampler (BTRD) needs an
unbounded number of uniforms and declares ``random_numbers_needed == DYNAMIC``.

Kurtosis is reported as the plain fourth standardized moment (3 for the
normal distribution), not excess kurtosis.

Example:
    >>> demand = NormalDistribution(mean_=100.0, std=15.0)
    >>> demand.quantile(0.975)
    129.39...
    >>> demand.sample(0.5)
    100.0
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Sequence

import numpy as np

from ..exceptions import AbortedError, InvalidInputError, NonConvergenceError
from . import numerics
from .numerics import validate_cumulative_density_value, validate_probability

# random_numbers_needed sentinel for samplers with an unbounded draw count
DYNAMIC = -1

INT32_MAX = 2**31 - 1

# Threshold on n * min(p, 1 - p) above which the binomial switches to BTRD
BINOMIAL_NP_THRESHOLD = 10.0
BTRD_MAX_TRIALS = 1000

_AROUND_ONE_TOLERANCE = 1e-10
_DISCRETE_UNIFORM_QUANTILE_TOLERANCE = 1e-7
_GEOMETRIC_STEP_TOLERANCE = 1e-7
_SCENARIO_VALUE_TOLERANCE = 1e-4
_DEGENERATE_VARIANCE = 1e-12


def _check_finite(value: float, name: str) -> None:
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be a finite number, got {value}")


def _check_abort(query_abort: Optional[Callable[[], bool]]) -> None:
    if query_abort is not None and query_abort():
        raise AbortedError("Sampling aborted")


class Distribution(ABC):
    """Base class for distributions."""

    @abstractmethod
    def mean(self) -> float:
        """Distribution mean."""

    @abstractmethod
    def variance(self) -> float:
        """Distribution variance."""

    @abstractmethod
    def skewness(self) -> float:
        """Third standardized moment."""

    @abstractmethod
    def kurtosis(self) -> float:
        """Fourth standardized moment."""

    @abstractmethod
    def density(self, x: float) -> float:
        """Probability density (or mass for discrete distributions) at ``x``."""

    @abstractmethod
    def cumulative_density(self, x: float) -> float:
        """P(X <= x)."""

    @abstractmethod
    def quantile(self, probability: float) -> float:
        """Smallest support value whose cumulative density reaches ``probability``."""

    @property
    def random_numbers_needed(self) -> int:
        """Uniform draws consumed per sample, or ``DYNAMIC``."""
        return 1

    @property
    def supports_latin_hypercube(self) -> bool:
        return self.random_numbers_needed == 1

    @property
    def is_discrete(self) -> bool:
        return False

    def sample(self, *uniforms: float) -> float:
        """
        Map uniform draws in [0, 1] to one sample.

        The default is inverse-CDF on the single uniform.

        Raises:
            InvalidInputError: Wrong number of uniforms, or one outside [0, 1]
        """
        self._check_sample_args(uniforms)
        return self.quantile(uniforms[0])

    def sample_stream(
        self,
        next_uniform: Callable[[], float],
        query_abort: Optional[Callable[[], bool]] = None,
    ) -> float:
        """
        Draw one sample, pulling as many uniforms as needed from ``next_uniform``.

        Args:
            next_uniform: Source of uniforms in [0, 1)
            query_abort: Polled inside unbounded sampling loops
        """
        needed = self.random_numbers_needed
        if needed == DYNAMIC:
            raise InvalidInputError(
                f"{type(self).__name__} needs a dynamic draw count but has no stream sampler"
            )
        return self.sample(*(next_uniform() for _ in range(needed)))

    def _check_sample_args(self, uniforms: Sequence[float]) -> None:
        needed = self.random_numbers_needed
        if needed != DYNAMIC and len(uniforms) != needed:
            raise InvalidInputError(
                f"{type(self).__name__} needs {needed} random numbers, got {len(uniforms)}"
            )
        for u in uniforms:
            if math.isnan(u) or u < 0.0 or u > 1.0:
                raise InvalidInputError(f"random numbers must be in [0, 1], got {u}")


# ============================================================================
# Continuous distributions
# ============================================================================


@dataclass(frozen=True)
class NormalDistribution(Distribution):
    """
    Normal distribution.

    A zero standard deviation is accepted and turns the distribution into a
    point mass at ``mean_``, so a random parameter can be made deterministic
    without rebuilding the model.

    Args:
        mean_: Mean (finite)
        std: Standard deviation (finite, >= 0)

    Example:
        >>> dist = NormalDistribution(mean_=10.0, std=2.0)
        >>> dist.cumulative_density(10.0)
        0.5
    """

    mean_: float
    std: float = 1.0

    def __post_init__(self):
        _check_finite(self.mean_, "mean")
        _check_finite(self.std, "standard deviation")
        if self.std < 0:
            raise InvalidInputError(f"standard deviation must be non-negative, got {self.std}")

    def mean(self) -> float:
        return self.mean_

    def variance(self) -> float:
        return self.std**2

    def skewness(self) -> float:
        return 0.0

    def kurtosis(self) -> float:
        return 3.0

    def density(self, x: float) -> float:
        if self.std == 0.0:
            return math.inf if x == self.mean_ else 0.0
        z = (x - self.mean_) / self.std
        return math.exp(-0.5 * z * z) / (self.std * numerics.SQRT_TWO_PI)

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if self.std == 0.0:
            if x < self.mean_:
                return 0.0
            return 1.0 if x > self.mean_ else 0.5
        if math.isinf(x):
            return 0.0 if x < 0 else 1.0
        return 0.5 * (1.0 + numerics.error_function((x - self.mean_) / (self.std * numerics.SQRT_TWO)))

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        if self.std == 0.0:
            return self.mean_
        if probability == 0.0:
            return -math.inf
        if probability == 1.0:
            return math.inf
        return self.mean_ + self.std * numerics.inverse_standard_normal_cdf(probability)


@dataclass(frozen=True)
class LogNormalDistribution(Distribution):
    """
    Log-normal distribution (always positive).

    Args:
        mu: Mean of log(X)
        sigma: Std of log(X); zero gives a point mass at exp(mu)
    """

    mu: float
    sigma: float

    def __post_init__(self):
        _check_finite(self.mu, "mean of log")
        _check_finite(self.sigma, "standard deviation of log")
        if self.sigma < 0:
            raise InvalidInputError(
                f"standard deviation of log must be non-negative, got {self.sigma}"
            )

    @property
    def _sigma_sq(self) -> float:
        return self.sigma * self.sigma

    def mean(self) -> float:
        return math.exp(self.mu + self._sigma_sq / 2.0)

    def variance(self) -> float:
        return math.exp(self._sigma_sq + 2.0 * self.mu) * (math.exp(self._sigma_sq) - 1.0)

    def skewness(self) -> float:
        s2 = self._sigma_sq
        return math.sqrt(math.exp(s2) - 1.0) * (2.0 + math.exp(s2))

    def kurtosis(self) -> float:
        s2 = self._sigma_sq
        return math.exp(4.0 * s2) + 2.0 * math.exp(3.0 * s2) + 3.0 * math.exp(2.0 * s2) - 3.0

    def density(self, x: float) -> float:
        if x < 0.0:
            return 0.0
        if self.sigma == 0.0:
            return math.inf if abs(x - self.mean()) <= _AROUND_ONE_TOLERANCE else 0.0
        if x <= _AROUND_ONE_TOLERANCE:
            return 0.0
        z = math.log(x) - self.mu
        return math.exp(-z * z / (2.0 * self._sigma_sq)) / (self.sigma * numerics.SQRT_TWO_PI * x)

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if self.sigma == 0.0:
            point = self.mean()
            if abs(x - point) <= _AROUND_ONE_TOLERANCE:
                return 0.5
            return 0.0 if x < point else 1.0
        if x <= _AROUND_ONE_TOLERANCE:
            return 0.0
        if math.isinf(x):
            return 1.0
        return 0.5 * (1.0 - numerics.error_function((self.mu - math.log(x)) / (numerics.SQRT_TWO * self.sigma)))

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        if self.sigma == 0.0:
            return self.mean()
        if probability <= _AROUND_ONE_TOLERANCE:
            return 0.0
        if abs(probability - 1.0) <= _AROUND_ONE_TOLERANCE:
            return math.inf
        return math.exp(self.mu + self.sigma * numerics.inverse_standard_normal_cdf(probability))


@dataclass(frozen=True)
class ExponentialDistribution(Distribution):
    """
    Exponential distribution with the given rate (1 / mean).

    Args:
        rate: Rate parameter (finite, > 0)
    """

    rate: float

    def __post_init__(self):
        _check_finite(self.rate, "rate")
        if self.rate <= 0:
            raise InvalidInputError(f"rate must be positive, got {self.rate}")

    def mean(self) -> float:
        return 1.0 / self.rate

    def variance(self) -> float:
        return 1.0 / (self.rate * self.rate)

    def skewness(self) -> float:
        return 2.0

    def kurtosis(self) -> float:
        return 9.0

    def density(self, x: float) -> float:
        if x < 0.0:
            return 0.0
        return self.rate * math.exp(-self.rate * x)

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if x <= 0.0:
            return 0.0
        return -math.expm1(-self.rate * x)

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        if probability == 1.0:
            return math.inf
        return -math.log1p(-probability) / self.rate


@dataclass(frozen=True)
class ContinuousUniformDistribution(Distribution):
    """
    Uniform distribution on [low, high].

    Args:
        low: Lower bound
        high: Upper bound (>= low; equal bounds give a point mass)

    Example:
        >>> ContinuousUniformDistribution(low=5.0, high=15.0).quantile(0.25)
        7.5
    """

    low: float
    high: float

    def __post_init__(self):
        _check_finite(self.low, "lower bound")
        _check_finite(self.high, "upper bound")
        if self.low > self.high:
            raise InvalidInputError(
                f"lower bound {self.low} must not exceed upper bound {self.high}"
            )

    @property
    def width(self) -> float:
        return self.high - self.low

    def mean(self) -> float:
        return (self.low + self.high) / 2.0

    def variance(self) -> float:
        return self.width**2 / 12.0

    def skewness(self) -> float:
        return 0.0

    def kurtosis(self) -> float:
        return 1.8

    def density(self, x: float) -> float:
        if x < self.low or x > self.high:
            return 0.0
        if self.width == 0.0:
            return math.inf
        return 1.0 / self.width

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if x < self.low:
            return 0.0
        if x >= self.high:
            return 1.0
        return (x - self.low) / self.width

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        return self.low + probability * self.width


# ============================================================================
# Discrete distributions
# ============================================================================


@dataclass(frozen=True)
class DiscreteUniformDistribution(Distribution):
    """
    Uniform distribution over the integers low, low + 1, ..., high.

    Args:
        low: Smallest value
        high: Largest value (>= low)

    Example:
        >>> dist = DiscreteUniformDistribution(low=1, high=6)
        >>> dist.density(3)
        0.16666666666666666
    """

    low: int
    high: int

    def __post_init__(self):
        for name, bound in (("lower bound", self.low), ("upper bound", self.high)):
            if isinstance(bound, float) and not bound.is_integer():
                raise InvalidInputError(f"{name} must be an integer, got {bound}")
        if self.low > self.high:
            raise InvalidInputError(
                f"lower bound {self.low} must not exceed upper bound {self.high}"
            )
        object.__setattr__(self, "low", int(self.low))
        object.__setattr__(self, "high", int(self.high))

    @property
    def is_discrete(self) -> bool:
        return True

    @property
    def count(self) -> int:
        return self.high - self.low + 1

    def mean(self) -> float:
        return (self.low + self.high) / 2.0

    def variance(self) -> float:
        return (self.count**2 - 1) / 12.0

    def skewness(self) -> float:
        return 0.0

    def kurtosis(self) -> float:
        n2 = float(self.count) ** 2
        if n2 == 1.0:
            return math.nan
        return 3.0 - 6.0 * (n2 + 1.0) / (5.0 * (n2 - 1.0))

    def density(self, x: float) -> float:
        if x < self.low or x > self.high or x != math.floor(x):
            return 0.0
        return 1.0 / self.count

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if x < self.low:
            return 0.0
        if x >= self.high:
            return 1.0
        return (math.floor(x) - self.low + 1) / self.count

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        return self._value_at(probability, _DISCRETE_UNIFORM_QUANTILE_TOLERANCE)

    def sample(self, *uniforms: float) -> float:
        self._check_sample_args(uniforms)
        return self._value_at(uniforms[0], 0.0)

    def _value_at(self, probability: float, tolerance: float) -> int:
        # A position within tolerance of a cell boundary belongs to the lower cell
        index = math.ceil(probability * self.count - tolerance) - 1
        index = min(max(index, 0), self.count - 1)
        return self.low + index


@dataclass(frozen=True)
class GeometricDistribution(Distribution):
    """
    Number of failures before the first success.

    Args:
        success_probability: Success probability in (0, 1]
    """

    success_probability: float

    def __post_init__(self):
        if not numerics.is_nonzero_probability(self.success_probability):
            raise InvalidInputError(
                f"success probability must be in (0, 1], got {self.success_probability}"
            )
        if numerics.equals_one(self.success_probability, _AROUND_ONE_TOLERANCE):
            object.__setattr__(self, "success_probability", 1.0)

    @property
    def is_discrete(self) -> bool:
        return True

    @property
    def _q(self) -> float:
        return 1.0 - self.success_probability

    def mean(self) -> float:
        return self._q / self.success_probability

    def variance(self) -> float:
        return self._q / self.success_probability**2

    def skewness(self) -> float:
        if self.success_probability == 1.0:
            return math.inf
        return (2.0 - self.success_probability) / math.sqrt(self._q)

    def kurtosis(self) -> float:
        if self.success_probability == 1.0:
            return math.inf
        return 9.0 + self.success_probability**2 / self._q

    def density(self, x: float) -> float:
        if x < 0 or not math.isfinite(x) or x != math.floor(x):
            return 0.0
        return self._q**x * self.success_probability

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if x < 0:
            return 0.0
        if math.isinf(x):
            return 1.0
        return 1.0 - self._q ** (math.floor(x) + 1)

    def quantile(self, probability: float) -> float:
        position = self._as_int32_range(self._position(probability))
        nearest = round(position)
        # Cumulative densities that land on a step belong to the lower value
        if nearest >= 1 and abs(position - nearest) <= _GEOMETRIC_STEP_TOLERANCE:
            return nearest - 1
        return math.floor(position)

    def sample(self, *uniforms: float) -> float:
        self._check_sample_args(uniforms)
        return math.floor(self._as_int32_range(self._position(uniforms[0])))

    def _position(self, probability: float) -> float:
        validate_probability(probability)
        if numerics.equals_one(probability, _AROUND_ONE_TOLERANCE):
            return math.inf
        if self.success_probability == 1.0:
            return 0.0
        return math.log1p(-probability) / math.log(self._q)

    @staticmethod
    def _as_int32_range(position: float) -> float:
        if position >= INT32_MAX + 1.0:
            raise NonConvergenceError(
                f"geometric quantile {position} does not fit a 32-bit integer"
            )
        return position


@dataclass(frozen=True)
class BinomialDistribution(Distribution):
    """
    Number of successes in ``n_trials`` independent Bernoulli trials.

    Sampling maps ``p > 0.5`` onto ``1 - p`` and the result ``x`` onto
    ``n - x`` so only ``p <= 0.5`` is handled internally. When
    ``n * min(p, 1 - p) < 10`` a single uniform is inverted through the
    probability-mass recurrence; otherwise the BTRD acceptance-rejection
    algorithm consumes a dynamic number of uniforms.

    Args:
        n_trials: Number of trials (> 0)
        success_probability: Probability in [0, 1]

    References:
        Hormann, W. (1993). The generation of binomial random variates.
        Journal of Statistical Computation and Simulation 46.
    """

    n_trials: int
    success_probability: float

    def __post_init__(self):
        validate_probability(self.success_probability, "success probability")
        if int(self.n_trials) != self.n_trials or self.n_trials <= 0:
            raise InvalidInputError(
                f"number of trials must be a positive integer, got {self.n_trials}"
            )
        object.__setattr__(self, "n_trials", int(self.n_trials))

    @property
    def is_discrete(self) -> bool:
        return True

    @property
    def _flipped(self) -> bool:
        return self.success_probability > 0.5

    @property
    def _p(self) -> float:
        return min(self.success_probability, 1.0 - self.success_probability)

    @property
    def _np(self) -> float:
        return self.n_trials * self._p

    @property
    def uses_inverse_transform(self) -> bool:
        return self._np < BINOMIAL_NP_THRESHOLD

    @property
    def random_numbers_needed(self) -> int:
        return 1 if self.uses_inverse_transform else DYNAMIC

    def _npq(self) -> float:
        return self.n_trials * self.success_probability * (1.0 - self.success_probability)

    def mean(self) -> float:
        return self.n_trials * self.success_probability

    def variance(self) -> float:
        return self._npq()

    def skewness(self) -> float:
        npq = self._npq()
        if npq == 0.0:
            return math.nan
        return (1.0 - 2.0 * self.success_probability) / math.sqrt(npq)

    def kurtosis(self) -> float:
        npq = self._npq()
        if npq == 0.0:
            return math.nan
        pq = self.success_probability * (1.0 - self.success_probability)
        return 3.0 + (1.0 - 6.0 * pq) / npq

    def density(self, x: float) -> float:
        if x < 0 or x > self.n_trials or x != math.floor(x):
            return 0.0
        return self._mass(int(x))

    def _mass(self, k: int) -> float:
        n, p = self.n_trials, self.success_probability
        if p == 0.0:
            return 1.0 if k == 0 else 0.0
        if p == 1.0:
            return 1.0 if k == n else 0.0
        log_mass = (
            numerics.log_gamma(n + 1.0)
            - numerics.log_gamma(k + 1.0)
            - numerics.log_gamma(n - k + 1.0)
            + k * math.log(p)
            + (n - k) * math.log1p(-p)
        )
        return math.exp(log_mass)

    def _cumulative_masses(self) -> Iterator[float]:
        total = 0.0
        for k in range(self.n_trials + 1):
            total += self._mass(k)
            yield total

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if x < 0:
            return 0.0
        if x >= self.n_trials:
            return 1.0
        last = math.floor(x)
        for k, total in enumerate(self._cumulative_masses()):
            if k == last:
                return total
        return 1.0

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        for k, total in enumerate(self._cumulative_masses()):
            if total >= probability:
                return k
        return self.n_trials

    def sample(self, *uniforms: float) -> float:
        self._check_sample_args(uniforms)
        if self.uses_inverse_transform:
            return self._inverse_transform(uniforms[0])
        draws = iter(uniforms)

        def next_uniform() -> float:
            try:
                return next(draws)
            except StopIteration:
                raise InvalidInputError("BTRD sampler ran out of random numbers") from None

        return self._map_result(self._btrd(next_uniform, None))

    def sample_stream(
        self,
        next_uniform: Callable[[], float],
        query_abort: Optional[Callable[[], bool]] = None,
    ) -> float:
        if self.uses_inverse_transform:
            return self._inverse_transform(next_uniform(), query_abort)
        return self._map_result(self._btrd(next_uniform, query_abort))

    def _map_result(self, x: int) -> int:
        return self.n_trials - x if self._flipped else x

    def _inverse_transform(
        self, u: float, query_abort: Optional[Callable[[], bool]] = None
    ) -> int:
        n, p = self.n_trials, self._p
        if p == 0.0:
            return self._map_result(0)
        if self._flipped:
            u = 1.0 - u
        if abs(u - 1.0) <= _AROUND_ONE_TOLERANCE:
            return self._map_result(n)
        q = 1.0 - p
        mass = q**n
        r = p / q
        nr = (n + 1) * r
        k = 0
        remaining = u
        while remaining > mass:
            _check_abort(query_abort)
            remaining -= mass
            k += 1
            mass *= nr / k - r
            if k > n:
                raise NonConvergenceError(
                    "binomial inverse transform ran past the number of trials",
                    iterations=k,
                )
        return self._map_result(k)

    def _btrd(
        self,
        next_uniform: Callable[[], float],
        query_abort: Optional[Callable[[], bool]],
    ) -> int:
        n, p = self.n_trials, self._p
        q = 1.0 - p
        npq = self._np * q
        spq = math.sqrt(npq)
        b = 1.15 + 2.53 * spq
        a = -0.0873 + 0.0248 * b + 0.01 * p
        two_a = 2.0 * a
        c = self._np + 0.5
        v_r = 0.92 - 4.2 / b
        mode = math.floor((n + 1) * p)
        alpha = r = nr = h = math.nan

        for trial in range(BTRD_MAX_TRIALS + 1):
            _check_abort(query_abort)
            v = next_uniform()

            # Triangular centre: accept immediately
            if v <= 0.86 * v_r:
                u = v / v_r - 0.43
                return math.floor((two_a / (0.5 - abs(u)) + b) * u + c)

            if v >= v_r:
                u = next_uniform() - 0.5
            else:
                u = v / v_r - 0.93
                u = math.copysign(0.5, u) - u
                v = next_uniform() * v_r

            us = 0.5 - abs(u)
            k = math.floor((two_a / us + b) * u + c)
            if k < 0 or k > n:
                continue

            if math.isnan(alpha):
                alpha = (2.83 + 5.1 / b) * spq
                r = p / q
                nr = (n + 1) * r

            v *= alpha / (a / (us * us) + b)
            km = abs(k - mode)

            # Explicit ratio by recurrence close to the mode
            if km <= 15:
                f = 1.0
                if mode < k:
                    for i in range(mode + 1, k + 1):
                        f *= nr / i - r
                else:
                    for i in range(k + 1, mode + 1):
                        v *= nr / i - r
                if v <= f:
                    return k
                continue

            # Squeeze in the log domain
            if v <= 0.0:
                return k
            v = math.log(v)
            rho = (km / npq) * (((km / 3.0 + 0.625) * km + 1.0 / 6.0) / npq + 0.5)
            t = -km * km / (2.0 * npq)
            if v < t - rho:
                return k
            if v > t + rho:
                continue

            nm = n - mode + 1
            if math.isnan(h):
                h = (
                    (mode + 0.5) * math.log((mode + 1) / (r * nm))
                    + numerics.stirling_correction(mode)
                    + numerics.stirling_correction(n - mode)
                )
            nk = n - k + 1
            bound = (
                h
                + (n + 1) * math.log(nm / nk)
                + (k + 0.5) * math.log(nk * r / (k + 1))
                - numerics.stirling_correction(k)
                - numerics.stirling_correction(n - k)
            )
            if v <= bound:
                return k

        raise NonConvergenceError(
            f"BTRD sampler rejected {BTRD_MAX_TRIALS + 1} candidates",
            iterations=BTRD_MAX_TRIALS + 1,
        )


@dataclass(frozen=True, eq=False)
class ScenariosDistribution(Distribution):
    """
    Discrete distribution over an explicit list of (probability, value) pairs.

    Scenarios are kept sorted by value together with their cumulative
    probabilities. Probabilities are not normalized; the explicit-scenarios
    value checks that they sum to one before the distribution is built.

    Args:
        values: Scenario values (finite)
        probabilities: Probability of each value, each in (0, 1]

    Example:
        >>> # Demand can be 10, 20, or 30 with probabilities 0.2, 0.5, 0.3
        >>> dist = ScenariosDistribution(
        ...     values=np.array([10, 20, 30]),
        ...     probabilities=np.array([0.2, 0.5, 0.3])
        ... )
        >>> dist.quantile(0.6)
        20.0
    """

    values: np.ndarray
    probabilities: np.ndarray
    cumulative: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        values = np.asarray(self.values, dtype=np.float64).reshape(-1)
        probabilities = np.asarray(self.probabilities, dtype=np.float64).reshape(-1)
        if values.shape != probabilities.shape:
            raise InvalidInputError(
                f"got {values.size} values but {probabilities.size} probabilities"
            )
        if not np.all(np.isfinite(values)):
            raise InvalidInputError("scenario values must be finite")
        if np.any(~((probabilities > 0.0) & (probabilities <= 1.0))):
            raise InvalidInputError("scenario probabilities must be in (0, 1]")

        order = np.argsort(values, kind="stable")
        object.__setattr__(self, "values", values[order])
        object.__setattr__(self, "probabilities", probabilities[order])
        object.__setattr__(self, "cumulative", np.cumsum(self.probabilities))

    @property
    def is_discrete(self) -> bool:
        return True

    @property
    def n_outcomes(self) -> int:
        return len(self.values)

    def mean(self) -> float:
        if self.n_outcomes == 0:
            return math.nan
        return float(np.dot(self.probabilities, self.values))

    def variance(self) -> float:
        if self.n_outcomes <= 1:
            return math.nan
        deviation = self.values - self.mean()
        return float(np.dot(self.probabilities, deviation**2))

    def _central_moment(self, order: int) -> float:
        deviation = self.values - self.mean()
        return float(np.dot(self.probabilities, deviation**order))

    def skewness(self) -> float:
        variance = self.variance()
        if not abs(variance) > _DEGENERATE_VARIANCE:
            return math.nan
        return self._central_moment(3) / variance**1.5

    def kurtosis(self) -> float:
        variance = self.variance()
        if not abs(variance) > _DEGENERATE_VARIANCE:
            return math.nan
        return self._central_moment(4) / (variance * variance)

    def density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if not math.isfinite(x):
            return 0.0
        close = np.abs(self.values - x) < _SCENARIO_VALUE_TOLERANCE
        return float(self.probabilities[close].sum())

    def cumulative_density(self, x: float) -> float:
        validate_cumulative_density_value(x)
        if math.isinf(x):
            return 1.0 if x > 0 else 0.0
        index = int(np.searchsorted(self.values, x + _SCENARIO_VALUE_TOLERANCE, side="left")) - 1
        if index < 0:
            return 0.0
        return float(self.cumulative[index])

    def quantile(self, probability: float) -> float:
        validate_probability(probability)
        if self.n_outcomes == 0:
            raise InvalidInputError("quantile of an empty scenario distribution")
        index = int(np.searchsorted(self.cumulative, probability, side="left"))
        return float(self.values[min(index, self.n_outcomes - 1)])
