"""
Numerical Kernels for Distributions
===================================

Shared special functions and probability checks used by every distribution:
Lanczos Gamma/LogGamma, the regularized incomplete gamma function, the error
function, an inverse standard normal CDF and the Stirling correction table
used by the BTRD binomial sampler.

These routines are accurate enough for scenario generation (roughly 1e-7
relative for ``error_function``); they are not a replacement for a full
special-function library.
"""

from __future__ import annotations

import math

from ..exceptions import InvalidInputError, NonConvergenceError

SQRT_TWO_PI = math.sqrt(2.0 * math.pi)
SQRT_TWO = math.sqrt(2.0)
LOG_SQRT_TWO_PI = math.log(SQRT_TWO_PI)

# Iteration cap and relative accuracy for the incomplete gamma approximations
_GAMMA_MAX_ITERATIONS = 100
_GAMMA_EPSILON = 3e-7
_FPMIN = 1.401298464324817e-45

_LANCZOS_COEFFICIENTS = (
    76.18009172947146,
    -86.50532032941678,
    24.01409824083091,
    -1.231739572450155,
    0.001208650973866179,
    -5.395239384953e-06,
)

# log(k!) - [(k + 1/2) log(k + 1) - (k + 1) + log(sqrt(2 pi))] for k = 0..9
_STIRLING_CORRECTION_TABLE = (
    0.08106146679532726,
    0.04134069595540929,
    0.02767792568499834,
    0.02079067210376509,
    0.01664469118982119,
    0.01387612882307075,
    0.01189670994589177,
    0.01041126526197209,
    0.009255462182712733,
    0.00833056343336287,
)

# Acklam's rational approximation of the probit function
_ICDF_A = (
    -39.69683028665376,
    220.9460984245205,
    -275.9285104469687,
    138.357751867269,
    -30.66479806614716,
    2.506628277459239,
)
_ICDF_B = (
    -54.47609879822406,
    161.5858368580409,
    -155.6989798598866,
    66.80131188771972,
    -13.28068155288572,
)
_ICDF_C = (
    -0.007784894002430293,
    -0.3223964580411365,
    -2.400758277161838,
    -2.549732539343734,
    4.374664141464968,
    2.938163982698783,
)
_ICDF_D = (
    0.007784695709041462,
    0.3224671290700398,
    2.445134137142996,
    3.754408661907416,
)
_ICDF_LOW = 0.02425
_ICDF_HIGH = 1.0 - _ICDF_LOW


# ============================================================================
# Probability checks
# ============================================================================


def is_valid_probability(probability: float) -> bool:
    """True if ``probability`` lies in [0, 1] (NaN is not a probability)."""
    return 0.0 <= probability <= 1.0


def validate_probability(probability: float, name: str = "probability") -> None:
    """
    Raise if ``probability`` is not in [0, 1].

    Raises:
        InvalidInputError: If the value is outside [0, 1] or NaN
    """
    if not is_valid_probability(probability):
        raise InvalidInputError(f"{name} must be in [0, 1], got {probability}")


def validate_cumulative_density_value(x: float) -> None:
    """
    Raise if ``x`` cannot be passed to a cumulative density function.

    Raises:
        InvalidInputError: If ``x`` is NaN
    """
    if math.isnan(x):
        raise InvalidInputError("cumulative density is undefined for NaN")


def is_nonzero_probability(probability: float) -> bool:
    """True if ``probability`` lies in (0, 1]."""
    return 0.0 < probability <= 1.0


def greater_than_one(probability: float, tolerance: float) -> bool:
    """True if ``probability`` exceeds one by more than ``tolerance``."""
    if math.isnan(probability):
        return False
    return probability - tolerance > 1.0


def less_than_one(probability: float, tolerance: float) -> bool:
    """True if ``probability`` is below one by more than ``tolerance``."""
    if math.isnan(probability):
        return False
    return probability + tolerance < 1.0


def equals_one(probability: float, tolerance: float) -> bool:
    """True if ``probability`` is within ``tolerance`` of one."""
    if not math.isfinite(probability):
        return False
    return not less_than_one(probability, tolerance) and not greater_than_one(
        probability, tolerance
    )


# ============================================================================
# Special functions
# ============================================================================


def stirling_correction(k: int) -> float:
    """
    Correction term ``fc(k)`` of Stirling's approximation to ``log(k!)``.

    Tabulated for k < 10, series expansion beyond.
    """
    if k < len(_STIRLING_CORRECTION_TABLE):
        return _STIRLING_CORRECTION_TABLE[k]
    k1 = k + 1.0
    k1_sq = k1 * k1
    return (1.0 / 12.0 - (1.0 / 360.0 - (1.0 / 1260.0) / k1_sq) / k1_sq) / k1


def _lanczos_series(x: float) -> float:
    y = x
    series = 1.000000000190015
    for coefficient in _LANCZOS_COEFFICIENTS:
        y += 1.0
        series += coefficient / y
    return series


def gamma(x: float) -> float:
    """
    Gamma function for x > 0.

    Grows very fast; prefer :func:`log_gamma` where a ratio is wanted.

    References:
        Lanczos, C. (1964). SIAM Journal on Numerical Analysis, ser. B, vol. 1.
    """
    series = _lanczos_series(x)
    return math.pow(x + 5.5, x + 0.5) * math.exp(-(x + 5.5)) * (SQRT_TWO_PI * series / x)


def log_gamma(x: float) -> float:
    """Natural log of the Gamma function for x > 0 (Lanczos approximation)."""
    series = _lanczos_series(x)
    return math.log(SQRT_TWO_PI * series / x) - (x + 5.5 - (x + 0.5) * math.log(x + 5.5))


def incomplete_gamma(a: float, x: float) -> float:
    """
    Regularized lower incomplete gamma function P(a, x).

    Uses the power series for x < a + 1 and the continued fraction for the
    complement otherwise.

    Raises:
        NonConvergenceError: If the approximation does not converge
    """
    if math.isinf(x) and x > 0:
        return 1.0
    if x < a + 1.0:
        return _incomplete_gamma_series(a, x)
    return 1.0 - _incomplete_gamma_continued_fraction(a, x)


def _incomplete_gamma_series(a: float, x: float) -> float:
    if x == 0.0:
        return 0.0
    term = 1.0 / a
    total = term
    for n in range(1, _GAMMA_MAX_ITERATIONS + 1):
        term *= x / (a + n)
        total += term
        if abs(term) < abs(total) * _GAMMA_EPSILON:
            return math.exp(-x + a * math.log(x) - log_gamma(a)) * total
    raise NonConvergenceError(
        f"Incomplete gamma series did not converge for a={a}, x={x}",
        iterations=_GAMMA_MAX_ITERATIONS,
    )


def _incomplete_gamma_continued_fraction(a: float, x: float) -> float:
    # Modified Lentz evaluation of Q(a, x)
    b = x + 1.0 - a
    c = 1.0 / _FPMIN
    d = 1.0 / b
    h = d
    for n in range(1, _GAMMA_MAX_ITERATIONS + 1):
        an = -n * (n - a)
        b += 2.0
        d = an * d + b
        if abs(d) < _FPMIN:
            d = _FPMIN
        c = b + an / c
        if abs(c) < _FPMIN:
            c = _FPMIN
        d = 1.0 / d
        delta = d * c
        h *= delta
        if abs(delta - 1.0) < _GAMMA_EPSILON:
            return math.exp(-x + a * math.log(x) - log_gamma(a)) * h
    raise NonConvergenceError(
        f"Incomplete gamma continued fraction did not converge for a={a}, x={x}",
        iterations=_GAMMA_MAX_ITERATIONS,
    )


def error_function(x: float) -> float:
    """The error function erf(x), via P(1/2, x^2)."""
    value = incomplete_gamma(0.5, x * x)
    return -value if x < 0.0 else value


def standard_normal_cdf(x: float) -> float:
    """Cumulative density of the standard normal distribution."""
    if math.isinf(x):
        return 0.0 if x < 0 else 1.0
    return 0.5 * (1.0 + error_function(x / SQRT_TWO))


def inverse_standard_normal_cdf(probability: float) -> float:
    """
    Probit function: quantile of the standard normal distribution.

    Acklam's rational approximation in three bands (lower tail, central
    region, upper tail) followed by one Newton correction step against
    :func:`standard_normal_cdf`. Valid for 0 < probability < 1.
    """
    c, d = _ICDF_C, _ICDF_D
    if probability < _ICDF_LOW:
        q = math.sqrt(-2.0 * math.log(probability))
        x = (((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) / (
            (((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0
        )
    elif probability <= _ICDF_HIGH:
        a, b = _ICDF_A, _ICDF_B
        q = probability - 0.5
        r = q * q
        x = (
            (((((a[0] * r + a[1]) * r + a[2]) * r + a[3]) * r + a[4]) * r + a[5])
            * q
            / (((((b[0] * r + b[1]) * r + b[2]) * r + b[3]) * r + b[4]) * r + 1.0)
        )
    else:
        q = math.sqrt(-2.0 * math.log(1.0 - probability))
        x = -(((((c[0] * q + c[1]) * q + c[2]) * q + c[3]) * q + c[4]) * q + c[5]) / (
            (((d[0] * q + d[1]) * q + d[2]) * q + d[3]) * q + 1.0
        )

    return x + (probability - standard_normal_cdf(x)) * math.exp(0.5 * x * x + LOG_SQRT_TWO_PI)
