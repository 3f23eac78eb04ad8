"""
Numeric helpers shared by the analytics engines.

Helpers degrade to a neutral value (0.0 or None) on degenerate input
instead of raising, except `strict_log_return`, whose callers catch
NumericDegenerateError themselves.
"""

import math
from typing import Iterable, Optional, Sequence

from ..core.exceptions import NumericDegenerateError


def percentile(values: Iterable[float], p: float) -> Optional[float]:
    """
    Nearest-rank style percentile.

    Sorts ascending and returns the element at index floor(p * n), clamped to
    the last index. Returns None for an empty sample.

    Example:
        >>> percentile([5, 1, 3, 2, 4], 0.9)
        5
    """
    ordered = sorted(values)
    if not ordered:
        return None
    idx = min(int(math.floor(p * len(ordered))), len(ordered) - 1)
    return ordered[idx]


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sample."""
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def sample_variance(values: Sequence[float]) -> float:
    """Unbiased variance (n - 1 denominator, floored at 1)."""
    if not values:
        return 0.0
    mu = mean(values)
    ss = math.fsum((v - mu) * (v - mu) for v in values)
    return ss / max(1, len(values) - 1)


def linear_regression_slope(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Ordinary least squares slope of y on x.

    Returns 0.0 when the samples differ in length, hold fewer than two
    points, x has zero variance, or the result is not finite.
    """
    if len(x) != len(y) or len(x) < 2:
        return 0.0

    x_mean = mean(x)
    y_mean = mean(y)

    numerator = math.fsum((xi - x_mean) * (yi - y_mean) for xi, yi in zip(x, y))
    denominator = math.fsum((xi - x_mean) * (xi - x_mean) for xi in x)

    if denominator == 0.0 or not math.isfinite(numerator) or not math.isfinite(denominator):
        return 0.0
    slope = numerator / denominator
    return slope if math.isfinite(slope) else 0.0


def strict_log_return(previous: float, current: float) -> float:
    """
    ln(current / previous).

    Raises:
        NumericDegenerateError: If the ratio underflows to zero, overflows,
            or the log is not finite
    """
    ratio = current / previous
    if ratio <= 0.0 or not math.isfinite(ratio):
        raise NumericDegenerateError(
            "Degenerate price ratio",
            details={"previous": previous, "current": current},
        )
    r = math.log(ratio)
    if not math.isfinite(r):
        raise NumericDegenerateError("Non-finite log return", details={"ratio": ratio})
    return r


def log_return(previous: float, current: float) -> Optional[float]:
    """ln(current / previous), or None when undefined or not finite."""
    if previous <= 0.0 or current <= 0.0:
        return None
    try:
        return strict_log_return(previous, current)
    except NumericDegenerateError:
        return None


def log_returns(prices: Sequence[float]) -> list[float]:
    """All finite log returns between consecutive prices."""
    returns = []
    for prev, curr in zip(prices, prices[1:]):
        r = log_return(prev, curr)
        if r is not None:
            returns.append(r)
    return returns


def abs_deltas(prices: Sequence[float]) -> list[float]:
    """Absolute consecutive price changes."""
    return [abs(curr - prev) for prev, curr in zip(prices, prices[1:])]
