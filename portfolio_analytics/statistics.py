"""Series statistics shared by every analytics component.

All functions take chronological series of numbers and return `Decimal`.
Empty input never raises; each function documents its fallback value.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from portfolio_analytics.errors import LengthMismatchError
from portfolio_analytics.types import Number, to_decimal

ZERO = Decimal("0")


def to_series(values: Iterable[Number]) -> tuple[Decimal, ...]:
    """Capture a series as an immutable tuple of Decimals."""
    return tuple(to_decimal(v) for v in values)


def mean(values: Sequence[Number]) -> Decimal:
    """Arithmetic mean (0 for an empty series)."""
    series = to_series(values)
    if not series:
        return ZERO
    return sum(series, ZERO) / len(series)


def variance(values: Sequence[Number]) -> Decimal:
    """Population variance (0 for an empty series)."""
    series = to_series(values)
    if not series:
        return ZERO
    avg = mean(series)
    return sum(((v - avg) ** 2 for v in series), ZERO) / len(series)


def std_dev(values: Sequence[Number]) -> Decimal:
    """Population standard deviation."""
    return variance(values).sqrt()


def covariance(left: Sequence[Number], right: Sequence[Number]) -> Decimal:
    """Population covariance of two equally long series.

    Raises:
        LengthMismatchError: If the series differ in length
    """
    x = to_series(left)
    y = to_series(right)
    if len(x) != len(y):
        raise LengthMismatchError(len(x), len(y))
    if not x:
        return ZERO
    mean_x = mean(x)
    mean_y = mean(y)
    return sum(((a - mean_x) * (b - mean_y) for a, b in zip(x, y)), ZERO) / len(x)


def pearson_correlation(left: Sequence[Number], right: Sequence[Number]) -> Decimal:
    """Pearson correlation coefficient in [-1, 1].

    Formula:
        r = (n*Σxy - Σx*Σy) / sqrt((n*Σx² - (Σx)²) * (n*Σy² - (Σy)²))

    A zero denominator (constant or too-short series) yields 0.

    Raises:
        LengthMismatchError: If the series differ in length
    """
    x = to_series(left)
    y = to_series(right)
    if len(x) != len(y):
        raise LengthMismatchError(len(x), len(y))

    n = len(x)
    sum_x = sum(x, ZERO)
    sum_y = sum(y, ZERO)
    sum_xy = sum((a * b for a, b in zip(x, y)), ZERO)
    sum_x2 = sum((a * a for a in x), ZERO)
    sum_y2 = sum((b * b for b in y), ZERO)

    numerator = n * sum_xy - sum_x * sum_y
    radicand = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if radicand <= 0:
        return ZERO
    denominator = radicand.sqrt()
    if denominator == 0:
        return ZERO

    # Rounding in the last digit can push |r| a hair past 1
    return max(Decimal("-1"), min(Decimal("1"), numerator / denominator))


def simple_returns(prices: Sequence[Number]) -> tuple[Decimal, ...]:
    """Period-over-period simple returns; a zero previous price yields a 0 return."""
    series = to_series(prices)
    returns = []
    for previous, current in zip(series, series[1:]):
        returns.append((current - previous) / previous if previous != 0 else ZERO)
    return tuple(returns)


def linear_trend(values: Sequence[Number]) -> Decimal:
    """Least-squares slope of the series against x = 1..n (0 if undefined)."""
    series = to_series(values)
    n = len(series)
    if n < 2:
        return ZERO
    sum_x = Decimal(n * (n + 1) // 2)
    sum_x2 = Decimal(n * (n + 1) * (2 * n + 1) // 6)
    sum_y = sum(series, ZERO)
    sum_xy = sum((v * (i + 1) for i, v in enumerate(series)), ZERO)
    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return ZERO
    return (n * sum_xy - sum_x * sum_y) / denominator


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))
