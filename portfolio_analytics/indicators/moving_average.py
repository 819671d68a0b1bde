"""
Moving averages (SMA and EMA) over a price series.

Usage:
    from portfolio_analytics.indicators.moving_average import compute_ema, compute_sma

    sma = compute_sma(prices, period=20)
    ema = compute_ema(prices, period=20)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from portfolio_analytics.statistics import ZERO, mean, to_series
from portfolio_analytics.types import Number


def compute_sma(prices: Sequence[Number], period: int = 20) -> Decimal:
    """
    Simple moving average of the trailing `period` values.

    Returns:
        SMA value, or 0 when fewer than `period` points exist

    Raises:
        ValueError: If period < 1
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")

    series = to_series(prices)
    if len(series) < period:
        return ZERO
    return mean(series[-period:])


def compute_ema(prices: Sequence[Number], period: int = 20) -> Decimal:
    """
    Exponential moving average seeded with the first value.

    Formula:
        multiplier = 2 / (period + 1)
        ema = (value - ema) * multiplier + ema   for every value after the first

    A one-element series returns that element. An empty series returns 0.

    Raises:
        ValueError: If period < 1
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")

    series = to_series(prices)
    if not series:
        return ZERO

    multiplier = Decimal(2) / Decimal(period + 1)
    ema = series[0]
    for value in series[1:]:
        ema = (value - ema) * multiplier + ema
    return ema
