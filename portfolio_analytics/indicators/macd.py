"""
MACD (Moving Average Convergence Divergence) indicator module.

Usage:
    from portfolio_analytics.indicators.macd import compute_macd

    result = compute_macd(prices)
    result.macd, result.signal, result.histogram
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from portfolio_analytics.indicators.moving_average import compute_ema
from portfolio_analytics.statistics import ZERO, to_series
from portfolio_analytics.types import Number


@dataclass(frozen=True)
class MACDResult:
    macd: Decimal
    signal: Decimal
    histogram: Decimal


def compute_macd(
    prices: Sequence[Number],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MACDResult:
    """
    Calculate MACD from a price series.

    Formula:
        MACD Line = EMA(fast_period) - EMA(slow_period)
        Signal Line = EMA(signal_period) over the one-element series [MACD Line]
        Histogram = MACD Line - Signal Line

    The signal line is taken over the latest MACD value only, so it always equals
    the MACD line and the histogram is 0. Callers needing a crossover signal must
    build a MACD history themselves.

    Returns:
        MACDResult; all zeros when fewer than `slow_period` prices exist

    Raises:
        ValueError: If a period is < 1 or fast_period >= slow_period
    """
    if fast_period < 1 or slow_period < 1 or signal_period < 1:
        raise ValueError("All periods must be >= 1")

    if fast_period >= slow_period:
        raise ValueError(f"fast_period ({fast_period}) must be < slow_period ({slow_period})")

    series = to_series(prices)
    if len(series) < slow_period:
        return MACDResult(macd=ZERO, signal=ZERO, histogram=ZERO)

    macd_line = compute_ema(series, fast_period) - compute_ema(series, slow_period)
    signal_line = compute_ema((macd_line,), signal_period)

    return MACDResult(macd=macd_line, signal=signal_line, histogram=macd_line - signal_line)
