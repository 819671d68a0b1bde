"""Trend, momentum and market-cycle classification."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from portfolio_analytics.statistics import ZERO, to_decimal, to_series
from portfolio_analytics.types import MarketCyclePhase, Number, TrendDirection

DEFAULT_TREND_THRESHOLD = Decimal("0.01")


def classify_trend(values: Sequence[Number], threshold: Number = DEFAULT_TREND_THRESHOLD) -> TrendDirection:
    """Classify a series by its relative change from first to last value.

    change > +threshold -> UP, change < -threshold -> DOWN, otherwise SIDEWAYS.

    Returns:
        UNKNOWN for fewer than 2 points or a zero first value
    """
    series = to_series(values)
    if len(series) < 2 or series[0] == 0:
        return TrendDirection.UNKNOWN

    limit = to_decimal(threshold)
    change = (series[-1] - series[0]) / series[0]
    if change > limit:
        return TrendDirection.UP
    if change < -limit:
        return TrendDirection.DOWN
    return TrendDirection.SIDEWAYS


def compute_momentum(values: Sequence[Number], lookback: int = 14) -> Decimal:
    """Relative change between the last value and the first of the trailing `lookback` values.

    The window includes the last value, so the base sits `lookback - 1` points back.

    Returns:
        0 when fewer than `lookback` points exist or the reference value is 0
    """
    if lookback < 1:
        raise ValueError(f"lookback must be >= 1, got {lookback}")

    series = to_series(values)
    if len(series) < lookback:
        return ZERO
    previous = series[-lookback]
    if previous == 0:
        return ZERO
    return (series[-1] - previous) / previous


_CYCLE_PHASES = {
    (TrendDirection.UP, TrendDirection.UP): MarketCyclePhase.BULLISH,
    (TrendDirection.DOWN, TrendDirection.DOWN): MarketCyclePhase.BEARISH,
    (TrendDirection.UP, TrendDirection.DOWN): MarketCyclePhase.RECOVERY,
    (TrendDirection.DOWN, TrendDirection.UP): MarketCyclePhase.CORRECTION,
}


def detect_market_cycle(
    values: Sequence[Number],
    window: int = 20,
    threshold: Number = DEFAULT_TREND_THRESHOLD,
) -> MarketCyclePhase:
    """Classify the market phase from the recent window against the full series.

    recent UP + long UP -> BULLISH, recent DOWN + long DOWN -> BEARISH,
    recent UP + long DOWN -> RECOVERY, recent DOWN + long UP -> CORRECTION.

    Returns:
        UNKNOWN for fewer than `window` points or any sideways/unknown trend
    """
    series = to_series(values)
    if len(series) < window:
        return MarketCyclePhase.UNKNOWN

    recent = classify_trend(series[-window:], threshold)
    long_term = classify_trend(series, threshold)
    return _CYCLE_PHASES.get((recent, long_term), MarketCyclePhase.UNKNOWN)
