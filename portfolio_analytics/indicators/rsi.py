"""
RSI (Relative Strength Index) indicator module.

This variant sums gains and losses over the first `period` price transitions
without Wilder smoothing, so two series sharing their first `period + 1` points
share an RSI.

Usage:
    from portfolio_analytics.indicators.rsi import compute_rsi

    rsi_value = compute_rsi(prices, period=14)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from portfolio_analytics.statistics import ZERO, to_series
from portfolio_analytics.types import Number

NEUTRAL_RSI = Decimal("50")
MAX_RSI = Decimal("100")


def compute_rsi(prices: Sequence[Number], period: int = 14) -> Decimal:
    """
    Calculate RSI from a price series.

    Formula:
        RS = sum(gains) / sum(losses)   over transitions 1..period
        RSI = 100 - (100 / (1 + RS))

    Args:
        prices: Chronological prices
        period: Number of transitions to sum (default: 14)

    Returns:
        RSI value (0-100). 0 when fewer than period + 1 prices exist, 100 when the
        window has gains but no losses, 50 when the window is flat.

    Raises:
        ValueError: If period < 1
    """
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")

    series = to_series(prices)
    if len(series) < period + 1:
        return ZERO

    gains = ZERO
    losses = ZERO
    for i in range(1, period + 1):
        change = series[i] - series[i - 1]
        if change > 0:
            gains += change
        else:
            losses -= change

    if losses == 0:
        return MAX_RSI if gains > 0 else NEUTRAL_RSI

    rs = gains / losses
    return MAX_RSI - (MAX_RSI / (1 + rs))
