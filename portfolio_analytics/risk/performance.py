"""Return and performance-history helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from portfolio_analytics.errors import LengthMismatchError
from portfolio_analytics.statistics import ZERO, to_decimal, to_series
from portfolio_analytics.types import Number


@dataclass(frozen=True)
class PerformancePoint:
    date: datetime
    daily_return: Decimal
    cumulative_return: Decimal
    drawdown: Decimal
    peak_date: datetime


def simple_return(initial_value: Number, final_value: Number) -> Decimal:
    """(final - initial) / initial, 0 when initial is 0."""
    initial = to_decimal(initial_value)
    if initial == 0:
        return ZERO
    return (to_decimal(final_value) - initial) / initial


def rolling_returns(values: Sequence[Number], window: int = 30) -> tuple[Decimal, ...]:
    """Simple return over each trailing `window`-point span.

    Returns:
        One return per point from index `window` on; empty if the series is shorter
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    series = to_series(values)
    return tuple(simple_return(series[i - window], series[i]) for i in range(window, len(series)))


def performance_history(values: Sequence[Number], dates: Sequence[datetime]) -> list[PerformancePoint]:
    """Daily and cumulative return plus running drawdown for every point after the first.

    Raises:
        LengthMismatchError: If values and dates differ in length
    """
    series = to_series(values)
    if len(series) != len(dates):
        raise LengthMismatchError(len(series), len(dates))
    if not series:
        return []

    initial = series[0]
    peak = initial
    peak_date = dates[0]
    history = []

    for i in range(1, len(series)):
        current = series[i]
        if current > peak:
            peak = current
            peak_date = dates[i]
        drawdown = (peak - current) / peak if peak > 0 else ZERO
        history.append(
            PerformancePoint(
                date=dates[i],
                daily_return=simple_return(series[i - 1], current),
                cumulative_return=simple_return(initial, current),
                drawdown=drawdown,
                peak_date=peak_date,
            )
        )

    return history
