"""Risk metrics over return and value series.

Volatility, maximum drawdown, correlation and Sharpe ratio. Every metric is
defined for degenerate input (empty series, zero volatility, zero peak) and
returns 0 there instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from portfolio_analytics.config import RiskConfig
from portfolio_analytics.statistics import ZERO, mean, pearson_correlation, std_dev, to_decimal, to_series
from portfolio_analytics.types import Number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskMetrics:
    """Risk-metric record for one portfolio or series."""

    identifier: str
    volatility: Decimal
    max_drawdown: Decimal
    correlation: Decimal
    sharpe_ratio: Decimal


def annualized_volatility(returns: Sequence[Number], trading_days: int = 252) -> Decimal:
    """Population standard deviation of returns, annualized by sqrt(trading_days).

    Args:
        returns: Periodic (e.g. daily) returns
        trading_days: Periods per year (default 252)

    Returns:
        Annualized volatility (>= 0; 0 for an empty series)
    """
    series = to_series(returns)
    if not series:
        return ZERO
    return std_dev(series) * Decimal(trading_days).sqrt()


def max_drawdown(values: Sequence[Number]) -> Decimal:
    """Largest peak-to-trough decline as a fraction of the peak.

    Max Drawdown = max((peak - value) / peak) over a running peak

    Returns:
        Drawdown in [0, 1] (0 for an empty series)
    """
    series = to_series(values)
    if not series:
        return ZERO

    worst = ZERO
    peak = series[0]
    for value in series:
        if value > peak:
            peak = value
            continue
        if peak <= 0:
            continue
        drawdown = (peak - value) / peak
        if drawdown > worst:
            worst = drawdown

    return min(worst, Decimal("1"))


def sharpe_ratio(
    returns: Sequence[Number],
    risk_free_rate: Number = Decimal("0.02"),
    trading_days: int = 252,
) -> Decimal:
    """Mean excess return divided by the annualized volatility of excess returns.

    Sharpe Ratio = mean(r - rf) / volatility(r - rf)

    Returns:
        Sharpe ratio (0 when the excess-return volatility is 0 or the series is empty)
    """
    series = to_series(returns)
    if not series:
        return ZERO

    rf = to_decimal(risk_free_rate)
    excess = tuple(r - rf for r in series)
    volatility = annualized_volatility(excess, trading_days)
    if volatility == 0:
        return ZERO
    return mean(excess) / volatility


class RiskMetricsCalculator:
    """Risk metrics with an injected RiskConfig."""

    def __init__(self, config: RiskConfig | None = None) -> None:
        self.config = config or RiskConfig()

    def volatility(self, returns: Sequence[Number]) -> Decimal:
        return annualized_volatility(returns, self.config.trading_days)

    def max_drawdown(self, values: Sequence[Number]) -> Decimal:
        return max_drawdown(values)

    def correlation(self, left: Sequence[Number], right: Sequence[Number]) -> Decimal:
        """Pearson correlation; raises LengthMismatchError for different lengths."""
        return pearson_correlation(left, right)

    def sharpe_ratio(self, returns: Sequence[Number], risk_free_rate: Optional[Number] = None) -> Decimal:
        rate = self.config.risk_free_rate if risk_free_rate is None else risk_free_rate
        return sharpe_ratio(returns, rate, self.config.trading_days)

    def risk_report(
        self,
        identifier: str,
        returns: Sequence[Number],
        values: Sequence[Number],
        benchmark: Optional[Sequence[Number]] = None,
    ) -> RiskMetrics:
        """Build the full risk-metric record for one portfolio or series.

        Args:
            identifier: Portfolio id or series name the record is keyed by
            returns: Periodic returns
            values: Value series used for drawdown
            benchmark: Optional benchmark returns, same length as `returns`

        Returns:
            RiskMetrics record; correlation is 0 without a benchmark
        """
        correlation = ZERO if benchmark is None else self.correlation(returns, benchmark)
        report = RiskMetrics(
            identifier=identifier,
            volatility=self.volatility(returns),
            max_drawdown=self.max_drawdown(values),
            correlation=correlation,
            sharpe_ratio=self.sharpe_ratio(returns),
        )
        logger.debug(
            "Risk report %s: vol=%s mdd=%s corr=%s sharpe=%s",
            identifier,
            report.volatility,
            report.max_drawdown,
            report.correlation,
            report.sharpe_ratio,
        )
        return report
