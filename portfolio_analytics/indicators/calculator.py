"""Technical indicator snapshots per symbol."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from portfolio_analytics.config import IndicatorConfig
from portfolio_analytics.indicators.macd import MACDResult, compute_macd
from portfolio_analytics.indicators.moving_average import compute_ema, compute_sma
from portfolio_analytics.indicators.rsi import compute_rsi
from portfolio_analytics.indicators.trend import classify_trend, compute_momentum, detect_market_cycle
from portfolio_analytics.statistics import to_series
from portfolio_analytics.types import MarketCyclePhase, Number, TrendDirection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TechnicalSnapshot:
    symbol: str
    sma: Decimal
    ema: Decimal
    rsi: Decimal
    macd: Decimal
    macd_signal: Decimal
    macd_histogram: Decimal
    trend: TrendDirection
    momentum: Decimal
    cycle: MarketCyclePhase


class TechnicalIndicatorCalculator:
    """Indicator calculations using the periods from an IndicatorConfig."""

    def __init__(self, config: IndicatorConfig | None = None) -> None:
        self.config = config or IndicatorConfig()

    def sma(self, prices: Sequence[Number], period: int | None = None) -> Decimal:
        return compute_sma(prices, period if period is not None else self.config.sma_period)

    def ema(self, prices: Sequence[Number], period: int | None = None) -> Decimal:
        return compute_ema(prices, period if period is not None else self.config.ema_period)

    def rsi(self, prices: Sequence[Number], period: int | None = None) -> Decimal:
        return compute_rsi(prices, period if period is not None else self.config.rsi_period)

    def macd(self, prices: Sequence[Number]) -> MACDResult:
        return compute_macd(
            prices,
            fast_period=self.config.macd_fast,
            slow_period=self.config.macd_slow,
            signal_period=self.config.macd_signal,
        )

    def trend(self, prices: Sequence[Number]) -> TrendDirection:
        return classify_trend(prices, self.config.trend_threshold)

    def momentum(self, prices: Sequence[Number]) -> Decimal:
        return compute_momentum(prices, self.config.momentum_lookback)

    def market_cycle(self, prices: Sequence[Number]) -> MarketCyclePhase:
        return detect_market_cycle(prices, self.config.cycle_window, self.config.trend_threshold)

    def snapshot(self, symbol: str, prices: Sequence[Number]) -> TechnicalSnapshot:
        """Compute every indicator for one symbol's price series."""
        series = to_series(prices)
        macd = self.macd(series)
        snapshot = TechnicalSnapshot(
            symbol=symbol,
            sma=self.sma(series),
            ema=self.ema(series),
            rsi=self.rsi(series),
            macd=macd.macd,
            macd_signal=macd.signal,
            macd_histogram=macd.histogram,
            trend=self.trend(series),
            momentum=self.momentum(series),
            cycle=self.market_cycle(series),
        )
        logger.debug(
            "%s: SMA=%s EMA=%s RSI=%s MACD=%s trend=%s",
            symbol,
            snapshot.sma,
            snapshot.ema,
            snapshot.rsi,
            snapshot.macd,
            snapshot.trend.value,
        )
        return snapshot
