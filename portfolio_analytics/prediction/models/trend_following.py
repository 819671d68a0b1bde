"""Trend-following prediction model.

Compares trailing moving averages over 20, 50, 100 and 200 periods. Trend
strength is the mean relative gap between MA(p) and MA(2p) for every pair where
both are available; volume trend compares recent against older volume.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence

from portfolio_analytics.indicators.moving_average import compute_sma
from portfolio_analytics.prediction.base import AccuracyTracker, PredictionModel
from portfolio_analytics.prediction.types import (
    Direction,
    MarketPrediction,
    PerformanceMetrics,
    PortfolioPrediction,
    Recommendation,
    RecommendationAction,
    RiskLevel,
    SecurityPrediction,
    TrainingData,
)
from portfolio_analytics.statistics import ZERO, clamp, mean, simple_returns, std_dev, to_series
from portfolio_analytics.types import EconomicContext, EconomicFactors, Number, Portfolio

logger = logging.getLogger(__name__)

DEFAULT_PERIODS = (20, 50, 100, 200)

RECENT_VOLUME_POINTS = 20
HISTORICAL_VOLUME_POINTS = 80

# Expected return per unit of trend strength
BASE_RETURN_RATE = Decimal("0.01")
VOLATILITY_SCALE = Decimal("0.2")
VOLUME_SENSITIVITY = Decimal("0.5")

STRONG_TREND = Decimal("0.1")

ONE = Decimal("1")


def moving_averages(prices: Sequence[Number], periods: Sequence[int] = DEFAULT_PERIODS) -> dict[int, Decimal]:
    """Trailing SMA for every period the series is long enough for."""
    series = to_series(prices)
    return {period: compute_sma(series, period) for period in periods if period <= len(series)}


def trend_strength(averages: dict[int, Decimal], periods: Sequence[int] = DEFAULT_PERIODS) -> Decimal:
    """Mean of (MA(p) - MA(2p)) / MA(2p) over the pairs present; 0 if none."""
    gaps = [
        (averages[p] - averages[p * 2]) / averages[p * 2]
        for p in periods
        if p in averages and p * 2 in averages and averages[p * 2] != 0
    ]
    return mean(gaps)


def volume_trend(volume: Sequence[Number]) -> Decimal:
    """Relative change of the last 20 volume points against up to 80 points before them.

    Returns 0 when there are fewer than 20 points, no older points, or zero older volume.
    """
    series = to_series(volume)
    if len(series) < RECENT_VOLUME_POINTS:
        return ZERO
    recent = series[-RECENT_VOLUME_POINTS:]
    historical = series[:-RECENT_VOLUME_POINTS][-HISTORICAL_VOLUME_POINTS:]
    if not historical:
        return ZERO
    baseline = mean(historical)
    if baseline == 0:
        return ZERO
    return (mean(recent) - baseline) / baseline


def expected_return(strength: Decimal, volatility: Decimal, volume: Decimal = ZERO) -> Decimal:
    """strength * 1% scaled down by volatility and up by a rising volume trend."""
    return (
        strength
        * BASE_RETURN_RATE
        * (ONE - volatility / VOLATILITY_SCALE)
        * (ONE + volume * VOLUME_SENSITIVITY)
    )


def risk_level(volatility: Decimal, strength: Decimal) -> RiskLevel:
    """Mean of a volatility score and a trend score, rounded down."""
    volatility_score = 1 if volatility < Decimal("0.1") else 2 if volatility < Decimal("0.2") else 3
    trend_score = 1 if strength > STRONG_TREND else 3 if strength < -STRONG_TREND else 2
    return RiskLevel((volatility_score + trend_score) // 2)


def confidence_score(strength: Decimal, volatility: Decimal, volume: Decimal = ZERO) -> Decimal:
    trend_score = Decimal("0.8") if strength > 0 else Decimal("0.2")
    volume_score = Decimal("0.8") if volume > 0 else Decimal("0.2")
    return clamp((trend_score + (ONE - volatility) + volume_score) / 3, ZERO, ONE)


def _volatility(prices: Sequence[Number]) -> Decimal:
    return std_dev(simple_returns(prices))


class TrendFollowingModel(PredictionModel):
    """Moving-average trend model."""

    name = "trend_following"

    def __init__(self, periods: Sequence[int] = DEFAULT_PERIODS) -> None:
        self.periods = tuple(periods)
        self._tracker = AccuracyTracker(
            self.name,
            accuracy=Decimal("0.70"),
            precision=Decimal("0.65"),
            recall=Decimal("0.68"),
        )

    def _strength(self, prices: Sequence[Number]) -> Decimal:
        return trend_strength(moving_averages(prices, self.periods), self.periods)

    def predict_market(
        self,
        series: Sequence[Number],
        context: EconomicContext,
        horizon_days: int = 30,
    ) -> MarketPrediction:
        strength = self._strength(series)
        volatility = _volatility(series)
        return MarketPrediction(
            direction=Direction.UP if strength > 0 else Direction.DOWN,
            expected_return=expected_return(strength, volatility),
            volatility=volatility,
            risk_level=risk_level(volatility, strength),
            horizon_days=horizon_days,
        )

    def predict_security(
        self,
        symbol: str,
        prices: Sequence[Number],
        factors: EconomicFactors,
        horizon_days: int = 30,
    ) -> SecurityPrediction:
        averages = moving_averages(prices, self.periods)
        strength = trend_strength(averages, self.periods)
        volatility = _volatility(prices)
        volume = volume_trend(factors.volume_data)

        momentum = ZERO
        if 20 in averages and 50 in averages and averages[50] != 0:
            momentum = (averages[20] - averages[50]) / averages[50]

        return SecurityPrediction(
            direction=Direction.UP if strength > 0 else Direction.DOWN,
            expected_return=expected_return(strength, volatility, volume),
            volatility=volatility,
            risk_level=risk_level(volatility, strength),
            horizon_days=horizon_days,
            symbol=symbol,
            technical_score=clamp((strength + momentum + volume) / 3, -ONE, ONE),
        )

    def predict_portfolio(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
        horizon_days: int = 30,
    ) -> PortfolioPrediction:
        positions = portfolio.position_list()
        strengths = {p.symbol: self._strength(p.price_history) for p in positions}
        weights = {p.symbol: portfolio.weight_of(p.symbol) for p in positions}

        strength = sum((weights[s] * strengths[s] for s in strengths), ZERO)
        volatility = sum((weights[p.symbol] * _volatility(p.price_history) for p in positions), ZERO)

        return PortfolioPrediction(
            direction=Direction.UP if strength > 0 else Direction.DOWN,
            expected_return=expected_return(strength, volatility),
            volatility=volatility,
            risk_level=risk_level(volatility, strength),
            horizon_days=horizon_days,
            asset_allocation=self._trend_allocation(strengths),
        )

    def performance_metrics(self) -> PerformanceMetrics:
        return self._tracker.metrics()

    def recommendations(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
    ) -> list[Recommendation]:
        result = []
        for position in portfolio.position_list():
            strength = self._strength(position.price_history)
            volatility = _volatility(position.price_history)

            if strength > STRONG_TREND and volatility < Decimal("0.2"):
                action = RecommendationAction.BUY
            elif strength < -STRONG_TREND or volatility > Decimal("0.3"):
                action = RecommendationAction.SELL
            else:
                action = RecommendationAction.HOLD

            result.append(
                Recommendation(
                    action=action,
                    confidence=confidence_score(strength, volatility),
                    symbol=position.symbol,
                    model_name=self.name,
                    rationale="Based on trend following analysis",
                )
            )
        return result

    def update(self, training_data: TrainingData) -> None:
        self._tracker.record(training_data)

    def _trend_allocation(self, strengths: dict[str, Decimal]) -> dict[str, Decimal]:
        """Shares proportional to max(1 + strength, 0); equal weights if all are 0."""
        if not strengths:
            return {}
        scores = {symbol: max(ONE + s, ZERO) for symbol, s in strengths.items()}
        total = sum(scores.values(), ZERO)
        if total == 0:
            logger.debug("No positive trend scores, falling back to equal weights")
            share = ONE / len(scores)
            return {symbol: share for symbol in scores}
        return {symbol: score / total for symbol, score in scores.items()}
