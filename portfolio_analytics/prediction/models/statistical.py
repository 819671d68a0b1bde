"""Statistical prediction model.

Predicts from the distribution of simple returns:
- direction from the least-squares trend of the returns
- volatility as the population standard deviation of returns
- portfolio volatility from the returns covariance matrix (numpy)
- allocation by inverse volatility
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Sequence

import numpy as np

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
from portfolio_analytics.statistics import ZERO, clamp, linear_trend, mean, simple_returns, std_dev
from portfolio_analytics.types import EconomicContext, EconomicFactors, Number, Portfolio, Position

logger = logging.getLogger(__name__)

# Assumed periodic market return used for beta and alpha
MARKET_RETURN = Decimal("0.01")

LOW_RISK_VOLATILITY = Decimal("0.05")
MEDIUM_RISK_VOLATILITY = Decimal("0.1")

BUY_MAX_VOLATILITY = Decimal("0.1")
SELL_MIN_VOLATILITY = Decimal("0.2")

ONE = Decimal("1")


def risk_level(volatility: Decimal) -> RiskLevel:
    """< 0.05 -> LOW, < 0.1 -> MEDIUM, else HIGH."""
    if volatility < LOW_RISK_VOLATILITY:
        return RiskLevel.LOW
    if volatility < MEDIUM_RISK_VOLATILITY:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def confidence_score(trend: Decimal, volatility: Decimal) -> Decimal:
    """Mean of a trend score (0.8 rising, 0.2 otherwise) and 1 - volatility, in [0, 1]."""
    trend_score = Decimal("0.8") if trend > 0 else Decimal("0.2")
    return clamp((trend_score + (ONE - volatility)) / 2, ZERO, ONE)


def _beta(returns: Sequence[Decimal]) -> Decimal:
    return mean(returns) / MARKET_RETURN


def _alpha(returns: Sequence[Decimal]) -> Decimal:
    return mean(returns) - MARKET_RETURN


class StatisticalModel(PredictionModel):
    """Return-distribution model with inverse-volatility allocation."""

    name = "statistical"

    def __init__(self) -> None:
        self._tracker = AccuracyTracker(
            self.name,
            accuracy=Decimal("0.75"),
            precision=Decimal("0.70"),
            recall=Decimal("0.72"),
        )

    def predict_market(
        self,
        series: Sequence[Number],
        context: EconomicContext,
        horizon_days: int = 30,
    ) -> MarketPrediction:
        returns = simple_returns(series)
        volatility = std_dev(returns)
        trend = linear_trend(returns)
        return MarketPrediction(
            direction=Direction.UP if trend > 0 else Direction.DOWN,
            expected_return=mean(returns),
            volatility=volatility,
            risk_level=risk_level(volatility),
            horizon_days=horizon_days,
        )

    def predict_security(
        self,
        symbol: str,
        prices: Sequence[Number],
        factors: EconomicFactors,
        horizon_days: int = 30,
    ) -> SecurityPrediction:
        returns = simple_returns(prices)
        volatility = std_dev(returns)
        expected = mean(returns) * _beta(returns) + _alpha(returns)
        trend = linear_trend(returns)
        technical = clamp(trend / volatility, -ONE, ONE) if volatility else ZERO
        return SecurityPrediction(
            direction=Direction.UP if expected > 0 else Direction.DOWN,
            expected_return=expected,
            volatility=volatility,
            risk_level=risk_level(volatility),
            horizon_days=horizon_days,
            symbol=symbol,
            technical_score=technical,
        )

    def predict_portfolio(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
        horizon_days: int = 30,
    ) -> PortfolioPrediction:
        positions = [p for p in portfolio.position_list() if len(p.price_history) >= 2]
        weights = [portfolio.weight_of(p.symbol) for p in positions]
        returns = [simple_returns(p.price_history) for p in positions]

        expected = sum((w * mean(r) for w, r in zip(weights, returns)), ZERO)
        volatility = self._portfolio_volatility(weights, returns)

        return PortfolioPrediction(
            direction=Direction.UP if expected > 0 else Direction.DOWN,
            expected_return=expected,
            volatility=volatility,
            risk_level=risk_level(volatility),
            horizon_days=horizon_days,
            asset_allocation=self._inverse_volatility_allocation(positions),
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
            returns = simple_returns(position.price_history)
            volatility = std_dev(returns)
            beta = _beta(returns)

            if beta > 1 and volatility < BUY_MAX_VOLATILITY:
                action = RecommendationAction.BUY
            elif beta < 1 and volatility > SELL_MIN_VOLATILITY:
                action = RecommendationAction.SELL
            else:
                action = RecommendationAction.HOLD

            result.append(
                Recommendation(
                    action=action,
                    confidence=confidence_score(linear_trend(returns), volatility),
                    symbol=position.symbol,
                    model_name=self.name,
                    rationale="Based on statistical analysis of returns and volatility",
                )
            )
        return result

    def update(self, training_data: TrainingData) -> None:
        self._tracker.record(training_data)

    def _portfolio_volatility(self, weights: list[Decimal], returns: list[tuple[Decimal, ...]]) -> Decimal:
        """sqrt(w' C w) over the aligned tails of each position's returns."""
        if not returns:
            return ZERO
        length = min(len(r) for r in returns)
        if len(returns) == 1:
            return weights[0] * std_dev(returns[0][-length:])

        matrix = np.array([[float(v) for v in r[-length:]] for r in returns])
        covariance = np.atleast_2d(np.cov(matrix, bias=True))
        w = np.array([float(x) for x in weights])
        variance = float(w @ covariance @ w)
        if variance <= 0:
            return ZERO
        return Decimal(str(round(float(np.sqrt(variance)), 12)))

    def _inverse_volatility_allocation(self, positions: list[Position]) -> dict[str, Decimal]:
        if not positions:
            return {}
        volatilities = {p.symbol: std_dev(simple_returns(p.price_history)) for p in positions}
        if any(v == 0 for v in volatilities.values()):
            logger.debug("Zero-volatility position present, falling back to equal weights")
            share = ONE / len(positions)
            return {symbol: share for symbol in volatilities}

        inverse = {symbol: ONE / v for symbol, v in volatilities.items()}
        total = sum(inverse.values(), ZERO)
        return {symbol: value / total for symbol, value in inverse.items()}
