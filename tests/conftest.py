"""Shared test fixtures for pytest.

Provides sample price series, a two-position portfolio and a configurable stub
prediction model used across multiple test files.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Sequence

import pytest

from portfolio_analytics.prediction import (
    Direction,
    MarketPrediction,
    PerformanceMetrics,
    PortfolioPrediction,
    PredictionModel,
    Recommendation,
    RecommendationAction,
    RiskLevel,
    SecurityPrediction,
    TrainingData,
)
from portfolio_analytics.types import Portfolio, Position


class StubModel(PredictionModel):
    """Prediction model returning fixed values."""

    def __init__(
        self,
        name: str,
        direction: Direction = Direction.UP,
        expected_return: Decimal = Decimal("0.01"),
        volatility: Decimal = Decimal("0.1"),
        risk_level: RiskLevel = RiskLevel.MEDIUM,
        accuracy: Decimal = Decimal("0.7"),
        technical_score: Decimal = Decimal("0"),
        allocation: Optional[dict[str, Decimal]] = None,
        recommendations: Sequence[tuple[RecommendationAction, Decimal]] = (),
        fail_on_update: bool = False,
    ) -> None:
        self.name = name
        self.direction = direction
        self.expected_return = expected_return
        self.volatility = volatility
        self.risk_level = risk_level
        self.accuracy = accuracy
        self.technical_score = technical_score
        self.allocation = allocation or {}
        self._recommendations = list(recommendations)
        self.fail_on_update = fail_on_update
        self.updates: list[TrainingData] = []

    def _fields(self, horizon_days: int) -> dict:
        return {
            "direction": self.direction,
            "expected_return": self.expected_return,
            "volatility": self.volatility,
            "risk_level": self.risk_level,
            "horizon_days": horizon_days,
        }

    def predict_market(self, series, context, horizon_days=30) -> MarketPrediction:
        return MarketPrediction(**self._fields(horizon_days))

    def predict_security(self, symbol, prices, factors, horizon_days=30) -> SecurityPrediction:
        return SecurityPrediction(**self._fields(horizon_days), symbol=symbol, technical_score=self.technical_score)

    def predict_portfolio(self, portfolio, market_prediction, horizon_days=30) -> PortfolioPrediction:
        return PortfolioPrediction(**self._fields(horizon_days), asset_allocation=dict(self.allocation))

    def performance_metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics(model_name=self.name, accuracy=self.accuracy)

    def recommendations(self, portfolio, market_prediction) -> list[Recommendation]:
        return [
            Recommendation(action=action, confidence=confidence, model_name=self.name)
            for action, confidence in self._recommendations
        ]

    def update(self, training_data: TrainingData) -> None:
        if self.fail_on_update:
            raise RuntimeError("update rejected")
        self.updates.append(training_data)


@pytest.fixture
def make_stub_model() -> Callable[..., StubModel]:
    """Factory for StubModel instances."""
    return StubModel


@pytest.fixture
def rising_prices() -> list[Decimal]:
    """250 steadily rising prices, long enough for every moving-average period."""
    return [Decimal("100") + Decimal(i) for i in range(250)]


@pytest.fixture
def falling_prices() -> list[Decimal]:
    """250 steadily falling prices."""
    return [Decimal("400") - Decimal(i) for i in range(250)]


@pytest.fixture
def as_of() -> datetime:
    return datetime(2024, 1, 2, 16, 0, tzinfo=timezone.utc)


@pytest.fixture
def two_position_portfolio() -> Portfolio:
    """Portfolio worth 10,000: A at 60% and B at 40%."""
    portfolio = Portfolio(id="p1")
    portfolio.add_position(
        Position(
            symbol="A",
            quantity=Decimal("60"),
            current_price=Decimal("100"),
            price_history=(Decimal("90"), Decimal("95"), Decimal("92"), Decimal("98"), Decimal("100")),
        )
    )
    portfolio.add_position(
        Position(
            symbol="B",
            quantity=Decimal("40"),
            current_price=Decimal("100"),
            price_history=(Decimal("110"), Decimal("104"), Decimal("106"), Decimal("101"), Decimal("100")),
        )
    )
    return portfolio
