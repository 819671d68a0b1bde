"""Prediction model contract and shared accuracy tracking."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Sequence

from portfolio_analytics.prediction.types import (
    Direction,
    MarketPrediction,
    PerformanceMetrics,
    PortfolioPrediction,
    Recommendation,
    SecurityPrediction,
    TrainingData,
)
from portfolio_analytics.types import EconomicContext, EconomicFactors, Number, Portfolio

logger = logging.getLogger(__name__)

# Observations the prior metrics count for when blended with realized outcomes
PRIOR_OBSERVATIONS = 20


class PredictionModel(ABC):
    """A trained model the aggregator can query.

    Implementations must be deterministic for identical inputs. `update` is the
    only operation allowed to change a model's state.
    """

    name: str = ""

    @abstractmethod
    def predict_market(
        self,
        series: Sequence[Number],
        context: EconomicContext,
        horizon_days: int = 30,
    ) -> MarketPrediction:
        """Predict market direction, return, volatility and risk from a price series."""

    @abstractmethod
    def predict_security(
        self,
        symbol: str,
        prices: Sequence[Number],
        factors: EconomicFactors,
        horizon_days: int = 30,
    ) -> SecurityPrediction:
        """Predict a single security, including its technical score."""

    @abstractmethod
    def predict_portfolio(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
        horizon_days: int = 30,
    ) -> PortfolioPrediction:
        """Predict a portfolio, including a suggested asset allocation."""

    @abstractmethod
    def performance_metrics(self) -> PerformanceMetrics:
        """Historical accuracy of this model."""

    @abstractmethod
    def recommendations(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
    ) -> list[Recommendation]:
        """Per-position action recommendations."""

    @abstractmethod
    def update(self, training_data: TrainingData) -> None:
        """Incorporate newly realized outcomes."""


class AccuracyTracker:
    """Blends prior performance metrics with realized prediction outcomes.

    Each metric is (prior * PRIOR_OBSERVATIONS + observed) / (PRIOR_OBSERVATIONS + n),
    with precision and recall measured for the UP direction.
    """

    def __init__(
        self,
        model_name: str,
        accuracy: Decimal,
        precision: Decimal,
        recall: Decimal,
        prior_observations: int = PRIOR_OBSERVATIONS,
    ) -> None:
        self.model_name = model_name
        self.prior = (accuracy, precision, recall)
        self.prior_observations = prior_observations
        self.hits = 0
        self.total = 0
        self.true_up = 0
        self.predicted_up = 0
        self.actual_up = 0

    def record(self, training_data: TrainingData) -> None:
        for predicted, actual in zip(training_data.predicted, training_data.actual):
            self.total += 1
            if predicted == actual:
                self.hits += 1
            if predicted == Direction.UP:
                self.predicted_up += 1
            if actual == Direction.UP:
                self.actual_up += 1
            if predicted == Direction.UP and actual == Direction.UP:
                self.true_up += 1
        logger.debug("%s accuracy now %d/%d realized hits", self.model_name, self.hits, self.total)

    def _blend(self, prior: Decimal, observed: int, count: int) -> Decimal:
        weight = Decimal(self.prior_observations)
        return (prior * weight + observed) / (weight + count)

    def metrics(self) -> PerformanceMetrics:
        prior_accuracy, prior_precision, prior_recall = self.prior
        accuracy = self._blend(prior_accuracy, self.hits, self.total)
        precision = self._blend(prior_precision, self.true_up, self.predicted_up)
        recall = self._blend(prior_recall, self.true_up, self.actual_up)
        f1 = 2 * precision * recall / (precision + recall) if precision + recall else Decimal("0")
        return PerformanceMetrics(
            model_name=self.model_name,
            accuracy=accuracy,
            precision=precision,
            recall=recall,
            f1_score=f1,
        )
