"""Prediction aggregator: weighted combination of pluggable prediction models.

Combines the outputs of every registered model into one prediction.
Supports:
- Weighted direction voting with a deterministic tie-break
- Weighted expected return, volatility, technical score and allocation
- A confidence score from agreement, historical accuracy and, per kind,
  technical score or diversification
- Grouped, ranked recommendations

Usage:
    from portfolio_analytics.prediction import PredictionAggregator
    from portfolio_analytics.prediction.models import StatisticalModel, TrendFollowingModel

    aggregator = PredictionAggregator(
        [StatisticalModel(), TrendFollowingModel()],
        {"statistical": Decimal("0.5"), "trend_following": Decimal("0.5")},
    )
    prediction = aggregator.predict_market(prices, EconomicContext())
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from portfolio_analytics.config import validate_weight_sum
from portfolio_analytics.errors import InvalidWeightConfigurationError
from portfolio_analytics.prediction.base import PredictionModel
from portfolio_analytics.prediction.types import (
    AggregatedPrediction,
    Direction,
    MarketPrediction,
    PerformanceMetrics,
    PortfolioPrediction,
    PredictionKind,
    Recommendation,
    RecommendationAction,
    SecurityPrediction,
    TrainingData,
)
from portfolio_analytics.statistics import ZERO, mean, to_decimal
from portfolio_analytics.types import EconomicContext, EconomicFactors, Number, Portfolio

logger = logging.getLogger(__name__)

AGGREGATE_MODEL_NAME = "aggregate"


def prediction_consistency(directions: Sequence[Direction]) -> Decimal:
    """1 if all directions agree, 0.5 for exactly two distinct directions, else 0."""
    distinct = len(set(directions))
    if distinct == 1:
        return Decimal("1")
    if distinct == 2:
        return Decimal("0.5")
    return ZERO


def diversification_score(allocations: Sequence[Mapping[str, Decimal]]) -> Decimal:
    """1 - the largest allocation share, taking each asset's first-seen share.

    Returns 0 when no model allocates anything.
    """
    first_seen: dict[str, Decimal] = {}
    for allocation in allocations:
        for asset, share in allocation.items():
            first_seen.setdefault(asset, share)
    if not first_seen:
        return ZERO
    return 1 - max(first_seen.values())


class PredictionAggregator:
    """Weighted combination of prediction models.

    Model weights are keyed by model name, must cover every model and must sum
    to 1. Construction fails with InvalidWeightConfigurationError otherwise.
    """

    def __init__(self, models: Sequence[PredictionModel], weights: Mapping[str, Number]) -> None:
        names = [model.name for model in models]
        if not names:
            raise InvalidWeightConfigurationError("at least one prediction model is required")
        if len(set(names)) != len(names):
            raise InvalidWeightConfigurationError(f"model names must be unique, got {names}")

        missing = [name for name in names if name not in weights]
        if missing:
            raise InvalidWeightConfigurationError(f"no weight configured for models: {', '.join(missing)}")
        extra = [name for name in weights if name not in names]
        if extra:
            raise InvalidWeightConfigurationError(f"weights given for unregistered models: {', '.join(extra)}")

        resolved = {name: to_decimal(weights[name]) for name in names}
        if any(weight < 0 for weight in resolved.values()):
            raise InvalidWeightConfigurationError(f"model weights must be >= 0, got {resolved}")
        validate_weight_sum(resolved, "model weights")

        self._models: dict[str, PredictionModel] = {model.name: model for model in models}
        self._weights = resolved
        logger.info("Prediction aggregator configured with %s", ", ".join(f"{n}={w}" for n, w in resolved.items()))

    @property
    def model_names(self) -> list[str]:
        return list(self._models)

    @property
    def weights(self) -> dict[str, Decimal]:
        return dict(self._weights)

    # ------------------------------------------------------------------
    # Predictions
    # ------------------------------------------------------------------

    def predict_market(
        self,
        series: Sequence[Number],
        context: EconomicContext,
        horizon_days: int = 30,
    ) -> AggregatedPrediction:
        """Combined market prediction; confidence = mean(consistency, accuracy)."""
        predictions = {
            name: model.predict_market(series, context, horizon_days) for name, model in self._models.items()
        }
        components = self._base_confidence_components(predictions)
        return self._combine(PredictionKind.MARKET, predictions, components, horizon_days)

    def predict_security(
        self,
        symbol: str,
        prices: Sequence[Number],
        factors: EconomicFactors,
        horizon_days: int = 30,
    ) -> AggregatedPrediction:
        """Combined security prediction; confidence also averages in the mean technical score."""
        predictions: dict[str, SecurityPrediction] = {
            name: model.predict_security(symbol, prices, factors, horizon_days)
            for name, model in self._models.items()
        }
        components = self._base_confidence_components(predictions)
        components.append(mean([p.technical_score for p in predictions.values()]))

        technical_score = sum(
            (p.technical_score * self._weights[name] for name, p in predictions.items()),
            ZERO,
        )
        return self._combine(
            PredictionKind.SECURITY,
            predictions,
            components,
            horizon_days,
            symbol=symbol,
            technical_score=technical_score,
        )

    def predict_portfolio(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
        horizon_days: int = 30,
    ) -> AggregatedPrediction:
        """Combined portfolio prediction; confidence also averages in the diversification score."""
        predictions: dict[str, PortfolioPrediction] = {
            name: model.predict_portfolio(portfolio, market_prediction, horizon_days)
            for name, model in self._models.items()
        }
        components = self._base_confidence_components(predictions)
        components.append(diversification_score([p.asset_allocation for p in predictions.values()]))

        return self._combine(
            PredictionKind.PORTFOLIO,
            predictions,
            components,
            horizon_days,
            asset_allocation=self._combined_allocation(predictions),
        )

    def recommendations(
        self,
        portfolio: Portfolio,
        market_prediction: MarketPrediction,
    ) -> list[Recommendation]:
        """Every model's recommendations grouped by action, ranked by confidence.

        Group confidence = mean(confidence * model weight) over the group's members.
        """
        grouped: dict[RecommendationAction, list[Decimal]] = {}
        for name, model in self._models.items():
            weight = self._weights[name]
            for recommendation in model.recommendations(portfolio, market_prediction):
                grouped.setdefault(recommendation.action, []).append(recommendation.confidence * weight)

        combined = [
            Recommendation(
                action=action,
                confidence=mean(scores),
                model_name=AGGREGATE_MODEL_NAME,
                rationale=f"{len(scores)} model recommendation(s)",
            )
            for action, scores in grouped.items()
        ]
        return sorted(combined, key=lambda r: r.confidence, reverse=True)

    # ------------------------------------------------------------------
    # Model management
    # ------------------------------------------------------------------

    def model_performance(self, name: str) -> PerformanceMetrics:
        """Performance metrics of one model; empty metrics for an unknown name."""
        model = self._models.get(name)
        if model is None:
            logger.warning("Unknown prediction model %s", name)
            return PerformanceMetrics(model_name=name)
        return model.performance_metrics()

    def update_model(self, name: str, training_data: TrainingData) -> bool:
        """Feed realized outcomes to one model.

        Returns:
            True if the model accepted the update, False for an unknown model or a
            failed update (logged, current predictions unaffected)
        """
        model = self._models.get(name)
        if model is None:
            logger.warning("Ignoring update for unknown prediction model %s", name)
            return False
        try:
            model.update(training_data)
        except Exception:
            logger.exception("Update of prediction model %s failed", name)
            return False
        return True

    # ------------------------------------------------------------------
    # Combination helpers
    # ------------------------------------------------------------------

    def _base_confidence_components(self, predictions: Mapping[str, MarketPrediction]) -> list[Decimal]:
        consistency = prediction_consistency([p.direction for p in predictions.values()])
        accuracy = mean([self._models[name].performance_metrics().accuracy for name in predictions])
        return [consistency, accuracy]

    def _weighted_direction(self, predictions: Mapping[str, MarketPrediction]) -> Direction:
        """Direction with the larger weight total.

        Ties go to the direction with the larger weighted expected return, then DOWN.
        """
        weight_totals = {Direction.UP: ZERO, Direction.DOWN: ZERO}
        return_totals = {Direction.UP: ZERO, Direction.DOWN: ZERO}
        for name, prediction in predictions.items():
            weight_totals[prediction.direction] += self._weights[name]
            return_totals[prediction.direction] += prediction.expected_return * self._weights[name]

        if weight_totals[Direction.UP] != weight_totals[Direction.DOWN]:
            return max(weight_totals, key=weight_totals.__getitem__)
        if return_totals[Direction.UP] > return_totals[Direction.DOWN]:
            return Direction.UP
        return Direction.DOWN

    def _combine(
        self,
        kind: PredictionKind,
        predictions: Mapping[str, MarketPrediction],
        confidence_components: list[Decimal],
        horizon_days: int,
        symbol: Optional[str] = None,
        technical_score: Optional[Decimal] = None,
        asset_allocation: Optional[dict[str, Decimal]] = None,
    ) -> AggregatedPrediction:
        weighted_return = sum((p.expected_return * self._weights[n] for n, p in predictions.items()), ZERO)
        weighted_volatility = sum((p.volatility * self._weights[n] for n, p in predictions.items()), ZERO)
        # Divided by model count, not total weight
        weighted_risk = sum((Decimal(int(p.risk_level)) * self._weights[n] for n, p in predictions.items()), ZERO)
        risk_level = weighted_risk / len(predictions)

        aggregated = AggregatedPrediction(
            kind=kind,
            direction=self._weighted_direction(predictions),
            expected_return=weighted_return,
            volatility=weighted_volatility,
            risk_level=risk_level,
            confidence=mean(confidence_components),
            horizon_days=horizon_days,
            symbol=symbol,
            technical_score=technical_score,
            asset_allocation=asset_allocation or {},
        )
        logger.info(
            "Aggregated %s prediction: %s return=%s confidence=%s",
            kind.value,
            aggregated.direction.value,
            aggregated.expected_return,
            aggregated.confidence,
        )
        return aggregated

    def _combined_allocation(self, predictions: Mapping[str, PortfolioPrediction]) -> dict[str, Decimal]:
        """Weighted sum of each model's allocation, normalized to sum to 1."""
        allocation: dict[str, Decimal] = {}
        for name, prediction in predictions.items():
            for asset, share in prediction.asset_allocation.items():
                allocation[asset] = allocation.get(asset, ZERO) + share * self._weights[name]

        total = sum(allocation.values(), ZERO)
        if total == 0:
            return allocation
        return {asset: share / total for asset, share in allocation.items()}
