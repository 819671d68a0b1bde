"""Model weight strategies for the prediction aggregator.

Turns performance metrics or market conditions into a model-weight mapping that
sums to 1, ready to pass to `PredictionAggregator`:

- EQUAL: 1/n per model
- PERFORMANCE: share of the summed F1 scores
- CONFIDENCE: share of the summed per-model confidence scores
- MARKET_CONDITION: base weights, statistical boosted in high volatility and
  trend following boosted in trending markets
- VOLATILITY: base weights, trend following favoured in calm markets and
  statistical favoured in volatile ones

Usage:
    from portfolio_analytics.prediction.weighting import WeightingStrategy, model_weights

    metrics = [model.performance_metrics() for model in models]
    weights = model_weights(WeightingStrategy.PERFORMANCE, metrics)
    aggregator = PredictionAggregator(models, weights)
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Sequence

from portfolio_analytics.config import validate_weight_sum
from portfolio_analytics.errors import InvalidWeightConfigurationError
from portfolio_analytics.prediction.types import PerformanceMetrics
from portfolio_analytics.types import Number, to_decimal

logger = logging.getLogger(__name__)

STATISTICAL = "statistical"
TREND_FOLLOWING = "trend_following"

HIGH_VOLATILITY = Decimal("0.2")
LOW_VOLATILITY = Decimal("0.1")
TRENDING_STRENGTH = Decimal("0.1")

BOOST = Decimal("1.2")
DAMPEN = Decimal("0.8")
TRIM = Decimal("0.9")


class WeightingStrategy(str, Enum):
    EQUAL = "EQUAL"
    PERFORMANCE = "PERFORMANCE"
    MARKET_CONDITION = "MARKET_CONDITION"
    VOLATILITY = "VOLATILITY"
    CONFIDENCE = "CONFIDENCE"


def normalize_weights(weights: Mapping[str, Decimal]) -> dict[str, Decimal]:
    """Normalize weights to sum to 1.

    Raises:
        InvalidWeightConfigurationError: If the total weight is <= 0
    """
    total = sum(weights.values(), Decimal("0"))
    if total <= 0:
        raise InvalidWeightConfigurationError("weights total must be > 0")
    return {name: weight / total for name, weight in weights.items()}


def equal_weights(names: Sequence[str]) -> dict[str, Decimal]:
    if not names:
        raise InvalidWeightConfigurationError("at least one model is required")
    share = Decimal("1") / len(names)
    return {name: share for name in names}


def _share_or_equal(scores: dict[str, Decimal], what: str) -> dict[str, Decimal]:
    if sum(scores.values(), Decimal("0")) <= 0:
        logger.warning("No positive %s to weight by, using equal weights", what)
        return equal_weights(list(scores))
    return normalize_weights(scores)


def _base_weights(names: Sequence[str], base: Optional[Mapping[str, Number]]) -> dict[str, Decimal]:
    if base is None:
        return equal_weights(names)
    missing = [name for name in names if name not in base]
    if missing:
        raise InvalidWeightConfigurationError(f"no base weight for models: {', '.join(missing)}")
    return {name: to_decimal(base[name]) for name in names}


def _market_condition_weights(
    weights: dict[str, Decimal],
    volatility: Decimal,
    trend_strength: Decimal,
) -> dict[str, Decimal]:
    if volatility > HIGH_VOLATILITY:
        for name in weights:
            if name == STATISTICAL:
                weights[name] *= BOOST
            elif name != TREND_FOLLOWING:
                weights[name] *= DAMPEN
    if trend_strength > TRENDING_STRENGTH and TREND_FOLLOWING in weights:
        weights[TREND_FOLLOWING] *= BOOST
    return weights


def _volatility_weights(weights: dict[str, Decimal], volatility: Decimal) -> dict[str, Decimal]:
    if volatility < LOW_VOLATILITY:
        factors = {TREND_FOLLOWING: BOOST, STATISTICAL: TRIM}
    elif volatility > HIGH_VOLATILITY:
        factors = {STATISTICAL: BOOST, TREND_FOLLOWING: DAMPEN}
    else:
        factors = {}
    for name, factor in factors.items():
        if name in weights:
            weights[name] *= factor
    return weights


def model_weights(
    strategy: WeightingStrategy,
    metrics: Sequence[PerformanceMetrics],
    volatility: Number = Decimal("0"),
    trend_strength: Number = Decimal("0"),
    confidences: Optional[Mapping[str, Number]] = None,
    base_weights: Optional[Mapping[str, Number]] = None,
) -> dict[str, Decimal]:
    """Compute a model-weight mapping that sums to 1.

    Args:
        strategy: How to derive the weights
        metrics: One entry per model; its `model_name` keys the result
        volatility: Market volatility, used by MARKET_CONDITION and VOLATILITY
        trend_strength: Market trend strength, used by MARKET_CONDITION
        confidences: Model name -> confidence score, used by CONFIDENCE (missing names score 0)
        base_weights: Starting weights for MARKET_CONDITION and VOLATILITY (default: equal)

    Returns:
        Model name -> weight, in the order of `metrics`. PERFORMANCE and CONFIDENCE
        fall back to equal weights when every score is 0.

    Raises:
        InvalidWeightConfigurationError: If no metrics are given, names repeat, or
            base weights are missing or do not total more than 0
    """
    names = [m.model_name for m in metrics]
    if not names:
        raise InvalidWeightConfigurationError("at least one model is required")
    if len(set(names)) != len(names):
        raise InvalidWeightConfigurationError("model names must be unique")

    if strategy == WeightingStrategy.EQUAL:
        weights = equal_weights(names)
    elif strategy == WeightingStrategy.PERFORMANCE:
        weights = _share_or_equal({m.model_name: m.f1_score for m in metrics}, "F1 scores")
    elif strategy == WeightingStrategy.CONFIDENCE:
        scores = confidences or {}
        weights = _share_or_equal({name: to_decimal(scores.get(name, 0)) for name in names}, "confidence scores")
    elif strategy == WeightingStrategy.MARKET_CONDITION:
        weights = normalize_weights(
            _market_condition_weights(
                _base_weights(names, base_weights), to_decimal(volatility), to_decimal(trend_strength)
            )
        )
    elif strategy == WeightingStrategy.VOLATILITY:
        weights = normalize_weights(_volatility_weights(_base_weights(names, base_weights), to_decimal(volatility)))
    else:
        raise ValueError(f"Unknown weighting strategy: {strategy}")

    validate_weight_sum(weights, "model weights")
    logger.info("%s model weights: %s", strategy.value, {name: str(w) for name, w in weights.items()})
    return weights
