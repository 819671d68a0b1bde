"""Prediction module.

Pluggable prediction models and their weighted aggregation.
"""

from .aggregator import PredictionAggregator, diversification_score, prediction_consistency
from .base import AccuracyTracker, PredictionModel
from .types import (
    AggregatedPrediction,
    Direction,
    MarketPrediction,
    PerformanceMetrics,
    PortfolioPrediction,
    PredictionKind,
    Recommendation,
    RecommendationAction,
    RiskLevel,
    SecurityPrediction,
    TrainingData,
)
from .weighting import WeightingStrategy, model_weights, normalize_weights

__all__ = [
    # Aggregation
    "PredictionAggregator",
    "diversification_score",
    "prediction_consistency",
    # Model weighting
    "WeightingStrategy",
    "model_weights",
    "normalize_weights",
    # Model contract
    "AccuracyTracker",
    "PredictionModel",
    # Types
    "AggregatedPrediction",
    "Direction",
    "MarketPrediction",
    "PerformanceMetrics",
    "PortfolioPrediction",
    "PredictionKind",
    "Recommendation",
    "RecommendationAction",
    "RiskLevel",
    "SecurityPrediction",
    "TrainingData",
]
