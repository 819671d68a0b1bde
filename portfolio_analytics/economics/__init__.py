"""Economic context module.

Sentiment, market impact, correlation and event impact of economic indicators.
"""

from .analyzer import (
    EconomicContextAnalyzer,
    EconomicTrendPrediction,
    EventImpact,
    IndicatorCorrelation,
    IndicatorImpact,
    MarketImpactAnalysis,
    correlation_significance,
    event_significance,
)

__all__ = [
    "EconomicContextAnalyzer",
    "EconomicTrendPrediction",
    "EventImpact",
    "IndicatorCorrelation",
    "IndicatorImpact",
    "MarketImpactAnalysis",
    "correlation_significance",
    "event_significance",
]
