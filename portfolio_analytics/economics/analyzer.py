"""Economic context analysis.

Turns raw economic indicators into:
- a clamped sentiment score
- a market-impact score with a per-type breakdown
- per-type correlation against market performance
- per-type condition outlooks
- event-impact estimates around economic events

All weights come from an injected EconomicWeights table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence, Union

from portfolio_analytics.config import EconomicWeights
from portfolio_analytics.indicators.trend import DEFAULT_TREND_THRESHOLD, classify_trend
from portfolio_analytics.statistics import ZERO, clamp, mean, pearson_correlation, std_dev, to_series
from portfolio_analytics.types import (
    EconomicEvent,
    EconomicIndicator,
    EconomicIndicatorType,
    MarketSentiment,
    Number,
    TrendDirection,
)

logger = logging.getLogger(__name__)

IndicatorKey = Union[EconomicIndicatorType, str]

SENTIMENT_BAND = Decimal("0.5")

# (lower bound on |value|, significance), checked in order
CORRELATION_SIGNIFICANCE = (
    (Decimal("0.7"), Decimal("0.95")),
    (Decimal("0.5"), Decimal("0.85")),
    (Decimal("0.3"), Decimal("0.75")),
    (Decimal("0.1"), Decimal("0.65")),
)
EVENT_SIGNIFICANCE = (
    (Decimal("0.05"), Decimal("0.95")),
    (Decimal("0.03"), Decimal("0.85")),
    (Decimal("0.01"), Decimal("0.75")),
    (Decimal("0.005"), Decimal("0.65")),
)
BASE_SIGNIFICANCE = Decimal("0.5")

BASE_CONFIDENCE = Decimal("0.5")
LOW_VOLATILITY = Decimal("0.02")


@dataclass(frozen=True)
class IndicatorImpact:
    type: IndicatorKey
    score: Decimal
    trend: TrendDirection


@dataclass(frozen=True)
class MarketImpactAnalysis:
    overall_impact: Decimal
    sentiment: MarketSentiment
    breakdown: dict[IndicatorKey, IndicatorImpact] = field(default_factory=dict)


@dataclass(frozen=True)
class IndicatorCorrelation:
    type: IndicatorKey
    correlation: Decimal
    significance: Decimal


@dataclass(frozen=True)
class EconomicTrendPrediction:
    type: IndicatorKey
    trend: TrendDirection
    volatility: Decimal
    confidence: Decimal


@dataclass(frozen=True)
class EventImpact:
    event: EconomicEvent
    market_impact: Decimal
    significance: Decimal


def _bucket(value: Decimal, buckets: Sequence[tuple[Decimal, Decimal]]) -> Decimal:
    magnitude = abs(value)
    for lower, significance in buckets:
        if magnitude > lower:
            return significance
    return BASE_SIGNIFICANCE


def correlation_significance(correlation: Decimal) -> Decimal:
    """Significance of a correlation: >0.7 -> 0.95, >0.5 -> 0.85, >0.3 -> 0.75, >0.1 -> 0.65, else 0.5."""
    return _bucket(correlation, CORRELATION_SIGNIFICANCE)


def event_significance(impact: Decimal) -> Decimal:
    """Significance of an event's market impact: >5% -> 0.95 down to 0.5."""
    return _bucket(impact, EVENT_SIGNIFICANCE)


def _group_by_type(indicators: Sequence[EconomicIndicator]) -> dict[IndicatorKey, list[EconomicIndicator]]:
    """Group indicators by type in first-seen order, each group sorted by date."""
    grouped: dict[IndicatorKey, list[EconomicIndicator]] = {}
    for indicator in indicators:
        grouped.setdefault(indicator.type, []).append(indicator)
    return {key: sorted(group, key=lambda i: i.date) for key, group in grouped.items()}


class EconomicContextAnalyzer:
    """Scores economic indicators with configurable weight tables."""

    def __init__(
        self,
        weights: EconomicWeights | None = None,
        trend_threshold: Number = DEFAULT_TREND_THRESHOLD,
    ) -> None:
        self.weights = weights or EconomicWeights()
        self.trend_threshold = trend_threshold

    def sentiment(self, indicators: Sequence[EconomicIndicator]) -> Decimal:
        """Economic sentiment score.

        Sentiment = sum(value * type_weight * impact_weight), clamped to [-100, 100]
        """
        if not indicators:
            return ZERO

        score = sum(
            (
                i.value * self.weights.type_weight(i.type) * self.weights.impact_weight(i.impact)
                for i in indicators
            ),
            ZERO,
        )
        return clamp(score, self.weights.sentiment_floor, self.weights.sentiment_ceiling)

    def market_impact(self, indicators: Sequence[EconomicIndicator]) -> MarketImpactAnalysis:
        """Overall market impact with a per-type breakdown.

        Overall = sum(impact_weight * type_weight). Each breakdown entry carries its
        type's share of that sum and the trend of the type's values over time.
        """
        overall = ZERO
        breakdown: dict[IndicatorKey, IndicatorImpact] = {}

        for indicator_type, group in _group_by_type(indicators).items():
            type_weight = self.weights.type_weight(indicator_type)
            score = sum((self.weights.impact_weight(i.impact) * type_weight for i in group), ZERO)
            overall += score
            breakdown[indicator_type] = IndicatorImpact(
                type=indicator_type,
                score=score,
                trend=classify_trend([i.value for i in group], self.trend_threshold),
            )

        if overall > SENTIMENT_BAND:
            sentiment = MarketSentiment.BULLISH
        elif overall < -SENTIMENT_BAND:
            sentiment = MarketSentiment.BEARISH
        else:
            sentiment = MarketSentiment.NEUTRAL

        logger.debug("Market impact %s (%s) from %d indicator types", overall, sentiment.value, len(breakdown))
        return MarketImpactAnalysis(overall_impact=overall, sentiment=sentiment, breakdown=breakdown)

    def correlation(
        self,
        indicators: Sequence[EconomicIndicator],
        market_series: Sequence[Number],
    ) -> dict[IndicatorKey, IndicatorCorrelation]:
        """Correlate each indicator type's values with market performance.

        Each type's values (by date) must line up one-to-one with `market_series`.

        Raises:
            LengthMismatchError: If a type has a different number of observations
        """
        market = to_series(market_series)
        result: dict[IndicatorKey, IndicatorCorrelation] = {}
        for indicator_type, group in _group_by_type(indicators).items():
            correlation = pearson_correlation([i.value for i in group], market)
            result[indicator_type] = IndicatorCorrelation(
                type=indicator_type,
                correlation=correlation,
                significance=correlation_significance(correlation),
            )
        return result

    def predict_conditions(self, history: Sequence[EconomicIndicator]) -> dict[IndicatorKey, EconomicTrendPrediction]:
        """Trend and volatility outlook per indicator type.

        Confidence starts at 0.5, +0.2 for volatility below 0.02, +0.1 for a known
        trend, capped at 1.
        """
        predictions: dict[IndicatorKey, EconomicTrendPrediction] = {}
        for indicator_type, group in _group_by_type(history).items():
            values = [i.value for i in group]
            trend = classify_trend(values, self.trend_threshold)
            volatility = std_dev(values)

            confidence = BASE_CONFIDENCE
            if volatility < LOW_VOLATILITY:
                confidence += Decimal("0.2")
            if trend != TrendDirection.UNKNOWN:
                confidence += Decimal("0.1")

            predictions[indicator_type] = EconomicTrendPrediction(
                type=indicator_type,
                trend=trend,
                volatility=volatility,
                confidence=min(confidence, Decimal("1")),
            )
        return predictions

    def event_impact(
        self,
        events: Sequence[EconomicEvent],
        market_series: Sequence[Number],
        window: int = 5,
    ) -> list[EventImpact]:
        """Estimate each event's market impact from the series around it.

        impact = (mean(after) - mean(before)) / mean(before), where `before` is up to
        `window` points preceding the event and `after` is up to `window` points
        starting at it. Events without a `series_index` sit on the last point.
        """
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")

        market = to_series(market_series)
        impacts = []
        for event in events:
            impact = self._single_event_impact(event, market, window)
            impacts.append(EventImpact(event=event, market_impact=impact, significance=event_significance(impact)))
        return impacts

    def _single_event_impact(self, event: EconomicEvent, market: tuple[Decimal, ...], window: int) -> Decimal:
        if not market:
            return ZERO

        index = len(market) - 1 if event.series_index is None else event.series_index
        if not 0 <= index < len(market):
            logger.warning("Event %s index %d outside market series of %d points", event.type, index, len(market))
            return ZERO

        before = market[max(0, index - window):index]
        after = market[index:index + window]
        if not before:
            return ZERO

        before_mean = mean(before)
        if before_mean == 0:
            return ZERO
        return (mean(after) - before_mean) / before_mean
