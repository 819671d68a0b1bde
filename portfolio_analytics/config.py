"""Configuration for the analytics components.

Every component receives its tables and thresholds through one of these frozen
dataclasses at construction time. Defaults are the standard tables and thresholds;
`AnalyticsSettings.from_env()` layers optional environment overrides on top.

Usage:
    from portfolio_analytics.config import AnalyticsSettings

    settings = AnalyticsSettings.from_env()
    engine = RebalancingEngine(settings.rebalancing)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Mapping

from portfolio_analytics.errors import InvalidWeightConfigurationError
from portfolio_analytics.types import EconomicImpact, EconomicIndicatorType

logger = logging.getLogger(__name__)

# Weight tables are compared against 1 with this tolerance
WEIGHT_SUM_TOLERANCE = Decimal("0.000001")

DEFAULT_TYPE_WEIGHTS: dict[str, Decimal] = {
    EconomicIndicatorType.GDP.value: Decimal("0.30"),
    EconomicIndicatorType.INFLATION.value: Decimal("0.25"),
    EconomicIndicatorType.INTEREST_RATE.value: Decimal("0.20"),
    EconomicIndicatorType.UNEMPLOYMENT.value: Decimal("0.15"),
    EconomicIndicatorType.CONSUMER_CONFIDENCE.value: Decimal("0.10"),
}

DEFAULT_IMPACT_WEIGHTS: dict[str, Decimal] = {
    EconomicImpact.POSITIVE.value: Decimal("0.30"),
    EconomicImpact.NEGATIVE.value: Decimal("-0.30"),
    EconomicImpact.NEUTRAL.value: Decimal("0"),
}

# Weights for the bundled reference models (see portfolio_analytics.prediction.models)
DEFAULT_MODEL_WEIGHTS: dict[str, Decimal] = {
    "statistical": Decimal("0.5"),
    "trend_following": Decimal("0.5"),
}


def validate_weight_sum(weights: Mapping[str, Decimal], what: str) -> None:
    """Raise InvalidWeightConfigurationError unless weights sum to 1.

    Args:
        weights: Mapping of key to weight
        what: Name of the table, used in the error message
    """
    if not weights:
        raise InvalidWeightConfigurationError(f"{what} must not be empty")
    total = sum(weights.values(), Decimal("0"))
    if abs(total - 1) > WEIGHT_SUM_TOLERANCE:
        raise InvalidWeightConfigurationError(f"{what} must sum to 1, got {total}")


@dataclass(frozen=True)
class RiskConfig:
    trading_days: int = 252
    risk_free_rate: Decimal = Decimal("0.02")

    def __post_init__(self) -> None:
        if self.trading_days < 1:
            raise ValueError(f"trading_days must be >= 1, got {self.trading_days}")


@dataclass(frozen=True)
class IndicatorConfig:
    """Indicator periods and classification thresholds.

    Attributes:
        trend_threshold: Relative first-to-last change beyond which a series is Up/Down
        cycle_window: Size of the recent window used for market-cycle detection
    """

    sma_period: int = 20
    ema_period: int = 20
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    trend_threshold: Decimal = Decimal("0.01")
    cycle_window: int = 20
    momentum_lookback: int = 14

    def __post_init__(self) -> None:
        for name in ("sma_period", "ema_period", "rsi_period", "macd_fast", "macd_slow", "macd_signal",
                     "cycle_window", "momentum_lookback"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.macd_fast >= self.macd_slow:
            raise ValueError(f"macd_fast ({self.macd_fast}) must be < macd_slow ({self.macd_slow})")


@dataclass(frozen=True)
class RebalancingConfig:
    """Rebalancing thresholds.

    Attributes:
        deviation_threshold: Weight deviation a symbol must exceed to be rebalanced (0.05 = 5%)
        fee_rate: Fee charged per unit of traded amount (0.001 = 0.1%)
        min_transaction_size: Netted amounts below this are dropped by optimization
    """

    deviation_threshold: Decimal = Decimal("0.05")
    fee_rate: Decimal = Decimal("0.001")
    min_transaction_size: Decimal = Decimal("100")

    def __post_init__(self) -> None:
        if self.deviation_threshold < 0:
            raise ValueError("deviation_threshold must be >= 0")
        if self.fee_rate < 0:
            raise ValueError("fee_rate must be >= 0")
        if self.min_transaction_size < 0:
            raise ValueError("min_transaction_size must be >= 0")


@dataclass(frozen=True)
class EconomicWeights:
    """Weight tables for economic indicator scoring.

    `type_weights` must sum to 1; indicator types missing from it fall back to
    `default_type_weight`. Impacts missing from `impact_weights` count as 0.
    """

    type_weights: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_TYPE_WEIGHTS))
    default_type_weight: Decimal = Decimal("0.10")
    impact_weights: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_IMPACT_WEIGHTS))
    sentiment_floor: Decimal = Decimal("-100")
    sentiment_ceiling: Decimal = Decimal("100")

    def __post_init__(self) -> None:
        validate_weight_sum(self.type_weights, "economic indicator type weights")
        if self.sentiment_floor > self.sentiment_ceiling:
            raise ValueError("sentiment_floor must be <= sentiment_ceiling")

    def type_weight(self, indicator_type: object) -> Decimal:
        key = _enum_key(indicator_type)
        weight = self.type_weights.get(key)
        if weight is None:
            logger.debug("Unknown indicator type %s, using default weight %s", key, self.default_type_weight)
            return self.default_type_weight
        return weight

    def impact_weight(self, impact: object) -> Decimal:
        key = _enum_key(impact)
        weight = self.impact_weights.get(key)
        if weight is None:
            logger.debug("Unknown impact %s, treating as neutral", key)
            return Decimal("0")
        return weight


def _enum_key(value: object) -> str:
    return value.value if hasattr(value, "value") else str(value)


@dataclass(frozen=True)
class AnalyticsSettings:
    risk: RiskConfig = field(default_factory=RiskConfig)
    indicators: IndicatorConfig = field(default_factory=IndicatorConfig)
    rebalancing: RebalancingConfig = field(default_factory=RebalancingConfig)
    economic: EconomicWeights = field(default_factory=EconomicWeights)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AnalyticsSettings":
        """Build settings from defaults plus environment overrides.

        Recognised variables: PORTFOLIO_TRADING_DAYS, PORTFOLIO_RISK_FREE_RATE,
        PORTFOLIO_REBALANCE_THRESHOLD, PORTFOLIO_FEE_RATE,
        PORTFOLIO_MIN_TRANSACTION_SIZE.

        Raises:
            ValueError: If a variable is set but not a valid number
        """
        env = os.environ if environ is None else environ

        risk_defaults = RiskConfig()
        risk = RiskConfig(
            trading_days=int(_env_decimal(env, "PORTFOLIO_TRADING_DAYS", Decimal(risk_defaults.trading_days))),
            risk_free_rate=_env_decimal(env, "PORTFOLIO_RISK_FREE_RATE", risk_defaults.risk_free_rate),
        )

        rebalancing_defaults = RebalancingConfig()
        rebalancing = RebalancingConfig(
            deviation_threshold=_env_decimal(
                env, "PORTFOLIO_REBALANCE_THRESHOLD", rebalancing_defaults.deviation_threshold
            ),
            fee_rate=_env_decimal(env, "PORTFOLIO_FEE_RATE", rebalancing_defaults.fee_rate),
            min_transaction_size=_env_decimal(
                env, "PORTFOLIO_MIN_TRANSACTION_SIZE", rebalancing_defaults.min_transaction_size
            ),
        )

        logger.debug("Loaded analytics settings: risk=%s rebalancing=%s", risk, rebalancing)
        return cls(risk=risk, rebalancing=rebalancing)


def _env_decimal(env: Mapping[str, str], name: str, default: Decimal) -> Decimal:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return Decimal(raw)
    except InvalidOperation as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
