"""Tests for analytics configuration."""

from decimal import Decimal

import pytest

from portfolio_analytics.config import (
    DEFAULT_MODEL_WEIGHTS,
    AnalyticsSettings,
    EconomicWeights,
    IndicatorConfig,
    RiskConfig,
    validate_weight_sum,
)
from portfolio_analytics.errors import InvalidWeightConfigurationError
from portfolio_analytics.types import EconomicImpact, EconomicIndicatorType


def test_defaults() -> None:
    settings = AnalyticsSettings()
    assert settings.risk.trading_days == 252
    assert settings.risk.risk_free_rate == Decimal("0.02")
    assert settings.rebalancing.deviation_threshold == Decimal("0.05")
    assert settings.rebalancing.fee_rate == Decimal("0.001")
    assert settings.rebalancing.min_transaction_size == Decimal("100")
    assert settings.indicators.rsi_period == 14


def test_from_env_overrides() -> None:
    settings = AnalyticsSettings.from_env(
        {
            "PORTFOLIO_TRADING_DAYS": "365",
            "PORTFOLIO_RISK_FREE_RATE": "0.03",
            "PORTFOLIO_REBALANCE_THRESHOLD": "0.1",
            "PORTFOLIO_FEE_RATE": "0.002",
            "PORTFOLIO_MIN_TRANSACTION_SIZE": "50",
        }
    )
    assert settings.risk.trading_days == 365
    assert settings.risk.risk_free_rate == Decimal("0.03")
    assert settings.rebalancing.deviation_threshold == Decimal("0.1")
    assert settings.rebalancing.fee_rate == Decimal("0.002")
    assert settings.rebalancing.min_transaction_size == Decimal("50")


def test_from_env_ignores_blank_values() -> None:
    settings = AnalyticsSettings.from_env({"PORTFOLIO_FEE_RATE": "  "})
    assert settings.rebalancing.fee_rate == Decimal("0.001")


def test_from_env_reads_process_environment(monkeypatch) -> None:
    monkeypatch.setenv("PORTFOLIO_RISK_FREE_RATE", "0.05")
    assert AnalyticsSettings.from_env().risk.risk_free_rate == Decimal("0.05")


def test_from_env_rejects_malformed_number() -> None:
    with pytest.raises(ValueError, match="PORTFOLIO_FEE_RATE"):
        AnalyticsSettings.from_env({"PORTFOLIO_FEE_RATE": "cheap"})


def test_risk_config_rejects_zero_trading_days() -> None:
    with pytest.raises(ValueError, match="trading_days"):
        RiskConfig(trading_days=0)


def test_indicator_config_validation() -> None:
    with pytest.raises(ValueError, match="rsi_period"):
        IndicatorConfig(rsi_period=0)
    with pytest.raises(ValueError, match="macd_fast"):
        IndicatorConfig(macd_fast=30)


def test_default_weight_tables_sum_to_one() -> None:
    validate_weight_sum(EconomicWeights().type_weights, "type weights")
    validate_weight_sum(DEFAULT_MODEL_WEIGHTS, "model weights")


def test_validate_weight_sum_tolerance() -> None:
    validate_weight_sum({"a": Decimal("0.3333333"), "b": Decimal("0.6666667")}, "weights")
    with pytest.raises(InvalidWeightConfigurationError):
        validate_weight_sum({"a": Decimal("0.33"), "b": Decimal("0.66")}, "weights")


def test_economic_weight_lookup() -> None:
    weights = EconomicWeights()
    assert weights.type_weight(EconomicIndicatorType.GDP) == Decimal("0.30")
    assert weights.type_weight("GDP") == Decimal("0.30")
    assert weights.type_weight(EconomicIndicatorType.HOUSING) == Decimal("0.10")
    assert weights.impact_weight(EconomicImpact.NEGATIVE) == Decimal("-0.30")
    assert weights.impact_weight("UNKNOWN") == Decimal("0")


def test_sentiment_bounds_must_be_ordered() -> None:
    with pytest.raises(ValueError, match="sentiment_floor"):
        EconomicWeights(sentiment_floor=Decimal("10"), sentiment_ceiling=Decimal("-10"))
