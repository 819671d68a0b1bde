"""Tests for technical indicators."""

from decimal import Decimal

import pytest

from portfolio_analytics.config import IndicatorConfig
from portfolio_analytics.indicators import (
    TechnicalIndicatorCalculator,
    classify_trend,
    compute_ema,
    compute_macd,
    compute_momentum,
    compute_rsi,
    compute_sma,
    detect_market_cycle,
)
from portfolio_analytics.types import MarketCyclePhase, TrendDirection


# ========== Moving averages ==========


class TestMovingAverages:
    def test_sma_of_trailing_window(self) -> None:
        assert compute_sma([1, 2, 3, 4, 5], period=3) == Decimal("4")

    def test_sma_too_few_points_is_zero(self) -> None:
        assert compute_sma([1, 2], period=3) == Decimal("0")

    def test_sma_rejects_invalid_period(self) -> None:
        with pytest.raises(ValueError, match="period must be >= 1"):
            compute_sma([1, 2, 3], period=0)

    def test_ema_single_value(self) -> None:
        assert compute_ema([Decimal("10")], period=5) == Decimal("10")

    def test_ema_empty_is_zero(self) -> None:
        assert compute_ema([], period=5) == Decimal("0")

    def test_ema_period_one_tracks_last_value(self) -> None:
        assert compute_ema([1, 2, 3], period=1) == Decimal("3")

    def test_ema_seeded_with_first_value(self) -> None:
        # multiplier 2/3: 10 -> (13 - 10) * 2/3 + 10 = 12
        assert compute_ema([10, 13], period=2) == Decimal("12")


# ========== RSI ==========


class TestRSI:
    def test_only_gains_is_100(self) -> None:
        assert compute_rsi([1, 2, 3], period=2) == Decimal("100")

    def test_flat_window_is_50(self) -> None:
        assert compute_rsi([5, 5, 5], period=2) == Decimal("50")

    def test_mixed_window(self) -> None:
        # gains 2, losses 1 -> RS 2 -> 100 - 100/3
        assert float(compute_rsi([1, 3, 2], period=2)) == pytest.approx(66.6666666667)

    def test_uses_first_period_transitions_only(self) -> None:
        assert compute_rsi([1, 2, 3, 1], period=2) == Decimal("100")

    def test_too_few_prices_is_zero(self) -> None:
        assert compute_rsi([1, 2], period=2) == Decimal("0")

    def test_rejects_invalid_period(self) -> None:
        with pytest.raises(ValueError, match="period must be >= 1"):
            compute_rsi([1, 2, 3], period=0)

    def test_within_bounds(self, rising_prices) -> None:
        assert Decimal("0") <= compute_rsi(rising_prices) <= Decimal("100")


# ========== MACD ==========


class TestMACD:
    def test_too_few_prices_is_zero(self) -> None:
        result = compute_macd([1, 2, 3])
        assert result.macd == result.signal == result.histogram == Decimal("0")

    def test_rising_series_has_positive_macd(self, rising_prices) -> None:
        result = compute_macd(rising_prices)
        assert result.macd > 0

    def test_signal_over_single_value_equals_macd(self, rising_prices) -> None:
        result = compute_macd(rising_prices)
        assert result.signal == result.macd
        assert result.histogram == Decimal("0")

    def test_rejects_fast_not_below_slow(self) -> None:
        with pytest.raises(ValueError, match="must be < slow_period"):
            compute_macd([1] * 30, fast_period=26, slow_period=12)

    def test_rejects_non_positive_period(self) -> None:
        with pytest.raises(ValueError, match="All periods must be >= 1"):
            compute_macd([1] * 30, signal_period=0)


# ========== Trend, momentum, cycle ==========


class TestTrend:
    def test_up(self) -> None:
        assert classify_trend([100, 102]) == TrendDirection.UP

    def test_down(self) -> None:
        assert classify_trend([100, 98]) == TrendDirection.DOWN

    def test_change_at_threshold_is_sideways(self) -> None:
        assert classify_trend([100, 101]) == TrendDirection.SIDEWAYS

    def test_unknown_for_short_or_zero_start(self) -> None:
        assert classify_trend([100]) == TrendDirection.UNKNOWN
        assert classify_trend([0, 5]) == TrendDirection.UNKNOWN

    def test_custom_threshold(self) -> None:
        assert classify_trend([100, 104], threshold=Decimal("0.05")) == TrendDirection.SIDEWAYS


class TestMomentum:
    def test_change_over_lookback(self) -> None:
        assert compute_momentum([100, 110, 121], lookback=3) == Decimal("0.21")

    def test_too_short_is_zero(self) -> None:
        assert compute_momentum([100, 110, 121], lookback=14) == Decimal("0")

    def test_rejects_invalid_lookback(self) -> None:
        with pytest.raises(ValueError, match="lookback must be >= 1"):
            compute_momentum([1, 2], lookback=0)


class TestMarketCycle:
    def test_bullish(self, rising_prices) -> None:
        assert detect_market_cycle(rising_prices) == MarketCyclePhase.BULLISH

    def test_bearish(self, falling_prices) -> None:
        assert detect_market_cycle(falling_prices) == MarketCyclePhase.BEARISH

    def test_recovery(self) -> None:
        prices = [200 - i for i in range(100)] + [101 + i for i in range(20)]
        assert detect_market_cycle(prices) == MarketCyclePhase.RECOVERY

    def test_correction(self) -> None:
        prices = [100 + i for i in range(100)] + [199 - i for i in range(20)]
        assert detect_market_cycle(prices) == MarketCyclePhase.CORRECTION

    def test_too_short_is_unknown(self) -> None:
        assert detect_market_cycle([1, 2, 3]) == MarketCyclePhase.UNKNOWN


# ========== Calculator ==========


class TestTechnicalIndicatorCalculator:
    def test_snapshot(self, rising_prices) -> None:
        snapshot = TechnicalIndicatorCalculator().snapshot("AAPL", rising_prices)

        assert snapshot.symbol == "AAPL"
        assert snapshot.sma == Decimal("339.5")
        assert snapshot.rsi == Decimal("100")
        assert snapshot.trend == TrendDirection.UP
        assert snapshot.cycle == MarketCyclePhase.BULLISH
        assert snapshot.momentum > 0
        assert snapshot.macd_histogram == Decimal("0")

    def test_config_periods(self) -> None:
        calc = TechnicalIndicatorCalculator(IndicatorConfig(sma_period=5))
        assert calc.sma([1, 2, 3, 4, 5]) == Decimal("3")

    def test_explicit_period_overrides_config(self) -> None:
        calc = TechnicalIndicatorCalculator(IndicatorConfig(sma_period=5))
        assert calc.sma([1, 2, 3, 4, 5], period=2) == Decimal("4.5")

    def test_explicit_zero_period_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            TechnicalIndicatorCalculator().rsi([1, 2, 3], period=0)
