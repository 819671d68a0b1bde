"""Technical indicators module.

Moving averages, RSI, MACD, trend, momentum and market-cycle classification.
"""

from __future__ import annotations

from .calculator import TechnicalIndicatorCalculator, TechnicalSnapshot
from .macd import MACDResult, compute_macd
from .moving_average import compute_ema, compute_sma
from .rsi import compute_rsi
from .trend import classify_trend, compute_momentum, detect_market_cycle

__all__ = [
    "MACDResult",
    "TechnicalIndicatorCalculator",
    "TechnicalSnapshot",
    "classify_trend",
    "compute_ema",
    "compute_macd",
    "compute_momentum",
    "compute_rsi",
    "compute_sma",
    "detect_market_cycle",
]
