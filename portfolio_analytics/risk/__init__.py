"""Risk metrics module.

Volatility, drawdown, correlation, Sharpe ratio and performance history.
"""

from .correlation import CorrelationMatrix, correlation_matrix
from .metrics import RiskMetrics, RiskMetricsCalculator, annualized_volatility, max_drawdown, sharpe_ratio
from .performance import PerformancePoint, performance_history, rolling_returns, simple_return

__all__ = [
    # Metrics
    "RiskMetrics",
    "RiskMetricsCalculator",
    "annualized_volatility",
    "max_drawdown",
    "sharpe_ratio",
    # Correlation
    "CorrelationMatrix",
    "correlation_matrix",
    # Performance
    "PerformancePoint",
    "performance_history",
    "rolling_returns",
    "simple_return",
]
