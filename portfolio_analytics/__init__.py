"""Portfolio analytics core.

Pure, synchronous building blocks for portfolio decision support:

- statistics: mean/variance/correlation primitives shared by every component
- risk: volatility, drawdown, correlation, Sharpe ratio, performance history
- indicators: SMA/EMA/RSI/MACD, trend, momentum and market-cycle classification
- economics: economic indicator sentiment, market impact and event impact
- rebalancing: cost-aware rebalancing transactions toward a target allocation
- prediction: weighted aggregation of pluggable prediction models
- export: JSON/CSV rendering of the produced reports

Storage, notification and model training live outside this package.
"""

__version__ = "0.1.0"
