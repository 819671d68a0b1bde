#!/usr/bin/env python
"""CLI runner for portfolio analysis over a price CSV.

The CSV has a date column followed by one close-price column per symbol:

    date,AAPL,MSFT
    2024-01-02,185.64,370.87
    ...

Example:
    python scripts/analyze_portfolio.py prices.csv AAPL=10 MSFT=5 --target AAPL=0.5 --target MSFT=0.5
"""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import pandas as pd

# Add project root to path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_analytics.config import DEFAULT_MODEL_WEIGHTS, AnalyticsSettings
from portfolio_analytics.export import export_prediction_to_json, export_risk_metrics_to_json
from portfolio_analytics.indicators import TechnicalIndicatorCalculator
from portfolio_analytics.prediction import PredictionAggregator
from portfolio_analytics.prediction.models import StatisticalModel, TrendFollowingModel
from portfolio_analytics.rebalancing import RebalancingEngine
from portfolio_analytics.risk import RiskMetricsCalculator, correlation_matrix
from portfolio_analytics.statistics import simple_returns
from portfolio_analytics.types import EconomicContext, Portfolio, Position

logger = logging.getLogger("analyze_portfolio")


def parse_assignment(raw: str) -> tuple[str, Decimal]:
    """Parse SYMBOL=NUMBER into (symbol, Decimal)."""
    symbol, sep, value = raw.partition("=")
    if not sep or not symbol:
        raise argparse.ArgumentTypeError(f"expected SYMBOL=NUMBER, got {raw!r}")
    try:
        return symbol.strip().upper(), Decimal(value.strip())
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"invalid number in {raw!r}") from exc


def load_prices(path: Path) -> dict[str, tuple[Decimal, ...]]:
    """Load a price CSV into chronological Decimal series per symbol."""
    frame = pd.read_csv(path)
    date_column = frame.columns[0]
    frame = frame.sort_values(date_column).dropna()
    return {
        str(column).upper(): tuple(Decimal(str(v)) for v in frame[column].tolist())
        for column in frame.columns[1:]
    }


def build_portfolio(prices: dict[str, tuple[Decimal, ...]], holdings: list[tuple[str, Decimal]]) -> Portfolio:
    portfolio = Portfolio(id="cli")
    for symbol, quantity in holdings:
        if symbol not in prices:
            raise SystemExit(f"ERROR: no price column for {symbol}")
        history = prices[symbol]
        portfolio.add_position(
            Position(symbol=symbol, quantity=quantity, current_price=history[-1], price_history=history)
        )
    return portfolio


def portfolio_values(portfolio: Portfolio) -> list[Decimal]:
    """Daily portfolio value over the common tail of every position's history."""
    length = min(len(p.price_history) for p in portfolio.position_list())
    return [
        sum((p.quantity * p.price_history[-length:][i] for p in portfolio.position_list()), Decimal("0"))
        for i in range(length)
    ]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Analyze a portfolio from historical prices")
    parser.add_argument("prices", type=Path, help="CSV with a date column and one column per symbol")
    parser.add_argument("holdings", nargs="+", type=parse_assignment, help="Holdings as SYMBOL=QTY")
    parser.add_argument(
        "--target",
        action="append",
        default=[],
        type=parse_assignment,
        help="Target weight as SYMBOL=WEIGHT (repeatable)",
    )
    parser.add_argument("--horizon", type=int, default=30, help="Prediction horizon in days (default: 30)")
    parser.add_argument("--output", type=Path, help="Write risk metrics and prediction JSON to this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = AnalyticsSettings.from_env()
    prices = load_prices(args.prices)
    portfolio = build_portfolio(prices, args.holdings)
    values = portfolio_values(portfolio)

    # Risk
    risk = RiskMetricsCalculator(settings.risk)
    report = risk.risk_report(portfolio.id, simple_returns(values), values)
    print(f"\n{'=' * 50}")
    print("RISK METRICS")
    print(f"{'=' * 50}")
    print(f"Portfolio Value: {portfolio.total_value:,.2f}")
    print(f"Volatility: {report.volatility:.4f}")
    print(f"Max Drawdown: {report.max_drawdown * 100:.2f}%")
    print(f"Sharpe Ratio: {report.sharpe_ratio:.4f}")

    if len(portfolio.positions) >= 2:
        length = min(len(p.price_history) for p in portfolio.position_list())
        matrix = correlation_matrix(
            {p.symbol: simple_returns(p.price_history[-length:]) for p in portfolio.position_list()}
        )
        print("\nReturn correlation:")
        for symbol, row in zip(matrix.symbols, matrix.matrix):
            print(f"  {symbol:<8}" + "".join(f"{v:>9.3f}" for v in row))

    # Technical snapshots
    indicators = TechnicalIndicatorCalculator(settings.indicators)
    print(f"\n{'Symbol':<8}{'SMA':>12}{'RSI':>8}{'MACD':>10}{'Trend':>10}{'Cycle':>12}")
    for position in portfolio.position_list():
        snap = indicators.snapshot(position.symbol, position.price_history)
        print(
            f"{snap.symbol:<8}{snap.sma:>12.2f}{snap.rsi:>8.2f}{snap.macd:>10.4f}"
            f"{snap.trend.value:>10}{snap.cycle.value:>12}"
        )

    # Prediction
    aggregator = PredictionAggregator([StatisticalModel(), TrendFollowingModel()], DEFAULT_MODEL_WEIGHTS)
    market = aggregator.predict_market(values, EconomicContext(), args.horizon)
    recommendations = aggregator.recommendations(portfolio, market)
    print(f"\nPrediction ({args.horizon}d): {market.direction.value} "
          f"return={market.expected_return:.4f} confidence={market.confidence:.2f}")
    for rec in recommendations:
        print(f"  {rec.action.value:<10} confidence={rec.confidence:.3f}")

    # Rebalancing
    if args.target:
        engine = RebalancingEngine(settings.rebalancing)
        plan = engine.rebalance(portfolio.position_list(), dict(args.target))
        print(f"\nRebalancing ({len(plan.transactions)} transactions, est. cost {plan.estimated_cost:.2f}):")
        for tx in plan.transactions:
            print(f"  {tx.action.value:<5}{tx.symbol:<8}{tx.quantity:>14.4f} @ {tx.price:.2f} = {tx.amount:,.2f}")

    if args.output:
        args.output.mkdir(parents=True, exist_ok=True)
        (args.output / "risk_metrics.json").write_text(export_risk_metrics_to_json([report]))
        (args.output / "prediction.json").write_text(export_prediction_to_json(market, recommendations))
        print(f"\nResults exported to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
