"""Tests for JSON and CSV export utilities."""

import json
from datetime import datetime, timezone
from decimal import Decimal

from portfolio_analytics.export import (
    export_prediction_to_json,
    export_risk_metrics_to_json,
    export_transactions_to_csv,
    export_transactions_to_json,
)
from portfolio_analytics.prediction import (
    AggregatedPrediction,
    Direction,
    PredictionKind,
    Recommendation,
    RecommendationAction,
)
from portfolio_analytics.risk import RiskMetrics
from portfolio_analytics.types import RebalancingTransaction, TransactionAction

TRANSACTIONS = [
    RebalancingTransaction(
        symbol="AAPL",
        action=TransactionAction.SELL,
        quantity=Decimal("10"),
        price=Decimal("100.50"),
        timestamp=datetime(2024, 1, 2, 16, 0, tzinfo=timezone.utc),
    ),
    RebalancingTransaction(
        symbol="MSFT",
        action=TransactionAction.BUY,
        quantity=Decimal("2.5"),
        price=Decimal("400"),
        timestamp=datetime(2024, 1, 2, 16, 0, tzinfo=timezone.utc),
    ),
]


def test_export_risk_metrics_to_json():
    """Test exporting risk-metric records to JSON."""
    metrics = [
        RiskMetrics(
            identifier="growth",
            volatility=Decimal("0.1587"),
            max_drawdown=Decimal("0.2"),
            correlation=Decimal("0"),
            sharpe_ratio=Decimal("1.25"),
        )
    ]

    data = json.loads(export_risk_metrics_to_json(metrics))

    assert data["metadata"]["row_count"] == 1
    assert "exported_at" in data["metadata"]
    assert data["data"][0]["identifier"] == "growth"
    # Decimals are exported as strings to keep precision
    assert data["data"][0]["volatility"] == "0.1587"
    assert data["data"][0]["sharpe_ratio"] == "1.25"


def test_export_prediction_to_json():
    """Test exporting an aggregated prediction with recommendations."""
    prediction = AggregatedPrediction(
        kind=PredictionKind.PORTFOLIO,
        direction=Direction.UP,
        expected_return=Decimal("0.012"),
        volatility=Decimal("0.08"),
        risk_level=Decimal("1.5"),
        confidence=Decimal("0.7"),
        horizon_days=30,
        asset_allocation={"AAPL": Decimal("0.6"), "MSFT": Decimal("0.4")},
    )
    recommendations = [
        Recommendation(action=RecommendationAction.BUY, confidence=Decimal("0.45"), model_name="aggregate")
    ]

    data = json.loads(export_prediction_to_json(prediction, recommendations))

    assert data["metadata"]["kind"] == "PORTFOLIO"
    assert data["metadata"]["recommendation_count"] == 1
    assert data["prediction"]["direction"] == "UP"
    assert data["prediction"]["asset_allocation"] == {"AAPL": "0.6", "MSFT": "0.4"}
    assert data["prediction"]["symbol"] is None
    assert data["recommendations"][0]["action"] == "BUY"
    assert data["recommendations"][0]["confidence"] == "0.45"


def test_export_prediction_without_recommendations():
    """Test that recommendations default to an empty list."""
    prediction = AggregatedPrediction(
        kind=PredictionKind.MARKET,
        direction=Direction.DOWN,
        expected_return=Decimal("-0.01"),
        volatility=Decimal("0.2"),
        risk_level=Decimal("3"),
        confidence=Decimal("0.5"),
        horizon_days=7,
    )

    data = json.loads(export_prediction_to_json(prediction))

    assert data["recommendations"] == []
    assert data["prediction"]["horizon_days"] == 7


def test_export_transactions_to_json():
    """Test exporting rebalancing transactions to JSON."""
    data = json.loads(export_transactions_to_json(TRANSACTIONS))

    assert data["metadata"]["row_count"] == 2
    assert data["data"][0] == {
        "symbol": "AAPL",
        "action": "SELL",
        "quantity": "10",
        "price": "100.50",
        "amount": "1005.00",
        "timestamp": "2024-01-02T16:00:00+00:00",
    }
    assert data["data"][1]["amount"] == "1000.0"


def test_export_transactions_to_csv():
    """Test exporting rebalancing transactions to CSV."""
    lines = export_transactions_to_csv(TRANSACTIONS).splitlines()

    assert lines[0].startswith("# Exported: ")
    assert lines[1] == "# Rows: 2"
    assert lines[2] == "timestamp,symbol,action,quantity,price,amount"
    assert lines[3] == "2024-01-02T16:00:00+00:00,AAPL,SELL,10,100.50,1005.00"
    assert lines[4] == "2024-01-02T16:00:00+00:00,MSFT,BUY,2.5,400,1000.0"


def test_export_empty_transactions_to_csv():
    """Test that an empty export still has metadata and headers."""
    lines = export_transactions_to_csv([]).splitlines()

    assert lines[1] == "# Rows: 0"
    assert len(lines) == 3
