"""JSON export utilities for risk metrics, predictions and transactions."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Sequence

from portfolio_analytics.prediction.types import AggregatedPrediction, Recommendation
from portfolio_analytics.risk.metrics import RiskMetrics
from portfolio_analytics.types import RebalancingTransaction


def _default(value: Any) -> Any:
    """Render Decimals as strings, enums by value and datetimes as ISO 8601."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _metadata(**extra: Any) -> dict[str, Any]:
    return {"exported_at": datetime.now(timezone.utc).isoformat(), **extra}


def transaction_to_dict(tx: RebalancingTransaction) -> dict[str, Any]:
    return {
        "symbol": tx.symbol,
        "action": tx.action.value,
        "quantity": str(tx.quantity),
        "price": str(tx.price),
        "amount": str(tx.amount),
        "timestamp": tx.timestamp.isoformat(),
    }


def export_risk_metrics_to_json(metrics: Sequence[RiskMetrics]) -> str:
    """Export risk-metric records to JSON format.

    Args:
        metrics: Records keyed by portfolio or series identifier

    Returns:
        JSON string with metadata and data
    """
    output = {
        "metadata": _metadata(row_count=len(metrics)),
        "data": [asdict(m) for m in metrics],
    }

    return json.dumps(output, indent=2, default=_default)


def export_prediction_to_json(
    prediction: AggregatedPrediction,
    recommendations: Sequence[Recommendation] = (),
) -> str:
    """Export an aggregated prediction and its ranked recommendations.

    Returns:
        JSON string with metadata, prediction and recommendations
    """
    output = {
        "metadata": _metadata(kind=prediction.kind.value, recommendation_count=len(recommendations)),
        "prediction": asdict(prediction),
        "recommendations": [asdict(r) for r in recommendations],
    }

    return json.dumps(output, indent=2, default=_default)


def export_transactions_to_json(transactions: Sequence[RebalancingTransaction]) -> str:
    """Export rebalancing transactions to JSON format.

    Returns:
        JSON string with metadata and data
    """
    output = {
        "metadata": _metadata(row_count=len(transactions)),
        "data": [transaction_to_dict(tx) for tx in transactions],
    }

    return json.dumps(output, indent=2)
