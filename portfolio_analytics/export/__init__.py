"""Export module."""

from portfolio_analytics.export.csv import export_transactions_to_csv
from portfolio_analytics.export.json import (
    export_prediction_to_json,
    export_risk_metrics_to_json,
    export_transactions_to_json,
)

__all__ = [
    "export_transactions_to_csv",
    "export_prediction_to_json",
    "export_risk_metrics_to_json",
    "export_transactions_to_json",
]
