"""CSV export utilities for rebalancing transactions."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from typing import Sequence

from portfolio_analytics.types import RebalancingTransaction


def export_transactions_to_csv(transactions: Sequence[RebalancingTransaction]) -> str:
    """Export rebalancing transactions to CSV format.

    Args:
        transactions: Transactions to export

    Returns:
        CSV string with metadata comments and headers
    """
    output = io.StringIO()
    writer = csv.writer(output)

    # Write metadata
    output.write(f"# Exported: {datetime.now(timezone.utc).isoformat()}\n")
    output.write(f"# Rows: {len(transactions)}\n")

    writer.writerow(["timestamp", "symbol", "action", "quantity", "price", "amount"])

    for tx in transactions:
        writer.writerow(
            [
                tx.timestamp.isoformat(),
                tx.symbol,
                tx.action.value,
                str(tx.quantity),
                str(tx.price),
                str(tx.amount),
            ]
        )

    return output.getvalue()
