"""Correlation matrix across several return series.

Used for diversification analysis of a portfolio's holdings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

import pandas as pd

from portfolio_analytics.errors import LengthMismatchError
from portfolio_analytics.types import Number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrelationMatrix:
    symbols: tuple[str, ...]
    matrix: tuple[tuple[Decimal, ...], ...]
    data_points: int

    def get(self, left: str, right: str) -> Decimal:
        return self.matrix[self.symbols.index(left)][self.symbols.index(right)]


def correlation_matrix(series_by_symbol: Mapping[str, Sequence[Number]]) -> CorrelationMatrix:
    """Calculate the Pearson correlation matrix between series.

    Args:
        series_by_symbol: Symbol -> chronological series; all series must be equally long

    Returns:
        CorrelationMatrix in the mapping's symbol order. Pairs involving a constant
        series get 0, the diagonal is always 1.

    Raises:
        ValueError: If fewer than 2 symbols are supplied
        LengthMismatchError: If the series differ in length
    """
    if len(series_by_symbol) < 2:
        raise ValueError("Need at least 2 symbols for correlation analysis")

    symbols = list(series_by_symbol)
    lengths = {symbol: len(series_by_symbol[symbol]) for symbol in symbols}
    first = lengths[symbols[0]]
    for symbol in symbols[1:]:
        if lengths[symbol] != first:
            raise LengthMismatchError(first, lengths[symbol])

    combined = pd.DataFrame({symbol: [float(v) for v in series_by_symbol[symbol]] for symbol in symbols})
    corr = combined.corr(method="pearson").fillna(0.0)

    rows = []
    for i, symbol in enumerate(symbols):
        row = []
        for j, other in enumerate(symbols):
            value = 1.0 if i == j else float(corr.loc[symbol, other])
            row.append(Decimal(str(round(value, 12))))
        rows.append(tuple(row))

    logger.debug("Correlation matrix for %d symbols over %d points", len(symbols), first)
    return CorrelationMatrix(symbols=tuple(symbols), matrix=tuple(rows), data_points=first)
