"""Rebalancing engine.

Converts current positions plus a target allocation into buy/sell transactions,
nets them per symbol and estimates their fee cost.

Usage:
    from portfolio_analytics.rebalancing import RebalancingEngine

    engine = RebalancingEngine()
    plan = engine.rebalance(portfolio.position_list(), {"AAPL": Decimal("0.5"), "MSFT": Decimal("0.5")})
    for tx in plan.transactions:
        print(tx.symbol, tx.action.value, tx.amount)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from portfolio_analytics.config import RebalancingConfig
from portfolio_analytics.statistics import ZERO, to_decimal
from portfolio_analytics.types import (
    Number,
    Position,
    RebalancingRecommendation,
    RebalancingTransaction,
    TransactionAction,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebalancingPlan:
    """Optimized transactions for the flagged symbols plus their estimated fees."""

    transactions: list[RebalancingTransaction] = field(default_factory=list)
    recommendations: list[RebalancingRecommendation] = field(default_factory=list)
    estimated_cost: Decimal = ZERO


def _total_value(positions: Sequence[Position]) -> Decimal:
    return sum((p.market_value for p in positions), ZERO)


class RebalancingEngine:
    """Cost-aware rebalancing toward a target allocation."""

    def __init__(self, config: RebalancingConfig | None = None) -> None:
        self.config = config or RebalancingConfig()

    def target_weights(
        self,
        positions: Sequence[Position],
        allocation: Mapping[str, Number],
    ) -> dict[str, Decimal]:
        """Target weight per held symbol; symbols missing from the allocation get 0."""
        return {p.symbol: to_decimal(allocation.get(p.symbol, ZERO)) for p in positions}

    def generate_transactions(
        self,
        positions: Sequence[Position],
        target_weights: Mapping[str, Number],
        portfolio_value: Number,
        as_of: Optional[datetime] = None,
    ) -> list[RebalancingTransaction]:
        """Transactions moving every position to its target value.

        target_value = portfolio_value * target_weight, diff = target_value - market_value.
        A non-zero diff becomes a Buy (diff > 0) or Sell of |diff| / price units
        with amount |diff|.

        Args:
            positions: Current holdings
            target_weights: Symbol -> target weight; missing symbols target 0
            portfolio_value: Value the weights apply to
            as_of: Timestamp stamped on every transaction (default: now, UTC)
        """
        timestamp = as_of or datetime.now(timezone.utc)
        total = to_decimal(portfolio_value)
        transactions = []

        for position in positions:
            target_value = total * to_decimal(target_weights.get(position.symbol, ZERO))
            diff = target_value - position.market_value
            if diff == 0:
                continue
            if position.current_price <= 0:
                logger.warning("Skipping %s: cannot size a trade at price %s", position.symbol, position.current_price)
                continue

            transactions.append(
                RebalancingTransaction(
                    symbol=position.symbol,
                    action=TransactionAction.BUY if diff > 0 else TransactionAction.SELL,
                    quantity=abs(diff) / position.current_price,
                    price=position.current_price,
                    timestamp=timestamp,
                    amount=abs(diff),
                )
            )

        logger.debug("Generated %d transactions for %d positions", len(transactions), len(positions))
        return transactions

    def optimize(
        self,
        transactions: Sequence[RebalancingTransaction],
        fee_rate: Optional[Number] = None,
        min_size: Optional[Number] = None,
    ) -> list[RebalancingTransaction]:
        """Net transactions per symbol and drop the small ones.

        Signed amounts (Buy positive, Sell negative) are summed per symbol. Groups
        whose absolute net is below `min_size` are dropped; each remaining group
        becomes one transaction of amount |net| priced at its first transaction's price.
        """
        rate = self.config.fee_rate if fee_rate is None else to_decimal(fee_rate)
        minimum = self.config.min_transaction_size if min_size is None else to_decimal(min_size)

        groups: dict[str, list[RebalancingTransaction]] = {}
        for tx in transactions:
            groups.setdefault(tx.symbol, []).append(tx)

        optimized = []
        for symbol, group in groups.items():
            net = sum((tx.signed_amount for tx in group), ZERO)
            if net == 0 or abs(net) < minimum:
                logger.debug("Dropping %s: net amount %s below minimum %s", symbol, net, minimum)
                continue

            first = group[0]
            if any(tx.price != first.price for tx in group[1:]):
                logger.warning("Mixed prices for %s; netting at first price %s", symbol, first.price)

            optimized.append(
                RebalancingTransaction(
                    symbol=symbol,
                    action=TransactionAction.BUY if net > 0 else TransactionAction.SELL,
                    quantity=abs(net) / first.price,
                    price=first.price,
                    timestamp=first.timestamp,
                    amount=abs(net),
                )
            )

        logger.debug(
            "Optimized %d transactions into %d, estimated cost %s",
            len(transactions),
            len(optimized),
            self.rebalancing_cost(optimized, rate),
        )
        return optimized

    def rebalancing_cost(
        self,
        transactions: Sequence[RebalancingTransaction],
        fee_rate: Optional[Number] = None,
    ) -> Decimal:
        """Total fees: sum(amount * fee_rate)."""
        rate = self.config.fee_rate if fee_rate is None else to_decimal(fee_rate)
        return sum((tx.amount * rate for tx in transactions), ZERO)

    def weight_deviations(
        self,
        positions: Sequence[Position],
        target_weights: Mapping[str, Number],
    ) -> dict[str, Decimal]:
        """|current_weight - target_weight| for each position present in `target_weights`."""
        total = _total_value(positions)
        deviations = {}
        for position in positions:
            if position.symbol not in target_weights:
                continue
            current = position.market_value / total if total else ZERO
            deviations[position.symbol] = abs(current - to_decimal(target_weights[position.symbol]))
        return deviations

    def recommendations(
        self,
        positions: Sequence[Position],
        allocation: Mapping[str, Number],
    ) -> list[RebalancingRecommendation]:
        """Held symbols in the allocation whose deviation exceeds the threshold."""
        total = _total_value(positions)
        threshold = self.config.deviation_threshold
        result = []

        for symbol, deviation in self.weight_deviations(positions, allocation).items():
            if deviation <= threshold:
                continue
            position = next(p for p in positions if p.symbol == symbol)
            current = position.market_value / total if total else ZERO
            target = to_decimal(allocation[symbol])
            result.append(
                RebalancingRecommendation(
                    symbol=symbol,
                    current_weight=current,
                    target_weight=target,
                    deviation=deviation,
                    action=TransactionAction.BUY if target > current else TransactionAction.SELL,
                )
            )

        if result:
            logger.info(
                "Rebalancing flagged %s (threshold %s)",
                ", ".join(r.symbol for r in result),
                threshold,
            )
        return result

    def rebalance(
        self,
        positions: Sequence[Position],
        allocation: Mapping[str, Number],
        as_of: Optional[datetime] = None,
    ) -> RebalancingPlan:
        """Full rebalancing pass: flag, generate, optimize, cost.

        Only symbols flagged by `recommendations` get transactions, so nothing is
        traded unless its deviation exceeds the threshold.
        """
        flagged = self.recommendations(positions, allocation)
        if not flagged:
            return RebalancingPlan()

        flagged_symbols = {r.symbol for r in flagged}
        targets = self.target_weights(positions, allocation)
        transactions = self.generate_transactions(
            [p for p in positions if p.symbol in flagged_symbols],
            targets,
            _total_value(positions),
            as_of=as_of,
        )
        optimized = self.optimize(transactions)
        return RebalancingPlan(
            transactions=optimized,
            recommendations=flagged,
            estimated_cost=self.rebalancing_cost(optimized),
        )
