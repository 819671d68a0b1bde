"""Tests for the rebalancing engine."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from portfolio_analytics.config import RebalancingConfig
from portfolio_analytics.rebalancing import RebalancingEngine
from portfolio_analytics.types import Position, RebalancingTransaction, TransactionAction

BUY = TransactionAction.BUY
SELL = TransactionAction.SELL
HALF_HALF = {"A": Decimal("0.5"), "B": Decimal("0.5")}


def _tx(symbol: str, action: TransactionAction, quantity, price="100") -> RebalancingTransaction:
    return RebalancingTransaction(
        symbol=symbol,
        action=action,
        quantity=Decimal(str(quantity)),
        price=Decimal(price),
        timestamp=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )


@pytest.fixture
def engine() -> RebalancingEngine:
    return RebalancingEngine()


@pytest.fixture
def positions(two_position_portfolio) -> list[Position]:
    return two_position_portfolio.position_list()


# ========== Target weights ==========


class TestTargetWeights:
    def test_missing_symbols_target_zero(self, engine, positions) -> None:
        assert engine.target_weights(positions, {"A": Decimal("0.5")}) == {"A": Decimal("0.5"), "B": Decimal("0")}

    def test_ignores_unheld_symbols(self, engine, positions) -> None:
        targets = engine.target_weights(positions, {"A": Decimal("0.5"), "Z": Decimal("0.5")})
        assert set(targets) == {"A", "B"}


# ========== Transaction generation ==========


class TestGenerateTransactions:
    def test_moves_positions_to_target(self, engine, positions, as_of) -> None:
        transactions = engine.generate_transactions(positions, HALF_HALF, Decimal("10000"), as_of=as_of)

        by_symbol = {tx.symbol: tx for tx in transactions}
        assert by_symbol["A"].action == SELL
        assert by_symbol["A"].quantity == Decimal("10")
        assert by_symbol["A"].amount == Decimal("1000")
        assert by_symbol["B"].action == BUY
        assert by_symbol["B"].amount == Decimal("1000")
        assert all(tx.timestamp == as_of for tx in transactions)

    def test_no_transaction_at_target(self, engine, positions) -> None:
        targets = {"A": Decimal("0.6"), "B": Decimal("0.4")}
        assert engine.generate_transactions(positions, targets, Decimal("10000")) == []

    def test_missing_target_sells_everything(self, engine, positions) -> None:
        transactions = engine.generate_transactions(positions, {"A": Decimal("1")}, Decimal("10000"))
        by_symbol = {tx.symbol: tx for tx in transactions}
        assert by_symbol["B"].action == SELL
        assert by_symbol["B"].quantity == Decimal("40")

    def test_zero_price_position_is_skipped(self, engine) -> None:
        positions = [Position(symbol="C", quantity=Decimal("10"), current_price=Decimal("0"))]
        assert engine.generate_transactions(positions, {"C": Decimal("0.1")}, Decimal("10000")) == []

    def test_amount_is_exact_value_difference(self, engine) -> None:
        """A 100 trade at price 3 keeps amount 100 although the quantity is rounded."""
        positions = [Position(symbol="A", quantity=Decimal("100"), current_price=Decimal("3"))]

        [tx] = engine.generate_transactions(positions, {"A": Decimal("1")}, Decimal("400"))

        assert tx.action == BUY
        assert tx.amount == Decimal("100")
        assert tx.quantity * tx.price != Decimal("100")

    def test_float_prices_are_accepted(self, engine) -> None:
        positions = [Position(symbol="A", quantity=10, current_price=100.5)]
        assert engine.weight_deviations(positions, {"A": 1}) == {"A": Decimal("0")}

    def test_defaults_timestamp_to_now(self, engine, positions) -> None:
        before = datetime.now(timezone.utc)
        transactions = engine.generate_transactions(positions, HALF_HALF, Decimal("10000"))
        assert all(tx.timestamp >= before for tx in transactions)


# ========== Optimization ==========


class TestOptimize:
    def test_drops_small_net_amount(self, engine) -> None:
        """Buy 1000 and sell 950 net to 50, below the default minimum of 100."""
        assert engine.optimize([_tx("A", BUY, 10), _tx("A", SELL, "9.5")]) == []

    def test_nets_same_direction(self, engine) -> None:
        [tx] = engine.optimize([_tx("A", BUY, 10), _tx("A", BUY, 5)])
        assert tx.action == BUY
        assert tx.quantity == Decimal("15")
        assert tx.amount == Decimal("1500")

    def test_nets_to_sell(self, engine) -> None:
        [tx] = engine.optimize([_tx("A", BUY, 2), _tx("A", SELL, 5)])
        assert tx.action == SELL
        assert tx.quantity == Decimal("3")

    def test_amount_at_minimum_is_kept(self, engine) -> None:
        [tx] = engine.optimize([_tx("A", BUY, 1)])
        assert tx.amount == Decimal("100")

    def test_net_exactly_at_minimum_with_uneven_price(self, engine) -> None:
        positions = [Position(symbol="A", quantity=Decimal("100"), current_price=Decimal("3"))]
        transactions = engine.generate_transactions(positions, {"A": Decimal("1")}, Decimal("400"))

        [tx] = engine.optimize(transactions)

        assert tx.amount == Decimal("100")
        assert engine.rebalancing_cost([tx]) == Decimal("0.1")

    def test_custom_minimum(self, engine) -> None:
        [tx] = engine.optimize([_tx("A", BUY, 10), _tx("A", SELL, "9.5")], min_size=Decimal("10"))
        assert tx.amount == Decimal("50")

    def test_fully_offsetting_group_is_dropped(self, engine) -> None:
        assert engine.optimize([_tx("A", BUY, 10), _tx("A", SELL, 10)], min_size=0) == []

    def test_mixed_prices_use_first_price(self, engine) -> None:
        [tx] = engine.optimize([_tx("A", BUY, 10, "100"), _tx("A", BUY, 10, "200")])
        # net 1000 + 2000 = 3000 at price 100
        assert tx.price == Decimal("100")
        assert tx.quantity == Decimal("30")

    def test_keeps_symbols_separate(self, engine) -> None:
        optimized = engine.optimize([_tx("A", BUY, 10), _tx("B", SELL, 10)])
        assert [(tx.symbol, tx.action) for tx in optimized] == [("A", BUY), ("B", SELL)]


# ========== Cost and deviations ==========


class TestCostAndDeviation:
    def test_rebalancing_cost(self, engine) -> None:
        transactions = [_tx("A", BUY, 10), _tx("B", SELL, 10)]
        assert engine.rebalancing_cost(transactions) == Decimal("2")
        assert engine.rebalancing_cost(transactions, Decimal("0.01")) == Decimal("20")

    def test_weight_deviations(self, engine, positions) -> None:
        assert engine.weight_deviations(positions, HALF_HALF) == {"A": Decimal("0.1"), "B": Decimal("0.1")}

    def test_deviations_only_for_targeted_symbols(self, engine, positions) -> None:
        assert set(engine.weight_deviations(positions, {"A": Decimal("0.5")})) == {"A"}


# ========== Recommendations and full pass ==========


class TestRebalance:
    def test_recommendations_above_threshold(self, engine, positions) -> None:
        recommendations = {r.symbol: r for r in engine.recommendations(positions, HALF_HALF)}
        assert recommendations["A"].action == SELL
        assert recommendations["A"].current_weight == Decimal("0.6")
        assert recommendations["A"].deviation == Decimal("0.1")
        assert recommendations["B"].action == BUY

    def test_deviation_at_threshold_is_not_flagged(self, engine, positions) -> None:
        assert engine.recommendations(positions, {"A": Decimal("0.55"), "B": Decimal("0.45")}) == []

    def test_sixty_forty_to_fifty_fifty(self, engine, positions, as_of) -> None:
        """10,000 at 60/40 rebalanced to 50/50: sell 1,000 of A, buy 1,000 of B."""
        plan = engine.rebalance(positions, HALF_HALF, as_of=as_of)

        by_symbol = {tx.symbol: tx for tx in plan.transactions}
        assert by_symbol["A"].action == SELL
        assert by_symbol["A"].amount == Decimal("1000")
        assert by_symbol["B"].action == BUY
        assert by_symbol["B"].amount == Decimal("1000")
        assert plan.estimated_cost == Decimal("2")
        assert len(plan.recommendations) == 2

    def test_only_flagged_symbols_trade(self, engine) -> None:
        positions = [
            Position(symbol="A", quantity=Decimal("60"), current_price=Decimal("100")),
            Position(symbol="B", quantity=Decimal("37"), current_price=Decimal("100")),
            Position(symbol="C", quantity=Decimal("3"), current_price=Decimal("100")),
        ]
        allocation = {"A": Decimal("0.5"), "B": Decimal("0.4"), "C": Decimal("0.1")}

        plan = engine.rebalance(positions, allocation)

        amounts = {tx.symbol: (tx.action, tx.amount) for tx in plan.transactions}
        assert amounts == {"A": (SELL, Decimal("1000")), "C": (BUY, Decimal("700"))}

    def test_nothing_flagged_gives_empty_plan(self, positions) -> None:
        engine = RebalancingEngine(RebalancingConfig(deviation_threshold=Decimal("0.2")))
        plan = engine.rebalance(positions, HALF_HALF)
        assert plan.transactions == []
        assert plan.estimated_cost == Decimal("0")

    def test_config_rejects_negative_values(self) -> None:
        with pytest.raises(ValueError, match="fee_rate"):
            RebalancingConfig(fee_rate=Decimal("-0.1"))
