from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Sequence, Union

Number = Union[Decimal, int, float, str]
Series = Sequence[Decimal]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal, going through str() for floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


class TrendDirection(str, Enum):
    """Direction of a series over a window."""

    UP = "UP"
    DOWN = "DOWN"
    SIDEWAYS = "SIDEWAYS"
    UNKNOWN = "UNKNOWN"


class MarketCyclePhase(str, Enum):
    """Market phase from a recent window vs the full history."""

    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    RECOVERY = "RECOVERY"
    CORRECTION = "CORRECTION"
    UNKNOWN = "UNKNOWN"


class TransactionAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


@dataclass(frozen=True)
class Position:
    """A holding of one symbol at its current price.

    `price_history` is optional chronological price data used by prediction models.
    """

    symbol: str
    quantity: Decimal
    current_price: Decimal
    price_history: tuple[Decimal, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "current_price", to_decimal(self.current_price))
        object.__setattr__(self, "price_history", tuple(to_decimal(v) for v in self.price_history))

    @property
    def market_value(self) -> Decimal:
        return self.quantity * self.current_price


@dataclass
class Portfolio:
    """Positions keyed by symbol.

    The analytics core only reads portfolios; the add/update/remove operations are
    for the service layer that owns the portfolio.
    """

    id: str
    positions: dict[str, Position] = field(default_factory=dict)

    @property
    def total_value(self) -> Decimal:
        return sum((p.market_value for p in self.positions.values()), Decimal("0"))

    def position_list(self) -> list[Position]:
        return list(self.positions.values())

    def weight_of(self, symbol: str) -> Decimal:
        """Current weight of a symbol (0 if not held or the portfolio is empty)."""
        total = self.total_value
        position = self.positions.get(symbol)
        if position is None or total == 0:
            return Decimal("0")
        return position.market_value / total

    def add_position(self, position: Position) -> None:
        if position.symbol in self.positions:
            raise ValueError(f"position {position.symbol} already exists in portfolio {self.id}")
        self.positions[position.symbol] = position

    def update_position(self, position: Position) -> None:
        if position.symbol not in self.positions:
            raise KeyError(position.symbol)
        self.positions[position.symbol] = position

    def remove_position(self, symbol: str) -> Position:
        return self.positions.pop(symbol)


@dataclass(frozen=True)
class RebalancingTransaction:
    """A buy or sell of one symbol.

    `amount` defaults to quantity * price. The rebalancing engine sets it to the
    exact value difference it trades, since the quantity is rounded by division.
    """

    symbol: str
    action: TransactionAction
    quantity: Decimal
    price: Decimal
    timestamp: datetime
    amount: Optional[Decimal] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "price", to_decimal(self.price))
        amount = self.quantity * self.price if self.amount is None else to_decimal(self.amount)
        object.__setattr__(self, "amount", amount)

    @property
    def signed_amount(self) -> Decimal:
        """Buy positive, sell negative."""
        return self.amount if self.action == TransactionAction.BUY else -self.amount


@dataclass(frozen=True)
class RebalancingRecommendation:
    symbol: str
    current_weight: Decimal
    target_weight: Decimal
    deviation: Decimal
    action: TransactionAction


# ---------------------------------------------------------------------------
# Economic context
# ---------------------------------------------------------------------------


class EconomicIndicatorType(str, Enum):
    GDP = "GDP"
    INFLATION = "INFLATION"
    INTEREST_RATE = "INTEREST_RATE"
    UNEMPLOYMENT = "UNEMPLOYMENT"
    CONSUMER_CONFIDENCE = "CONSUMER_CONFIDENCE"
    RETAIL_SALES = "RETAIL_SALES"
    MANUFACTURING = "MANUFACTURING"
    HOUSING = "HOUSING"


class EconomicImpact(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class MarketSentiment(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class EconomicIndicator:
    """One observation of an economic indicator.

    `type` may be a plain string for indicator kinds outside the built-in taxonomy.
    """

    type: Union[EconomicIndicatorType, str]
    value: Decimal
    date: datetime
    source: str = ""
    impact: Union[EconomicImpact, str] = EconomicImpact.NEUTRAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", to_decimal(self.value))


@dataclass(frozen=True)
class EconomicEvent:
    """A scheduled economic event (FOMC meeting, CPI release, ...).

    `series_index` locates the event in the market series it is analysed against;
    None means the most recent point.
    """

    date: datetime
    type: str
    impact: Union[EconomicImpact, str] = EconomicImpact.NEUTRAL
    description: str = ""
    series_index: Optional[int] = None


@dataclass(frozen=True)
class EconomicContext:
    """Economic backdrop handed to prediction models."""

    indicators: tuple[EconomicIndicator, ...] = ()
    sentiment: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        object.__setattr__(self, "sentiment", to_decimal(self.sentiment))


@dataclass(frozen=True)
class EconomicFactors:
    """Security-level factors handed to prediction models.

    `volume_data` is chronological, like every other series.
    """

    indicators: tuple[EconomicIndicator, ...] = ()
    volume_data: tuple[Decimal, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "volume_data", tuple(to_decimal(v) for v in self.volume_data))
