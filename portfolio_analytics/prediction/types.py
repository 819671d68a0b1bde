"""Types shared by prediction models and the aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

from portfolio_analytics.errors import LengthMismatchError


class Direction(str, Enum):
    UP = "UP"
    DOWN = "DOWN"


class RiskLevel(IntEnum):
    """Ordinal risk category; integer values take part in weighted arithmetic."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3


class RecommendationAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    INCREASE = "INCREASE"
    REDUCE = "REDUCE"


class PredictionKind(str, Enum):
    MARKET = "MARKET"
    SECURITY = "SECURITY"
    PORTFOLIO = "PORTFOLIO"


@dataclass(frozen=True)
class MarketPrediction:
    direction: Direction
    expected_return: Decimal
    volatility: Decimal
    risk_level: RiskLevel
    horizon_days: int = 30


@dataclass(frozen=True)
class SecurityPrediction(MarketPrediction):
    symbol: str = ""
    technical_score: Decimal = Decimal("0")


@dataclass(frozen=True)
class PortfolioPrediction(MarketPrediction):
    asset_allocation: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class PerformanceMetrics:
    model_name: str
    accuracy: Decimal = Decimal("0")
    precision: Decimal = Decimal("0")
    recall: Decimal = Decimal("0")
    f1_score: Decimal = Decimal("0")


@dataclass(frozen=True)
class Recommendation:
    action: RecommendationAction
    confidence: Decimal
    symbol: Optional[str] = None
    model_name: str = ""
    rationale: str = ""


@dataclass(frozen=True)
class TrainingData:
    """Predicted directions paired with the directions that were realized."""

    predicted: tuple[Direction, ...]
    actual: tuple[Direction, ...]

    def __post_init__(self) -> None:
        if len(self.predicted) != len(self.actual):
            raise LengthMismatchError(len(self.predicted), len(self.actual))


@dataclass(frozen=True)
class AggregatedPrediction:
    """Weighted combination of every registered model's prediction.

    `risk_level` is the weighted ordinal sum divided by the number of models, so it
    is a Decimal rather than a RiskLevel. `technical_score` is set for security
    predictions and `asset_allocation` for portfolio predictions.
    """

    kind: PredictionKind
    direction: Direction
    expected_return: Decimal
    volatility: Decimal
    risk_level: Decimal
    confidence: Decimal
    horizon_days: int
    symbol: Optional[str] = None
    technical_score: Optional[Decimal] = None
    asset_allocation: dict[str, Decimal] = field(default_factory=dict)
