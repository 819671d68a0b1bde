"""Reference prediction models."""

from .statistical import StatisticalModel
from .trend_following import TrendFollowingModel

__all__ = [
    "StatisticalModel",
    "TrendFollowingModel",
]
