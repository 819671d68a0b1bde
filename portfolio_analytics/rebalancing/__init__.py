"""Rebalancing module.

Transaction generation, netting and cost estimation toward a target allocation.
"""

from .engine import RebalancingEngine, RebalancingPlan

__all__ = [
    "RebalancingEngine",
    "RebalancingPlan",
]
