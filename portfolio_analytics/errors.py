"""Exception types raised by the analytics core."""

from __future__ import annotations


class AnalyticsError(Exception):
    """Base exception for analytics errors."""


class LengthMismatchError(AnalyticsError, ValueError):
    """Two series passed to a bivariate statistic have different lengths."""

    def __init__(self, left: int, right: int):
        super().__init__(f"series must have the same length, got {left} and {right}")
        self.left = left
        self.right = right


class InvalidWeightConfigurationError(AnalyticsError, ValueError):
    """A weight table is missing entries or does not sum to 1."""
