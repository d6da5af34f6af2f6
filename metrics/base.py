"""Base metric interface."""

from abc import ABC, abstractmethod
from typing import Any


class WindowMetric(ABC):
    """Abstract base class for metrics evaluated over a date window."""

    @abstractmethod
    def calculate(self, asof: Any, base: Any) -> float:
        """Calculate the metric for the window ending at `asof`.

        Args:
            asof: Upper bound of the window (inclusive)
            base: Lower bound of the window

        Returns:
            Calculated metric value
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return metric name for display."""
        pass
