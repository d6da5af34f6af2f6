"""Return metrics over dated return series."""

from metrics.base import WindowMetric
from metrics.returns import CumulativeReturnCalculator, ReturnSeries

__all__ = ["WindowMetric", "CumulativeReturnCalculator", "ReturnSeries"]
