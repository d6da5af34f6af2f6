"""Cumulative return metric over a dated return series.

Usage:
    from metrics.returns import CumulativeReturnCalculator

    calc = CumulativeReturnCalculator.from_mapping({
        "2015/2/10": 0.05,
        "2015/4/10": 0.15,
    })
    calc.compute_cumulative_return(asof="2015/5/8", base="2015/2/1")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from metrics.base import WindowMetric

logger = logging.getLogger(__name__)

DATE_UNIT = "us"


def to_datetime64(value: Any) -> np.datetime64:
    """Coerce a date-like value to a microsecond datetime64.

    Microsecond resolution covers dates well past the year 2262 limit of
    nanosecond timestamps.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Not a date value: {value!r}") from e
    if ts is pd.NaT:
        raise ValueError(f"Not a date value: {value!r}")
    return ts.as_unit(DATE_UNIT).to_datetime64()


@dataclass(frozen=True, eq=False)
class ReturnSeries:
    """Immutable, date-ordered series of period returns.

    Both arrays are sorted by date ascending and flagged read-only.
    """
    dates: np.ndarray      # datetime64[us], strictly increasing
    returns: np.ndarray    # float64, aligned with dates

    @classmethod
    def from_mapping(cls, period_returns: Mapping[Any, float]) -> "ReturnSeries":
        """Build a series from a date -> return mapping in any order.

        Args:
            period_returns: Mapping of date-like keys to fractional returns

        Returns:
            New ReturnSeries sorted by date

        Raises:
            ValueError: If a key is not a date or two keys name the same date
        """
        items = list(period_returns.items())
        dates = np.array([to_datetime64(d) for d, _ in items], dtype=f"datetime64[{DATE_UNIT}]")
        returns = np.array([r for _, r in items], dtype=np.float64)

        order = np.argsort(dates, kind="stable")
        dates = dates[order]
        returns = returns[order]

        if len(dates) > 1:
            dupes = dates[1:][dates[1:] == dates[:-1]]
            if len(dupes):
                raise ValueError(f"Duplicate date in return series: {pd.Timestamp(dupes[0])}")

        dates.flags.writeable = False
        returns.flags.writeable = False
        return cls(dates=dates, returns=returns)

    def __len__(self) -> int:
        return len(self.dates)

    def __iter__(self) -> Iterator[Tuple[pd.Timestamp, float]]:
        for d, r in zip(self.dates, self.returns):
            yield pd.Timestamp(d), float(r)

    @property
    def is_empty(self) -> bool:
        return len(self.dates) == 0

    @property
    def first_date(self) -> Optional[pd.Timestamp]:
        return None if self.is_empty else pd.Timestamp(self.dates[0])

    @property
    def last_date(self) -> Optional[pd.Timestamp]:
        return None if self.is_empty else pd.Timestamp(self.dates[-1])


class CumulativeReturnCalculator(WindowMetric):
    """Cumulative Return metric over a date window.

    Compounds (1 + r) for every entry dated on or after `base` and on or
    before `asof`, then subtracts 1. An entry dated exactly `base` is
    included. Any query that selects no entries returns 0.0.
    """

    def __init__(self, series: ReturnSeries):
        """Initialize calculator.

        Args:
            series: Date-ordered return series; use `from_mapping` for raw data
        """
        self.series = series

    @classmethod
    def from_mapping(cls, period_returns: Mapping[Any, float]) -> "CumulativeReturnCalculator":
        """Create a calculator from an unordered date -> return mapping."""
        return cls(ReturnSeries.from_mapping(period_returns))

    @property
    def name(self) -> str:
        return "Cumulative Return"

    def calculate(self, asof: Any, base: Any) -> float:
        return self.compute_cumulative_return(asof, base)

    def compute_cumulative_return(self, asof: Any, base: Any) -> float:
        """Calculate compounded return for the window [base, asof].

        Args:
            asof: Last date included in the window
            base: Entries dated before this are skipped

        Returns:
            Cumulative return as fraction (e.g., 0.5 = 50% gain)
        """
        dates = self.series.dates
        asof_dt = to_datetime64(asof)
        base_dt = to_datetime64(base)

        # Sorted dates: skipping d < base and stopping at d > asof is a slice
        start = int(np.searchsorted(dates, base_dt, side="left"))
        stop = int(np.searchsorted(dates, asof_dt, side="right"))

        if stop <= start:
            logger.debug("No returns between %s and %s", base, asof)
            return 0.0

        cumulative = 1.0
        for r in self.series.returns[start:stop]:
            cumulative *= 1.0 + float(r)

        logger.debug(
            "Compounded %d returns between %s and %s: %.6f",
            stop - start, base, asof, cumulative - 1.0,
        )
        return cumulative - 1.0
