"""Load and generate dated period-return series.

Parses textual (date, return) records and CSV files into the
date -> return mappings consumed by CumulativeReturnCalculator, and
generates the synthetic sample series used for timing runs.

Usage:
    python data_loader.py --output data/sample_returns.csv
    python data_loader.py --output data/small.csv --extra-days 1000 --extra-return 0.0001

CSV layout:
    date,return
    2015/1/10,0.10
    2015/2/10,0.05
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Tuple

import pandas as pd

from metrics.returns import DATE_UNIT

DATE_FORMAT = "%Y/%m/%d"

# Reference observations, deliberately out of chronological order
SAMPLE_RETURNS: List[Tuple[str, float]] = [
    ("2015/6/10", -0.12),
    ("2015/4/15", -0.10),
    ("2015/4/10", 0.15),
    ("2015/2/10", 0.05),
    ("2015/1/10", 0.10),
]


class ReturnDataError(ValueError):
    """Raised when return data cannot be parsed into a dated series."""


def parse_date(text: str, date_format: str = DATE_FORMAT) -> pd.Timestamp:
    """Parse a single date string.

    Raises:
        ReturnDataError: If the text does not match `date_format`
    """
    try:
        date = pd.to_datetime(text, format=date_format)
    except (TypeError, ValueError) as e:
        raise ReturnDataError(f"Invalid date {text!r} (expected format {date_format})") from e
    # Missing values parse to NaT or None instead of raising
    if pd.isna(date):
        raise ReturnDataError(f"Missing date (expected format {date_format})")
    return date.as_unit(DATE_UNIT)


def parse_return_records(
    records: Iterable[Tuple[str, float]],
    date_format: str = DATE_FORMAT,
) -> Dict[pd.Timestamp, float]:
    """Convert (date text, return) pairs into a date -> return mapping.

    Args:
        records: Iterable of (date string, period return) pairs
        date_format: strptime-style format of the date strings

    Returns:
        Dict keyed by Timestamp

    Raises:
        ReturnDataError: On a malformed date, a non-numeric return or a repeated date
    """
    returns: Dict[pd.Timestamp, float] = {}
    for text, value in records:
        date = parse_date(text, date_format)
        if date in returns:
            raise ReturnDataError(f"Duplicate date {text!r} in return data")
        try:
            returns[date] = float(value)
        except (TypeError, ValueError) as e:
            raise ReturnDataError(f"Invalid return {value!r} for {text!r}") from e
    return returns


def load_returns_csv(
    path: str,
    date_column: str = "date",
    return_column: str = "return",
    date_format: str = DATE_FORMAT,
) -> Dict[pd.Timestamp, float]:
    """Load a date -> return mapping from a CSV file.

    Args:
        path: CSV file path
        date_column: Column holding date strings
        return_column: Column holding period returns
        date_format: strptime-style format of the date column

    Returns:
        Dict keyed by Timestamp

    Raises:
        ValueError: If a required column is missing
        ReturnDataError: If any row cannot be parsed
    """
    df = pd.read_csv(path, dtype={date_column: str})

    required_cols = [date_column, return_column]
    if not all(col in df.columns for col in required_cols):
        raise ValueError(
            f"CSV must contain columns: {required_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    return parse_return_records(zip(df[date_column], df[return_column]), date_format)


def create_sample_returns(
    extra_days: int = 100_000,
    extra_return: float = 0.000001,
) -> Dict[pd.Timestamp, float]:
    """Create the reference sample plus a long tail of daily returns.

    The tail starts the day after the last reference date (2015/6/10) and
    adds one entry per day, so the default size ends on 2289/3/25.

    Args:
        extra_days: Number of daily entries appended after the sample
        extra_return: Return assigned to every appended entry

    Returns:
        Dict keyed by Timestamp, in no particular date order
    """
    if extra_days < 0:
        raise ValueError("extra_days must be >= 0")

    returns = parse_return_records(SAMPLE_RETURNS)
    last_sample = max(returns)

    tail = pd.date_range(
        last_sample + pd.Timedelta(days=1), periods=extra_days, freq="D", unit=DATE_UNIT
    )
    for date in tail:
        returns[date] = extra_return

    return returns


def save_returns_csv(
    returns: Mapping[pd.Timestamp, float],
    path: str,
    date_format: str = DATE_FORMAT,
) -> pd.DataFrame:
    """Write a date -> return mapping to CSV, sorted by date."""
    df = pd.DataFrame(
        {"date": list(returns.keys()), "return": list(returns.values())}
    ).sort_values("date")
    df["date"] = pd.to_datetime(df["date"]).dt.strftime(date_format)

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return df


def main():
    parser = argparse.ArgumentParser(description="Write the sample return series to CSV")
    parser.add_argument("--output", "-o", required=True, help="Output CSV file path")
    parser.add_argument(
        "--extra-days",
        type=int,
        default=100_000,
        help="Daily entries appended after the reference sample",
    )
    parser.add_argument(
        "--extra-return",
        type=float,
        default=0.000001,
        help="Return assigned to each appended entry",
    )
    args = parser.parse_args()

    returns = create_sample_returns(args.extra_days, args.extra_return)
    print(f"Generated {len(returns)} returns, last date {max(returns).date()}")

    df = save_returns_csv(returns, args.output)
    print(f"Saved {len(df)} rows to {args.output}")


if __name__ == "__main__":
    main()
