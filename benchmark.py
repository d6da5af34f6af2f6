"""Timing harness for the cumulative return calculator.

Builds (or loads) a return series, constructs the calculator, runs one
query and reports the last date of the series, the computed return, the
series size and the elapsed computation time.

Usage:
    python benchmark.py
    python benchmark.py --config config.yaml
    python benchmark.py --base 2015/2/1 --asof 2015/5/8 --input data/sample_returns.csv
    python benchmark.py --repeat 20
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd
import yaml
from tqdm import tqdm

from data_loader import DATE_FORMAT, create_sample_returns, load_returns_csv, parse_date
from metrics.returns import CumulativeReturnCalculator


@dataclass
class BenchmarkConfig:
    """Benchmark configuration."""
    base: str = "2015/2/1"             # Window start
    asof: str = "2089/5/8"             # Window end (inclusive)
    extra_days: int = 100_000          # Synthetic daily entries after the sample
    extra_return: float = 0.000001     # Return of each synthetic entry
    repeat: int = 1                    # Timed runs; mean time is reported
    input_path: Optional[str] = None   # CSV to load instead of the sample
    date_format: str = DATE_FORMAT


@dataclass
class BenchmarkResult:
    """Observable output of one benchmark."""
    last_date: Optional[pd.Timestamp]
    cumulative_return: float
    compute_time_ms: float
    series_size: int


def setup_logging(level: str = "INFO") -> None:
    """Configure logging to console."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def load_config(config_path: str) -> BenchmarkConfig:
    """Load benchmark configuration from a YAML file.

    Reads the `benchmark` section; keys left out keep their defaults.
    """
    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    section = config.get("benchmark", {}) or {}
    known = {f.name for f in fields(BenchmarkConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown benchmark config keys: {unknown}")

    return BenchmarkConfig(**section)


def run_benchmark(
    config: BenchmarkConfig,
    returns: Optional[Mapping[Any, float]] = None,
) -> BenchmarkResult:
    """Time calculator construction plus one query.

    Args:
        config: Benchmark configuration
        returns: Pre-built date -> return mapping; loaded or generated from
            `config` when omitted

    Returns:
        BenchmarkResult with last date, return, mean time per run and size
    """
    if config.repeat < 1:
        raise ValueError("repeat must be >= 1")

    if returns is None:
        if config.input_path:
            logging.info(f"Loading returns from {config.input_path}...")
            returns = load_returns_csv(config.input_path, date_format=config.date_format)
        else:
            logging.info(f"Generating sample returns with {config.extra_days:,} extra days...")
            returns = create_sample_returns(config.extra_days, config.extra_return)

    base = parse_date(config.base, config.date_format)
    asof = parse_date(config.asof, config.date_format)

    timings: List[float] = []
    results: List[float] = []
    calc = None
    for _ in tqdm(range(config.repeat), desc="Benchmark", disable=config.repeat == 1):
        start = time.perf_counter()
        calc = CumulativeReturnCalculator.from_mapping(returns)
        cum_return = calc.compute_cumulative_return(asof, base)
        timings.append((time.perf_counter() - start) * 1000.0)
        results.append(cum_return)

    if any(r != results[0] for r in results):
        raise RuntimeError(f"Inconsistent results across runs: {sorted(set(results))}")

    return BenchmarkResult(
        last_date=calc.series.last_date,
        cumulative_return=results[0],
        compute_time_ms=float(np.mean(timings)),
        series_size=len(calc.series),
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Time the cumulative return calculation")
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config YAML file",
    )
    parser.add_argument("--base", "-b", type=str, help="Base date, e.g. 2015/2/1")
    parser.add_argument("--asof", "-a", type=str, help="As-of date, e.g. 2089/5/8")
    parser.add_argument("--input", "-i", type=str, help="CSV of date,return rows to load")
    parser.add_argument("--extra-days", type=int, help="Synthetic daily entries after the sample")
    parser.add_argument("--extra-return", type=float, help="Return of each synthetic entry")
    parser.add_argument("--repeat", "-r", type=int, help="Number of timed runs")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> BenchmarkResult:
    args = parse_args(argv)
    setup_logging(args.log_level)

    if args.config:
        logging.info(f"Loading config from {args.config}...")
        config = load_config(args.config)
    else:
        config = BenchmarkConfig()

    overrides: Dict[str, Any] = {
        "base": args.base,
        "asof": args.asof,
        "input_path": args.input,
        "extra_days": args.extra_days,
        "extra_return": args.extra_return,
        "repeat": args.repeat,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})

    result = run_benchmark(config)

    last_date = result.last_date.date() if result.last_date is not None else None
    logging.info(f"Last Date of Series: {last_date}")
    logging.info(
        f"CumReturn: {result.cumulative_return}   "
        f"ComputeTime(ms): {result.compute_time_ms:.3f}   "
        f"SeriesSize: {result.series_size:,}"
    )
    return result


if __name__ == "__main__":
    main()
