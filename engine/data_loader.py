"""
Candle loading and band calculation.

Loads a CSV or parquet candle file, applies optional date filters,
and converts rows into Candle records for the backtest loop.

Expected columns:
  - close (required)
  - open, high, low (optional, default to close)
  - timestamp / datetime / date (optional, used for sorting + filtering)
"""

import logging
import os
from typing import List, Optional

import pandas as pd

from engine.trade import Candle
from indicators.bollinger import RollingBandIndicator

logger = logging.getLogger(__name__)

# First matching column is used as the candle timestamp
TIME_COLUMNS = ['timestamp', 'datetime', 'date', 'time']

PRICE_COLUMNS = ['open', 'high', 'low', 'close']


def _time_column(df: pd.DataFrame) -> Optional[str]:
    for col in TIME_COLUMNS:
        if col in df.columns:
            return col
    return None


def read_frame(path: str) -> pd.DataFrame:
    """Read a CSV or parquet file into a DataFrame (by extension)."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Candle file not found: {path}")

    ext = os.path.splitext(path)[1].lower()
    if ext == '.parquet':
        return pd.read_parquet(path)
    if ext in ('.csv', '.txt'):
        return pd.read_csv(path)
    raise ValueError(f"Unsupported candle file type '{ext}' (use .csv or .parquet)")


def prepare_frame(df: pd.DataFrame, start_date: Optional[str] = None,
                  end_date: Optional[str] = None) -> pd.DataFrame:
    """
    Normalize a raw candle DataFrame.

    Steps:
      - lower-case column names
      - require a close column, fill missing open/high/low from close
      - drop rows without a close price
      - parse + sort by the time column (if any), filter date range

    Returns:
        Cleaned DataFrame with a fresh index
    """
    df = df.rename(columns=lambda c: str(c).strip().lower())
    if 'close' not in df.columns:
        raise ValueError(f"Candle data needs a 'close' column, got: {list(df.columns)}")

    df = df.copy()
    df['close'] = pd.to_numeric(df['close'], errors='coerce')
    for col in ('open', 'high', 'low'):
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors='coerce').fillna(df['close'])
        else:
            df[col] = df['close']

    missing = int(df['close'].isna().sum())
    if missing:
        logger.warning(f"Dropping {missing} row(s) with no close price")
        df = df[df['close'].notna()]

    tcol = _time_column(df)
    if tcol is not None:
        df[tcol] = pd.to_datetime(df[tcol])
        # Stable sort keeps file order for equal timestamps
        df = df.sort_values(tcol, kind='mergesort')

        tz = df[tcol].dt.tz
        if start_date:
            start = pd.to_datetime(start_date)
            if tz is not None and start.tzinfo is None:
                start = start.tz_localize(tz)
            df = df[df[tcol] >= start]
        if end_date:
            # end_date is inclusive of the whole day
            end = pd.to_datetime(end_date) + pd.Timedelta(days=1)
            if tz is not None and end.tzinfo is None:
                end = end.tz_localize(tz)
            df = df[df[tcol] < end]
    elif start_date or end_date:
        logger.warning("No time column found; ignoring date range filter")

    return df.reset_index(drop=True)


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """Convert a prepared DataFrame into Candle records (row order kept)."""
    tcol = _time_column(df)
    times = df[tcol].tolist() if tcol is not None else list(range(len(df)))
    return [
        Candle(timestamp=t, open=float(o), high=float(h), low=float(lo), close=float(c))
        for t, o, h, lo, c in zip(times, df['open'], df['high'], df['low'], df['close'])
    ]


def load_candles(path: str, start_date: Optional[str] = None,
                 end_date: Optional[str] = None) -> List[Candle]:
    """
    Load a candle file and return chronologically ordered Candles.

    Args:
        path: .csv or .parquet file
        start_date: "YYYY-MM-DD" start date (inclusive), optional
        end_date: "YYYY-MM-DD" end date (inclusive), optional

    Raises:
        FileNotFoundError: path does not exist
        ValueError: unsupported file type or no close column
    """
    logger.info(f"Loading {path}...")
    df = prepare_frame(read_frame(path), start_date, end_date)
    candles = candles_from_frame(df)

    if candles:
        logger.info(f"Loaded {len(candles):,} candles | "
                    f"Range: {candles[0].timestamp} to {candles[-1].timestamp}")
    else:
        logger.warning(f"No candles loaded from {path}")
    return candles


def calculate_bands(df: pd.DataFrame, period: int, multiplier: float) -> pd.DataFrame:
    """
    Add bb_middle / bb_upper / bb_lower columns to a prepared DataFrame.

    Uses the vectorized form of the same indicator the backtest streams.
    First `period - 1` rows are NaN.
    """
    ind = RollingBandIndicator(period, multiplier)
    result = ind.calculate(df['close'])
    df = df.copy()
    for key in ('middle', 'upper', 'lower'):
        df[f"bb_{key}"] = result[key]
    logger.info(f"  {ind.name}: {int(df['bb_middle'].notna().sum()):,} non-null values")
    return df
