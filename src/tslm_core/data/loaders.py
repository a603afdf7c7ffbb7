"""Data loading utilities for the forecasting pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from tslm_core.exceptions import DataMismatchError

logger = logging.getLogger(__name__)


def load_series(
    csv_path: str | Path,
    index: str,
    period: Optional[str] = None,
) -> pd.DataFrame:
    """Load a time series from a CSV file.

    Args:
        csv_path: Path to the CSV file.
        index: Name of the timestamp column.
        period: Optional pandas period frequency ("M", "Q", "W", ...). When given,
            timestamps are parsed as Periods (year-month, year-quarter, ...);
            otherwise as datetimes.

    Returns:
        DataFrame sorted by the timestamp column

    Raises:
        FileNotFoundError: If the CSV file does not exist
        DataMismatchError: If the timestamp column is missing
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Series data not found at {csv_path}")

    df = pd.read_csv(csv_path)
    if index not in df.columns:
        raise DataMismatchError(
            f"Timestamp column '{index}' not found in {csv_path}. Columns: {list(df.columns)}"
        )

    timestamps = pd.to_datetime(df[index])
    if period is not None:
        df[index] = timestamps.dt.to_period(period)
    else:
        df[index] = timestamps

    df = df.sort_values(index).reset_index(drop=True)
    logger.info(f"Loaded {len(df)} rows from {csv_path}")
    return df
