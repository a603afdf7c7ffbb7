"""Input preparation for model training.

Normalises the accepted input shapes (a Series with a time index, a frame with
a time index, or a frame with a timestamp column) into one table with a
timestamp column, the target and the exogenous columns, sorted by time.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from tslm_core.exceptions import DataMismatchError, TslmWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedSeries:
    """Cleaned training input.

    Attributes:
        table: Timestamp column, target and exogenous columns, sorted by time.
        y: Target column name.
        x: Exogenous column names.
        index: Timestamp column name.
    """

    table: pd.DataFrame
    y: str
    x: tuple[str, ...]
    index: str


def _is_time_index(index: pd.Index) -> bool:
    return isinstance(index, (pd.DatetimeIndex, pd.PeriodIndex))


def _is_time_column(series: pd.Series) -> bool:
    return isinstance(series.dtype, pd.PeriodDtype) or pd.api.types.is_datetime64_any_dtype(
        series.dtype
    )


def _normalize_x(x: Optional[str | Iterable[str]]) -> tuple[str, ...]:
    if x is None:
        return ()
    if isinstance(x, str):
        return (x,)
    return tuple(x)


def prepare_series(
    data: pd.DataFrame | pd.Series,
    y: Optional[str] = None,
    x: Optional[str | Iterable[str]] = None,
    index: Optional[str] = None,
) -> PreparedSeries:
    """Normalise training input.

    Args:
        data: Series with a DatetimeIndex/PeriodIndex, or DataFrame with either
            a time index or a timestamp column.
        y: Target column (required for DataFrames; Series use their name or "y").
        x: Exogenous column name(s); ignored with a warning for Series input.
        index: Timestamp column name. If None, the frame's time index or its
            only datetime/period column is used.

    Returns:
        PreparedSeries

    Raises:
        DataMismatchError: If the target, exogenous or timestamp columns are
            missing, timestamps are duplicated, or the target has missing or
            non-numeric values.
    """
    exogenous = _normalize_x(x)

    if isinstance(data, pd.Series):
        if not _is_time_index(data.index):
            raise DataMismatchError("Series input must have a DatetimeIndex or PeriodIndex")
        if exogenous:
            message = "The 'x' argument cannot be used when the input is a Series; ignoring it"
            logger.warning(message)
            warnings.warn(message, TslmWarning, stacklevel=3)
            exogenous = ()
        y = data.name if isinstance(data.name, str) else "y"
        index = data.index.name or "index"
        df = data.rename(y).to_frame()
        df.index = df.index.rename(index)
        df = df.reset_index()
    elif isinstance(data, pd.DataFrame):
        df = data.copy()
        if index is None:
            if _is_time_index(df.index):
                index = df.index.name or "index"
                df.index = df.index.rename(index)
                df = df.reset_index()
            else:
                candidates = [c for c in df.columns if _is_time_column(df[c])]
                if len(candidates) != 1:
                    raise DataMismatchError(
                        "Could not identify the timestamp column; pass the 'index' argument "
                        f"(datetime/period columns found: {candidates})"
                    )
                index = candidates[0]
        elif index not in df.columns:
            if df.index.name == index and _is_time_index(df.index):
                df = df.reset_index()
            else:
                raise DataMismatchError(f"Timestamp column '{index}' not found in the input")
        if y is None or y not in df.columns:
            raise DataMismatchError("The 'y' argument is missing or does not exist in the input")
    else:
        raise DataMismatchError(
            f"Input must be a pandas DataFrame or Series, got {type(data).__name__}"
        )

    missing_x = [c for c in exogenous if c not in df.columns]
    if missing_x:
        raise DataMismatchError(
            f"Some or all of the variables in the 'x' argument do not exist in the input: {missing_x}"
        )

    if not _is_time_column(df[index]):
        try:
            df[index] = pd.to_datetime(df[index])
        except (TypeError, ValueError) as e:
            raise DataMismatchError(f"Timestamp column '{index}' could not be parsed: {e}") from e

    df = df[[index, y, *exogenous]].sort_values(index).reset_index(drop=True)
    if df[index].duplicated().any():
        raise DataMismatchError(f"Timestamp column '{index}' has duplicated values")

    try:
        df[y] = pd.to_numeric(df[y]).astype(float)
    except (TypeError, ValueError) as e:
        raise DataMismatchError(f"Target column '{y}' must be numeric: {e}") from e
    if df[y].isna().any():
        raise DataMismatchError(
            f"Target column '{y}' has {int(df[y].isna().sum())} missing value(s)"
        )

    return PreparedSeries(table=df, y=y, x=exogenous, index=index)
