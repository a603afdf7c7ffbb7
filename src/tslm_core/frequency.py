"""Frequency inference and timestamp utilities for regular time series.

A series is regular when its timestamps are strictly increasing and evenly
spaced by a calendar unit (minute, hour, day, week, month, quarter or year).
The inferred ``Frequency`` is stored on the trained model and reused to build
the future timestamps of a forecast.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

import numpy as np
import pandas as pd
from pandas.tseries import offsets

from tslm_core.config import CYCLE_LENGTHS
from tslm_core.exceptions import DataMismatchError

logger = logging.getLogger(__name__)

# Checked in order: the first matching offset class decides the unit
_UNIT_OFFSETS = (
    ("minute", (offsets.Minute,)),
    ("hour", (offsets.Hour,)),
    ("day", (offsets.Day,)),
    ("week", (offsets.Week,)),
    ("month", (offsets.MonthBegin, offsets.MonthEnd)),
    ("quarter", (offsets.QuarterBegin, offsets.QuarterEnd)),
    ("year", (offsets.YearBegin, offsets.YearEnd)),
)


@dataclass(frozen=True)
class Frequency:
    """Frequency descriptor of a regular series.

    Attributes:
        unit: Calendar unit of the spacing ("minute", "hour", "day", "week",
            "month", "quarter" or "year").
        step: Number of units between consecutive observations.
        cycle: Number of observations per seasonal cycle.
        kind: "datetime" for datetime64 timestamps, "period" for Period timestamps.
        offset: pandas offset matching the spacing.
    """

    unit: str
    step: int
    cycle: int
    kind: str
    offset: offsets.BaseOffset

    @property
    def freqstr(self) -> str:
        """pandas frequency string of the spacing."""
        return self.offset.freqstr


def _unit_from_offset(offset: offsets.BaseOffset) -> str:
    for unit, classes in _UNIT_OFFSETS:
        if isinstance(offset, classes):
            return unit
    raise DataMismatchError(
        f"Unsupported series frequency '{offset.freqstr}'. "
        f"Supported units: {[unit for unit, _ in _UNIT_OFFSETS]}"
    )


def _cycle_length(unit: str, step: int) -> int:
    cycle = CYCLE_LENGTHS[unit]
    if unit in ("hour", "minute"):
        cycle = max(cycle // step, 1)
    return cycle


def infer_frequency(timestamps: pd.Series) -> Frequency:
    """Infer the frequency of a timestamp column.

    Args:
        timestamps: Sorted timestamp column, either datetime64 or Period dtype.

    Returns:
        Frequency descriptor.

    Raises:
        DataMismatchError: If the timestamps are not strictly increasing, have
            gaps, are irregular or use an unsupported unit.
    """
    if isinstance(timestamps.dtype, pd.PeriodDtype):
        index = pd.PeriodIndex(timestamps)
        if not (index.is_monotonic_increasing and index.is_unique):
            raise DataMismatchError("Series timestamps must be strictly increasing")
        offset = index.freq
        expected = pd.period_range(start=index[0], periods=len(index), freq=offset)
        if not index.equals(expected):
            raise DataMismatchError(
                f"Series timestamps have gaps; expected a contiguous '{offset.freqstr}' sequence"
            )
        kind = "period"
    elif pd.api.types.is_datetime64_any_dtype(timestamps.dtype):
        index = pd.DatetimeIndex(timestamps)
        if not (index.is_monotonic_increasing and index.is_unique):
            raise DataMismatchError("Series timestamps must be strictly increasing")
        if len(index) < 3:
            raise DataMismatchError(
                f"At least 3 observations are required to infer the frequency, got {len(index)}"
            )
        alias = pd.infer_freq(index)
        if alias is None:
            raise DataMismatchError(
                "Could not infer a regular frequency from the series timestamps "
                "(irregular spacing or gaps)"
            )
        offset = pd.tseries.frequencies.to_offset(alias)
        kind = "datetime"
    else:
        raise DataMismatchError(
            f"Timestamp column must be datetime64 or Period dtype, got {timestamps.dtype}"
        )

    unit = _unit_from_offset(offset)
    step = int(offset.n)
    frequency = Frequency(
        unit=unit,
        step=step,
        cycle=_cycle_length(unit, step),
        kind=kind,
        offset=offset,
    )
    logger.debug(f"Inferred frequency: unit={unit}, step={step}, cycle={frequency.cycle}")
    return frequency


def future_timestamps(last: Any, h: int, frequency: Frequency) -> pd.Index:
    """Build ``h`` timestamps contiguous with ``last`` at the series frequency."""
    if frequency.kind == "period":
        return pd.period_range(start=last, periods=h + 1, freq=frequency.offset)[1:]
    return pd.date_range(start=last, periods=h + 1, freq=frequency.offset)[1:]


def matches_timestamp_kind(value: Any, frequency: Frequency) -> bool:
    """Return True if ``value`` has the same temporal type as the series timestamps.

    Period series accept Periods of the same frequency; datetime series accept
    dates, datetimes, pandas Timestamps and numpy datetime64 values.
    """
    if frequency.kind == "period":
        return isinstance(value, pd.Period) and value.freq == frequency.offset
    if isinstance(value, pd.Period):
        return False
    return isinstance(value, (date, np.datetime64))


def check_timestamp_values(values: Iterable[Any], frequency: Frequency, argument: str) -> list:
    """Validate and normalise event/knot timestamps against the series type.

    Returns:
        List of values comparable with the series timestamp column.

    Raises:
        DataMismatchError: If any value does not match the series timestamp type.
    """
    values = list(values)
    mismatched = [v for v in values if not matches_timestamp_kind(v, frequency)]
    if mismatched:
        raise DataMismatchError(
            f"The date/time objects of the '{argument}' argument do not align with the "
            f"series timestamps ({frequency.kind}, '{frequency.freqstr}'): {mismatched[:3]}"
        )
    if frequency.kind == "period":
        return values
    return [pd.Timestamp(v) for v in values]


def as_calendar_timestamps(timestamps: pd.Series) -> pd.Series:
    """Return datetime64 values for calendar field extraction (periods map to their start)."""
    if isinstance(timestamps.dtype, pd.PeriodDtype):
        return timestamps.dt.start_time
    return timestamps
