"""Calendar feature extraction.

Derives categorical seasonal fields from a timestamp column. Which fields can
be requested depends on the frequency unit of the series (see
``tslm_core.config.ALLOWED_FIELDS``); the fields are always evaluated in the
fixed order of ``tslm_core.config.CALENDAR_FIELDS`` so that training and
forecast tables get identical column sets.
"""

from __future__ import annotations

import logging
import warnings
from typing import Callable, Iterable

import numpy as np
import pandas as pd

from tslm_core.config import ALLOWED_FIELDS, CALENDAR_FIELDS
from tslm_core.exceptions import InvalidSpecError, SeasonalFieldWarning
from tslm_core.frequency import Frequency, as_calendar_timestamps

logger = logging.getLogger(__name__)

# Locale independent labels, in calendar order
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
WDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def normalize_seasonal(seasonal: str | Iterable[str] | None) -> tuple[str, ...]:
    """Turn a seasonal declaration into a tuple of field names (no validation)."""
    if seasonal is None:
        return ()
    if isinstance(seasonal, str):
        return (seasonal,)
    return tuple(seasonal)


def resolve_seasonal(seasonal: str | Iterable[str] | None, unit: str) -> tuple[str, ...]:
    """Resolve the requested seasonal fields for a frequency unit.

    Args:
        seasonal: Field name or collection of field names.
        unit: Frequency unit of the series.

    Returns:
        Tuple of allowed fields in evaluation order.

    Raises:
        InvalidSpecError: If a field is unknown, or none of the requested
            fields is allowed for the unit.
    """
    requested = normalize_seasonal(seasonal)
    if not requested:
        return ()

    unknown = [f for f in requested if f not in CALENDAR_FIELDS]
    if unknown:
        raise InvalidSpecError(
            f"Unknown seasonal component(s) {unknown}. Valid fields: {list(CALENDAR_FIELDS)}"
        )

    allowed = ALLOWED_FIELDS[unit]
    valid = [f for f in CALENDAR_FIELDS if f in requested and f in allowed]
    dropped = [f for f in requested if f not in allowed]

    if not valid:
        raise InvalidSpecError(
            f"The seasonal component {list(requested)} is not valid for {unit} frequency. "
            f"Allowed fields: {list(allowed)}"
        )
    if dropped:
        message = (
            f"Seasonal component(s) {dropped} cannot be used with {unit} frequency "
            f"and were dropped; using {valid}"
        )
        logger.warning(message)
        warnings.warn(message, SeasonalFieldWarning, stacklevel=3)

    return tuple(valid)


def _categorical(values: pd.Series, categories: list) -> pd.Series:
    return pd.Series(
        pd.Categorical(values, categories=categories, ordered=False),
        index=values.index,
    )


def _quarter(ts: pd.Series, _frequency: Frequency) -> pd.Series:
    return _categorical(ts.dt.quarter, [1, 2, 3, 4])


def _month(ts: pd.Series, _frequency: Frequency) -> pd.Series:
    labels = ts.dt.month.map(lambda m: MONTH_LABELS[m - 1])
    return _categorical(labels, MONTH_LABELS)


def _week(ts: pd.Series, _frequency: Frequency) -> pd.Series:
    week = (ts.dt.dayofyear - 1) // 7 + 1
    return _categorical(week, list(range(1, 54)))


def _wday(ts: pd.Series, _frequency: Frequency) -> pd.Series:
    # dayofweek is Monday=0; labels start on Sunday
    labels = ts.dt.dayofweek.map(lambda d: WDAY_LABELS[(d + 1) % 7])
    return _categorical(labels, WDAY_LABELS)


def _yday(ts: pd.Series, _frequency: Frequency) -> pd.Series:
    return _categorical(ts.dt.dayofyear, list(range(1, 367)))


def _hour(ts: pd.Series, _frequency: Frequency) -> pd.Series:
    return _categorical(ts.dt.hour + 1, list(range(1, 25)))


def format_bucket(value: float) -> str:
    """Render a minute bucket index as a plain decimal label ("3", "2.5")."""
    return np.format_float_positional(float(value), trim="-")


def minute_bucket(hour: pd.Series, minute: pd.Series, step: int) -> pd.Series:
    """Half-hour bucket index generalised by the series step: 2*hour + (minute + step)/step."""
    return hour * 2 + (minute + step) / step


def _minute(ts: pd.Series, frequency: Frequency) -> pd.Series:
    buckets = minute_bucket(ts.dt.hour, ts.dt.minute, frequency.step)
    categories = [format_bucket(v) for v in sorted(buckets.unique())]
    return _categorical(buckets.map(format_bucket), categories)


FIELD_EXTRACTORS: dict[str, Callable[[pd.Series, Frequency], pd.Series]] = {
    "quarter": _quarter,
    "month": _month,
    "week": _week,
    "wday": _wday,
    "yday": _yday,
    "hour": _hour,
    "minute": _minute,
}


def extract_calendar_fields(
    timestamps: pd.Series,
    fields: Iterable[str],
    frequency: Frequency,
) -> pd.DataFrame:
    """Extract categorical calendar fields from a timestamp column.

    Args:
        timestamps: Timestamp column (datetime64 or Period dtype).
        fields: Resolved field names (see ``resolve_seasonal``).
        frequency: Frequency of the series; the minute field uses its step.

    Returns:
        DataFrame with one categorical column per field, in evaluation order.
    """
    ts = as_calendar_timestamps(timestamps)
    requested = set(fields)
    columns = {}
    for field in CALENDAR_FIELDS:
        if field in requested:
            columns[field] = FIELD_EXTRACTORS[field](ts, frequency)
    return pd.DataFrame(columns, index=timestamps.index)
