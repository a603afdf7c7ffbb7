"""Tests for frequency inference and timestamp helpers."""

from datetime import date

import pandas as pd
import pytest

from tslm_core.exceptions import DataMismatchError
from tslm_core.frequency import (
    check_timestamp_values,
    future_timestamps,
    infer_frequency,
    matches_timestamp_kind,
)


def test_monthly_periods() -> None:
    """Monthly periods infer unit month with a 12 step cycle."""
    freq = infer_frequency(pd.Series(pd.period_range("2010-01", periods=24, freq="M")))
    assert freq.unit == "month"
    assert freq.step == 1
    assert freq.cycle == 12
    assert freq.kind == "period"


def test_month_start_datetimes() -> None:
    freq = infer_frequency(pd.Series(pd.date_range("2010-01-01", periods=24, freq="MS")))
    assert freq.unit == "month"
    assert freq.kind == "datetime"


@pytest.mark.parametrize(
    "freq_alias,unit,cycle",
    [
        ("D", "day", 7),
        ("W", "week", 52),
        ("h", "hour", 24),
        ("QS", "quarter", 4),
    ],
)
def test_datetime_units(freq_alias: str, unit: str, cycle: int) -> None:
    """Datetime columns map their inferred offset to a calendar unit."""
    stamps = pd.Series(pd.date_range("2024-01-07", periods=20, freq=freq_alias))
    freq = infer_frequency(stamps)
    assert freq.unit == unit
    assert freq.cycle == cycle


def test_half_hourly_step_and_cycle() -> None:
    """Sub-hourly spacing keeps its step and divides the daily cycle."""
    stamps = pd.Series(pd.date_range("2024-03-01", periods=96, freq="30min"))
    freq = infer_frequency(stamps)
    assert freq.unit == "minute"
    assert freq.step == 30
    assert freq.cycle == 48


def test_datetime_gap_raises() -> None:
    """A missing day makes the spacing irregular."""
    stamps = pd.date_range("2024-01-01", periods=20, freq="D").delete(5)
    with pytest.raises(DataMismatchError, match="regular frequency"):
        infer_frequency(pd.Series(stamps))


def test_period_gap_raises() -> None:
    stamps = pd.period_range("2010-01", periods=24, freq="M").delete(3)
    with pytest.raises(DataMismatchError, match="gaps"):
        infer_frequency(pd.Series(stamps))


def test_unsorted_timestamps_raise() -> None:
    stamps = pd.Series(pd.date_range("2024-01-01", periods=10, freq="D")[::-1])
    with pytest.raises(DataMismatchError, match="strictly increasing"):
        infer_frequency(stamps)


def test_non_temporal_column_raises() -> None:
    with pytest.raises(DataMismatchError, match="datetime64 or Period"):
        infer_frequency(pd.Series([1, 2, 3, 4]))


def test_future_timestamps_continue_periods() -> None:
    """Future periods start one step after the last observation."""
    stamps = pd.Series(pd.period_range("2010-01", periods=120, freq="M"))
    freq = infer_frequency(stamps)
    future = future_timestamps(stamps.iloc[-1], 3, freq)
    assert list(future) == list(pd.period_range("2020-01", periods=3, freq="M"))


def test_future_timestamps_continue_datetimes() -> None:
    stamps = pd.Series(pd.date_range("2010-01-01", periods=12, freq="MS"))
    freq = infer_frequency(stamps)
    future = future_timestamps(stamps.iloc[-1], 2, freq)
    assert list(future) == [pd.Timestamp("2011-01-01"), pd.Timestamp("2011-02-01")]


def test_timestamp_kind_matching() -> None:
    """Period series only accept Periods; datetime series reject Periods."""
    period_freq = infer_frequency(pd.Series(pd.period_range("2010-01", periods=12, freq="M")))
    datetime_freq = infer_frequency(pd.Series(pd.date_range("2010-01-01", periods=12, freq="MS")))

    assert matches_timestamp_kind(pd.Period("2010-05", freq="M"), period_freq)
    assert not matches_timestamp_kind(pd.Timestamp("2010-05-01"), period_freq)
    assert matches_timestamp_kind(date(2010, 5, 1), datetime_freq)
    assert not matches_timestamp_kind(pd.Period("2010-05", freq="M"), datetime_freq)


def test_check_timestamp_values_normalises_dates() -> None:
    freq = infer_frequency(pd.Series(pd.date_range("2024-01-01", periods=10, freq="D")))
    values = check_timestamp_values([date(2024, 1, 3)], freq, "events")
    assert values == [pd.Timestamp("2024-01-03")]


def test_check_timestamp_values_mismatch_raises() -> None:
    freq = infer_frequency(pd.Series(pd.period_range("2010-01", periods=12, freq="M")))
    with pytest.raises(DataMismatchError, match="'knots' argument"):
        check_timestamp_values([pd.Timestamp("2010-03-01")], freq, "knots")
