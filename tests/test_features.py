"""Tests for feature construction."""

import logging

import numpy as np
import pandas as pd
import pytest

from tslm_core.exceptions import DataMismatchError, InvalidSpecError
from tslm_core.features.builder import (
    FeatureBuilder,
    build_event_features,
    build_knot_features,
    build_lag_features,
    build_trend_features,
    knot_continuation,
    knot_start,
    power_name,
    seed_lag_features,
    trim_lagged_rows,
)
from tslm_core.frequency import infer_frequency
from tslm_core.specs import TrendSpec


def _monthly_table(n: int = 12) -> pd.DataFrame:
    return pd.DataFrame(
        {"date": pd.period_range("2020-01", periods=n, freq="M"), "y": np.arange(10.0, 10.0 + n)}
    )


def _daily_table(n: int = 10) -> pd.DataFrame:
    return pd.DataFrame({"date": pd.date_range("2024-01-01", periods=n, freq="D"), "y": np.ones(n)})


def test_power_name() -> None:
    assert power_name(2) == "trend_power_2"
    assert power_name(0.5) == "trend_power_0.5"


def test_trend_columns_and_order() -> None:
    """Power terms come first, then exp, log and linear."""
    trend = TrendSpec(linear=True, exponential=True, log=True, power=(2,))
    table = build_trend_features(range(1, 6), trend)
    assert list(table.columns) == ["trend_power_2", "exp_trend", "log_trend", "linear_trend"]
    assert list(table["linear_trend"]) == [1, 2, 3, 4, 5]
    np.testing.assert_allclose(table["trend_power_2"], [1, 4, 9, 16, 25])
    np.testing.assert_allclose(table["exp_trend"], np.exp(np.arange(1, 6)))
    assert table["log_trend"].iloc[0] == 0.0


def test_trend_continues_row_numbers() -> None:
    table = build_trend_features(range(121, 124), TrendSpec())
    assert list(table["linear_trend"]) == [121, 122, 123]


def test_lag_features_shift_target() -> None:
    table, names = build_lag_features(_monthly_table(), "y", [1, 3])
    assert names == ["lag_1", "lag_3"]
    assert np.isnan(table["lag_1"].iloc[0])
    assert table["lag_1"].iloc[1] == table["y"].iloc[0]
    assert table["lag_3"].iloc[5] == table["y"].iloc[2]


def test_trim_lagged_rows() -> None:
    """The first max(lags) rows are dropped."""
    table, _ = build_lag_features(_monthly_table(), "y", [1, 3])
    trimmed = trim_lagged_rows(table, [1, 3])
    assert len(trimmed) == 9
    assert not trimmed[["lag_1", "lag_3"]].isna().any().any()
    assert len(trim_lagged_rows(table, [])) == 12


def test_event_indicators() -> None:
    table = _monthly_table()
    freq = infer_frequency(table["date"])
    events = {"promo": [pd.Period("2020-03", freq="M"), pd.Period("2020-07", freq="M")]}
    result, names = build_event_features(table, "date", events, freq)
    assert names == ["promo"]
    assert list(np.flatnonzero(result["promo"].to_numpy())) == [2, 6]
    assert result["promo"].sum() == 2


def test_event_type_mismatch_raises() -> None:
    table = _monthly_table()
    freq = infer_frequency(table["date"])
    with pytest.raises(DataMismatchError):
        build_event_features(table, "date", {"promo": [pd.Timestamp("2020-03-01")]}, freq)


def test_knot_ramp() -> None:
    """The ramp starts one row after the first timestamp past the knot."""
    table = _daily_table()
    freq = infer_frequency(table["date"])
    assert knot_start(table["date"], pd.Timestamp("2024-01-03")) == 4
    result, names = build_knot_features(table, "date", {"k": pd.Timestamp("2024-01-03")}, freq)
    assert names == ["k"]
    assert list(result["k"]) == [0, 0, 0, 0, 0, 1, 2, 3, 4, 5]


def test_knot_continuation() -> None:
    table = _daily_table()
    freq = infer_frequency(table["date"])
    knots = {"k": pd.Timestamp("2024-01-03"), "late": pd.Timestamp("2024-02-01")}
    trained, _ = build_knot_features(table, "date", knots, freq)
    state = knot_continuation(trained, "date", knots)
    # only ramps that started in training continue
    assert state == {"k": 5}

    future = pd.DataFrame({"date": pd.date_range("2024-01-11", periods=3, freq="D")})
    extended, _ = build_knot_features(future, "date", {"k": knots["k"]}, freq, start=11, continuation=state)
    assert list(extended["k"]) == [6, 7, 8]


def test_knot_after_training_uses_global_rows() -> None:
    """A knot past the training data ramps up on global row numbers in the future."""
    table = _daily_table(30)
    freq = infer_frequency(table["date"])
    knots = {"k": pd.Timestamp("2024-02-02")}
    trained, _ = build_knot_features(table, "date", knots, freq)
    assert trained["k"].sum() == 0

    future = pd.DataFrame({"date": pd.date_range("2024-01-31", periods=6, freq="D")})
    extended, _ = build_knot_features(future, "date", knots, freq, start=31, continuation={})
    assert list(extended["k"]) == [0, 0, 0, 0, 0, 1]


def test_seed_lag_features() -> None:
    """Future lag k is seeded for its first k rows from the training tail."""
    history = pd.Series(np.arange(1.0, 11.0))
    future = pd.DataFrame({"date": pd.period_range("2021-01", periods=5, freq="M")})
    table, names = seed_lag_features(future, history, [1, 3])
    assert names == ["lag_1", "lag_3"]
    assert table["lag_1"].iloc[0] == 10.0
    assert table["lag_1"].iloc[1:].isna().all()
    assert list(table["lag_3"].iloc[:3]) == [8.0, 9.0, 10.0]
    assert table["lag_3"].iloc[3:].isna().all()


def test_seed_lag_longer_than_horizon() -> None:
    history = pd.Series(np.arange(1.0, 25.0))
    future = pd.DataFrame({"date": pd.period_range("2021-01", periods=2, freq="M")})
    table, _ = seed_lag_features(future, history, [12])
    assert list(table["lag_12"]) == [13.0, 14.0]


def test_builder_chain() -> None:
    table = _monthly_table(24)
    freq = infer_frequency(table["date"])
    augmented = (
        FeatureBuilder(table, "date", freq)
        .add_calendar(["month"])
        .add_trend(TrendSpec())
        .add_lags("y", [1, 12])
        .build()
    )
    assert augmented.features == ("month", "linear_trend", "lag_1", "lag_12")
    assert list(augmented.table["linear_trend"]) == list(range(1, 25))


def test_builder_without_trend() -> None:
    table = _monthly_table()
    freq = infer_frequency(table["date"])
    augmented = FeatureBuilder(table, "date", freq).add_trend(None).build()
    assert augmented.features == ()


def test_builder_start_offsets_trend() -> None:
    table = _monthly_table(3)
    freq = infer_frequency(table["date"])
    augmented = FeatureBuilder(table, "date", freq, start=121).add_trend(TrendSpec()).build()
    assert list(augmented.table["linear_trend"]) == [121, 122, 123]


def test_builder_name_collision_raises() -> None:
    """Generated names may not overwrite existing columns."""
    table = _monthly_table().assign(month=1)
    freq = infer_frequency(table["date"])
    with pytest.raises(InvalidSpecError, match="collide"):
        FeatureBuilder(table, "date", freq).add_calendar(["month"])


def test_builder_does_not_mutate_input() -> None:
    table = _monthly_table()
    freq = infer_frequency(table["date"])
    FeatureBuilder(table, "date", freq).add_trend(TrendSpec()).add_lags("y", [1])
    assert list(table.columns) == ["date", "y"]


def test_knot_past_data_warns_only_in_training(caplog: pytest.LogCaptureFixture) -> None:
    """A knot beyond the forecast horizon is not reported when extending."""
    table = _daily_table(30)
    freq = infer_frequency(table["date"])
    knots = {"k": pd.Timestamp("2024-03-01")}

    with caplog.at_level(logging.WARNING, logger="tslm_core.features.builder"):
        build_knot_features(table, "date", knots, freq)
    assert "not followed by any observation" in caplog.text

    caplog.clear()
    future = pd.DataFrame({"date": pd.date_range("2024-01-31", periods=5, freq="D")})
    with caplog.at_level(logging.WARNING, logger="tslm_core.features.builder"):
        extended, _ = build_knot_features(future, "date", knots, freq, start=31, continuation={})
    assert caplog.text == ""
    assert extended["k"].sum() == 0
