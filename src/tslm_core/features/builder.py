"""Feature construction for the regression design table.

Each ``build_*`` function takes a table value and returns a new table together
with the names of the columns it added. ``FeatureBuilder`` chains them on an
owned table and keeps the ordered feature-name list that the regression
formula is built from.

The same functions serve two modes:
- training: row numbers start at 1 and lags are shifted target values;
- extension: row numbers continue from the end of the training table, knot
  ramps continue from their last training value and lags are seeded from the
  tail of the training target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd

from tslm_core.exceptions import InvalidSpecError
from tslm_core.features.calendar import extract_calendar_fields
from tslm_core.frequency import Frequency, check_timestamp_values
from tslm_core.specs import TrendSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AugmentedTable:
    """Table with generated feature columns.

    Attributes:
        table: Series columns plus one column per generated feature.
        features: Generated feature names in creation order.
    """

    table: pd.DataFrame
    features: tuple[str, ...]


def power_name(power: float) -> str:
    """Column name of a power trend term, e.g. ``trend_power_2`` or ``trend_power_0.5``."""
    return f"trend_power_{power:g}"


def lag_name(lag: int) -> str:
    return f"lag_{lag}"


def build_event_features(
    table: pd.DataFrame,
    index: str,
    events: Mapping[str, Iterable[Any]],
    frequency: Frequency,
) -> tuple[pd.DataFrame, list[str]]:
    """Add one 0/1 indicator column per named event.

    Raises:
        DataMismatchError: If event timestamps do not match the series timestamp type.
    """
    table = table.copy()
    names = []
    for name, stamps in events.items():
        values = check_timestamp_values(stamps, frequency, "events")
        table[name] = table[index].isin(values).astype(int)
        names.append(name)
    return table, names


def knot_start(timestamps: pd.Series, knot: Any) -> int | None:
    """1-based row of the first timestamp strictly after ``knot``, or None."""
    after = np.flatnonzero((timestamps > knot).to_numpy())
    if len(after) == 0:
        return None
    return int(after[0]) + 1


def build_knot_features(
    table: pd.DataFrame,
    index: str,
    knots: Mapping[str, Any],
    frequency: Frequency,
    start: int = 1,
    continuation: Mapping[str, float] | None = None,
) -> tuple[pd.DataFrame, list[str]]:
    """Add a piecewise-linear ramp column per knot.

    The ramp at global row ``i`` is ``max(0, i - first - 1)`` where ``first`` is the
    global row of the first timestamp after the knot. Knots listed in
    ``continuation`` instead continue from their last training value
    (``last + 1, last + 2, ...``).

    Args:
        table: Table holding the timestamp column.
        index: Name of the timestamp column.
        knots: Mapping of feature name to knot timestamp.
        frequency: Series frequency, used to validate the knot timestamps.
        start: Global row number of the first table row.
        continuation: Last training value per knot whose ramp already started.
    """
    table = table.copy()
    names = []
    rows = np.arange(start, start + len(table))
    for name, knot in knots.items():
        (value,) = check_timestamp_values([knot], frequency, "knots")
        if continuation is not None and name in continuation:
            table[name] = continuation[name] + np.arange(1, len(table) + 1)
        else:
            first = knot_start(table[index], value)
            if first is None:
                # a knot past the horizon is expected when extending
                if start == 1:
                    logger.warning(f"Knot '{name}' ({value}) is not followed by any observation")
                table[name] = np.zeros(len(table), dtype=int)
            else:
                table[name] = np.maximum(0, rows - (start - 1 + first) - 1)
        names.append(name)
    return table, names


def knot_continuation(
    table: pd.DataFrame,
    index: str,
    knots: Mapping[str, Any],
) -> dict[str, float]:
    """Last training value of every knot whose ramp started inside ``table``."""
    state = {}
    for name, knot in knots.items():
        if knot_start(table[index], knot) is not None:
            state[name] = table[name].iloc[-1]
    return state


def build_calendar_features(
    table: pd.DataFrame,
    index: str,
    seasonal: Iterable[str],
    frequency: Frequency,
) -> tuple[pd.DataFrame, list[str]]:
    """Add categorical calendar columns for the resolved seasonal fields."""
    table = table.copy()
    fields = extract_calendar_fields(table[index], seasonal, frequency)
    for name in fields.columns:
        table[name] = fields[name]
    return table, list(fields.columns)


def build_trend_features(rows: range, trend: TrendSpec) -> pd.DataFrame:
    """Trend columns over 1-based row numbers.

    Columns are created in the order power terms, ``exp_trend``, ``log_trend``,
    ``linear_trend``.
    """
    i = np.arange(rows.start, rows.stop, dtype=float)
    columns: dict[str, Any] = {}
    for power in trend.power:
        columns[power_name(power)] = i**power
    if trend.exponential:
        columns["exp_trend"] = np.exp(i)
    if trend.log:
        columns["log_trend"] = np.log(i)
    if trend.linear:
        columns["linear_trend"] = np.arange(rows.start, rows.stop)
    return pd.DataFrame(columns)


def build_lag_features(
    table: pd.DataFrame,
    target: str,
    lags: Iterable[int],
) -> tuple[pd.DataFrame, list[str]]:
    """Add ``lag_<k>`` columns holding the target shifted by ``k`` rows."""
    table = table.copy()
    names = []
    for k in lags:
        table[lag_name(k)] = table[target].shift(k)
        names.append(lag_name(k))
    return table, names


def seed_lag_features(
    table: pd.DataFrame,
    history: pd.Series,
    lags: Iterable[int],
) -> tuple[pd.DataFrame, list[str]]:
    """Seed future ``lag_<k>`` columns from the tail of the training target.

    Row ``j`` (1-based) of lag ``k`` gets ``history[n - k + j]`` for ``j <= k``;
    later rows stay undefined until the forecast loop fills them.
    """
    table = table.copy()
    names = []
    h = len(table)
    for k in lags:
        values = np.full(h, np.nan)
        seed = history.to_numpy(dtype=float)[-k:][:h]
        values[: len(seed)] = seed
        table[lag_name(k)] = values
        names.append(lag_name(k))
    return table, names


def trim_lagged_rows(table: pd.DataFrame, lags: Iterable[int]) -> pd.DataFrame:
    """Drop the first ``max(lags)`` rows, whose lag values are undefined."""
    lags = list(lags)
    if not lags:
        return table.copy()
    return table.iloc[max(lags) :].copy()


class FeatureBuilder:
    """Appends generated feature columns to an owned table.

    Example:
        >>> builder = FeatureBuilder(df, index="date", frequency=freq)
        >>> augmented = builder.add_calendar(["month"]).add_trend(TrendSpec()).build()
        >>> augmented.features
        ('month', 'linear_trend')
    """

    def __init__(
        self,
        table: pd.DataFrame,
        index: str,
        frequency: Frequency,
        start: int = 1,
    ) -> None:
        """Initialize the builder.

        Args:
            table: Base table holding the timestamp column (copied).
            index: Name of the timestamp column.
            frequency: Series frequency.
            start: Global row number of the first row (1 for training,
                ``training_rows + 1`` for extension).
        """
        self._table = table.reset_index(drop=True).copy()
        self._features: list[str] = []
        self.index = index
        self.frequency = frequency
        self.start = start

    @property
    def features(self) -> tuple[str, ...]:
        return tuple(self._features)

    @property
    def table(self) -> pd.DataFrame:
        return self._table.copy()

    def _check_names(self, names: Iterable[str]) -> None:
        clashes = [n for n in names if n in self._table.columns]
        if clashes:
            raise InvalidSpecError(
                f"Generated feature name(s) {clashes} collide with existing columns"
            )

    def _append(self, table: pd.DataFrame, names: list[str]) -> FeatureBuilder:
        self._table = table
        self._features.extend(names)
        return self

    def add_column(self, name: str, values: Any) -> FeatureBuilder:
        """Add a non-feature column (e.g. the scaled target)."""
        self._check_names([name])
        self._table[name] = values
        return self

    def add_events(self, events: Mapping[str, Iterable[Any]]) -> FeatureBuilder:
        self._check_names(events)
        return self._append(
            *build_event_features(self._table, self.index, events, self.frequency)
        )

    def add_knots(
        self,
        knots: Mapping[str, Any],
        continuation: Mapping[str, float] | None = None,
    ) -> FeatureBuilder:
        self._check_names(knots)
        return self._append(
            *build_knot_features(
                self._table,
                self.index,
                knots,
                self.frequency,
                start=self.start,
                continuation=continuation,
            )
        )

    def add_calendar(self, fields: Iterable[str]) -> FeatureBuilder:
        fields = list(fields)
        self._check_names(fields)
        return self._append(
            *build_calendar_features(self._table, self.index, fields, self.frequency)
        )

    def add_trend(self, trend: TrendSpec | None) -> FeatureBuilder:
        if trend is None:
            return self
        rows = range(self.start, self.start + len(self._table))
        trend_table = build_trend_features(rows, trend)
        self._check_names(trend_table.columns)
        table = self._table.copy()
        for name in trend_table.columns:
            table[name] = trend_table[name].to_numpy()
        return self._append(table, list(trend_table.columns))

    def add_lags(self, target: str, lags: Iterable[int]) -> FeatureBuilder:
        lags = list(lags)
        self._check_names(lag_name(k) for k in lags)
        return self._append(*build_lag_features(self._table, target, lags))

    def add_lag_seeds(self, history: pd.Series, lags: Iterable[int]) -> FeatureBuilder:
        lags = list(lags)
        self._check_names(lag_name(k) for k in lags)
        return self._append(*seed_lag_features(self._table, history, lags))

    def build(self) -> AugmentedTable:
        return AugmentedTable(table=self._table.copy(), features=tuple(self._features))
