"""Feature construction: calendar fields, trends, events, knots and lags."""

from tslm_core.features.builder import (
    AugmentedTable,
    FeatureBuilder,
    build_calendar_features,
    build_event_features,
    build_knot_features,
    build_lag_features,
    build_trend_features,
    seed_lag_features,
    trim_lagged_rows,
)
from tslm_core.features.calendar import extract_calendar_fields, resolve_seasonal

__all__ = [
    "AugmentedTable",
    "FeatureBuilder",
    "build_calendar_features",
    "build_event_features",
    "build_knot_features",
    "build_lag_features",
    "build_trend_features",
    "extract_calendar_fields",
    "resolve_seasonal",
    "seed_lag_features",
    "trim_lagged_rows",
]
