"""Multi-step forecasting of trained models.

The future table is built with the same feature functions used in training,
in extension mode: trend row numbers and knot ramps continue from the end of
the training table, calendar fields and events are evaluated on the future
timestamps, and lag columns are seeded from the tail of the training target.

With lags, each step is predicted from a single row and its point forecast is
written into the lag columns of the later rows it feeds, so steps are strictly
sequential. Without lags all rows are predicted in one call per interval level.
"""

from __future__ import annotations

import logging
import numbers
import warnings
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from tslm_core.config import DEFAULT_PI
from tslm_core.exceptions import (
    DataMismatchError,
    InvalidSpecError,
    RowCountMismatchWarning,
)
from tslm_core.features.builder import FeatureBuilder, knot_continuation, lag_name
from tslm_core.frequency import future_timestamps
from tslm_core.models.base import RegressionEngine
from tslm_core.models.ols import OLSEngine
from tslm_core.scaling import invert_scale
from tslm_core.types import ForecastResult, ModelParameters, TrainedModel

logger = logging.getLogger(__name__)


def level_label(level: float) -> str:
    """Percent label of an interval level, e.g. 0.95 -> "95", 0.975 -> "97.5"."""
    return f"{round(100 * level, 6):g}"


def _validate_horizon(h: object) -> int:
    if isinstance(h, bool) or not isinstance(h, numbers.Real):
        raise InvalidSpecError("The forecast horizon argument, 'h', must be an integer")
    if h != int(h):
        raise InvalidSpecError("The forecast horizon argument, 'h', must be an integer")
    if h < 1:
        raise InvalidSpecError("The forecast horizon argument, 'h', must be positive")
    return int(h)


def _validate_pi(pi: float | Iterable[float]) -> tuple[float, ...]:
    if isinstance(pi, numbers.Real):
        pi = (pi,)
    levels = tuple(pi)
    if not levels or any(
        isinstance(p, bool) or not isinstance(p, numbers.Real) or not 0 < p < 1 for p in levels
    ):
        raise InvalidSpecError(
            f"The value of the 'pi' argument is not valid: {levels}. Levels must be in (0, 1)"
        )
    return tuple(dict.fromkeys(float(p) for p in levels))


def _align_newdata(
    newdata: pd.DataFrame,
    parameters: ModelParameters,
    future: pd.Index,
) -> pd.DataFrame:
    """Order the exogenous rows along the future timestamps."""
    index = parameters.index
    if index in newdata.columns:
        newdata = newdata.sort_values(index)
        stamps = newdata[index]
        if parameters.frequency.kind == "datetime":
            stamps = pd.to_datetime(stamps)
        if not pd.Index(stamps).equals(future):
            raise DataMismatchError(
                f"The timestamps of 'newdata' must continue the training series: "
                f"expected {future[0]} .. {future[-1]}"
            )
    return newdata.reset_index(drop=True)


def build_future_table(
    model: TrainedModel,
    h: int,
    newdata: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """Future rows with every regressor the model needs, lags seeded.

    Args:
        model: Trained model.
        h: Number of future rows.
        newdata: Exogenous rows aligned with the horizon (models with regressors).

    Returns:
        DataFrame with the timestamp column, exogenous echoes and generated features.
    """
    params = model.parameters
    series = model.series
    future = future_timestamps(series[params.index].iloc[-1], h, params.frequency)

    base = pd.DataFrame({params.index: future})
    if params.x:
        exogenous = _align_newdata(newdata, params, future)
        for column in params.x:
            base[column] = exogenous[column].to_numpy()[:h]

    builder = FeatureBuilder(base, params.index, params.frequency, start=len(series) + 1)
    builder.add_events(params.events)
    builder.add_knots(
        params.knots,
        continuation=knot_continuation(series, params.index, params.knots),
    )
    builder.add_calendar(params.seasonal).add_trend(params.trend)
    if params.lags:
        builder.add_lag_seeds(series[params.target], params.lags)
    return builder.build().table


def _recursive_predict(
    engine: RegressionEngine,
    model: TrainedModel,
    table: pd.DataFrame,
    levels: tuple[float, ...],
) -> tuple[pd.DataFrame, np.ndarray, dict[float, tuple[np.ndarray, np.ndarray]]]:
    lags = model.parameters.lags
    h = len(table)
    buffer = table.copy()
    for k in lags:
        buffer[lag_name(k)] = buffer[lag_name(k)].astype(float)
    lag_positions = {k: buffer.columns.get_loc(lag_name(k)) for k in lags}

    points = np.full(h, np.nan)
    bounds = {level: (np.full(h, np.nan), np.full(h, np.nan)) for level in levels}

    for i in range(h):
        row = buffer.iloc[[i]]
        for level in levels:
            prediction = engine.predict(model.model, row, level)
            bounds[level][0][i] = prediction["lower"].iloc[0]
            bounds[level][1][i] = prediction["upper"].iloc[0]
        points[i] = prediction["point"].iloc[0]

        # Feed the scale-space point forecast into the lags of later steps
        for k in lags:
            if i + k < h:
                buffer.iat[i + k, lag_positions[k]] = points[i]
        logger.debug(f"Step {i + 1}/{h}: point={points[i]:.6g}")

    return buffer, points, bounds


def _batch_predict(
    engine: RegressionEngine,
    model: TrainedModel,
    table: pd.DataFrame,
    levels: tuple[float, ...],
) -> tuple[pd.DataFrame, np.ndarray, dict[float, tuple[np.ndarray, np.ndarray]]]:
    bounds = {}
    for level in levels:
        prediction = engine.predict(model.model, table, level)
        bounds[level] = (prediction["lower"].to_numpy(), prediction["upper"].to_numpy())
    return table.copy(), prediction["point"].to_numpy(), bounds


def forecast_lm(
    model: TrainedModel,
    h: int,
    newdata: Optional[pd.DataFrame] = None,
    pi: float | Iterable[float] = DEFAULT_PI,
    engine: Optional[RegressionEngine] = None,
) -> ForecastResult:
    """Forecast a trained model ``h`` steps ahead with prediction intervals.

    Args:
        model: TrainedModel from ``train_lm``.
        h: Forecast horizon (positive integer).
        newdata: Future exogenous rows; required when the model uses regressors.
            If it holds the timestamp column, its timestamps must continue the
            training series. A row count different from ``h`` sets the horizon
            to the number of rows, with a warning.
        pi: Interval confidence level(s), each in (0, 1).
        engine: Regression engine used to predict; defaults to the engine that
            trained the model (OLSEngine for models without one).

    Returns:
        ForecastResult

    Raises:
        InvalidSpecError: If the model, horizon or interval levels are invalid.
        DataMismatchError: If exogenous data is missing or misaligned.
    """
    if not isinstance(model, TrainedModel):
        raise InvalidSpecError("The input model is invalid, must be a TrainedModel")
    levels = _validate_pi(pi)
    h = _validate_horizon(h)
    params = model.parameters
    notes: list[str] = []

    if params.x:
        if newdata is None:
            raise DataMismatchError(
                "The model was trained with regressors; 'newdata' must provide "
                f"the columns {list(params.x)}"
            )
        missing = [c for c in params.x if c not in newdata.columns]
        if missing:
            raise DataMismatchError(
                f"The columns of 'newdata' do not match the training regressors; missing {missing}"
            )
        if len(newdata) == 0:
            raise DataMismatchError("'newdata' has no rows")
        if len(newdata) != h:
            message = (
                f"The number of rows of 'newdata' ({len(newdata)}) does not match the forecast "
                f"horizon ({h}); setting the horizon to {len(newdata)}"
            )
            logger.warning(message)
            warnings.warn(message, RowCountMismatchWarning, stacklevel=2)
            notes.append(message)
            h = len(newdata)
    elif newdata is not None:
        message = "The model has no regressors; 'newdata' is ignored"
        logger.warning(message)
        notes.append(message)

    table = build_future_table(model, h, newdata)
    if engine is None:
        engine = model.engine if model.engine is not None else OLSEngine()

    logger.info(f"Forecasting {h} step(s) at levels {[level_label(p) for p in levels]}")
    if params.lags:
        table, points, bounds = _recursive_predict(engine, model, table, levels)
    else:
        table, points, bounds = _batch_predict(engine, model, table, levels)

    forecast = table
    for level in sorted(levels, reverse=True):
        forecast[f"lower{level_label(level)}"] = invert_scale(bounds[level][0], params.scaling)
    forecast["yhat"] = invert_scale(points, params.scaling)
    for level in sorted(levels):
        forecast[f"upper{level_label(level)}"] = invert_scale(bounds[level][1], params.scaling)
    forecast = forecast.set_index(params.index)

    return ForecastResult(
        forecast=forecast,
        actual=model.series.copy(),
        h=h,
        pi=levels,
        parameters=params,
        model=model.model,
        warnings=notes,
    )
