"""Model training: feature construction, scaling and regression fit.

``train_lm`` validates the feature declarations, infers the series frequency,
builds the augmented table (events, knots, scaled target, calendar, trend,
lags), trims the rows whose lags are undefined and hands the design table to
the regression engine.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from tslm_core.data.preparation import prepare_series
from tslm_core.exceptions import DataMismatchError, InvalidSpecError
from tslm_core.features.builder import FeatureBuilder, trim_lagged_rows
from tslm_core.features.calendar import resolve_seasonal
from tslm_core.frequency import check_timestamp_values, infer_frequency
from tslm_core.models.base import RegressionEngine, build_formula
from tslm_core.models.ols import OLSEngine
from tslm_core.scaling import apply_scale, invert_scale, scaled_name
from tslm_core.specs import FeatureSpec, TrendSpec
from tslm_core.types import ModelParameters, TrainedModel

logger = logging.getLogger(__name__)


def train_lm(
    data: pd.DataFrame | pd.Series,
    y: Optional[str] = None,
    x: Optional[str | Iterable[str]] = None,
    index: Optional[str] = None,
    seasonal: Optional[str | Iterable[str]] = None,
    trend: TrendSpec | Mapping[str, Any] | None = TrendSpec(),
    lags: int | Iterable[int] | None = None,
    events: Optional[Mapping[str, Any]] = None,
    knots: Optional[Mapping[str, Any]] = None,
    scale: Optional[str] = None,
    step: bool = False,
    engine: Optional[RegressionEngine] = None,
    **step_options: Any,
) -> TrainedModel:
    """Train a linear-regression forecasting model on a regular time series.

    Args:
        data: Series with a time index, or DataFrame with a time index or a
            timestamp column (datetime64 or Period).
        y: Target column (DataFrame input).
        x: Exogenous regressor column(s).
        index: Timestamp column; inferred when None.
        seasonal: Calendar field(s) to encode as categorical regressors, any of
            quarter, month, week, wday, yday, hour, minute (depending on the
            frequency unit).
        trend: Trend structure; a TrendSpec or a mapping with keys linear,
            exponential, log, power. Defaults to a linear trend; None disables it.
        lags: Positive lag(s) of the target used as regressors.
        events: Mapping of indicator name to trigger timestamp(s).
        knots: Mapping of ramp name to the timestamp starting a piecewise-linear trend.
        scale: Target transform: "log", "normal" or "standard".
        step: If True, prune terms with the engine's stepwise selection.
        engine: Regression engine; defaults to OLSEngine.
        **step_options: Options passed to ``engine.fit_stepwise`` (e.g. criterion="bic").

    Returns:
        TrainedModel

    Raises:
        InvalidSpecError: If a declaration is malformed or not valid for the series frequency.
        DataMismatchError: If columns are missing, timestamps are irregular, event/knot
            timestamps do not match the series type, or too few rows remain.

    Example:
        >>> model = train_lm(df, y="y", index="date", seasonal="month",
        ...                  trend={"linear": True}, lags=[1, 12])
        >>> model.parameters.features
        ('month', 'linear_trend', 'lag_1', 'lag_12')
    """
    spec = FeatureSpec.create(
        seasonal=seasonal,
        trend=trend,
        lags=lags,
        events=events,
        knots=knots,
        scale=scale,
    )
    if not isinstance(step, bool):
        raise InvalidSpecError("The 'step' argument must be either True or False")
    if step_options and not step:
        logger.warning(f"Stepwise options {sorted(step_options)} ignored because step=False")

    prepared = prepare_series(data, y=y, x=x, index=index)
    table = prepared.table
    frequency = infer_frequency(table[prepared.index])
    fields = resolve_seasonal(spec.seasonal, frequency.unit)

    event_stamps = {
        name: tuple(check_timestamp_values(stamps, frequency, "events"))
        for name, stamps in spec.events.items()
    }
    knot_stamps = {
        name: check_timestamp_values([value], frequency, "knots")[0]
        for name, value in spec.knots.items()
    }

    logger.info(
        f"Training on {len(table)} observations ({frequency.unit} frequency, step {frequency.step})"
    )

    builder = FeatureBuilder(table, prepared.index, frequency)
    builder.add_events(event_stamps).add_knots(knot_stamps)

    target = prepared.y
    scaling = None
    if spec.scale is not None:
        scaled, scaling = apply_scale(table[prepared.y], spec.scale)
        target = scaled_name(prepared.y, spec.scale)
        builder.add_column(target, scaled.to_numpy())

    augmented = (
        builder.add_calendar(fields).add_trend(spec.trend).add_lags(target, spec.lags).build()
    )

    design = trim_lagged_rows(augmented.table, spec.lags)
    if design.empty:
        raise DataMismatchError(
            f"No observations left after dropping the first {max(spec.lags)} rows for lags"
        )

    formula = build_formula(target, (*prepared.x, *augmented.features), design)
    logger.info(f"Formula: {formula}")

    engine = engine if engine is not None else OLSEngine()
    if step:
        fitted_model = engine.fit_stepwise(formula, design, **step_options)
    else:
        fitted_model = engine.fit(formula, design)

    timestamps = pd.Index(design[prepared.index], name=prepared.index)
    fitted_scaled = pd.Series(
        engine.fitted_values(fitted_model).to_numpy(), index=timestamps, name="fitted"
    )
    fitted = invert_scale(fitted_scaled, scaling).rename("fitted")
    residuals = pd.Series(
        design[prepared.y].to_numpy() - fitted.to_numpy(), index=timestamps, name="residuals"
    )

    parameters = ModelParameters(
        y=prepared.y,
        x=prepared.x,
        index=prepared.index,
        features=augmented.features,
        seasonal=fields,
        trend=spec.trend,
        lags=spec.lags,
        events=event_stamps,
        knots=knot_stamps,
        step=step,
        scale=spec.scale,
        scaling=scaling,
        frequency=frequency,
        formula=engine.formula_of(fitted_model),
        target=target,
    )

    return TrainedModel(
        model=fitted_model,
        fitted=fitted,
        residuals=residuals,
        parameters=parameters,
        series=augmented.table,
        design=design,
        debug=getattr(engine, "debug_", None),
        engine=engine,
    )
