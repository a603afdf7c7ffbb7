"""Shared types: trained model artifact, forecast result and debug info."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from tslm_core.frequency import Frequency
from tslm_core.scaling import ScalingParameters
from tslm_core.specs import TrendSpec

if TYPE_CHECKING:
    from tslm_core.models.base import RegressionEngine, RegressionFormula
    from tslm_core.models.ols import FittedRegression


@dataclass(frozen=True)
class ModelDebugInfo:
    """Generic container for engine-specific debug information.

    Attributes:
        model_name: Short identifier for the engine, e.g. "ols", "ols_stepwise".
        version: Optional version string if engine behavior changes over time.
        data: Arbitrary engine-specific payload (dict of JSON-like values).
    """

    model_name: str
    version: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelParameters:
    """Everything needed to rebuild features at forecast time.

    Attributes:
        y: Original target column name.
        x: Exogenous column names.
        index: Timestamp column name.
        features: Generated feature names in creation order.
        seasonal: Resolved calendar fields.
        trend: Trend structure (None for no trend terms).
        lags: Lags used by the model.
        events: Event name to normalised trigger timestamps.
        knots: Knot name to normalised start timestamp.
        step: Whether stepwise selection was applied.
        scale: Scale method, or None.
        scaling: Frozen scaling parameters, or None.
        frequency: Frequency descriptor of the series.
        formula: Final regression formula (after stepwise pruning).
        target: Name of the modelled column (scaled target when scaling is used).
    """

    y: str
    x: tuple[str, ...]
    index: str
    features: tuple[str, ...]
    seasonal: tuple[str, ...]
    trend: TrendSpec | None
    lags: tuple[int, ...]
    events: dict[str, tuple]
    knots: dict[str, Any]
    step: bool
    scale: str | None
    scaling: ScalingParameters | None
    frequency: Frequency
    formula: RegressionFormula
    target: str


@dataclass(frozen=True)
class TrainedModel:
    """Fitted forecasting model.

    Attributes:
        model: Fitted regression returned by the engine.
        fitted: In-sample fitted values in original units, indexed by timestamp.
        residuals: In-sample residuals in original units, indexed by timestamp.
        parameters: Parameter record used to extend features.
        series: Cleaned, untrimmed training table with all generated columns.
        design: Trimmed table the regression was fitted on.
        debug: Engine debug information, if the engine exposes any.
        engine: Engine that fitted ``model``; forecasts predict with it by default.

    Note:
        The model is treated as read-only after training; forecasting never
        mutates it, so one instance can back several forecasts.
    """

    model: FittedRegression
    fitted: pd.Series
    residuals: pd.Series
    parameters: ModelParameters
    series: pd.DataFrame
    design: pd.DataFrame
    debug: ModelDebugInfo | None = None
    engine: RegressionEngine | None = None


@dataclass
class ForecastResult:
    """Result of a forecast.

    Attributes:
        forecast: Table indexed by future timestamp with exogenous echoes, generated
            features, ``lower<level>`` columns (descending), ``yhat`` and
            ``upper<level>`` columns (ascending).
        actual: Copy of the untrimmed training table the model was built from.
        h: Forecast horizon (after any coercion to the supplied exogenous rows).
        pi: Requested interval levels, in the order given.
        parameters: Parameter record of the trained model.
        model: Fitted regression used to produce the forecast.
        warnings: Messages of recoverable conditions met while forecasting.
    """

    forecast: pd.DataFrame
    actual: pd.DataFrame
    h: int
    pi: tuple[float, ...]
    parameters: ModelParameters
    model: Any = None
    warnings: list[str] = field(default_factory=list)
