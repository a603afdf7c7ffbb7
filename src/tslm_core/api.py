"""Public API for the train-then-forecast pipeline.

This module provides a configurable one-call API over ``train_lm`` and
``forecast_lm`` working on in-memory DataFrames with no side effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from tslm_core.config import DEFAULT_PI
from tslm_core.forecast import forecast_lm
from tslm_core.models.base import RegressionEngine
from tslm_core.specs import TrendSpec
from tslm_core.training import train_lm
from tslm_core.types import ForecastResult

logger = logging.getLogger(__name__)


@dataclass
class ForecastConfig:
    """Configuration for a train-then-forecast run.

    Attributes:
        y: Target column (None for Series input).
        x: Exogenous column names.
        index: Timestamp column (None to infer it).
        seasonal: Calendar fields to encode.
        trend: Trend structure (default: linear); None disables trend terms.
        lags: Target lags used as regressors.
        events: Event name to trigger timestamps.
        knots: Knot name to ramp start timestamp.
        scale: Target transform ("log", "normal", "standard") or None.
        step: Apply stepwise term pruning.
        step_options: Options passed to the engine's stepwise selection.
        horizon: Number of periods to forecast (default: 12).
        pi: Prediction interval levels (default: 0.95 and 0.80).
        engine: Optional regression engine instance. If None, uses OLSEngine.
    """

    y: Optional[str] = None
    x: List[str] = field(default_factory=list)
    index: Optional[str] = None
    seasonal: List[str] = field(default_factory=list)
    trend: Optional[TrendSpec] = field(default_factory=TrendSpec)
    lags: List[int] = field(default_factory=list)
    events: Dict[str, Any] = field(default_factory=dict)
    knots: Dict[str, Any] = field(default_factory=dict)
    scale: Optional[str] = None
    step: bool = False
    step_options: Dict[str, Any] = field(default_factory=dict)
    horizon: int = 12
    pi: Tuple[float, ...] = DEFAULT_PI
    engine: Optional[RegressionEngine] = None  # if None, use OLSEngine


def run_forecast(
    data: pd.DataFrame | pd.Series,
    config: Optional[ForecastConfig] = None,
    newdata: Optional[pd.DataFrame] = None,
) -> ForecastResult:
    """Train a model on ``data`` and forecast ``config.horizon`` periods.

    This function:
    - does NOT read or write any files,
    - does NOT parse CLI arguments or read environment variables,
    - MAY log progress via the logging module.

    Args:
        data: Training series (see ``train_lm`` for accepted shapes).
        config: ForecastConfig. If None, uses defaults (linear trend, 12 periods).
        newdata: Future exogenous rows when ``config.x`` is set.

    Returns:
        ForecastResult of the trained model

    Raises:
        InvalidSpecError: If the configuration is malformed.
        DataMismatchError: If the data does not fit the configuration.
    """
    if config is None:
        config = ForecastConfig()

    model = train_lm(
        data,
        y=config.y,
        x=config.x or None,
        index=config.index,
        seasonal=config.seasonal or None,
        trend=config.trend,
        lags=config.lags or None,
        events=config.events or None,
        knots=config.knots or None,
        scale=config.scale,
        step=config.step,
        engine=config.engine,
        **config.step_options,
    )
    logger.info(f"Trained model: {model.parameters.formula}")

    return forecast_lm(
        model,
        h=config.horizon,
        newdata=newdata,
        pi=config.pi,
        engine=config.engine,
    )
