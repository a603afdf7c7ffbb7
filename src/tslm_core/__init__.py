"""tslm-core - Linear regression forecasting for regular time series.

This package fits a linear regression model from a regular series plus
declarative feature specifications, and forecasts it recursively with
prediction intervals:

- **Features**: seasonal calendar fields, trend shapes, lags, events and knots
- **Scaling**: log, min-max normalization or standardization of the target
- **Forecasting**: recursive multi-step prediction feeding forecasts into lags

Module Structure:
    tslm_core.training: train_lm (model trainer)
    tslm_core.forecast: forecast_lm (forecast extender)
    tslm_core.features: calendar extractor and feature builder
    tslm_core.scaling: target transforms
    tslm_core.models: regression engine interface and statsmodels OLS engine
    tslm_core.api: ForecastConfig and run_forecast

Quick Start:
    >>> import pandas as pd
    >>> from tslm_core import train_lm, forecast_lm
    >>>
    >>> df = pd.DataFrame({
    ...     "date": pd.period_range("2010-01", periods=120, freq="M"),
    ...     "y": values,
    ... })
    >>> model = train_lm(df, y="y", index="date", seasonal="month",
    ...                  trend={"linear": True}, lags=[1, 12])
    >>> fc = forecast_lm(model, h=60)
    >>> print(fc.forecast[["lower95", "lower80", "yhat", "upper80", "upper95"]].head())
"""

__version__ = "0.1.0"

from tslm_core.api import ForecastConfig, run_forecast
from tslm_core.exceptions import (
    DataMismatchError,
    InvalidSpecError,
    RedundancyWarning,
    RowCountMismatchWarning,
    SeasonalFieldWarning,
    TslmError,
    TslmWarning,
)
from tslm_core.forecast import forecast_lm
from tslm_core.specs import FeatureSpec, TrendSpec
from tslm_core.training import train_lm
from tslm_core.types import ForecastResult, TrainedModel

__all__ = [
    "DataMismatchError",
    "FeatureSpec",
    "ForecastConfig",
    "ForecastResult",
    "InvalidSpecError",
    "RedundancyWarning",
    "RowCountMismatchWarning",
    "SeasonalFieldWarning",
    "TrainedModel",
    "TrendSpec",
    "TslmError",
    "TslmWarning",
    "__version__",
    "forecast_lm",
    "run_forecast",
    "train_lm",
]
