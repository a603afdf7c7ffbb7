"""Console output formatting utilities."""

from __future__ import annotations

import re

import pandas as pd

from tslm_core.types import ForecastResult, TrainedModel

_INTERVAL_COLUMN = re.compile(r"^(lower|upper)(\d+(?:\.\d+)?)$")


def format_timestamp(value: object) -> str:
    """Render a timestamp compactly (periods as-is, midnight datetimes as dates)."""
    if isinstance(value, pd.Timestamp):
        if value == value.normalize():
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)


def interval_columns(forecast: pd.DataFrame) -> list[str]:
    """Interval columns of a forecast table, in table order."""
    return [c for c in forecast.columns if _INTERVAL_COLUMN.match(str(c))]


def format_model_summary(model: TrainedModel) -> str:
    """Build a human-readable summary of a trained model.

    Args:
        model: TrainedModel from ``train_lm``

    Returns:
        Human-readable text string for console output
    """
    params = model.parameters
    results = model.model.results
    lines = [
        "Linear Regression Forecasting Model",
        "=" * 60,
        f"Formula: {params.formula}",
        f"Frequency: {params.frequency.unit} (step {params.frequency.step}, "
        f"cycle {params.frequency.cycle})",
        f"Observations: {int(results.nobs)} (of {len(model.series)})",
        f"Scale: {params.scale or 'none'}",
        f"R-squared: {results.rsquared:.4f}  Adj. R-squared: {results.rsquared_adj:.4f}",
        f"AIC: {results.aic:.2f}",
        f"Residual std. error: {model.residuals.std(ddof=1):,.4f}",
        "",
        "Coefficients:",
    ]
    for name, value in results.params.items():
        lines.append(f"  {name:<30} {value:>14,.4f}")
    return "\n".join(lines)


def format_forecast_for_console(result: ForecastResult) -> str:
    """Build a human-readable table of the forecast.

    Args:
        result: ForecastResult from ``forecast_lm``

    Returns:
        Human-readable text string for console output
    """
    if result.forecast.empty:
        return "No forecasts available."

    forecast = result.forecast
    columns = interval_columns(forecast)
    ordered = [c for c in columns if c.startswith("lower")] + ["yhat"] + [
        c for c in columns if c.startswith("upper")
    ]

    lines = [f"Forecast - Next {result.h} Periods", "=" * 60]
    header = f"{'period':<18}" + "".join(f"{c:>14}" for c in ordered)
    lines.append(header)
    lines.append("-" * len(header))
    for stamp, row in forecast.iterrows():
        values = "".join(f"{row[c]:>14,.2f}" for c in ordered)
        lines.append(f"{format_timestamp(stamp):<18}{values}")

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        for message in result.warnings:
            lines.append(f"  - {message}")

    return "\n".join(lines)
