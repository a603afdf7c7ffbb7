"""Example: Seasonal Forecast with Recursive Lags

This example trains a linear regression model on a monthly series with a
trend, month-of-year seasonality and lags at 1 and 12 months, then forecasts
five years ahead with 80% and 95% prediction intervals.

Prerequisites:
- A CSV with a date column and a numeric target, or the synthetic data below
"""

from pathlib import Path

import numpy as np
import pandas as pd

from tslm_core import forecast_lm, train_lm
from tslm_core.formatters.console import format_forecast_for_console, format_model_summary

# Modify this path to point to your own monthly series
data_file = Path("data/monthly_sales.csv")

print("=" * 80)
print("Example 1: Monthly Forecast with Seasonality and Lags")
print("=" * 80)

if data_file.exists():
    print(f"\nLoading data from: {data_file}")
    df = pd.read_csv(data_file)
    df["date"] = pd.to_datetime(df["date"]).dt.to_period("M")
else:
    print(f"\nData file not found: {data_file}")
    print("Using synthetic data for demonstration instead...")
    rng = np.random.default_rng(0)
    t = np.arange(1, 121)
    df = pd.DataFrame(
        {
            "date": pd.period_range("2010-01", periods=120, freq="M"),
            "y": 100 + 0.5 * t + 10 * np.sin(2 * np.pi * (t - 1) / 12) + rng.normal(0, 1, 120),
        }
    )

print(f"Loaded {len(df)} rows")
print(f"Date range: {df['date'].min()} to {df['date'].max()}")

model = train_lm(
    df,
    y="y",
    index="date",
    seasonal="month",
    trend={"linear": True},
    lags=[1, 12],
)
print("\n" + format_model_summary(model))

result = forecast_lm(model, h=60, pi=[0.95, 0.80])
print("\n" + format_forecast_for_console(result))

# Example 2: Same model on a log scale with stepwise term selection
print("\n" + "=" * 80)
print("Example 2: Log Scale and Stepwise Selection")
print("=" * 80)

model = train_lm(df, y="y", index="date", seasonal="month", lags=[1, 12], scale="log", step=True)
print(f"\nSelected formula: {model.parameters.formula}")
print(f"Dropped terms: {model.debug.data['dropped']}")

result = forecast_lm(model, h=12)
print(result.forecast[["lower95", "lower80", "yhat", "upper80", "upper95"]].round(2))
