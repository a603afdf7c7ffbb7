"""CLI wrapper for the train-then-forecast pipeline.

This module provides a command-line interface for running forecasts.
All core forecasting logic is in tslm_core.api.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from tslm_core.api import ForecastConfig, run_forecast
from tslm_core.config import DEFAULT_PI, SCALE_METHODS
from tslm_core.data.loaders import load_series
from tslm_core.formatters.console import format_forecast_for_console
from tslm_core.specs import TrendSpec


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Train a linear regression model and forecast a time series.")
    parser.add_argument("--file", type=str, required=True, help="Path to the series CSV file")
    parser.add_argument("--index", type=str, required=True, help="Timestamp column name")
    parser.add_argument("--y", type=str, required=True, help="Target column name")
    parser.add_argument("--x", type=str, nargs="*", default=[], help="Exogenous column names")
    parser.add_argument(
        "--period",
        type=str,
        default=None,
        help="Parse timestamps as periods of this frequency (e.g. M, Q, W)",
    )
    parser.add_argument(
        "--seasonal",
        type=str,
        nargs="*",
        default=[],
        help="Calendar fields (quarter, month, week, wday, yday, hour, minute)",
    )
    parser.add_argument("--lags", type=int, nargs="*", default=[], help="Target lags")
    parser.add_argument("--no-linear", action="store_true", help="Disable the linear trend")
    parser.add_argument("--power", type=float, nargs="*", default=[], help="Power trend exponents")
    parser.add_argument("--exponential", action="store_true", help="Add an exponential trend")
    parser.add_argument("--log-trend", action="store_true", help="Add a log trend")
    parser.add_argument("--scale", type=str, default=None, choices=SCALE_METHODS, help="Target transform")
    parser.add_argument("--step", action="store_true", help="Apply stepwise term selection")
    parser.add_argument(
        "--criterion",
        type=str,
        default="aic",
        choices=["aic", "bic"],
        help="Stepwise selection criterion (default: aic)",
    )
    parser.add_argument("--horizon", type=int, default=12, help="Number of periods to forecast (default: 12)")
    parser.add_argument(
        "--pi",
        type=float,
        nargs="*",
        default=list(DEFAULT_PI),
        help="Prediction interval levels (default: 0.95 0.80)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point for the forecasting pipeline.

    Parses command-line arguments, loads the series, trains the model and
    prints the forecast.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("Linear Regression Forecasting Pipeline")
    print("=" * 60)

    try:
        print("\n[1/3] Loading series...")
        print(f"  Reading from: {args.file}")
        df = load_series(args.file, index=args.index, period=args.period)
        print(f"[OK] Loaded {len(df)} rows")

        trend = TrendSpec(
            linear=not args.no_linear,
            exponential=args.exponential,
            log=args.log_trend,
            power=tuple(args.power),
        )
        config = ForecastConfig(
            y=args.y,
            x=args.x,
            index=args.index,
            seasonal=args.seasonal,
            trend=None if trend.is_empty else trend,
            lags=args.lags,
            scale=args.scale,
            step=args.step,
            step_options={"criterion": args.criterion} if args.step else {},
            horizon=args.horizon,
            pi=tuple(args.pi),
        )

        print(f"\n[2/3] Training and forecasting {args.horizon} periods...")
        result = run_forecast(df, config=config)
        print(f"[OK] Formula: {result.parameters.formula}")

        print("\n[3/3] Formatting results...")
        print("\n" + format_forecast_for_console(result))
        print("\n[OK] Pipeline completed successfully")

    except Exception as e:
        print(f"\n[ERROR] Pipeline failed: {e}")
        raise


if __name__ == "__main__":
    main()
