"""Output formatters."""

from tslm_core.formatters.console import format_forecast_for_console, format_model_summary

__all__ = ["format_forecast_for_console", "format_model_summary"]
