"""Data loading and preparation utilities."""

from tslm_core.data.loaders import load_series
from tslm_core.data.preparation import PreparedSeries, prepare_series

__all__ = ["PreparedSeries", "load_series", "prepare_series"]
