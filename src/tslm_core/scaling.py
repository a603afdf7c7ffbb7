"""Target scaling transforms.

The transform parameters are computed once on the training target and frozen
in ``ScalingParameters``; forecasts are mapped back to the original units with
the same frozen parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd

from tslm_core.exceptions import DataMismatchError
from tslm_core.specs import validate_scale


@dataclass(frozen=True)
class ScalingParameters:
    """Frozen transform constants.

    Attributes:
        method: "log", "normal" or "standard".
        params: ``{"min", "max"}`` for normal, ``{"mean", "sd"}`` for standard,
            empty for log.
    """

    method: str
    params: dict[str, float] = field(default_factory=dict)


def scaled_name(target: str, method: str) -> str:
    """Name of the scaled target column, e.g. ``y_log``."""
    return f"{target}_{method}"


def apply_scale(values: pd.Series, method: str) -> tuple[pd.Series, ScalingParameters]:
    """Scale a target column.

    Args:
        values: Training target values.
        method: "log", "normal" or "standard" (aliases accepted).

    Returns:
        Tuple of (scaled values, frozen parameters).

    Raises:
        DataMismatchError: If the data cannot be transformed (non-positive values
            for log, constant series for normal/standard).
    """
    method = validate_scale(method)
    if method is None:
        raise ValueError("A scaling method is required")
    values = values.astype(float)

    if method == "log":
        if (values <= 0).any():
            raise DataMismatchError("Log scaling requires strictly positive target values")
        return np.log(values), ScalingParameters(method="log")

    if method == "normal":
        normal_min = float(values.min())
        normal_max = float(values.max())
        if normal_max == normal_min:
            raise DataMismatchError("Cannot normalize a constant target (max equals min)")
        parameters = ScalingParameters(method="normal", params={"min": normal_min, "max": normal_max})
        return (values - normal_min) / (normal_max - normal_min), parameters

    # standard: sample standard deviation
    standard_mean = float(values.mean())
    standard_sd = float(values.std(ddof=1))
    if not standard_sd > 0:
        raise DataMismatchError("Cannot standardize a target with zero standard deviation")
    parameters = ScalingParameters(method="standard", params={"mean": standard_mean, "sd": standard_sd})
    return (values - standard_mean) / standard_sd, parameters


def invert_scale(values: Any, parameters: ScalingParameters | None) -> Any:
    """Map scaled values (scalar, array or Series) back to the original units."""
    if parameters is None:
        return values
    if parameters.method == "log":
        return np.exp(values)
    if parameters.method == "normal":
        p = parameters.params
        return values * (p["max"] - p["min"]) + p["min"]
    if parameters.method == "standard":
        p = parameters.params
        return values * p["sd"] + p["mean"]
    raise ValueError(f"Unknown scaling method: {parameters.method}")
