"""Declarative feature specifications and their validation.

All validation here happens before any feature is constructed; malformed
declarations raise ``InvalidSpecError``.
"""

from __future__ import annotations

import logging
import numbers
import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

import numpy as np

from tslm_core.config import CALENDAR_FIELDS, SCALE_ALIASES, SCALE_METHODS, TREND_KEYS
from tslm_core.exceptions import InvalidSpecError, RedundancyWarning

logger = logging.getLogger(__name__)


def _is_bool(value: Any) -> bool:
    # numpy bools are not bool subclasses
    return isinstance(value, (bool, np.bool_))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not _is_bool(value)


@dataclass(frozen=True)
class TrendSpec:
    """Trend structure of the model.

    Attributes:
        linear: Add ``linear_trend`` (1, 2, ..., n).
        exponential: Add ``exp_trend`` (exp of the row number).
        log: Add ``log_trend`` (log of the row number).
        power: Exponents of additional polynomial terms, e.g. ``(0.5, 2)``.
    """

    linear: bool = True
    exponential: bool = False
    log: bool = False
    power: tuple[float, ...] = ()

    @classmethod
    def from_value(cls, trend: TrendSpec | Mapping[str, Any] | None) -> TrendSpec | None:
        """Build a TrendSpec from a mapping such as ``{"linear": True, "power": [2]}``.

        Keys missing from a mapping default to False (no power terms).

        Raises:
            InvalidSpecError: On unknown keys, non-boolean flags or invalid powers.
        """
        if trend is None or isinstance(trend, TrendSpec):
            spec = trend
        elif isinstance(trend, Mapping):
            unknown = [k for k in trend if k not in TREND_KEYS]
            if unknown:
                raise InvalidSpecError(
                    f"The 'trend' argument is not valid: unknown key(s) {unknown}. "
                    f"Valid keys: {list(TREND_KEYS)}"
                )
            flags = {}
            for key in ("linear", "exponential", "log"):
                value = trend.get(key, False)
                if not _is_bool(value):
                    raise InvalidSpecError(
                        f"The '{key}' argument of the trend must be either True or False"
                    )
                flags[key] = bool(value)
            spec = cls(power=_normalize_power(trend.get("power", False)), **flags)
        else:
            raise InvalidSpecError(
                f"The 'trend' argument is not valid, use a mapping or TrendSpec, got {type(trend).__name__}"
            )

        if spec is None:
            return None
        spec = replace(spec, power=_normalize_power(spec.power))
        for key in ("linear", "exponential", "log"):
            if not _is_bool(getattr(spec, key)):
                raise InvalidSpecError(
                    f"The '{key}' argument of the trend must be either True or False"
                )

        if spec.linear and 1 in spec.power:
            message = (
                "Setting both the 'power' argument to 1 and the 'linear' argument to True "
                "is equivalent. To avoid redundancy in the variables, setting 'linear' to False"
            )
            logger.warning(message)
            warnings.warn(message, RedundancyWarning, stacklevel=3)
            spec = replace(spec, linear=False)
        return spec

    @property
    def is_empty(self) -> bool:
        return not (self.linear or self.exponential or self.log or self.power)


def _normalize_power(power: Any) -> tuple[float, ...]:
    if power is None or (_is_bool(power) and not power):
        return ()
    if _is_number(power):
        return (power,)
    if isinstance(power, Iterable) and not isinstance(power, str):
        values = tuple(power)
        if all(_is_number(p) for p in values):
            return values
    raise InvalidSpecError(
        "The value of the 'power' argument is not valid, can be either a numeric "
        "(e.g., 2 for square, 0.5 for square root, etc.), a list of numerics, or False to disable"
    )


def validate_lags(lags: int | Iterable[int] | None) -> tuple[int, ...]:
    """Validate lags and return them sorted and de-duplicated.

    Raises:
        InvalidSpecError: If any lag is not a positive integer.
    """
    if lags is None:
        return ()
    if _is_number(lags):
        lags = [lags]
    if isinstance(lags, str) or not isinstance(lags, Iterable):
        raise InvalidSpecError("The value of the 'lags' argument is not valid. Must be positive integers")
    values = list(lags)
    for lag in values:
        if not _is_number(lag) or lag != int(lag) or lag <= 0:
            raise InvalidSpecError(
                f"The value of the 'lags' argument is not valid ({lag!r}). Must be positive integers"
            )
    return tuple(sorted({int(lag) for lag in values}))


def validate_scale(scale: str | None) -> str | None:
    """Return the canonical scale method name, or None for no scaling."""
    if scale is None:
        return None
    if not isinstance(scale, str):
        raise InvalidSpecError(f"The value of the 'scale' argument is not valid: {scale!r}")
    method = SCALE_ALIASES.get(scale, scale)
    if method not in SCALE_METHODS:
        raise InvalidSpecError(
            f"The value of the 'scale' argument is not valid: '{scale}'. "
            f"Supported methods: {list(SCALE_METHODS)}"
        )
    return method


def validate_seasonal(seasonal: str | Iterable[str] | None) -> tuple[str, ...]:
    """Validate seasonal field names (frequency-independent part)."""
    if seasonal is None:
        return ()
    if isinstance(seasonal, str):
        seasonal = (seasonal,)
    if not isinstance(seasonal, Iterable):
        raise InvalidSpecError(f"The 'seasonal' argument is not valid: {seasonal!r}")
    fields = tuple(seasonal)
    unknown = [f for f in fields if f not in CALENDAR_FIELDS]
    if unknown:
        raise InvalidSpecError(
            f"Unknown seasonal component(s) {unknown}. Valid fields: {list(CALENDAR_FIELDS)}"
        )
    return fields


def validate_events(events: Mapping[str, Any] | None) -> dict[str, tuple]:
    """Validate the events container; a single timestamp per event is accepted."""
    if events is None:
        return {}
    if not isinstance(events, Mapping):
        raise InvalidSpecError("The 'events' argument is not valid, please use a mapping")
    validated = {}
    for name, stamps in events.items():
        if isinstance(stamps, (str, bytes)) or not isinstance(stamps, Iterable):
            stamps = [stamps]
        validated[str(name)] = tuple(stamps)
    return validated


def validate_knots(knots: Mapping[str, Any] | None) -> dict[str, Any]:
    """Validate the knots container (one timestamp per knot)."""
    if knots is None:
        return {}
    if not isinstance(knots, Mapping):
        raise InvalidSpecError("The 'knots' argument is not valid, please use a mapping")
    return {str(name): value for name, value in knots.items()}


@dataclass(frozen=True)
class FeatureSpec:
    """Validated bundle of feature declarations.

    Attributes:
        seasonal: Requested calendar fields (resolved against the frequency later).
        trend: Trend structure, or None for no trend terms.
        lags: Positive lags, sorted ascending.
        events: Event name to trigger timestamps.
        knots: Knot name to ramp start timestamp.
        scale: Canonical scale method, or None.
    """

    seasonal: tuple[str, ...] = ()
    trend: TrendSpec | None = field(default_factory=TrendSpec)
    lags: tuple[int, ...] = ()
    events: dict[str, tuple] = field(default_factory=dict)
    knots: dict[str, Any] = field(default_factory=dict)
    scale: str | None = None

    @classmethod
    def create(
        cls,
        seasonal: str | Iterable[str] | None = None,
        trend: TrendSpec | Mapping[str, Any] | None = TrendSpec(),
        lags: int | Iterable[int] | None = None,
        events: Mapping[str, Any] | None = None,
        knots: Mapping[str, Any] | None = None,
        scale: str | None = None,
    ) -> FeatureSpec:
        """Validate raw declarations and build a FeatureSpec.

        Raises:
            InvalidSpecError: If any declaration is malformed.
        """
        return cls(
            seasonal=validate_seasonal(seasonal),
            trend=TrendSpec.from_value(trend),
            lags=validate_lags(lags),
            events=validate_events(events),
            knots=validate_knots(knots),
            scale=validate_scale(scale),
        )
