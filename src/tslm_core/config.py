"""Configuration constants for the forecasting engine."""

# Default prediction interval levels
DEFAULT_PI = (0.95, 0.80)

# Supported target transformations and their accepted aliases
SCALE_METHODS = ("log", "normal", "standard")
SCALE_ALIASES = {
    "normalize": "normal",
    "minmax": "normal",
    "min-max": "normal",
    "standardize": "standard",
}

# Keys accepted by the trend declaration
TREND_KEYS = ("linear", "exponential", "log", "power")

# Calendar fields in evaluation (and column) order
CALENDAR_FIELDS = ("quarter", "month", "week", "wday", "yday", "hour", "minute")

# Calendar fields allowed per frequency unit (finer units permit coarser fields)
ALLOWED_FIELDS = {
    "year": (),
    "quarter": ("quarter",),
    "month": ("month", "quarter"),
    "week": ("week", "month", "quarter"),
    "day": ("wday", "yday", "week", "month", "quarter"),
    "hour": ("hour", "wday", "yday", "week", "month", "quarter"),
    "minute": ("minute", "hour", "wday", "yday", "week", "month", "quarter"),
}

# Observations per seasonal cycle for each unit (hour and minute are divided by the step)
CYCLE_LENGTHS = {
    "year": 1,
    "quarter": 4,
    "month": 12,
    "week": 52,
    "day": 7,
    "hour": 24,
    "minute": 1440,
}

# Minimum residual degrees of freedom required to fit a model
MIN_RESIDUAL_DF = 1
