"""Domain-specific exceptions and warnings for tslm-core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from TslmError for easy catching, and all warnings
inherit from TslmWarning so they can be filtered as a group.
"""


class TslmError(Exception):
    """Base exception for all tslm-core errors.

    This is the base class for all domain-specific exceptions in the package.
    Users can catch this exception to handle any tslm-core error.
    """

    pass


class InvalidSpecError(TslmError):
    """Raised when a feature specification is malformed.

    This exception is raised when:
    - The trend declaration has unknown keys or non-boolean flags
    - A seasonal field is unknown or not valid for the series frequency
    - Lags are not positive integers
    - The scale method is not supported
    - Forecast arguments (horizon, interval levels) are invalid
    """

    pass


class DataMismatchError(TslmError):
    """Raised when the input data does not fit the requested model.

    This exception is raised when:
    - The target or exogenous columns are missing from the input
    - Event or knot timestamps do not match the series timestamp type
    - The series is irregular, has gaps or duplicate timestamps
    - The data cannot be scaled with the requested method
    """

    pass


class TslmWarning(UserWarning):
    """Base warning for recoverable tslm-core conditions."""

    pass


class RedundancyWarning(TslmWarning):
    """Issued when the linear trend duplicates a power-1 trend term."""

    pass


class RowCountMismatchWarning(TslmWarning):
    """Issued when future exogenous rows do not match the forecast horizon.

    The horizon is coerced to the number of supplied rows.
    """

    pass


class SeasonalFieldWarning(TslmWarning):
    """Issued when some requested seasonal fields are dropped for the frequency."""

    pass
