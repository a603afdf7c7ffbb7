"""Regression engines.

Adding an engine
================

An engine implements ``RegressionEngine`` (see models/base.py):

1. ``fit(formula, data)`` and ``fit_stepwise(formula, data, **options)`` return
   an opaque fitted object.
2. ``predict(fitted, newrows, level)`` returns a DataFrame with ``point``,
   ``lower`` and ``upper`` columns indexed like ``newrows``.
3. ``fitted_values(fitted)`` and ``formula_of(fitted)`` expose the in-sample
   fit and the final formula.
4. Optionally set ``self.debug_`` to a ``ModelDebugInfo`` after fitting; the
   trainer copies it onto ``TrainedModel.debug``.

Prediction must be read-only on the fitted object: the forecast loop calls
``predict`` once per step and interval level.
"""

from tslm_core.models.base import RegressionEngine, RegressionFormula, build_formula
from tslm_core.models.ols import FittedRegression, OLSEngine

__all__ = [
    "FittedRegression",
    "OLSEngine",
    "RegressionEngine",
    "RegressionFormula",
    "build_formula",
]
