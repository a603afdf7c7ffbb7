"""Regression engine interface.

The trainer and the forecast extender talk to the regression engine only
through this interface, so a different estimator can be plugged in without
touching the feature pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

import pandas as pd


@dataclass(frozen=True)
class RegressionFormula:
    """Structured regression formula: target explained by an ordered list of terms.

    Attributes:
        target: Response column.
        regressors: Term names, exogenous first then generated features.
        categorical: Terms coded as categorical (one dummy per non-baseline level).
    """

    target: str
    regressors: tuple[str, ...]
    categorical: frozenset[str] = frozenset()

    def drop(self, term: str) -> RegressionFormula:
        """Return the formula without ``term``."""
        return RegressionFormula(
            target=self.target,
            regressors=tuple(r for r in self.regressors if r != term),
            categorical=self.categorical - {term},
        )

    def __str__(self) -> str:
        rhs = " + ".join(self.regressors) if self.regressors else "1"
        return f"{self.target} ~ {rhs}"


def is_categorical(series: pd.Series) -> bool:
    """True for category, object, string and boolean columns."""
    return (
        isinstance(series.dtype, pd.CategoricalDtype)
        or pd.api.types.is_object_dtype(series.dtype)
        or pd.api.types.is_string_dtype(series.dtype)
        or pd.api.types.is_bool_dtype(series.dtype)
    )


def build_formula(target: str, regressors: Iterable[str], data: pd.DataFrame) -> RegressionFormula:
    """Build a formula, flagging categorical terms from the column dtypes of ``data``."""
    regressors = tuple(regressors)
    categorical = frozenset(r for r in regressors if is_categorical(data[r]))
    return RegressionFormula(target=target, regressors=regressors, categorical=categorical)


class RegressionEngine(ABC):
    """Abstract base class for regression engines.

    Engines must implement fit(), fit_stepwise() and predict(); fitted objects
    are opaque to the rest of the package.
    """

    @abstractmethod
    def fit(self, formula: RegressionFormula, data: pd.DataFrame) -> Any:
        """Fit the formula on a data table.

        Args:
            formula: Structured regression formula.
            data: Table holding the target and every regressor.

        Returns:
            Fitted model object (type depends on implementation)

        Raises:
            DataMismatchError: If the data cannot be fitted.
        """
        pass

    @abstractmethod
    def fit_stepwise(self, formula: RegressionFormula, data: pd.DataFrame, **options: Any) -> Any:
        """Fit the formula and prune terms by an information criterion.

        Args:
            formula: Full regression formula.
            data: Table holding the target and every regressor.
            **options: Engine-specific selection options.

        Returns:
            Fitted model object of the selected formula
        """
        pass

    @abstractmethod
    def predict(self, fitted: Any, newrows: pd.DataFrame, level: float) -> pd.DataFrame:
        """Predict new rows with prediction intervals.

        Args:
            fitted: Fitted model object (from fit() or fit_stepwise())
            newrows: Rows holding every regressor of the fitted formula.
            level: Confidence level of the prediction interval, in (0, 1).

        Returns:
            DataFrame indexed like ``newrows`` with columns point, lower, upper
        """
        pass

    @abstractmethod
    def fitted_values(self, fitted: Any) -> pd.Series:
        """In-sample fitted values of a fitted model."""
        pass

    @abstractmethod
    def formula_of(self, fitted: Any) -> RegressionFormula:
        """Formula of a fitted model (after any stepwise pruning)."""
        pass
