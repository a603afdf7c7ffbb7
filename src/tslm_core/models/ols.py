"""Ordinary least squares engine built on statsmodels.

The design matrix is an intercept, the numeric regressors as-is and treatment
(drop-first) dummy coding for categorical regressors. Category levels are
frozen at fit time so that single future rows are coded exactly like the
training rows. Prediction intervals are observation intervals from
``get_prediction().summary_frame()``.

Stepwise selection is a backward elimination of whole terms: at every step
each remaining term is dropped in turn and the candidate with the lowest
information criterion is kept, until no drop improves the criterion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
import statsmodels.api as sm

from tslm_core.config import MIN_RESIDUAL_DF
from tslm_core.exceptions import DataMismatchError, InvalidSpecError
from tslm_core.models.base import RegressionEngine, RegressionFormula
from tslm_core.types import ModelDebugInfo

logger = logging.getLogger(__name__)

CONSTANT = "const"


@dataclass(frozen=True)
class FittedRegression:
    """Fitted OLS model.

    Attributes:
        formula: Formula of the fitted model.
        levels: Frozen levels per categorical term, baseline first.
        columns: Design matrix columns, intercept first.
        results: statsmodels regression results.
    """

    formula: RegressionFormula
    levels: dict[str, tuple]
    columns: tuple[str, ...]
    results: Any

    @property
    def aic(self) -> float:
        return float(self.results.aic)

    @property
    def params(self) -> pd.Series:
        return self.results.params


def _sorted_levels(values: list) -> list:
    try:
        return sorted(values)
    except TypeError:
        return sorted(values, key=str)


def frozen_levels(series: pd.Series) -> tuple:
    """Observed levels of a categorical column, in category order when defined."""
    observed = list(pd.unique(series.dropna()))
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(observed)
        return tuple(c for c in series.cat.categories if c in present)
    return tuple(_sorted_levels(observed))


def build_design(
    data: pd.DataFrame,
    formula: RegressionFormula,
    levels: dict[str, tuple],
) -> pd.DataFrame:
    """Build the numeric design matrix of ``formula`` for ``data``.

    Raises:
        DataMismatchError: If a regressor is missing or a categorical value was not
            seen when the levels were frozen.
    """
    missing = [r for r in formula.regressors if r not in data.columns]
    if missing:
        raise DataMismatchError(f"Missing regressor column(s): {missing}")

    columns: dict[str, Any] = {CONSTANT: np.ones(len(data))}
    for term in formula.regressors:
        values = data[term]
        if term in formula.categorical:
            term_levels = levels[term]
            raw = values.astype(object)
            unseen = set(raw.dropna()) - set(term_levels)
            if unseen:
                raise DataMismatchError(
                    f"Column '{term}' has level(s) not seen during training: {sorted(unseen, key=str)}"
                )
            for level in term_levels[1:]:
                columns[f"{term}[{level}]"] = (raw == level).astype(float).to_numpy()
        else:
            columns[term] = pd.to_numeric(values).astype(float).to_numpy()
    return pd.DataFrame(columns, index=data.index)


def extract_ic(results: Any, penalty: float) -> float:
    """Information criterion ``n*log(RSS/n) + penalty*edf`` used by stepwise selection."""
    n = results.nobs
    edf = results.df_model + 1
    with np.errstate(divide="ignore"):
        return float(n * np.log(results.ssr / n) + penalty * edf)


class OLSEngine(RegressionEngine):
    """statsmodels OLS engine with prediction intervals and stepwise selection."""

    def __init__(self) -> None:
        """Initialize the engine."""
        self.debug_: ModelDebugInfo | None = None

    def _fit(self, formula: RegressionFormula, data: pd.DataFrame) -> FittedRegression:
        if formula.target not in data.columns:
            raise DataMismatchError(f"Target column '{formula.target}' not found")
        levels = {term: frozen_levels(data[term]) for term in formula.categorical}
        design = build_design(data, formula, levels)
        y = data[formula.target].astype(float)

        if not np.isfinite(design.to_numpy()).all() or not np.isfinite(y.to_numpy()).all():
            raise DataMismatchError(
                "Design table contains missing or infinite values; check the target, "
                "exogenous columns and trend terms"
            )
        residual_df = len(y) - design.shape[1]
        if residual_df < MIN_RESIDUAL_DF:
            raise DataMismatchError(
                f"Insufficient data: {len(y)} rows for {design.shape[1]} design columns"
            )

        results = sm.OLS(y, design).fit()
        return FittedRegression(
            formula=formula,
            levels=levels,
            columns=tuple(design.columns),
            results=results,
        )

    def fit(self, formula: RegressionFormula, data: pd.DataFrame) -> FittedRegression:
        """Fit OLS on ``data``.

        Returns:
            FittedRegression holding the statsmodels results and frozen levels

        Raises:
            DataMismatchError: On missing columns, non-finite values or too few rows.
        """
        fitted = self._fit(formula, data)
        logger.debug(f"Fitted OLS: {formula} (nobs={int(fitted.results.nobs)})")
        self.debug_ = ModelDebugInfo(
            model_name="ols",
            data={
                "formula": str(formula),
                "nobs": int(fitted.results.nobs),
                "aic": float(fitted.results.aic),
                "rsquared": float(fitted.results.rsquared),
            },
        )
        return fitted

    def fit_stepwise(
        self,
        formula: RegressionFormula,
        data: pd.DataFrame,
        criterion: str = "aic",
        k: float | None = None,
        max_steps: int = 1000,
        **_options: Any,
    ) -> FittedRegression:
        """Fit OLS and drop terms by backward elimination.

        Args:
            formula: Full formula.
            data: Training table.
            criterion: "aic" (penalty 2) or "bic" (penalty log(n)).
            k: Explicit penalty per parameter, overrides ``criterion``.
            max_steps: Maximum number of terms to drop.
            **_options: Additional options (unused, for interface compatibility)

        Returns:
            FittedRegression of the selected formula

        Raises:
            InvalidSpecError: If the criterion is unknown.
        """
        if k is None:
            penalties = {"aic": 2.0, "bic": float(np.log(len(data)))}
            if criterion not in penalties:
                raise InvalidSpecError(
                    f"Unknown stepwise criterion '{criterion}'. Use one of {list(penalties)}"
                )
            penalty = penalties[criterion]
        else:
            penalty = float(k)

        current = self._fit(formula, data)
        current_score = extract_ic(current.results, penalty)
        history = [{"formula": str(formula), "score": current_score}]
        dropped: list[str] = []

        while current.formula.regressors and len(dropped) < max_steps:
            best = None
            for term in current.formula.regressors:
                candidate = self._fit(current.formula.drop(term), data)
                score = extract_ic(candidate.results, penalty)
                if best is None or score < best[0]:
                    best = (score, term, candidate)

            score, term, candidate = best
            if score >= current_score:
                break
            logger.info(f"Stepwise: dropping '{term}' ({current_score:.3f} -> {score:.3f})")
            dropped.append(term)
            current, current_score = candidate, score
            history.append({"formula": str(current.formula), "score": current_score})

        logger.info(f"Stepwise selection kept {len(current.formula.regressors)} term(s): {current.formula}")
        self.debug_ = ModelDebugInfo(
            model_name="ols_stepwise",
            data={
                "criterion": criterion if k is None else f"k={penalty:g}",
                "dropped": dropped,
                "history": history,
                "formula": str(current.formula),
            },
        )
        return current

    def predict(self, fitted: FittedRegression, newrows: pd.DataFrame, level: float) -> pd.DataFrame:
        """Point prediction and prediction interval at ``level`` for each row."""
        design = build_design(newrows, fitted.formula, fitted.levels)
        frame = fitted.results.get_prediction(design).summary_frame(alpha=1 - level)
        return pd.DataFrame(
            {
                "point": frame["mean"].to_numpy(),
                "lower": frame["obs_ci_lower"].to_numpy(),
                "upper": frame["obs_ci_upper"].to_numpy(),
            },
            index=newrows.index,
        )

    def fitted_values(self, fitted: FittedRegression) -> pd.Series:
        return fitted.results.fittedvalues

    def formula_of(self, fitted: FittedRegression) -> RegressionFormula:
        return fitted.formula
