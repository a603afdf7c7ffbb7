"""Tests for the statsmodels OLS engine."""

import numpy as np
import pandas as pd
import pytest

from tslm_core.exceptions import DataMismatchError, InvalidSpecError
from tslm_core.models.base import RegressionFormula, build_formula
from tslm_core.models.ols import OLSEngine, build_design, extract_ic


@pytest.fixture
def linear_data() -> pd.DataFrame:
    rng = np.random.default_rng(42)
    x = np.linspace(0, 10, 50)
    return pd.DataFrame({"x": x, "y": 2.0 + 3.0 * x + rng.normal(0, 0.1, 50)})


@pytest.fixture
def grouped_data() -> pd.DataFrame:
    rng = np.random.default_rng(7)
    groups = pd.Categorical(["a", "b", "c"] * 20, categories=["a", "b", "c"])
    effect = pd.Series(groups).map({"a": 0.0, "b": 5.0, "c": -5.0}).astype(float).to_numpy()
    t = np.arange(60, dtype=float)
    return pd.DataFrame({"g": groups, "t": t, "y": 10 + 0.5 * t + effect + rng.normal(0, 0.5, 60)})


def test_formula_rendering() -> None:
    assert str(RegressionFormula("y", ("a", "b"))) == "y ~ a + b"
    assert str(RegressionFormula("y", ())) == "y ~ 1"


def test_formula_drop() -> None:
    formula = RegressionFormula("y", ("a", "g"), frozenset({"g"}))
    dropped = formula.drop("g")
    assert dropped.regressors == ("a",)
    assert dropped.categorical == frozenset()


def test_fit_recovers_coefficients(linear_data: pd.DataFrame) -> None:
    engine = OLSEngine()
    fitted = engine.fit(RegressionFormula("y", ("x",)), linear_data)
    assert fitted.params["const"] == pytest.approx(2.0, abs=0.1)
    assert fitted.params["x"] == pytest.approx(3.0, abs=0.05)
    assert engine.debug_.model_name == "ols"
    assert engine.debug_.data["nobs"] == 50


def test_categorical_treatment_coding(grouped_data: pd.DataFrame) -> None:
    """The first level is the baseline; other levels get one dummy each."""
    formula = build_formula("y", ("g", "t"), grouped_data)
    assert formula.categorical == frozenset({"g"})
    fitted = OLSEngine().fit(formula, grouped_data)
    assert fitted.columns == ("const", "g[b]", "g[c]", "t")
    assert fitted.levels == {"g": ("a", "b", "c")}
    assert fitted.params["g[b]"] == pytest.approx(5.0, abs=0.5)


def test_predict_intervals_nest(grouped_data: pd.DataFrame) -> None:
    engine = OLSEngine()
    fitted = engine.fit(build_formula("y", ("g", "t"), grouped_data), grouped_data)
    rows = pd.DataFrame({"g": pd.Categorical(["b", "c"], categories=["a", "b", "c"]), "t": [60.0, 61.0]})

    wide = engine.predict(fitted, rows, 0.95)
    narrow = engine.predict(fitted, rows, 0.80)
    assert list(wide.columns) == ["point", "lower", "upper"]
    np.testing.assert_allclose(wide["point"], narrow["point"])
    assert (wide["lower"] <= narrow["lower"]).all()
    assert (narrow["lower"] <= narrow["point"]).all()
    assert (narrow["point"] <= narrow["upper"]).all()
    assert (narrow["upper"] <= wide["upper"]).all()


def test_single_row_prediction_matches_batch(grouped_data: pd.DataFrame) -> None:
    engine = OLSEngine()
    fitted = engine.fit(build_formula("y", ("g", "t"), grouped_data), grouped_data)
    rows = grouped_data.iloc[:4]
    batch = engine.predict(fitted, rows, 0.9)
    single = engine.predict(fitted, rows.iloc[[2]], 0.9)
    assert single["point"].iloc[0] == pytest.approx(batch["point"].iloc[2])
    assert single["upper"].iloc[0] == pytest.approx(batch["upper"].iloc[2])


def test_unseen_level_raises(grouped_data: pd.DataFrame) -> None:
    engine = OLSEngine()
    fitted = engine.fit(build_formula("y", ("g", "t"), grouped_data), grouped_data)
    rows = pd.DataFrame({"g": ["d"], "t": [1.0]})
    with pytest.raises(DataMismatchError, match="not seen"):
        build_design(rows, fitted.formula, fitted.levels)


def test_missing_values_raise(linear_data: pd.DataFrame) -> None:
    data = linear_data.copy()
    data.loc[3, "x"] = np.nan
    with pytest.raises(DataMismatchError, match="missing or infinite"):
        OLSEngine().fit(RegressionFormula("y", ("x",)), data)


def test_too_few_rows_raise() -> None:
    data = pd.DataFrame({"x": [1.0, 2.0], "y": [1.0, 3.0]})
    with pytest.raises(DataMismatchError, match="Insufficient data"):
        OLSEngine().fit(RegressionFormula("y", ("x",)), data)


@pytest.fixture
def stepwise_data() -> pd.DataFrame:
    """x2 is orthogonal to the intercept, x1 and the noise, so it explains nothing."""
    t = np.arange(40, dtype=float)
    x2 = np.tile([1.0, -1.0, -1.0, 1.0], 10)
    noise = np.tile([1.0, 1.0, -1.0, -1.0], 10)
    return pd.DataFrame({"x1": t, "x2": x2, "y": 1.0 + 2.0 * t + 0.5 * noise})


def test_stepwise_drops_useless_term(stepwise_data: pd.DataFrame) -> None:
    engine = OLSEngine()
    fitted = engine.fit_stepwise(RegressionFormula("y", ("x1", "x2")), stepwise_data)
    assert fitted.formula.regressors == ("x1",)
    assert engine.debug_.model_name == "ols_stepwise"
    assert engine.debug_.data["dropped"] == ["x2"]
    assert len(engine.debug_.data["history"]) == 2


def test_stepwise_bic_and_explicit_penalty(stepwise_data: pd.DataFrame) -> None:
    engine = OLSEngine()
    bic = engine.fit_stepwise(RegressionFormula("y", ("x1", "x2")), stepwise_data, criterion="bic")
    assert bic.formula.regressors == ("x1",)
    explicit = engine.fit_stepwise(RegressionFormula("y", ("x1", "x2")), stepwise_data, k=3)
    assert explicit.formula.regressors == ("x1",)
    assert engine.debug_.data["criterion"] == "k=3"


def test_stepwise_max_steps(stepwise_data: pd.DataFrame) -> None:
    fitted = OLSEngine().fit_stepwise(RegressionFormula("y", ("x1", "x2")), stepwise_data, max_steps=0)
    assert fitted.formula.regressors == ("x1", "x2")


def test_stepwise_unknown_criterion_raises(stepwise_data: pd.DataFrame) -> None:
    with pytest.raises(InvalidSpecError, match="criterion"):
        OLSEngine().fit_stepwise(RegressionFormula("y", ("x1", "x2")), stepwise_data, criterion="hqic")


def test_extract_ic_penalty(linear_data: pd.DataFrame) -> None:
    """With penalty 2 the criterion differs from statsmodels' AIC only by a constant."""
    engine = OLSEngine()
    small = engine.fit(RegressionFormula("y", ()), linear_data)
    full = engine.fit(RegressionFormula("y", ("x",)), linear_data)
    ours = extract_ic(full.results, 2.0) - extract_ic(small.results, 2.0)
    theirs = full.results.aic - small.results.aic
    assert ours == pytest.approx(theirs)
