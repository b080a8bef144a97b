import numpy as np
import pandas as pd
import pytest

from irislab.data_processing import filter_species, normalize_categorical
from irislab.errors import InsufficientDataError, RankDeficiencyError, SchemaError
from irislab.stats import coefficient_table, fit_ols
from irislab.stats.design import INTERCEPT, CategoricalEncoding
from irislab.stats.regression import confidence_intervals, overall_f_test


def _synthetic_frame(n=40, seed=0):
    rng = np.random.default_rng(seed)
    x1 = rng.uniform(0.0, 10.0, n)
    x2 = rng.uniform(-5.0, 5.0, n)
    return pd.DataFrame({"x1": x1, "x2": x2})


def test_noiseless_data_recovers_exact_coefficients():
    df = _synthetic_frame()
    df["y"] = 1.25 - 2.0 * df["x1"] + 0.5 * df["x2"]

    model = fit_ols(df, "y", ["x1", "x2"])

    assert model.terms == (INTERCEPT, "x1", "x2")
    np.testing.assert_allclose(model.coef, [1.25, -2.0, 0.5], atol=1e-9)
    assert model.rss == pytest.approx(0.0, abs=1e-16)
    assert model.r2 == pytest.approx(1.0)


def test_coefficients_match_least_squares_solution():
    df = _synthetic_frame(seed=3)
    rng = np.random.default_rng(11)
    df["y"] = 3.0 + 0.8 * df["x1"] - 1.1 * df["x2"] + rng.normal(0.0, 0.5, len(df))

    model = fit_ols(df, "y", ["x1", "x2"])

    x = np.column_stack([np.ones(len(df)), df["x1"], df["x2"]])
    expected, *_ = np.linalg.lstsq(x, df["y"].to_numpy(), rcond=None)
    np.testing.assert_allclose(model.coef, expected, rtol=1e-10, atol=1e-12)
    np.testing.assert_allclose(model.fitted + model.resid, df["y"].to_numpy())
    assert model.df_resid == len(df) - 3


def test_simple_regression_standard_errors_match_closed_form():
    df = _synthetic_frame(n=25, seed=5)
    rng = np.random.default_rng(2)
    df["y"] = 2.0 + 0.3 * df["x1"] + rng.normal(0.0, 1.0, len(df))

    model = fit_ols(df, "y", ["x1"])
    table = coefficient_table(model)

    x = df["x1"].to_numpy()
    n = len(x)
    ssxx = np.sum((x - x.mean()) ** 2)
    mse = model.rss / (n - 2)
    se_slope = np.sqrt(mse / ssxx)
    se_intercept = np.sqrt(mse * (1.0 / n + x.mean() ** 2 / ssxx))

    assert table.loc["x1", "std_error"] == pytest.approx(se_slope)
    assert table.loc[INTERCEPT, "std_error"] == pytest.approx(se_intercept)
    assert table.loc["x1", "t_value"] == pytest.approx(model.coef[1] / se_slope)


def test_coefficient_table_layout_and_interval_ordering(iris):
    setosa = filter_species(iris, "setosa")
    model = fit_ols(setosa, "Sepal_Length", ["Sepal_Width", "Petal_Length"])

    table = coefficient_table(model, level=0.95)

    assert list(table.columns) == [
        "estimate",
        "std_error",
        "t_value",
        "p_value",
        "ci_lower",
        "ci_upper",
    ]
    assert table.index.name == "term"
    assert list(table.index) == [INTERCEPT, "Sepal_Width", "Petal_Length"]
    assert (table["std_error"] > 0).all()
    assert table["p_value"].between(0.0, 1.0).all()
    assert (table["ci_lower"] < table["estimate"]).all()
    assert (table["estimate"] < table["ci_upper"]).all()


def test_wider_level_gives_wider_coefficient_intervals(iris):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])
    narrow = confidence_intervals(model, level=0.90)
    wide = confidence_intervals(model, level=0.99)
    assert ((wide["ci_upper"] - wide["ci_lower"]) > (narrow["ci_upper"] - narrow["ci_lower"])).all()


@pytest.mark.parametrize("level", [0.0, 1.0, 1.5, -0.1])
def test_invalid_level_raises(iris, level):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])
    with pytest.raises(ValueError, match="level"):
        coefficient_table(model, level=level)


def test_fit_is_deterministic(iris):
    setosa = filter_species(iris, "setosa")
    first = fit_ols(setosa, "Sepal_Length", ["Sepal_Width", "Petal_Length"])
    second = fit_ols(setosa, "Sepal_Length", ["Sepal_Width", "Petal_Length"])
    np.testing.assert_array_equal(first.coef, second.coef)
    assert first.sigma == second.sigma


def test_model_arrays_are_read_only(iris):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])
    with pytest.raises(ValueError):
        model.coef[0] = 0.0


class TestCategoricalPredictors:
    """Baseline-relative indicator encoding."""

    def test_three_levels_produce_two_indicator_terms(self, iris):
        model = fit_ols(iris, "Sepal_Length", ["Sepal_Width", "Petal_Length"], ["Species"])

        assert model.indicator_terms == ("Species[T.versicolor]", "Species[T.virginica]")
        assert model.terms == (
            INTERCEPT,
            "Sepal_Width",
            "Petal_Length",
            "Species[T.versicolor]",
            "Species[T.virginica]",
        )
        assert model.encodings[0].baseline == "setosa"
        assert model.df_resid == 150 - 5

    def test_encoding_matches_manual_dummy_columns(self, iris):
        model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"], ["Species"])

        labels = iris["Species"].astype(str)
        x = np.column_stack(
            [
                np.ones(len(iris)),
                iris["Sepal_Width"],
                (labels == "versicolor").astype(float),
                (labels == "virginica").astype(float),
            ]
        )
        expected, *_ = np.linalg.lstsq(x, iris["Sepal_Length"].to_numpy(), rcond=None)
        np.testing.assert_allclose(model.coef, expected, rtol=1e-9)

    def test_plain_string_column_uses_sorted_levels(self, iris):
        raw = iris.assign(Species=iris["Species"].astype(str))
        enc = CategoricalEncoding.from_series(raw["Species"])
        assert enc.levels == ("setosa", "versicolor", "virginica")
        assert enc.indicator_names == ("Species[T.versicolor]", "Species[T.virginica]")

    def test_single_observed_level_is_rank_deficient(self, iris):
        setosa = filter_species(iris, "setosa")
        with pytest.raises(RankDeficiencyError, match="Species"):
            fit_ols(setosa, "Sepal_Length", ["Sepal_Width"], ["Species"])

    def test_single_level_after_renormalizing_is_rank_deficient(self, iris):
        setosa = normalize_categorical(
            filter_species(iris, "setosa").assign(Species="setosa"), "Species"
        )
        with pytest.raises(RankDeficiencyError):
            fit_ols(setosa, "Sepal_Length", ["Sepal_Width"], ["Species"])


class TestFitFailures:
    def test_collinear_predictors_raise(self):
        df = _synthetic_frame()
        df["x3"] = 2.0 * df["x1"]
        df["y"] = df["x1"] + df["x2"]
        with pytest.raises(RankDeficiencyError, match="rank"):
            fit_ols(df, "y", ["x1", "x3"])

    def test_constant_predictor_raises(self):
        df = pd.DataFrame({"x": [2.0] * 6, "y": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]})
        with pytest.raises(RankDeficiencyError):
            fit_ols(df, "y", ["x"])

    def test_too_few_rows_raise(self):
        df = pd.DataFrame({"x1": [1.0, 2.0, 3.0], "x2": [0.5, 0.1, 0.9], "y": [1.0, 2.0, 2.5]})
        with pytest.raises(InsufficientDataError):
            fit_ols(df, "y", ["x1", "x2"])

    def test_missing_column_raises(self, iris):
        with pytest.raises(SchemaError, match="Petal_Area"):
            fit_ols(iris, "Sepal_Length", ["Petal_Area"])

    def test_non_numeric_response_raises(self, iris):
        with pytest.raises(SchemaError, match="numeric"):
            fit_ols(iris.assign(Species=iris["Species"].astype(str)), "Species", ["Sepal_Width"])

    def test_rows_with_missing_values_are_dropped_with_warning(self):
        df = _synthetic_frame(n=12)
        df["y"] = 1.0 + df["x1"]
        df.loc[3, "x1"] = np.nan

        with pytest.warns(RuntimeWarning, match="Dropped 1 row"):
            model = fit_ols(df, "y", ["x1"])

        assert model.n_obs == 11
        np.testing.assert_allclose(model.coef, [1.0, 1.0], atol=1e-9)


def test_overall_f_test_matches_r2_identity(iris):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width", "Petal_Length"])
    result = overall_f_test(model)

    p = len(model.terms) - 1
    expected = (model.r2 / p) / ((1.0 - model.r2) / model.df_resid)
    assert result["F"] == pytest.approx(expected)
    assert result["df_model"] == p
    assert 0.0 <= result["pvalue"] <= 1.0


def test_intercept_only_model_has_no_f_test(iris):
    model = fit_ols(iris, "Sepal_Length")
    assert model.coef[0] == pytest.approx(iris["Sepal_Length"].mean())
    assert np.isnan(overall_f_test(model)["F"])


def test_indicator_rows_sum_to_one_except_baseline(iris):
    enc = CategoricalEncoding.from_series(iris["Species"])

    indicators = enc.indicators(iris["Species"])
    row_sums = indicators.sum(axis=1)

    is_baseline = (iris["Species"].astype(str) == enc.baseline).to_numpy()
    assert indicators.shape == (150, 2)
    assert set(np.unique(indicators)) <= {0.0, 1.0}
    np.testing.assert_array_equal(row_sums[is_baseline], 0.0)
    np.testing.assert_array_equal(row_sums[~is_baseline], 1.0)


def test_models_compare_by_identity(iris):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])
    other = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])

    assert model == model
    assert model != other
    assert len({model, other}) == 2
