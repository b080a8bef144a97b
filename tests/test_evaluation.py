import math

import numpy as np
import pandas as pd
import pytest

from irislab.data_processing import filter_species, train_test_split
from irislab.errors import EmptyResultError, SchemaError
from irislab.stats import evaluate, fit_ols, regression_metrics
from irislab.stats.evaluation import mean_squared_error


def test_mean_squared_error_basic():
    assert mean_squared_error(np.array([1.0, 2.0, 3.0]), np.array([1.0, 2.0, 5.0])) == pytest.approx(4.0 / 3.0)


def test_mean_squared_error_ignores_non_finite_pairs():
    actual = np.array([1.0, np.nan, 3.0])
    predicted = np.array([2.0, 0.0, 3.0])
    assert mean_squared_error(actual, predicted) == pytest.approx(0.5)


def test_mean_squared_error_validates_inputs():
    with pytest.raises(ValueError, match="shape"):
        mean_squared_error(np.ones(3), np.ones(4))
    with pytest.raises(EmptyResultError):
        mean_squared_error(np.array([np.nan]), np.array([1.0]))


def test_evaluate_pairs_held_out_rows(iris):
    setosa = filter_species(iris, "setosa")
    train, test = train_test_split(setosa, 0.7, seed=123)
    model = fit_ols(train, "Sepal_Length", ["Sepal_Width", "Petal_Length"])

    comparison = evaluate(model, test)

    assert list(comparison.columns) == ["actual", "predicted", "residual"]
    assert list(comparison.index) == list(test.index)
    np.testing.assert_allclose(comparison["actual"], test["Sepal_Length"])
    np.testing.assert_allclose(
        comparison["residual"], comparison["actual"] - comparison["predicted"]
    )


def test_metrics_summarize_comparison(iris):
    setosa = filter_species(iris, "setosa")
    train, test = train_test_split(setosa, 0.7, seed=123)
    model = fit_ols(train, "Sepal_Length", ["Sepal_Width", "Petal_Length"])

    metrics = regression_metrics(evaluate(model, test))

    assert metrics["n"] == 15
    assert metrics["mse"] > 0
    assert metrics["rmse"] == pytest.approx(math.sqrt(metrics["mse"]))
    assert metrics["mae"] <= metrics["rmse"]


def test_perfect_predictions_score_zero_error():
    train = pd.DataFrame({"x": np.arange(10.0), "y": 2.0 + 3.0 * np.arange(10.0)})
    test = pd.DataFrame({"x": [10.5, 12.0], "y": [33.5, 38.0]})
    model = fit_ols(train, "y", ["x"])

    metrics = regression_metrics(evaluate(model, test))

    assert metrics["mse"] == pytest.approx(0.0, abs=1e-20)
    assert metrics["r2"] == pytest.approx(1.0)


def test_evaluate_requires_response_and_rows(iris):
    model = fit_ols(iris, "Sepal_Length", ["Sepal_Width"])
    with pytest.raises(SchemaError):
        evaluate(model, iris.drop(columns=["Sepal_Length"]))
    with pytest.raises(EmptyResultError):
        evaluate(model, iris.iloc[0:0])


def test_metrics_skip_rows_without_a_prediction(iris):
    setosa = filter_species(iris, "setosa")
    train, test = train_test_split(setosa, 0.7, seed=123)
    model = fit_ols(train, "Sepal_Length", ["Sepal_Width", "Petal_Length"])
    test = test.copy()
    test.iloc[0, test.columns.get_loc("Sepal_Width")] = np.nan

    comparison = evaluate(model, test)
    metrics = regression_metrics(comparison)

    complete = comparison.iloc[1:]
    assert np.isnan(comparison["predicted"].iloc[0])
    assert metrics["n"] == 14
    assert np.isfinite(metrics["mae"])
    assert np.isfinite(metrics["r2"])
    assert metrics["mse"] == pytest.approx(np.mean(complete["residual"] ** 2))
    assert metrics["mae"] == pytest.approx(np.mean(np.abs(complete["residual"])))
