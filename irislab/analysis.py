"""
Iris measurement walkthrough.

This module runs the whole analysis once, top to bottom:
- Load the 150-row Iris table and derive ``Sepal_Area``.
- Normalize ``Species`` to an unordered categorical (baseline ``setosa``).
- Filter to setosa and fit ``Sepal_Length ~ Sepal_Width + Petal_Length``;
  report coefficients, coefficient intervals, and confidence/prediction
  intervals at ``Sepal_Width = 3.5, Petal_Length = 1.5``.
- Split setosa rows 70/30 with a fixed seed, refit on the training rows and
  score the held-out rows.
- Fit the same model on all species with ``Species`` as a categorical
  predictor (two indicator coefficients against the setosa baseline).
- Draw two scatter plots with fitted line and confidence band.
- Compare mean sepal length of setosa and versicolor with a Welch t-test,
  and across all three species with a one-way ANOVA.

Every step's output feeds the next; a failing step raises and aborts the run.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict

import pandas as pd

from .data_processing import (
    add_product_column,
    filter_species,
    load_iris_data,
    normalize_categorical,
    train_test_split,
)
from .output import save_tables_to_csv
from .plotting import plot_regression_fit
from .reporting import (
    format_anova_report,
    format_coefficient_report,
    format_comparison_report,
    format_model_summary,
    format_prediction_report,
    format_ttest_report,
)
from .schema import COLUMNS
from .stats import (
    coefficient_table,
    evaluate,
    fit_ols,
    one_way_anova,
    predict,
    regression_metrics,
    welch_ttest,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """Run-level settings for the walkthrough.

    Attributes:
        seed: Seed of the train/test draw.
        train_fraction: Share of filtered rows used for training.
        level: Coverage of every confidence and prediction interval.
        output_dir: Directory for plots and CSV tables.
        make_plots: Render the two regression figures.
        save_tables: Write coefficient/prediction/test tables as CSV.
        data_path: Alternative CSV; ``None`` uses the bundled table.
        focus_species: Species used for the single-species models.
        comparison_species: Species compared against ``focus_species`` in the
            t-test.
    """

    seed: int = 123
    train_fraction: float = 0.7
    level: float = 0.95
    output_dir: str = "output"
    make_plots: bool = True
    save_tables: bool = True
    data_path: str | None = None
    focus_species: str = "setosa"
    comparison_species: str = "versicolor"


def _timed(label: str, start: float) -> None:
    logger.info("%s completed in %.3f seconds", label, time.time() - start)


def run_walkthrough(config: AnalysisConfig = AnalysisConfig()) -> Dict[str, Any]:
    """Run every analysis step and return the artifacts.

    Returns:
        dict[str, Any]: Tables, fitted models, test results, plot paths and
        the rendered text ``reports`` keyed by artifact name.
    """
    c = COLUMNS
    predictors = [c.sepal_width, c.petal_length]
    reports: Dict[str, str] = {}

    step = time.time()
    iris = load_iris_data(config.data_path)
    iris = add_product_column(iris, c.sepal_length, c.sepal_width, c.sepal_area)
    iris = normalize_categorical(iris, c.species)
    _timed("Data preparation", step)
    logger.info(
        "Species levels: %s (baseline %s)",
        list(iris[c.species].cat.categories),
        iris[c.species].cat.categories[0],
    )

    step = time.time()
    focus = filter_species(iris, config.focus_species)
    focus_model = fit_ols(focus, c.sepal_length, predictors)
    reports["focus_coefficients"] = format_coefficient_report(
        focus_model,
        level=config.level,
        title=f"{config.focus_species}: {c.sepal_length} ~ {' + '.join(predictors)}",
    )
    reports["focus_summary"] = format_model_summary(focus_model)

    new_rows = pd.DataFrame({c.sepal_width: [3.5], c.petal_length: [1.5]})
    confidence = predict(focus_model, new_rows, interval="confidence", level=config.level)
    prediction = predict(focus_model, new_rows, interval="prediction", level=config.level)
    reports["confidence_interval"] = format_prediction_report(
        new_rows, confidence, "confidence", config.level
    )
    reports["prediction_interval"] = format_prediction_report(
        new_rows, prediction, "prediction", config.level
    )
    _timed("Single-species model", step)

    step = time.time()
    train, test = train_test_split(focus, config.train_fraction, seed=config.seed)
    train_model = fit_ols(train, c.sepal_length, predictors)
    comparison = evaluate(train_model, test)
    metrics = regression_metrics(comparison)
    reports["holdout"] = format_comparison_report(comparison, metrics)
    logger.info("Held-out MSE %.4f on %d rows", metrics["mse"], metrics["n"])
    _timed("Train/test evaluation", step)

    step = time.time()
    species_model = fit_ols(iris, c.sepal_length, predictors, categorical=[c.species])
    reports["species_coefficients"] = format_coefficient_report(
        species_model,
        level=config.level,
        title=f"all species: {c.sepal_length} ~ {' + '.join(predictors)} + {c.species}",
    )
    reports["species_summary"] = format_model_summary(species_model)
    _timed("Categorical model", step)

    plot_paths: list[str] = []
    if config.make_plots:
        step = time.time()
        os.makedirs(config.output_dir, exist_ok=True)
        plot_paths.append(
            plot_regression_fit(
                focus,
                c.sepal_width,
                c.sepal_length,
                level=config.level,
                title=f"{config.focus_species}: sepal length vs. sepal width",
                output_path=os.path.join(config.output_dir, "sepal_length_vs_width.png"),
            )
        )
        plot_paths.append(
            plot_regression_fit(
                iris,
                c.petal_length,
                c.petal_width,
                level=config.level,
                hue=c.species,
                title="All species: petal width vs. petal length",
                output_path=os.path.join(config.output_dir, "petal_width_vs_length.png"),
            )
        )
        _timed("Plot rendering", step)

    step = time.time()
    group_a = filter_species(iris, config.focus_species)[c.sepal_length]
    group_b = filter_species(iris, config.comparison_species)[c.sepal_length]
    ttest = welch_ttest(group_a, group_b)
    reports["ttest"] = format_ttest_report(
        ttest, label_a=config.focus_species, label_b=config.comparison_species
    )
    anova = one_way_anova(iris, c.sepal_length, c.species)
    reports["anova"] = format_anova_report(anova)
    _timed("Hypothesis tests", step)

    tables = {
        "focus_coefficients": coefficient_table(focus_model, level=config.level),
        "species_coefficients": coefficient_table(species_model, level=config.level),
        "holdout_comparison": comparison,
        "anova": anova["table"],
    }
    table_paths: Dict[str, str] = {}
    if config.save_tables:
        table_paths = save_tables_to_csv(tables, config.output_dir)

    return {
        "data": iris,
        "focus_data": focus,
        "train": train,
        "test": test,
        "focus_model": focus_model,
        "train_model": train_model,
        "species_model": species_model,
        "new_rows": new_rows,
        "confidence": confidence,
        "prediction": prediction,
        "comparison": comparison,
        "metrics": metrics,
        "ttest": ttest,
        "anova": anova,
        "tables": tables,
        "table_paths": table_paths,
        "plot_paths": plot_paths,
        "reports": reports,
    }


def print_reports(reports: Dict[str, str]) -> None:
    """Print every report, separated by blank lines."""
    for text in reports.values():
        print()
        print(text)
