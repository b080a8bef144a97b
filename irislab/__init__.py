"""
A Python package walking through classical statistics on the Iris dataset.

Fits ordinary least squares models with numeric and categorical predictors,
extracts coefficient inference and confidence/prediction intervals, scores a
seeded held-out split, and runs two-sample t-tests and one-way ANOVA.

Modules:
    - data_processing: Loads the bundled table, derives columns, normalizes
      the species label, filters and splits rows.
    - stats: OLS fitting, inference, prediction, evaluation and hypothesis
      tests.
    - plotting: Scatter plots with regression line and confidence band.
    - reporting: Plain-text reports per artifact kind.
    - analysis: The end-to-end walkthrough.
"""

__version__ = "1.0.0"

from .analysis import AnalysisConfig, print_reports, run_walkthrough
from .data_processing import (
    add_product_column,
    filter_rows,
    filter_species,
    load_iris_data,
    normalize_categorical,
    train_test_split,
)
from .errors import (
    AnalysisError,
    EmptyResultError,
    InsufficientDataError,
    RankDeficiencyError,
    SchemaError,
    UnknownLevelError,
)
from .plotting import plot_regression_fit
from .stats import (
    coefficient_table,
    evaluate,
    fit_ols,
    one_way_anova,
    predict,
    regression_metrics,
    welch_ttest,
)

__all__ = [
    # Data processing
    "load_iris_data",
    "add_product_column",
    "normalize_categorical",
    "filter_rows",
    "filter_species",
    "train_test_split",
    # Statistics
    "fit_ols",
    "coefficient_table",
    "predict",
    "evaluate",
    "regression_metrics",
    "welch_ttest",
    "one_way_anova",
    # Plotting
    "plot_regression_fit",
    # Walkthrough
    "AnalysisConfig",
    "run_walkthrough",
    "print_reports",
    # Errors
    "AnalysisError",
    "SchemaError",
    "EmptyResultError",
    "RankDeficiencyError",
    "InsufficientDataError",
    "UnknownLevelError",
]
