"""
Statistical utilities for the Iris walkthrough.

This subpackage provides the numerical routines of the analysis. All
functions operate on DataFrames, arrays and primitive types; no plotting or
printing is done here.

Modules:
    design:
        Categorical level tables and design-matrix construction shared by
        fitting and prediction.

    regression:
        OLS fitting via QR, coefficient inference (SE, t, p, CI) and
        confidence/prediction intervals for new rows.

    evaluation:
        Held-out (actual, predicted) comparison and aggregate error metrics.

    hypothesis:
        Welch and pooled two-sample t-tests and one-way ANOVA.

Design Principle:
    This subpackage has no dependencies on plotting/ or reporting modules.
    Distribution functions come from scipy.stats; linear algebra from numpy.
"""

from .design import INTERCEPT, CategoricalEncoding, design_matrix
from .evaluation import evaluate, mean_squared_error, regression_metrics
from .hypothesis import grouped_values, one_way_anova, pooled_ttest, welch_ttest
from .regression import (
    LinearModel,
    coefficient_table,
    confidence_intervals,
    fit_ols,
    overall_f_test,
    predict,
)

__all__ = [
    "INTERCEPT",
    "CategoricalEncoding",
    "design_matrix",
    "LinearModel",
    "fit_ols",
    "coefficient_table",
    "confidence_intervals",
    "overall_f_test",
    "predict",
    "evaluate",
    "mean_squared_error",
    "regression_metrics",
    "grouped_values",
    "welch_ttest",
    "pooled_ttest",
    "one_way_anova",
]
