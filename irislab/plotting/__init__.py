"""
Plotting utilities for the Iris walkthrough.

All plotting functions accept data and fitted models and do not perform any
statistics of their own; lines and bands come from the stats subpackage.

Modules:
    regression_plots:
        Scatter plot with the fitted OLS line and the confidence band for
        the mean response, optionally one line per categorical level.

    style:
        Shared rcParams, axis cleanup, species colors and figure saving.
"""

from .regression_plots import plot_regression_fit
from .style import apply_global_style, save_figure, set_global_style

__all__ = [
    "plot_regression_fit",
    "apply_global_style",
    "set_global_style",
    "save_figure",
]
