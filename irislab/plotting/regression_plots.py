"""Render scatter plots with an overlaid regression line and confidence band.

Plotting code does no fitting of its own beyond delegating to
:func:`irislab.stats.fit_ols` when no model is supplied; every line and band
comes from :func:`irislab.stats.predict`.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.figure import Figure

from ..errors import SchemaError
from ..stats.regression import LinearModel, fit_ols, predict
from .style import (
    FIT_COLOR,
    MARKER_SIZE_POINTS,
    POINT_COLOR,
    STYLE,
    add_info_box,
    axis_label,
    clean_axis,
    color_for_species,
    save_figure,
    set_axis_labels,
    set_global_style,
)

GRID_POINTS = 200


def _check_model(model: LinearModel, x: str, y: str) -> None:
    if model.response != y:
        raise SchemaError(f"Model response is '{model.response}', not '{y}'.")
    if model.numeric_predictors != (x,):
        raise SchemaError(
            f"Model must have '{x}' as its only numeric predictor; "
            f"got {list(model.numeric_predictors)}."
        )
    if len(model.encodings) > 1:
        raise SchemaError("At most one categorical predictor can be drawn.")


def _band_frame(
    model: LinearModel,
    x: str,
    x_grid: np.ndarray,
    level_value: str | None,
    level: float,
) -> pd.DataFrame:
    grid = pd.DataFrame({x: x_grid})
    if level_value is not None:
        grid[model.encodings[0].column] = level_value
    return predict(model, grid, interval="confidence", level=level)


def plot_regression_fit(
    df: pd.DataFrame,
    x: str,
    y: str,
    model: LinearModel | None = None,
    *,
    level: float = 0.95,
    hue: str | None = None,
    title: str | None = None,
    output_path: str | Path | None = None,
) -> str | Figure:
    """Scatter ``y`` against ``x`` with the fitted line and its confidence band.

    Args:
        df (pandas.DataFrame): Rows to draw.
        x (str): Column on the horizontal axis; the model's only numeric
            predictor.
        y (str): Column on the vertical axis; the model's response.
        model (LinearModel | None): Fitted model to draw. When ``None`` a
            simple ``y ~ x`` model is fitted on ``df``. A model with one
            categorical predictor is drawn as one line per level.
        level (float): Coverage of the confidence band for the mean response.
        hue (str | None): Optional label column used to color points.
        title (str | None): Axes title.
        output_path (str | Path | None): PNG path. When given, the figure is
            saved and closed and the path is returned.

    Returns:
        str | matplotlib.figure.Figure: Saved PNG path, or the open figure.
    """
    missing = [col for col in (x, y, hue) if col is not None and col not in df.columns]
    if missing:
        raise SchemaError(f"Missing plot column(s): {missing}")
    if model is None:
        model = fit_ols(df, y, [x])
    _check_model(model, x, y)
    if model.encodings and model.encodings[0].column not in df.columns:
        raise SchemaError(f"Missing plot column: {model.encodings[0].column}")

    set_global_style()
    fig, ax = plt.subplots(figsize=STYLE.FIGSIZE_SINGLE)

    if hue is not None:
        for label, grp in df.groupby(hue, sort=True, observed=True):
            ax.scatter(
                grp[x],
                grp[y],
                s=MARKER_SIZE_POINTS,
                alpha=STYLE.ALPHA_POINTS,
                color=color_for_species(label),
                label=str(label),
                zorder=2,
            )
    else:
        ax.scatter(
            df[x],
            df[y],
            s=MARKER_SIZE_POINTS,
            alpha=STYLE.ALPHA_POINTS,
            color=POINT_COLOR,
            label="Observations",
            zorder=2,
        )

    if model.encodings:
        enc = model.encodings[0]
        for lvl in enc.levels:
            rows = df[df[enc.column].astype(str) == lvl]
            if rows.empty:
                continue
            x_grid = np.linspace(float(rows[x].min()), float(rows[x].max()), GRID_POINTS)
            band = _band_frame(model, x, x_grid, lvl, level)
            color = color_for_species(lvl)
            ax.plot(x_grid, band["fit"], color=color, linewidth=STYLE.LINEWIDTH, zorder=3)
            ax.fill_between(
                x_grid, band["lower"], band["upper"], color=color, alpha=STYLE.ALPHA_BAND
            )
    else:
        x_grid = np.linspace(float(df[x].min()), float(df[x].max()), GRID_POINTS)
        band = _band_frame(model, x, x_grid, None, level)
        ax.plot(
            x_grid,
            band["fit"],
            color=FIT_COLOR,
            linewidth=STYLE.LINEWIDTH,
            label="OLS fit",
            zorder=3,
        )
        ax.fill_between(
            x_grid,
            band["lower"],
            band["upper"],
            color=FIT_COLOR,
            alpha=STYLE.ALPHA_BAND,
            label=f"{level:.0%} CI (mean)",
        )

    set_axis_labels(ax, x=axis_label(x), y=axis_label(y))
    clean_axis(ax, grid_axis="both")
    if title:
        ax.set_title(title)
    ax.legend(loc="lower right")
    add_info_box(ax, f"$R^2$ = {model.r2:.3f}\nn = {model.n_obs}", loc="upper left")
    fig.tight_layout()

    if output_path is None:
        return fig
    png_path = save_figure(fig, output_path)
    plt.close(fig)
    return str(png_path)
