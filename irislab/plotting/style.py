"""Centralized plotting style, labels, colors, and save helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

OUTPUT_FORMATS: tuple[str, ...] = ("png",)
FIGURE_DPI = 300
_STYLE_STATE = {"initialized": False}


@dataclass(frozen=True)
class StyleConfig:
    BASE_FONTSIZE: float = 12.0
    TITLE_FONTSIZE: float = 14.0
    LABEL_FONTSIZE: float = 12.0
    TICK_FONTSIZE: float = 11.0
    LEGEND_FONTSIZE: float = 10.0
    ANNOTATION_FONTSIZE: float = 10.0
    LINEWIDTH: float = 2.0
    LINEWIDTH_THIN: float = 1.2
    MARKERSIZE: float = 6.0
    ALPHA_POINTS: float = 0.70
    ALPHA_BAND: float = 0.18
    GRID_ALPHA: float = 0.20
    FIGSIZE_SINGLE: tuple[float, float] = (7.0, 4.6)


STYLE = StyleConfig()

FONT_SIZES = {
    "base": STYLE.BASE_FONTSIZE,
    "title": STYLE.TITLE_FONTSIZE,
    "axis_label": STYLE.LABEL_FONTSIZE,
    "tick": STYLE.TICK_FONTSIZE,
    "legend": STYLE.LEGEND_FONTSIZE,
    "annotation": STYLE.ANNOTATION_FONTSIZE,
}

MARKER_SIZE_POINTS = 28

SPECIES_COLOR_MAP = {
    "setosa": "#1f77b4",
    "versicolor": "#ff7f0e",
    "virginica": "#2ca02c",
}
FIT_COLOR = "#C13B2A"
POINT_COLOR = "#2C4B7D"

AXIS_LABELS = {
    "Sepal_Length": "Sepal length / cm",
    "Sepal_Width": "Sepal width / cm",
    "Petal_Length": "Petal length / cm",
    "Petal_Width": "Petal width / cm",
    "Sepal_Area": r"Sepal area / $\mathrm{cm^2}$",
}


def axis_label(column: str) -> str:
    """Return the display label for a column, falling back to its name."""
    return AXIS_LABELS.get(column, column.replace("_", " "))


def color_for_species(species: str) -> str:
    """Return a stable color for one species label."""
    return SPECIES_COLOR_MAP.get(str(species), "#4A4A4A")


def apply_global_style(font_scale: float = 1.0) -> None:
    """Apply global Matplotlib style scaled by ``font_scale``."""
    scale = float(font_scale)
    plt.rcParams.update(
        {
            "font.size": STYLE.BASE_FONTSIZE * scale,
            "axes.titlesize": STYLE.TITLE_FONTSIZE * scale,
            "axes.labelsize": STYLE.LABEL_FONTSIZE * scale,
            "xtick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "ytick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "legend.fontsize": STYLE.LEGEND_FONTSIZE * scale,
            "mathtext.fontset": "stix",
            "mathtext.default": "regular",
            "axes.linewidth": STYLE.LINEWIDTH_THIN,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "grid.alpha": STYLE.GRID_ALPHA,
            "grid.linestyle": ":",
            "legend.frameon": False,
            "lines.linewidth": STYLE.LINEWIDTH,
            "lines.markersize": STYLE.MARKERSIZE,
            "figure.dpi": 120,
            "savefig.dpi": FIGURE_DPI,
            "savefig.bbox": "tight",
        }
    )


def set_global_style() -> None:
    """Apply global plotting style once per process."""
    if not _STYLE_STATE["initialized"]:
        apply_global_style(font_scale=1.0)
        _STYLE_STATE["initialized"] = True


def clean_axis(
    ax: Axes,
    *,
    grid_axis: str = "both",
    nbins_x: int = 6,
    nbins_y: int = 6,
) -> None:
    """Apply consistent ticks, grid, and spine formatting to one axis."""
    ax.tick_params(axis="both", which="major", labelsize=FONT_SIZES["tick"], width=1.0)
    ax.xaxis.set_major_locator(MaxNLocator(nbins=nbins_x, min_n_ticks=4))
    ax.yaxis.set_major_locator(MaxNLocator(nbins=nbins_y, min_n_ticks=4))
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.grid(False)
    if grid_axis in {"both", "x", "y"}:
        ax.grid(
            True, axis=grid_axis, alpha=STYLE.GRID_ALPHA, linestyle=":", linewidth=0.7
        )


def set_axis_labels(ax: Axes, x: str | None = None, y: str | None = None) -> None:
    """Apply standardized axis labels with project typography."""
    if x is not None:
        ax.set_xlabel(x, fontsize=FONT_SIZES["axis_label"], labelpad=6)
    if y is not None:
        ax.set_ylabel(y, fontsize=FONT_SIZES["axis_label"], labelpad=6)


def add_info_box(ax: Axes, text: str, loc: str = "upper left") -> None:
    """Add a consistently styled annotation anchored to one corner."""
    anchor_map = {
        "upper left": (0.02, 0.98, "left", "top"),
        "upper right": (0.98, 0.98, "right", "top"),
        "lower left": (0.02, 0.02, "left", "bottom"),
        "lower right": (0.98, 0.02, "right", "bottom"),
    }
    x, y, ha, va = anchor_map.get(loc, anchor_map["upper left"])
    ax.text(
        x,
        y,
        text,
        transform=ax.transAxes,
        ha=ha,
        va=va,
        fontsize=FONT_SIZES["annotation"],
        bbox={"boxstyle": "round", "facecolor": "white", "alpha": 0.8, "edgecolor": "0.7"},
    )


def save_figure(
    fig: Figure,
    savepath_base: str | Path,
    formats: Sequence[str] = OUTPUT_FORMATS,
    dpi: int = FIGURE_DPI,
    *,
    bbox_inches: str = "tight",
    pad_inches: float = 0.12,
) -> Path:
    """Save a figure to one or more formats using one extensionless base path.

    Returns:
        pathlib.Path: Path of the PNG (or first-format) artifact.
    """
    base = Path(savepath_base)
    if base.suffix:
        base = base.with_suffix("")
    base.parent.mkdir(parents=True, exist_ok=True)
    for ext in formats:
        target = base.with_suffix(f".{ext}")
        fig.savefig(
            str(target),
            dpi=dpi if ext == "png" else None,
            bbox_inches=bbox_inches,
            pad_inches=pad_inches,
        )
    primary = "png" if "png" in formats else formats[0]
    return base.with_suffix(f".{primary}")
