"""Held-out evaluation of fitted regression models."""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import pandas as pd

from ..errors import EmptyResultError, SchemaError
from .regression import LinearModel, predict


def mean_squared_error(actual: np.ndarray, predicted: np.ndarray) -> float:
    """Mean of squared differences between paired finite values."""
    a = np.asarray(actual, dtype=float)
    p = np.asarray(predicted, dtype=float)
    if a.shape != p.shape:
        raise ValueError("actual and predicted must have the same shape.")
    mask = np.isfinite(a) & np.isfinite(p)
    if not np.any(mask):
        raise EmptyResultError("No finite (actual, predicted) pairs to score.")
    return float(np.mean((a[mask] - p[mask]) ** 2))


def evaluate(model: LinearModel, test_df: pd.DataFrame) -> pd.DataFrame:
    """Pair every held-out row's actual response with its point prediction.

    Returns:
        pandas.DataFrame: ``actual``, ``predicted`` and ``residual`` columns,
        in the row order of ``test_df``.
    """
    if model.response not in test_df.columns:
        raise SchemaError(f"Test table lacks response column '{model.response}'.")
    if test_df.empty:
        raise EmptyResultError("Test table has no rows.")
    predicted = predict(model, test_df, interval="none")["fit"]
    actual = test_df[model.response].astype(float)
    return pd.DataFrame(
        {
            "actual": actual,
            "predicted": predicted,
            "residual": actual - predicted,
        },
        index=test_df.index,
    )


def regression_metrics(comparison: pd.DataFrame) -> dict[str, Any]:
    """Aggregate accuracy metrics for an :func:`evaluate` comparison table.

    Rows whose actual or predicted value is not finite (for example a
    held-out row with a missing predictor) are left out of every metric,
    including ``n``.
    """
    actual = comparison["actual"].to_numpy(dtype=float)
    predicted = comparison["predicted"].to_numpy(dtype=float)
    mask = np.isfinite(actual) & np.isfinite(predicted)
    actual, predicted = actual[mask], predicted[mask]
    mse = mean_squared_error(actual, predicted)
    resid = actual - predicted
    sst = float(np.sum((actual - np.mean(actual)) ** 2))
    return {
        "n": int(len(actual)),
        "mse": mse,
        "rmse": float(math.sqrt(mse)),
        "mae": float(np.mean(np.abs(resid))),
        "r2": float(1.0 - np.sum(resid**2) / sst) if sst > 0 else math.nan,
    }
