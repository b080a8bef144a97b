"""Ordinary least squares fitting, coefficient inference and prediction.

This module supports:
- multi-predictor OLS fits with optional categorical predictors expanded to
  baseline-relative indicator columns,
- per-coefficient standard errors, t statistics, p-values and confidence
  intervals from the Student t distribution, and
- point predictions with confidence (mean response) or prediction (single
  future observation) intervals.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd
from scipy import linalg
from scipy.stats import f as f_dist
from scipy.stats import t as student_t

from ..errors import InsufficientDataError, RankDeficiencyError, SchemaError
from .design import CategoricalEncoding, design_matrix, term_names

INTERVAL_KINDS: tuple[str, ...] = ("none", "confidence", "prediction")


@dataclass(frozen=True, eq=False)
class LinearModel:
    """Immutable result of one OLS fit.

    ``xtx_inv`` is ``(X^T X)^{-1}`` of the training design matrix; it is all
    that inference and interval prediction need besides ``sigma`` and
    ``df_resid``, so the training rows themselves are not retained.
    """

    response: str
    terms: tuple[str, ...]
    numeric_predictors: tuple[str, ...]
    encodings: tuple[CategoricalEncoding, ...]
    coef: np.ndarray
    xtx_inv: np.ndarray
    df_resid: int
    sigma: float
    rank: int
    n_obs: int
    fitted: np.ndarray
    resid: np.ndarray
    rss: float
    tss: float

    def __post_init__(self) -> None:
        for arr in (self.coef, self.xtx_inv, self.fitted, self.resid):
            arr.setflags(write=False)

    @property
    def coefficients(self) -> pd.Series:
        return pd.Series(self.coef, index=list(self.terms), name="estimate")

    @property
    def indicator_terms(self) -> tuple[str, ...]:
        names: list[str] = []
        for enc in self.encodings:
            names.extend(enc.indicator_names)
        return tuple(names)

    @property
    def sigma2(self) -> float:
        return float(self.sigma**2)

    @property
    def r2(self) -> float:
        return float(1.0 - self.rss / self.tss) if self.tss > 0 else math.nan

    @property
    def adj_r2(self) -> float:
        if self.tss <= 0:
            return math.nan
        return float(1.0 - (1.0 - self.r2) * (self.n_obs - 1) / self.df_resid)


def _t_critical(level: float, dof: int) -> float:
    level = float(level)
    if not np.isfinite(level) or not 0.0 < level < 1.0:
        raise ValueError("level must lie strictly between 0 and 1.")
    return float(student_t.ppf(0.5 + level / 2.0, dof))


def fit_ols(
    df: pd.DataFrame,
    response: str,
    predictors: Sequence[str] = (),
    categorical: Sequence[str] = (),
) -> LinearModel:
    """Fit ``response ~ predictors + categorical`` by ordinary least squares.

    Args:
        df (pandas.DataFrame): Training rows.
        response (str): Numeric response column.
        predictors (Sequence[str]): Numeric predictor columns.
        categorical (Sequence[str]): Categorical predictor columns. Each is
            expanded to one indicator per non-baseline level; a pandas
            categorical keeps its declared level set even when a level has no
            rows in ``df``.

    Returns:
        LinearModel: Immutable fit.

    Raises:
        SchemaError: If a column is missing or the response is non-numeric.
        InsufficientDataError: If rows available do not exceed the number of
            parameters.
        RankDeficiencyError: If the design matrix is not of full column rank,
            including categorical predictors with fewer than two observed
            levels.

    Note:
        Coefficients come from a QR decomposition of the design matrix, which
        matches the closed-form normal-equation solution to floating-point
        tolerance without forming ``X^T X`` explicitly.
    """
    predictors = tuple(predictors)
    categorical = tuple(categorical)
    columns = [response, *predictors, *categorical]
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing model column(s): {missing}")
    if not pd.api.types.is_numeric_dtype(df[response]):
        raise SchemaError(f"Response '{response}' must be numeric.")

    frame = df[columns]
    complete = frame.notna().all(axis=1)
    if not bool(complete.all()):
        n_dropped = int((~complete).sum())
        warnings.warn(
            f"Dropped {n_dropped} row(s) with missing values before fitting.",
            RuntimeWarning,
            stacklevel=2,
        )
        frame = frame.loc[complete]

    encodings = tuple(CategoricalEncoding.from_series(frame[col]) for col in categorical)
    observed_levels = {col: frame[col].astype(str).nunique() for col in categorical}
    degenerate = [col for col, n_levels in observed_levels.items() if n_levels < 2]
    if degenerate:
        raise RankDeficiencyError(
            f"Categorical predictor(s) {degenerate} have fewer than two observed "
            "levels; their indicator columns are degenerate."
        )

    x = design_matrix(frame, predictors, encodings)
    y = frame[response].to_numpy(dtype=float)
    n_obs, n_params = x.shape
    if n_obs <= n_params:
        raise InsufficientDataError(
            f"Need more than {n_params} rows to fit {n_params} parameters; "
            f"got {n_obs}."
        )

    rank = int(np.linalg.matrix_rank(x))
    if rank < n_params:
        raise RankDeficiencyError(
            f"Design matrix has rank {rank} < {n_params} columns "
            f"({list(term_names(predictors, encodings))})."
        )

    q, r = np.linalg.qr(x)
    coef = linalg.solve_triangular(r, q.T @ y)
    r_inv = linalg.solve_triangular(r, np.eye(n_params))
    xtx_inv = r_inv @ r_inv.T

    fitted = x @ coef
    resid = y - fitted
    rss = float(np.sum(resid**2))
    tss = float(np.sum((y - np.mean(y)) ** 2))
    df_resid = int(n_obs - n_params)

    return LinearModel(
        response=response,
        terms=term_names(predictors, encodings),
        numeric_predictors=predictors,
        encodings=encodings,
        coef=np.asarray(coef, dtype=float),
        xtx_inv=np.asarray(xtx_inv, dtype=float),
        df_resid=df_resid,
        sigma=float(np.sqrt(rss / df_resid)),
        rank=rank,
        n_obs=int(n_obs),
        fitted=np.asarray(fitted, dtype=float),
        resid=np.asarray(resid, dtype=float),
        rss=rss,
        tss=tss,
    )


def coefficient_table(model: LinearModel, level: float = 0.95) -> pd.DataFrame:
    """Return estimate, SE, t, two-sided p and CI bounds for every term."""
    t_crit = _t_critical(level, model.df_resid)
    se = np.sqrt(np.diag(model.xtx_inv) * model.sigma2)
    with np.errstate(divide="ignore", invalid="ignore"):
        t_values = model.coef / se
    p_values = 2.0 * student_t.sf(np.abs(t_values), model.df_resid)
    half = t_crit * se
    return pd.DataFrame(
        {
            "estimate": model.coef,
            "std_error": se,
            "t_value": t_values,
            "p_value": p_values,
            "ci_lower": model.coef - half,
            "ci_upper": model.coef + half,
        },
        index=pd.Index(model.terms, name="term"),
    )


def confidence_intervals(model: LinearModel, level: float = 0.95) -> pd.DataFrame:
    """Return only the coefficient confidence bounds."""
    return coefficient_table(model, level=level)[["ci_lower", "ci_upper"]]


def overall_f_test(model: LinearModel) -> dict[str, float]:
    """F-test of the fitted model against the intercept-only model."""
    df_model = int(len(model.terms) - 1)
    if df_model == 0 or model.rss <= 0:
        return {
            "F": math.nan,
            "df_model": float(df_model),
            "df_resid": float(model.df_resid),
            "pvalue": math.nan,
        }
    ms_model = (model.tss - model.rss) / df_model
    ms_resid = model.rss / model.df_resid
    f_stat = float(ms_model / ms_resid)
    return {
        "F": f_stat,
        "df_model": float(df_model),
        "df_resid": float(model.df_resid),
        "pvalue": float(f_dist.sf(f_stat, df_model, model.df_resid)),
    }


def _as_frame(new_rows: pd.DataFrame | Mapping[str, Any]) -> pd.DataFrame:
    if isinstance(new_rows, pd.DataFrame):
        return new_rows
    return pd.DataFrame({key: np.atleast_1d(val) for key, val in new_rows.items()})


def predict(
    model: LinearModel,
    new_rows: pd.DataFrame | Mapping[str, Any],
    interval: str = "none",
    level: float = 0.95,
) -> pd.DataFrame:
    """Predict the response for new rows.

    Args:
        model (LinearModel): Fitted model.
        new_rows (pandas.DataFrame | Mapping): Rows supplying every predictor
            column of the model. A mapping of column to scalar or sequence is
            accepted for convenience.
        interval (str): ``"none"``, ``"confidence"`` (mean response) or
            ``"prediction"`` (one future observation).
        level (float): Interval coverage, strictly between 0 and 1.

    Returns:
        pandas.DataFrame: Columns ``fit``, ``lower`` and ``upper`` indexed like
        ``new_rows``. For ``interval="none"`` both bounds equal ``fit``.

    Raises:
        SchemaError: If a predictor column is missing.
        UnknownLevelError: If a categorical value was not seen at fit time.
        ValueError: If ``interval`` or ``level`` is invalid.

    Note:
        With leverage ``h = x^T (X^T X)^{-1} x`` the confidence half-width is
        ``t * sqrt(h * s^2)`` and the prediction half-width is
        ``t * sqrt((1 + h) * s^2)``, so the prediction interval always
        contains the confidence interval.
    """
    if interval not in INTERVAL_KINDS:
        raise ValueError(f"interval must be one of {INTERVAL_KINDS}; got '{interval}'.")

    frame = _as_frame(new_rows)
    x = design_matrix(frame, model.numeric_predictors, model.encodings)
    fit = x @ model.coef

    if interval == "none":
        lower = upper = fit
    else:
        t_crit = _t_critical(level, model.df_resid)
        leverage = np.einsum("ij,jk,ik->i", x, model.xtx_inv, x)
        if interval == "prediction":
            leverage = 1.0 + leverage
        half = t_crit * np.sqrt(np.maximum(leverage * model.sigma2, 0.0))
        lower = fit - half
        upper = fit + half

    return pd.DataFrame({"fit": fit, "lower": lower, "upper": upper}, index=frame.index)
