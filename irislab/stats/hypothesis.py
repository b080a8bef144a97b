"""Two-sample t-tests and one-way ANOVA over grouped response values.

Test statistics, degrees of freedom and p-values come from
``scipy.stats.ttest_ind`` and ``scipy.stats.f_oneway``; this module only
cleans the groups, checks their sizes, and lays the results out as dicts
and an ANOVA table.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats

from ..errors import InsufficientDataError, SchemaError


def _clean_group(values: Any, label: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float).ravel()
    arr = arr[np.isfinite(arr)]
    if len(arr) < 2:
        raise InsufficientDataError(
            f"Group {label} needs at least 2 finite observations; got {len(arr)}."
        )
    return arr


def _two_sample_ttest(group_a: Any, group_b: Any, equal_var: bool) -> dict[str, Any]:
    a = _clean_group(group_a, "a")
    b = _clean_group(group_b, "b")
    result = scipy_stats.ttest_ind(a, b, equal_var=equal_var)
    return {
        "t_stat": float(result.statistic),
        "df": float(result.df),
        "pvalue": float(result.pvalue),
        "mean_a": float(np.mean(a)),
        "mean_b": float(np.mean(b)),
        "var_a": float(np.var(a, ddof=1)),
        "var_b": float(np.var(b, ddof=1)),
        "n_a": int(len(a)),
        "n_b": int(len(b)),
        "mean_diff": float(np.mean(a) - np.mean(b)),
    }


def welch_ttest(group_a: Any, group_b: Any) -> dict[str, Any]:
    """Two-sided Welch t-test (unequal variances).

    Args:
        group_a (array-like): Observations of the first group.
        group_b (array-like): Observations of the second group.

    Returns:
        dict[str, Any]: ``t_stat``, ``df`` (Welch-Satterthwaite), ``pvalue``,
        group means/variances/sizes, the mean difference ``a - b`` and a
        ``method`` label.

    Raises:
        InsufficientDataError: If either group has fewer than 2 finite
            observations.
    """
    result = _two_sample_ttest(group_a, group_b, equal_var=False)
    result["method"] = "Welch two-sample t-test"
    return result


def pooled_ttest(group_a: Any, group_b: Any) -> dict[str, Any]:
    """Two-sided Student t-test assuming equal variances."""
    result = _two_sample_ttest(group_a, group_b, equal_var=True)
    n_a, n_b = result["n_a"], result["n_b"]
    result["pooled_var"] = (
        (n_a - 1) * result["var_a"] + (n_b - 1) * result["var_b"]
    ) / (n_a + n_b - 2)
    result["method"] = "Two-sample t-test (pooled variance)"
    return result


def grouped_values(df: pd.DataFrame, response: str, group: str) -> dict[str, np.ndarray]:
    """Return finite response values per non-empty group level, in level order."""
    missing = [col for col in (response, group) if col not in df.columns]
    if missing:
        raise SchemaError(f"Missing column(s) {missing} for grouping.")
    out: dict[str, np.ndarray] = {}
    for level, grp in df.groupby(group, sort=True, observed=True):
        values = pd.to_numeric(grp[response], errors="coerce").to_numpy(dtype=float)
        values = values[np.isfinite(values)]
        if len(values):
            out[str(level)] = values
    return out


def one_way_anova(df: pd.DataFrame, response: str, group: str) -> dict[str, Any]:
    """One-way ANOVA F-test for equal group means.

    Levels of a categorical ``group`` column with no observations are
    ignored.

    Args:
        df (pandas.DataFrame): Table holding both columns.
        response (str): Numeric response column.
        group (str): Grouping column.

    Returns:
        dict[str, Any]: ``F``, ``pvalue``, ``df_between``, ``df_within``,
        sums of squares, mean squares, ``k`` groups, ``n`` observations,
        per-group means and an ANOVA ``table`` DataFrame.

    Raises:
        SchemaError: If either column is missing.
        InsufficientDataError: If fewer than 2 groups have observations, or
            the total number of observations does not exceed the number of
            groups.
    """
    groups = grouped_values(df, response, group)
    k = len(groups)
    n_total = int(sum(len(v) for v in groups.values()))
    if k < 2:
        raise InsufficientDataError(
            f"ANOVA needs at least 2 non-empty groups; got {k}."
        )
    if n_total <= k:
        raise InsufficientDataError(
            f"ANOVA needs more observations ({n_total}) than groups ({k})."
        )

    result = scipy_stats.f_oneway(*groups.values())
    f_stat = float(result.statistic)
    pvalue = float(result.pvalue)

    # Sums of squares for the table layout only.
    grand_mean = float(np.mean(np.concatenate(list(groups.values()))))
    ss_between = float(
        sum(len(v) * (float(np.mean(v)) - grand_mean) ** 2 for v in groups.values())
    )
    ss_within = float(sum(np.sum((v - np.mean(v)) ** 2) for v in groups.values()))
    df_between = k - 1
    df_within = n_total - k
    ms_between = ss_between / df_between
    ms_within = ss_within / df_within

    table = pd.DataFrame(
        {
            "df": [df_between, df_within, n_total - 1],
            "sum_sq": [ss_between, ss_within, ss_between + ss_within],
            "mean_sq": [ms_between, ms_within, np.nan],
            "F": [f_stat, np.nan, np.nan],
            "pvalue": [pvalue, np.nan, np.nan],
        },
        index=pd.Index(["Between", "Within", "Total"], name="source"),
    )

    return {
        "method": "One-way ANOVA",
        "response": response,
        "group": group,
        "F": f_stat,
        "pvalue": pvalue,
        "df_between": float(df_between),
        "df_within": float(df_within),
        "ss_between": ss_between,
        "ss_within": ss_within,
        "ms_between": float(ms_between),
        "ms_within": float(ms_within),
        "k": int(k),
        "n": n_total,
        "group_means": {lvl: float(np.mean(v)) for lvl, v in groups.items()},
        "table": table,
    }
