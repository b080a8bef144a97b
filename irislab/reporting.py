"""Plain-text reports for each kind of analysis artifact.

One named function per artifact kind (coefficients, predictions, held-out
comparison, t-test, ANOVA, model summary). Every function returns a string;
printing is left to the caller.
"""

from __future__ import annotations

import math
from typing import Any, Mapping

import numpy as np
import pandas as pd

from .stats.regression import LinearModel, coefficient_table, overall_f_test


def _format_pvalue(value: float) -> str:
    """Format p-values consistently for reports."""
    if not np.isfinite(value):
        return "NaN"
    if value < 1e-4:
        return "<0.0001"
    return f"{value:.4f}"


def _significance_code(value: float) -> str:
    if not np.isfinite(value):
        return ""
    for cutoff, code in ((0.001, "***"), (0.01, "**"), (0.05, "*"), (0.1, ".")):
        if value < cutoff:
            return code
    return ""


def _formula(model: LinearModel) -> str:
    rhs = [*model.numeric_predictors, *(enc.column for enc in model.encodings)]
    return f"{model.response} ~ {' + '.join(rhs) if rhs else '1'}"


def format_coefficient_report(
    model: LinearModel, level: float = 0.95, title: str | None = None
) -> str:
    """Coefficient table with SE, t, p, significance codes and CI bounds."""
    table = coefficient_table(model, level=level)
    shown = pd.DataFrame(
        {
            "Estimate": table["estimate"].map(lambda v: f"{v:.5f}"),
            "Std. Error": table["std_error"].map(lambda v: f"{v:.5f}"),
            "t value": table["t_value"].map(lambda v: f"{v:.3f}"),
            "Pr(>|t|)": table["p_value"].map(_format_pvalue),
            "": table["p_value"].map(_significance_code),
            f"{level:.1%} lower": table["ci_lower"].map(lambda v: f"{v:.5f}"),
            f"{level:.1%} upper": table["ci_upper"].map(lambda v: f"{v:.5f}"),
        },
        index=table.index,
    )
    lines = [title or f"Coefficients: {_formula(model)}", shown.to_string()]
    for enc in model.encodings:
        lines.append(f"Baseline level of {enc.column}: {enc.baseline} (effect fixed at 0)")
    lines.append("Signif. codes: 0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1")
    return "\n".join(lines)


def format_model_summary(model: LinearModel) -> str:
    """Residual standard error, R^2 and the overall F-test of a fit."""
    f_test = overall_f_test(model)
    lines = [
        f"Model: {_formula(model)}",
        f"Residual standard error: {model.sigma:.4f} on {model.df_resid} degrees of freedom",
        f"Multiple R-squared: {model.r2:.4f}, Adjusted R-squared: {model.adj_r2:.4f}",
    ]
    if np.isfinite(f_test["F"]):
        lines.append(
            f"F-statistic: {f_test['F']:.3f} on {int(f_test['df_model'])} and "
            f"{int(f_test['df_resid'])} DF, p-value: {_format_pvalue(f_test['pvalue'])}"
        )
    return "\n".join(lines)


def format_prediction_report(
    new_rows: pd.DataFrame,
    predictions: pd.DataFrame,
    interval: str,
    level: float = 0.95,
) -> str:
    """Input rows side by side with fit and interval bounds."""
    table = pd.concat(
        [new_rows.reset_index(drop=True), predictions.reset_index(drop=True)], axis=1
    )
    header = f"Predictions with {level:.0%} {interval} interval"
    return "\n".join([header, table.to_string(index=False, float_format="%.4f")])


def format_comparison_report(
    comparison: pd.DataFrame,
    metrics: Mapping[str, Any] | None = None,
    max_rows: int | None = None,
) -> str:
    """Held-out actual vs. predicted values plus aggregate metrics."""
    shown = comparison if max_rows is None else comparison.head(max_rows)
    lines = ["Held-out comparison (actual vs. predicted)"]
    lines.append(shown.to_string(float_format="%.4f"))
    if max_rows is not None and len(comparison) > max_rows:
        lines.append(f"... {len(comparison) - max_rows} more row(s)")
    if metrics:
        lines.append(
            f"n = {metrics['n']}, MSE = {metrics['mse']:.4f}, "
            f"RMSE = {metrics['rmse']:.4f}, MAE = {metrics['mae']:.4f}, "
            f"R^2 (held-out) = {metrics['r2']:.4f}"
        )
    return "\n".join(lines)


def format_ttest_report(
    result: Mapping[str, Any], label_a: str = "a", label_b: str = "b"
) -> str:
    """Summary of a two-sample t-test result dict."""
    return "\n".join(
        [
            str(result.get("method", "Two-sample t-test")),
            f"  {label_a}: mean = {result['mean_a']:.4f} (n = {result['n_a']})",
            f"  {label_b}: mean = {result['mean_b']:.4f} (n = {result['n_b']})",
            f"  t = {result['t_stat']:.4f}, df = {result['df']:.2f}, "
            f"p-value = {_format_pvalue(result['pvalue'])}",
            f"  difference in means ({label_a} - {label_b}) = {result['mean_diff']:.4f}",
        ]
    )


def format_anova_report(result: Mapping[str, Any]) -> str:
    """ANOVA table and group means of a one-way ANOVA result dict."""
    table = result["table"].copy()
    table["pvalue"] = table["pvalue"].map(
        lambda v: _format_pvalue(v) if not math.isnan(v) else ""
    )
    lines = [
        f"{result.get('method', 'One-way ANOVA')}: "
        f"{result['response']} by {result['group']}",
        table.to_string(float_format="%.4f", na_rep=""),
        "Group means: "
        + ", ".join(f"{lvl} = {mean:.4f}" for lvl, mean in result["group_means"].items()),
    ]
    return "\n".join(lines)
