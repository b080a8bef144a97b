"""Design-matrix construction with explicit categorical encodings.

A :class:`CategoricalEncoding` is built once from the fitting data and stored
on the fitted model, so prediction rows are expanded into exactly the same
indicator columns, in the same order, as the training rows were.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from ..errors import SchemaError, UnknownLevelError

INTERCEPT = "(Intercept)"


@dataclass(frozen=True)
class CategoricalEncoding:
    """Level table for one categorical predictor.

    Attributes:
        column: Source column name.
        levels: All levels in canonical order. ``levels[0]`` is the baseline
            and gets no indicator column; its effect is folded into the
            intercept.
    """

    column: str
    levels: tuple[str, ...]

    @classmethod
    def from_series(cls, series: pd.Series) -> "CategoricalEncoding":
        """Derive the encoding from a categorical or plain label series.

        A pandas categorical keeps its declared categories, including levels
        with no rows in ``series``; any other dtype uses the sorted distinct
        values.
        """
        if isinstance(series.dtype, pd.CategoricalDtype):
            levels = tuple(str(lvl) for lvl in series.cat.categories)
        else:
            levels = tuple(sorted(series.dropna().astype(str).unique()))
        return cls(column=str(series.name), levels=levels)

    @property
    def baseline(self) -> str:
        return self.levels[0]

    @property
    def indicator_names(self) -> tuple[str, ...]:
        return tuple(f"{self.column}[T.{lvl}]" for lvl in self.levels[1:])

    def indicators(self, values: pd.Series) -> np.ndarray:
        """Expand labels into an ``(n, len(levels) - 1)`` 0/1 matrix."""
        labels = values.astype(str).to_numpy()
        known = set(self.levels)
        unseen = sorted({lab for lab in labels if lab not in known})
        if unseen:
            raise UnknownLevelError(
                f"Level(s) {unseen} of '{self.column}' were not seen at fit time; "
                f"known levels: {list(self.levels)}"
            )
        non_baseline = np.asarray(self.levels[1:], dtype=object)
        return (labels[:, None] == non_baseline[None, :]).astype(float)


def term_names(
    numeric: Sequence[str], encodings: Sequence[CategoricalEncoding]
) -> tuple[str, ...]:
    """Column names of the design matrix in order."""
    names = [INTERCEPT, *numeric]
    for enc in encodings:
        names.extend(enc.indicator_names)
    return tuple(names)


def design_matrix(
    frame: pd.DataFrame,
    numeric: Sequence[str],
    encodings: Sequence[CategoricalEncoding] = (),
) -> np.ndarray:
    """Build ``[1, numeric..., indicators...]`` for every row of ``frame``.

    Raises:
        SchemaError: If a predictor column is missing or a numeric predictor
            is not numeric.
        UnknownLevelError: If a categorical value is outside its encoding.
    """
    required = [*numeric, *(enc.column for enc in encodings)]
    missing = [col for col in required if col not in frame.columns]
    if missing:
        raise SchemaError(f"Missing predictor column(s): {missing}")

    blocks = [np.ones((len(frame), 1), dtype=float)]
    for col in numeric:
        if not pd.api.types.is_numeric_dtype(frame[col]):
            raise SchemaError(f"Predictor '{col}' must be numeric.")
        blocks.append(frame[col].to_numpy(dtype=float).reshape(-1, 1))
    for enc in encodings:
        blocks.append(enc.indicators(frame[enc.column]))
    return np.hstack(blocks)
