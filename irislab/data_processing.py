"""
Handles CSV loading, derived columns, categorical normalization, filtering
and train/test partitioning of the Iris measurement table.
"""

# Algorithm summary: read the bundled CSV into a DataFrame, validate the
# fixed schema, append derived columns without touching existing ones,
# re-type the species label as an unordered categorical with sorted levels,
# and draw seeded row partitions without replacement.

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Union

import numpy as np
import pandas as pd

from .errors import EmptyResultError, SchemaError
from .schema import COLUMNS, SPECIES_LEVELS

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path(__file__).resolve().parent / "data" / "iris.csv"

SeedLike = Union[int, np.random.Generator, None]
Predicate = Callable[[pd.DataFrame], Union[pd.Series, np.ndarray]]


@dataclass(frozen=True)
class Partition:
    """Disjoint positional row sets produced by one seeded draw."""

    train: np.ndarray
    test: np.ndarray

    @property
    def n_total(self) -> int:
        return int(len(self.train) + len(self.test))


def _require_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise SchemaError(
            f"Missing required column(s) {missing}. "
            f"Available columns: {list(df.columns)}"
        )


def load_iris_data(filepath: str | Path | None = None) -> pd.DataFrame:
    """Load the Iris measurement table from CSV.

    Args:
        filepath (str | Path | None): Path to a CSV with the four measurement
            columns and the species column. Defaults to the copy bundled with
            the package.

    Returns:
        pandas.DataFrame: One row per flower; measurements as floats and the
        species label as plain strings (see :func:`normalize_categorical`).

    Raises:
        SchemaError: If a required column is missing or a measurement is
            non-numeric or not strictly positive.
    """
    path = Path(filepath) if filepath is not None else DEFAULT_DATA_PATH
    df = pd.read_csv(path)
    _require_columns(df, (*COLUMNS.measurements, COLUMNS.species))

    for col in COLUMNS.measurements:
        values = pd.to_numeric(df[col], errors="coerce")
        if values.isna().any():
            n_bad = int(values.isna().sum())
            raise SchemaError(f"Column '{col}' has {n_bad} non-numeric value(s).")
        if (values <= 0).any():
            raise SchemaError(f"Column '{col}' must hold strictly positive values.")
        df[col] = values.astype(float)

    df[COLUMNS.species] = df[COLUMNS.species].astype(str).str.strip()
    logger.info("Loaded %d rows from %s", len(df), path)
    return df


def add_product_column(
    df: pd.DataFrame, col_a: str, col_b: str, name: str
) -> pd.DataFrame:
    """Return a copy of ``df`` with ``name = col_a * col_b`` appended."""
    _require_columns(df, (col_a, col_b))
    out = df.copy()
    out[name] = out[col_a] * out[col_b]
    return out


def normalize_categorical(
    df: pd.DataFrame,
    column: str = COLUMNS.species,
    allowed: Iterable[str] | None = SPECIES_LEVELS,
) -> pd.DataFrame:
    """Re-type a label column as an unordered categorical.

    Levels are the distinct observed values in sorted order, so the first
    level alphabetically becomes the regression baseline.

    Args:
        df (pandas.DataFrame): Input table.
        column (str): Name of the label column.
        allowed (Iterable[str] | None): Closed set of admissible labels.
            ``None`` disables the check.

    Returns:
        pandas.DataFrame: Copy of ``df`` with ``column`` as
        ``pandas.CategoricalDtype(ordered=False)``.

    Raises:
        SchemaError: If the column is missing, contains missing values, or
            contains labels outside ``allowed``.
    """
    _require_columns(df, (column,))
    values = df[column]
    if values.isna().any():
        raise SchemaError(f"Column '{column}' contains missing labels.")

    labels = values.astype(str)
    observed = sorted(labels.unique())
    if allowed is not None:
        allowed_set = set(allowed)
        unexpected = [lvl for lvl in observed if lvl not in allowed_set]
        if unexpected:
            raise SchemaError(
                f"Column '{column}' has labels outside {sorted(allowed_set)}: "
                f"{unexpected}"
            )

    out = df.copy()
    out[column] = pd.Categorical(labels, categories=observed, ordered=False)
    return out


def baseline_level(series: pd.Series) -> str:
    """Return the baseline (first) level of a categorical series."""
    if not isinstance(series.dtype, pd.CategoricalDtype):
        raise SchemaError(f"Column '{series.name}' is not categorical.")
    return str(series.cat.categories[0])


def filter_rows(df: pd.DataFrame, predicate: Predicate) -> pd.DataFrame:
    """Return the subview of rows where ``predicate(df)`` holds.

    Raises:
        EmptyResultError: If no rows satisfy the predicate.
    """
    mask = np.asarray(predicate(df), dtype=bool)
    if mask.shape != (len(df),):
        raise ValueError("Predicate must return one boolean per row.")
    subset = df.loc[mask]
    if subset.empty:
        raise EmptyResultError("Filter matched zero rows.")
    return subset


def filter_species(
    df: pd.DataFrame, species: str, column: str = COLUMNS.species
) -> pd.DataFrame:
    """Return rows whose label equals ``species``."""
    _require_columns(df, (column,))
    try:
        return filter_rows(df, lambda frame: frame[column].astype(str) == species)
    except EmptyResultError:
        raise EmptyResultError(f"No rows with {column} == '{species}'.") from None


def _as_generator(seed: SeedLike) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def partition_indices(n_rows: int, fraction: float, seed: SeedLike = None) -> Partition:
    """Draw ``round(fraction * n_rows)`` positions without replacement.

    Both index arrays are returned sorted; the test set is the complement of
    the training draw.
    """
    fraction = float(fraction)
    if not np.isfinite(fraction) or not 0.0 < fraction < 1.0:
        raise ValueError("fraction must lie strictly between 0 and 1.")
    if n_rows <= 0:
        raise EmptyResultError("Cannot partition an empty table.")

    n_train = int(round(fraction * n_rows))
    if n_train == 0 or n_train == n_rows:
        raise EmptyResultError(
            f"fraction={fraction} leaves an empty partition for {n_rows} rows."
        )

    rng = _as_generator(seed)
    drawn = rng.choice(n_rows, size=n_train, replace=False)
    train = np.sort(drawn)
    test = np.setdiff1d(np.arange(n_rows), train, assume_unique=True)
    return Partition(train=train, test=test)


def train_test_split(
    df: pd.DataFrame, fraction: float = 0.7, seed: SeedLike = 123
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split ``df`` into seeded train and test partitions.

    Args:
        df (pandas.DataFrame): Table to split. Its index labels are
            preserved in both outputs.
        fraction (float): Share of rows assigned to the training partition.
        seed (int | numpy.random.Generator | None): Integer seed or an
            explicit generator. The same ``(df, fraction, seed)`` always
            yields the same partition.

    Returns:
        tuple[pandas.DataFrame, pandas.DataFrame]: ``(train, test)``.
    """
    part = partition_indices(len(df), fraction, seed)
    train = df.iloc[part.train]
    test = df.iloc[part.test]
    logger.info(
        "Split %d rows into %d train / %d test (fraction=%.2f)",
        len(df),
        len(train),
        len(test),
        fraction,
    )
    return train, test
