"""Define standardized column names for the Iris measurement table."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class IrisColumns:
    """Container for standardized column labels.

    These column names are used in every DataFrame handled by the
    walkthrough, so that loading, model fitting, reporting and plotting all
    agree on one spelling.

    Attributes:
        sepal_length: Sepal length in centimeters (cm). Strictly positive.

        sepal_width: Sepal width in centimeters (cm). Strictly positive.

        petal_length: Petal length in centimeters (cm). Strictly positive.

        petal_width: Petal width in centimeters (cm). Strictly positive.

        species: Categorical species label. Drawn from ``SPECIES_LEVELS``;
            after normalization the first level in alphabetical order
            (``setosa``) is the regression baseline.

        sepal_area: Derived column, ``sepal_length * sepal_width`` (cm^2).
            Not present in the raw CSV.
    """

    sepal_length: str = "Sepal_Length"
    sepal_width: str = "Sepal_Width"
    petal_length: str = "Petal_Length"
    petal_width: str = "Petal_Width"
    species: str = "Species"
    sepal_area: str = "Sepal_Area"

    @property
    def measurements(self) -> tuple[str, ...]:
        return (
            self.sepal_length,
            self.sepal_width,
            self.petal_length,
            self.petal_width,
        )


COLUMNS = IrisColumns()

SPECIES_LEVELS: tuple[str, ...] = ("setosa", "versicolor", "virginica")
