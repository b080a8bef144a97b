"""Exception types raised by the Iris walkthrough.

All errors derive from :class:`AnalysisError`, which is itself a
``ValueError`` so callers that already guard numerical helpers with
``except ValueError`` keep working.
"""

from __future__ import annotations


class AnalysisError(ValueError):
    """Base class for every failure raised by an analysis step."""


class SchemaError(AnalysisError):
    """A required column is missing or holds values outside its allowed set."""


class EmptyResultError(AnalysisError):
    """A filter or partition produced zero rows."""


class RankDeficiencyError(AnalysisError):
    """The regression design matrix is not of full column rank."""


class InsufficientDataError(AnalysisError):
    """Too few observations remain for the requested statistic."""


class UnknownLevelError(AnalysisError):
    """A categorical value was not part of the level set seen at fit time."""
