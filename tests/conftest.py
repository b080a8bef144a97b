"""Pytest configuration for repository-relative imports and shared fixtures."""

import os
import sys

import matplotlib

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")

import pytest  # noqa: E402

from irislab.data_processing import load_iris_data, normalize_categorical  # noqa: E402


@pytest.fixture()
def iris():
    """Bundled Iris table with Species normalized to a categorical."""
    return normalize_categorical(load_iris_data())
