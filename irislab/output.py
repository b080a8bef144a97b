"""Write analysis tables to reproducible CSV files.

This module is the output boundary between in-memory analysis and tabular
artifacts on disk.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping

import pandas as pd

logger = logging.getLogger(__name__)


def save_tables_to_csv(
    tables: Mapping[str, pd.DataFrame], output_dir: str = "output"
) -> Dict[str, str]:
    """Save each named table as ``<name>.csv`` in ``output_dir``.

    Args:
        tables (Mapping[str, pandas.DataFrame]): Table name to DataFrame. Names
            become file stems.
        output_dir (str): Directory where CSV outputs are written.

    Returns:
        dict[str, str]: Table name to written path.

    Note:
        Indexes are written only when they carry a name (coefficient terms,
        ANOVA sources); positional indexes are dropped.
    """
    os.makedirs(output_dir, exist_ok=True)

    paths: Dict[str, str] = {}
    for name, table in tables.items():
        path = os.path.join(output_dir, f"{name}.csv")
        table.to_csv(path, index=table.index.name is not None)
        paths[name] = path
        logger.info("Saved %s to %s", name, path)
    return paths
