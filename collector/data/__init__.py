"""Data infrastructure for collector package.

Provides the base model, tabular document sources, seeded shuffling and
stimulus range parsing.
"""

from __future__ import annotations

from collector.data.base import CollectorBaseModel
from collector.data.ranges import (
    iter_stimulus_indices,
    parse_range,
    stimulus_indices,
)
from collector.data.tables import (
    CsvDirectorySource,
    Row,
    TabularSource,
    build_table,
    freeze_rows,
    shuffle_rows,
)

__all__ = [
    # Base model
    "CollectorBaseModel",
    # Tables
    "Row",
    "TabularSource",
    "CsvDirectorySource",
    "build_table",
    "freeze_rows",
    "shuffle_rows",
    # Ranges
    "parse_range",
    "stimulus_indices",
    "iter_stimulus_indices",
]
