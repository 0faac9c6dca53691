"""Column type classification.

Two classifiers live here:

- ``classify_columns`` partitions columns into numeric and categorical for
  the analysis engine, from the first record only
- ``infer_column_types`` labels columns for the upload preview from a
  small multi-row sample (integer, float, date, boolean, string)
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

import pandas as pd

from datascope.core.dataset import Dataset
from datascope.core.values import ValueKind, kind_of, parse_number

logger = logging.getLogger(__name__)


class ColumnType(str, Enum):
    """Engine column types."""

    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


ColumnClassification = dict[str, ColumnType]


def classify_columns(dataset: Dataset) -> ColumnClassification:
    """Classify the columns of a dataset from its first record.

    A column is numeric when its first-record value parses as a finite
    number. The result is reused for the whole dataset; later rows that do
    not parse are dropped by the calculators, never reclassified.

    Args:
        dataset: Dataset snapshot

    Returns:
        Ordered mapping of column name to ColumnType (empty for an empty
        dataset)
    """
    if dataset.is_empty:
        return {}

    first = dataset.records[0]
    return {
        column: (
            ColumnType.NUMERIC
            if parse_number(value) is not None
            else ColumnType.CATEGORICAL
        )
        for column, value in first.items()
    }


def numeric_columns(classification: ColumnClassification) -> list[str]:
    """Numeric column names, in classification order."""
    return [c for c, t in classification.items() if t == ColumnType.NUMERIC]


def categorical_columns(classification: ColumnClassification) -> list[str]:
    """Categorical column names, in classification order."""
    return [c for c, t in classification.items() if t == ColumnType.CATEGORICAL]


# Preview type detection

_BOOLEAN_TOKENS = {"true", "false", "True", "False", "0", "1"}
_DATE_MARKERS = ("-", "/", ":")


def _is_boolean_like(value: Any) -> bool:
    if kind_of(value) == ValueKind.BOOLEAN:
        return True
    if isinstance(value, str):
        return value in _BOOLEAN_TOKENS
    return kind_of(value) == ValueKind.NUMBER and value in (0, 1)


def _is_date_like(value: Any) -> bool:
    if not isinstance(value, str) or not any(m in value for m in _DATE_MARKERS):
        return False
    with warnings.catch_warnings():
        # pandas warns when it has to guess a format per element
        warnings.simplefilter("ignore", UserWarning)
        return pd.to_datetime(value, errors="coerce") is not pd.NaT


def infer_column_types(
    records: Sequence[Mapping[str, Any]] | Dataset,
    sample_size: int = 10,
    threshold: float = 0.7,
) -> dict[str, str]:
    """Label columns for a data preview.

    Args:
        records: Records (or a Dataset) to sample from
        sample_size: Maximum number of leading records to inspect
        threshold: Fraction of the sample a type must reach

    Returns:
        Mapping of column name to one of "integer", "float", "date",
        "boolean" or "string", for the columns of the first record

    Example:
        >>> infer_column_types([{"n": "1"}, {"n": "2.5"}])
        {'n': 'float'}
    """
    dataset = Dataset.from_records(records)
    if dataset.is_empty:
        return {}

    sample = dataset.records[: min(len(dataset), sample_size)]
    cutoff = len(sample) * threshold
    types: dict[str, str] = {}

    for column in dataset.records[0]:
        present = [
            r.get(column)
            for r in sample
            if kind_of(r.get(column)) != ValueKind.NULL and r.get(column) != ""
        ]
        numbers = [n for n in (parse_number(v) for v in present) if n is not None]
        date_count = sum(1 for v in present if _is_date_like(v))
        boolean_count = sum(1 for v in present if _is_boolean_like(v))

        best = max(len(numbers), date_count, boolean_count)
        if best < cutoff or best == 0:
            types[column] = "string"
        elif best == len(numbers):
            types[column] = "integer" if all(n.is_integer() for n in numbers) else "float"
        elif best == date_count:
            types[column] = "date"
        else:
            types[column] = "boolean"

    logger.debug(f"Inferred preview types for {len(types)} columns")
    return types
