"""Core data model for Datascope.

This module contains:
- Scalar value kinds and the shared numeric parse
- Immutable dataset snapshots and shape validation
- Column type classification
- Degradation notes recorded during analysis
"""

from datascope.core.classify import (
    ColumnClassification,
    ColumnType,
    classify_columns,
    infer_column_types,
)
from datascope.core.dataset import Dataset, InvalidDatasetShape
from datascope.core.notes import AnalysisNote, NoteKind
from datascope.core.values import ValueKind, kind_of, parse_number

__all__ = [
    "AnalysisNote",
    "ColumnClassification",
    "ColumnType",
    "Dataset",
    "InvalidDatasetShape",
    "NoteKind",
    "ValueKind",
    "classify_columns",
    "infer_column_types",
    "kind_of",
    "parse_number",
]
