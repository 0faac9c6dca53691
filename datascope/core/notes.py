"""Degradation notes recorded during an analysis run.

The engine never fails a report because of a degenerate input. Instead,
each calculator records what it skipped and why:

- Empty datasets
- Columns with no parseable numeric values
- Constant-valued (zero variance) columns
- Records missing a column that other records carry
"""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from enum import Enum
from typing import Any


class NoteKind(str, Enum):
    """Kinds of degradation the engine tolerates."""

    EMPTY_DATASET = "empty_dataset"
    EMPTY_COLUMN = "empty_column"
    DEGENERATE_COLUMN = "degenerate_column"
    MISMATCHED_ROW_SHAPE = "mismatched_row_shape"


@dataclass(frozen=True)
class AnalysisNote:
    """A single degradation recorded while building a report.

    Attributes:
        kind: Category of the degradation
        message: Human-readable description
        column: Column involved (if applicable)
        details: Additional context
    """

    kind: NoteKind
    message: str
    column: str | None = None
    details: dict[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "column": self.column,
            "message": self.message,
            "details": dict(self.details),
        }


def empty_dataset_note() -> AnalysisNote:
    return AnalysisNote(
        kind=NoteKind.EMPTY_DATASET,
        message="Dataset contains no records.",
    )


def empty_column_note(column: str, calculator: str) -> AnalysisNote:
    return AnalysisNote(
        kind=NoteKind.EMPTY_COLUMN,
        column=column,
        message=f"{column} has no numeric values; omitted from {calculator}.",
        details={"calculator": calculator},
    )


def degenerate_column_note(column: str, calculator: str) -> AnalysisNote:
    return AnalysisNote(
        kind=NoteKind.DEGENERATE_COLUMN,
        column=column,
        message=f"{column} is constant; omitted from {calculator}.",
        details={"calculator": calculator},
    )


def mismatched_shape_note(column: str, missing_rows: int, row_count: int) -> AnalysisNote:
    return AnalysisNote(
        kind=NoteKind.MISMATCHED_ROW_SHAPE,
        column=column,
        message=f"{column} is absent from {missing_rows} of {row_count} records.",
        details={"missing_rows": missing_rows, "row_count": row_count},
    )
