"""IQR-fence outlier detection for numeric columns."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from datascope.analysis.quantiles import fixed, nearest_rank_quartiles
from datascope.core.dataset import Dataset
from datascope.core.notes import AnalysisNote, empty_column_note

logger = logging.getLogger(__name__)

FENCE_MULTIPLIER = 1.5


@dataclass(frozen=True)
class OutlierEntry:
    """Outliers found in a numeric column.

    Attributes:
        column: Column name
        count: Number of values outside the fences
        percentage: 100 * count / number of parseable values
        min: Smallest outlier value
        max: Largest outlier value
        lower_fence: Q1 - 1.5 * IQR
        upper_fence: Q3 + 1.5 * IQR
    """

    column: str
    count: int
    percentage: float
    min: float
    max: float
    lower_fence: float
    upper_fence: float

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        """Convert to dictionary."""
        if display:
            return {
                "column": self.column,
                "count": self.count,
                "percentage": fixed(self.percentage, 1),
                "min": fixed(self.min),
                "max": fixed(self.max),
                "lower_fence": fixed(self.lower_fence),
                "upper_fence": fixed(self.upper_fence),
            }
        return {
            "column": self.column,
            "count": self.count,
            "percentage": self.percentage,
            "min": self.min,
            "max": self.max,
            "lower_fence": self.lower_fence,
            "upper_fence": self.upper_fence,
        }

    def format_for_display(self) -> str:
        """Format as human-readable string."""
        return (
            f"**{self.column}**: {self.count} outliers ({self.percentage:.1f}% of values), "
            f"range [{self.min:.2f}, {self.max:.2f}]"
        )


def iqr_fences(values: np.ndarray) -> tuple[float, float]:
    """Lower and upper IQR fences of a non-empty column."""
    quartiles = nearest_rank_quartiles(values)
    spread = FENCE_MULTIPLIER * quartiles.iqr
    return quartiles.q1 - spread, quartiles.q3 + spread


def detect_outliers(
    dataset: Dataset,
    numeric_columns: list[str],
    notes: list[AnalysisNote] | None = None,
) -> list[OutlierEntry]:
    """Find IQR-fence outliers in numeric columns.

    A value is an outlier iff it is strictly below the lower fence or
    strictly above the upper fence. Columns without outliers produce no
    entry.

    Args:
        dataset: Dataset snapshot
        numeric_columns: Columns classified as numeric
        notes: Optional list collecting degradation notes

    Returns:
        Entries in classification order

    Example:
        >>> ds = Dataset.from_records([{"v": v} for v in [1, 2, 3, 4, 100]])
        >>> detect_outliers(ds, ["v"])[0].count
        1
    """
    entries: list[OutlierEntry] = []

    for column in numeric_columns:
        values = dataset.numeric_values(column)

        if len(values) == 0:
            if notes is not None:
                notes.append(empty_column_note(column, "outlier detection"))
            continue

        lower, upper = iqr_fences(values)
        flagged = values[(values < lower) | (values > upper)]

        if len(flagged) == 0:
            continue

        entries.append(
            OutlierEntry(
                column=column,
                count=len(flagged),
                percentage=100.0 * len(flagged) / len(values),
                min=float(np.min(flagged)),
                max=float(np.max(flagged)),
                lower_fence=lower,
                upper_fence=upper,
            )
        )

    logger.debug(f"Outliers found in {len(entries)} of {len(numeric_columns)} columns")
    return entries
