"""Summary statistics for numeric columns."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from datascope.analysis.quantiles import fixed, nearest_rank_quartiles
from datascope.core.dataset import Dataset
from datascope.core.notes import AnalysisNote, empty_column_note

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SummaryStats:
    """Summary statistics for a numeric column.

    Attributes:
        column: Column name
        count: Number of parseable values
        mean: Arithmetic mean
        median: Nearest-rank median
        min: Minimum value
        max: Maximum value
        std_dev: Population standard deviation
        q1: Nearest-rank first quartile
        q3: Nearest-rank third quartile
        iqr: Interquartile range (q3 - q1)
    """

    column: str
    count: int
    mean: float
    median: float
    min: float
    max: float
    std_dev: float
    q1: float
    q3: float
    iqr: float

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        """Convert to dictionary.

        Args:
            display: Render numbers as 2-decimal strings
        """
        fmt = fixed if display else (lambda v: v)
        return {
            "column": self.column,
            "count": self.count,
            "mean": fmt(self.mean),
            "median": fmt(self.median),
            "min": fmt(self.min),
            "max": fmt(self.max),
            "std_dev": fmt(self.std_dev),
            "q1": fmt(self.q1),
            "q3": fmt(self.q3),
            "iqr": fmt(self.iqr),
        }

    def format_for_display(self) -> str:
        """Format as human-readable string."""
        lines = [
            f"**{self.column}** (n={self.count})",
            f"  Mean: {self.mean:.2f}",
            f"  Median: {self.median:.2f}",
            f"  Std Dev: {self.std_dev:.2f}",
            f"  Range: [{self.min:.2f}, {self.max:.2f}]",
            f"  Quartiles: [{self.q1:.2f}, {self.q3:.2f}] (IQR {self.iqr:.2f})",
        ]
        return "\n".join(lines)


def _mean_and_std(values: np.ndarray) -> tuple[float, float]:
    with np.errstate(over="ignore", invalid="ignore"):
        mean = float(np.mean(values))
        # Population variance: divisor is the filtered count
        std_dev = float(np.sqrt(np.mean((values - mean) ** 2)))
    if np.isfinite(mean) and np.isfinite(std_dev):
        return mean, std_dev

    # Sums of huge values overflow; both statistics scale linearly
    scale = float(np.max(np.abs(values)))
    scaled = values / scale
    scaled_mean = float(np.mean(scaled))
    scaled_std = float(np.sqrt(np.mean((scaled - scaled_mean) ** 2)))
    return scaled_mean * scale, scaled_std * scale


def summarize_values(column: str, values: np.ndarray) -> SummaryStats:
    """Compute summary statistics over already filtered values.

    Raises:
        ValueError: If values is empty
    """
    quartiles = nearest_rank_quartiles(values)

    if np.all(values == values[0]):
        # Summation can leave rounding residue on constant columns
        mean, std_dev = float(values[0]), 0.0
    else:
        mean, std_dev = _mean_and_std(values)

    return SummaryStats(
        column=column,
        count=len(values),
        mean=mean,
        median=quartiles.median,
        min=float(np.min(values)),
        max=float(np.max(values)),
        std_dev=std_dev,
        q1=quartiles.q1,
        q3=quartiles.q3,
        iqr=quartiles.iqr,
    )


def compute_summary_statistics(
    dataset: Dataset,
    numeric_columns: list[str],
    notes: list[AnalysisNote] | None = None,
) -> dict[str, SummaryStats]:
    """Compute summary statistics for numeric columns.

    Args:
        dataset: Dataset snapshot
        numeric_columns: Columns classified as numeric
        notes: Optional list collecting degradation notes

    Returns:
        Mapping of column name to SummaryStats. Columns with no parseable
        values are omitted.

    Example:
        >>> ds = Dataset.from_records([{"a": 1}, {"a": 2}, {"a": 3}])
        >>> compute_summary_statistics(ds, ["a"])["a"].mean
        2.0
    """
    summary: dict[str, SummaryStats] = {}

    for column in numeric_columns:
        values = dataset.numeric_values(column)

        if len(values) == 0:
            logger.debug(f"No numeric values in {column}, skipping summary")
            if notes is not None:
                notes.append(empty_column_note(column, "summary statistics"))
            continue

        summary[column] = summarize_values(column, values)

    return summary
