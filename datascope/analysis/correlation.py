"""Pairwise Pearson correlation between numeric columns.

Every unordered pair of distinct numeric columns is scanned in
classification order. Pairs are skipped silently when they have no
jointly parseable rows or when either side is constant.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from datascope.analysis.quantiles import fixed
from datascope.core.dataset import Dataset
from datascope.core.notes import AnalysisNote, degenerate_column_note

logger = logging.getLogger(__name__)

MODERATE_THRESHOLD = 0.3
STRONG_THRESHOLD = 0.7


class CorrelationStrength(str, Enum):
    """Strength band of a correlation coefficient."""

    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"

    @classmethod
    def from_coefficient(cls, r: float) -> CorrelationStrength:
        abs_r = abs(r)
        if abs_r > STRONG_THRESHOLD:
            return cls.STRONG
        if abs_r >= MODERATE_THRESHOLD:
            return cls.MODERATE
        return cls.WEAK


class CorrelationSign(str, Enum):
    """Direction of a correlation coefficient."""

    POSITIVE = "positive"
    NEGATIVE = "negative"

    @classmethod
    def from_coefficient(cls, r: float) -> CorrelationSign:
        return cls.POSITIVE if r > 0 else cls.NEGATIVE


@dataclass(frozen=True)
class CorrelationEntry:
    """Pearson correlation between two numeric columns.

    Attributes:
        column_a: First column (earlier in classification order)
        column_b: Second column
        coefficient: Pearson r in [-1, 1]
        strength: Weak, Moderate or Strong
        sign: Positive or negative
        n_points: Number of rows where both columns parse
    """

    column_a: str
    column_b: str
    coefficient: float
    strength: CorrelationStrength
    sign: CorrelationSign
    n_points: int

    def involves(self, column: str) -> bool:
        return column in (self.column_a, self.column_b)

    def other(self, column: str) -> str:
        """The column paired with ``column`` in this entry."""
        return self.column_b if column == self.column_a else self.column_a

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "column_a": self.column_a,
            "column_b": self.column_b,
            "coefficient": fixed(self.coefficient) if display else self.coefficient,
            "strength": self.strength.value,
            "sign": self.sign.value,
            "n_points": self.n_points,
        }

    def format_for_display(self) -> str:
        """Format as human-readable string."""
        return (
            f"**{self.column_a} vs {self.column_b}** (n={self.n_points}): "
            f"r = {self.coefficient:.2f} "
            f"({self.strength.value.lower()} {self.sign.value})"
        )


def pearson(x: np.ndarray, y: np.ndarray) -> float | None:
    """Pearson correlation coefficient of two parallel arrays.

    Args:
        x: First values
        y: Second values, same length as x

    Returns:
        r clipped to [-1, 1], or None when the arrays are empty, differ in
        length, or either is constant
    """
    if len(x) != len(y) or len(x) == 0:
        return None
    if np.all(x == x[0]) or np.all(y == y[0]):
        return None

    with np.errstate(over="ignore", invalid="ignore"):
        r = _pearson_ratio(x, y)
    if not np.isfinite(r):
        # r is scale invariant, so rescale values whose products overflow
        r = _pearson_ratio(x / np.max(np.abs(x)), y / np.max(np.abs(y)))
    if not np.isfinite(r):
        return None

    return float(np.clip(r, -1.0, 1.0))


def _pearson_ratio(x: np.ndarray, y: np.ndarray) -> float:
    dx = x - np.mean(x)
    dy = y - np.mean(y)
    numerator = float(np.sum(dx * dy))
    denominator = float(np.sqrt(np.sum(dx * dx) * np.sum(dy * dy)))
    if denominator == 0 or not math.isfinite(denominator):
        return math.nan
    return numerator / denominator


def _is_constant(values: np.ndarray) -> bool:
    return len(values) > 0 and bool(np.all(values == values[0]))


def compute_correlations(
    dataset: Dataset,
    numeric_columns: list[str],
    notes: list[AnalysisNote] | None = None,
) -> list[CorrelationEntry]:
    """Compute Pearson correlations for every pair of numeric columns.

    Args:
        dataset: Dataset snapshot
        numeric_columns: Columns classified as numeric, in classification order
        notes: Optional list collecting degradation notes

    Returns:
        Entries in pair enumeration order (outer column first). Not sorted;
        callers wanting a "top correlations" view sort a copy.
    """
    entries: list[CorrelationEntry] = []
    constant: set[str] = set()
    # Constant over every parseable value of the column
    degenerate = {
        column
        for column in numeric_columns
        if _is_constant(dataset.numeric_values(column))
    }

    for i, column_a in enumerate(numeric_columns):
        for column_b in numeric_columns[i + 1 :]:
            x, y = dataset.paired_numeric_values(column_a, column_b)
            r = pearson(x, y)

            if r is None:
                constant.update(c for c in (column_a, column_b) if c in degenerate)
                continue

            entries.append(
                CorrelationEntry(
                    column_a=column_a,
                    column_b=column_b,
                    coefficient=r,
                    strength=CorrelationStrength.from_coefficient(r),
                    sign=CorrelationSign.from_coefficient(r),
                    n_points=len(x),
                )
            )

    if constant:
        logger.debug(f"Constant columns excluded from correlation: {sorted(constant)}")
        if notes is not None:
            notes.extend(
                degenerate_column_note(column, "correlations")
                for column in numeric_columns
                if column in constant
            )

    return entries


def top_correlations(
    entries: list[CorrelationEntry], limit: int = 5
) -> list[CorrelationEntry]:
    """Sorted copy of entries by descending |r|."""
    return sorted(entries, key=lambda e: abs(e.coefficient), reverse=True)[:limit]


def strongest_correlation(
    entries: list[CorrelationEntry], column: str | None = None
) -> CorrelationEntry | None:
    """Entry with the largest |r|, optionally restricted to one column.

    The first entry wins ties.
    """
    candidates = [e for e in entries if column is None or e.involves(column)]
    if not candidates:
        return None
    return max(candidates, key=lambda e: abs(e.coefficient))
