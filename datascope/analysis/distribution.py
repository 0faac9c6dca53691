"""Distribution binning for numeric and categorical columns.

Numeric columns get a fixed 5-bucket equal-width histogram over
[min, max]. Categorical columns get a frequency table of their 10 most
common exact values.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any

import numpy as np
from scipy import stats

from datascope.analysis.quantiles import fixed
from datascope.core.classify import ColumnClassification, ColumnType
from datascope.core.dataset import Dataset
from datascope.core.notes import AnalysisNote, empty_column_note
from datascope.core.values import ValueKind, kind_of

logger = logging.getLogger(__name__)

NUMERIC_BUCKETS = 5
TOP_CATEGORIES = 10


@dataclass(frozen=True)
class RangeBucket:
    """One equal-width histogram bucket."""

    label: str
    lower: float
    upper: float
    count: int
    percentage: float

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        return {
            "range": self.label,
            "lower": self.lower,
            "upper": self.upper,
            "count": self.count,
            "percentage": fixed(self.percentage, 1) if display else self.percentage,
        }


@dataclass(frozen=True)
class CategoryBucket:
    """One categorical value and its frequency (None for missing)."""

    value: str | None
    count: int
    percentage: float

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        return {
            "value": self.value,
            "count": self.count,
            "percentage": fixed(self.percentage, 1) if display else self.percentage,
        }


@dataclass(frozen=True)
class DistributionEntry:
    """Distribution of a single column.

    Attributes:
        column: Column name
        kind: NUMERIC or CATEGORICAL
        buckets: RangeBuckets (numeric) or CategoryBuckets (categorical)
        total: Denominator for percentages (filtered count for numeric
            columns, row count for categorical columns)
        unique_count: Distinct values before truncation
        skewness: Population skewness of numeric values, if defined
    """

    column: str
    kind: ColumnType
    buckets: tuple[RangeBucket, ...] | tuple[CategoryBucket, ...]
    total: int
    unique_count: int
    skewness: float | None = None

    @property
    def most_common(self) -> CategoryBucket | None:
        """Most frequent category (categorical columns only)."""
        if self.kind != ColumnType.CATEGORICAL or not self.buckets:
            return None
        return self.buckets[0]  # type: ignore[return-value]

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "column": self.column,
            "kind": self.kind.value,
            "total": self.total,
            "unique_count": self.unique_count,
            "skewness": self.skewness,
            "buckets": [b.to_dict(display=display) for b in self.buckets],
        }


def bin_numeric(column: str, values: np.ndarray) -> DistributionEntry:
    """Bin filtered numeric values into equal-width buckets.

    A constant column has zero width and every value lands in bucket 0.
    Offsets are taken on halved values, which is exact for floats and
    keeps ranges wider than the largest float finite.
    """
    low = float(np.min(values))
    high = float(np.max(values))
    half_width = (high / 2 - low / 2) / NUMERIC_BUCKETS
    width = half_width * 2

    if half_width == 0:
        indices = np.zeros(len(values), dtype=int)
    else:
        # The clip absorbs the value equal to max
        indices = np.clip(
            np.floor((values / 2 - low / 2) / half_width), 0, NUMERIC_BUCKETS - 1
        ).astype(int)
    counts = np.bincount(indices, minlength=NUMERIC_BUCKETS)

    buckets = []
    for i, count in enumerate(counts):
        lower = low + i * width
        upper = high if i == NUMERIC_BUCKETS - 1 else low + (i + 1) * width
        buckets.append(
            RangeBucket(
                label=f"{lower:.2f} - {upper:.2f}",
                lower=lower,
                upper=upper,
                count=int(count),
                percentage=100.0 * int(count) / len(values),
            )
        )

    return DistributionEntry(
        column=column,
        kind=ColumnType.NUMERIC,
        buckets=tuple(buckets),
        total=len(values),
        unique_count=len(np.unique(values)),
        skewness=_skewness(values),
    )


def _skewness(values: np.ndarray) -> float | None:
    if len(values) < 3 or np.all(values == values[0]):
        return None
    with np.errstate(over="ignore", invalid="ignore"):
        skew = float(stats.skew(values))
    return skew if math.isfinite(skew) else None


def _category(value: Any) -> str | None:
    """Key a raw value the way a dashboard renders it.

    Booleans become "true" or "false" and integral floats drop their
    fractional part, so True, "true" and 1.0, "1" share a bucket.
    """
    kind = kind_of(value)
    if kind == ValueKind.NULL:
        return None
    if isinstance(value, str):
        return value
    if kind == ValueKind.BOOLEAN:
        return "true" if value else "false"
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def bin_categorical(column: str, values: list[Any]) -> DistributionEntry:
    """Count exact values of a column across all rows."""
    counter = Counter(_category(v) for v in values)
    total = len(values)

    buckets = tuple(
        CategoryBucket(value=value, count=count, percentage=100.0 * count / total)
        for value, count in counter.most_common(TOP_CATEGORIES)
    )

    return DistributionEntry(
        column=column,
        kind=ColumnType.CATEGORICAL,
        buckets=buckets,
        total=total,
        unique_count=len(counter),
    )


def compute_distributions(
    dataset: Dataset,
    classification: ColumnClassification,
    notes: list[AnalysisNote] | None = None,
) -> list[DistributionEntry]:
    """Compute one distribution per classified column.

    Args:
        dataset: Dataset snapshot
        classification: Column classification for the dataset
        notes: Optional list collecting degradation notes

    Returns:
        Entries in classification order
    """
    entries: list[DistributionEntry] = []

    for column, column_type in classification.items():
        if column_type == ColumnType.CATEGORICAL:
            entries.append(bin_categorical(column, dataset.values(column)))
            continue

        values = dataset.numeric_values(column)
        if len(values) == 0:
            if notes is not None:
                notes.append(empty_column_note(column, "distributions"))
            continue
        entries.append(bin_numeric(column, values))

    return entries
