"""Tests for IQR-fence outlier detection."""

import numpy as np

from datascope.analysis.outliers import detect_outliers, iqr_fences
from datascope.core.dataset import Dataset
from datascope.core.notes import NoteKind


def _dataset(values: list) -> Dataset:
    return Dataset.from_records([{"v": v} for v in values])


class TestIqrFences:
    """Tests for fence computation."""

    def test_fences(self) -> None:
        """Test fences sit 1.5 IQR beyond the quartiles."""
        lower, upper = iqr_fences(np.array([1.0, 2.0, 3.0, 4.0, 100.0]))
        assert (lower, upper) == (-1.0, 7.0)


class TestDetectOutliers:
    """Tests for outlier entries."""

    def test_single_outlier(self) -> None:
        """Test the canonical [1, 2, 3, 4, 100] example."""
        entries = detect_outliers(_dataset([1, 2, 3, 4, 100]), ["v"])
        assert len(entries) == 1
        entry = entries[0]
        assert entry.count == 1
        assert entry.min == 100.0
        assert entry.max == 100.0
        assert entry.percentage == 20.0
        assert entry.to_dict(display=True)["percentage"] == "20.0"

    def test_no_outliers_no_entry(self, linear_records: list[dict]) -> None:
        """Test columns without outliers produce no entry."""
        ds = Dataset.from_records(linear_records)
        assert detect_outliers(ds, ["a", "b"]) == []

    def test_fence_values_not_flagged(self) -> None:
        """Test values exactly on a fence are not outliers."""
        # q1 = 2, q3 = 4, fences -1 and 7
        entries = detect_outliers(_dataset([2, 2, 3, 4, 4, 7, -1]), ["v"])
        assert entries == []

    def test_constant_column(self) -> None:
        """Test a constant column has zero-width fences and no outliers."""
        assert detect_outliers(_dataset([5, 5, 5, 5]), ["v"]) == []

    def test_percentage_of_parseable_values(self) -> None:
        """Test the denominator excludes unparseable cells."""
        entries = detect_outliers(_dataset([1, 2, 3, 4, 100, "x", None]), ["v"])
        assert entries[0].percentage == 20.0

    def test_low_and_high(self) -> None:
        """Test outliers on both sides are counted together."""
        entries = detect_outliers(_dataset([-50, 10, 11, 12, 13, 14, 15, 80]), ["v"])
        assert entries[0].count == 2
        assert entries[0].min == -50.0
        assert entries[0].max == 80.0

    def test_empty_column_noted(self) -> None:
        """Test a column with no numeric values is noted."""
        notes = []
        assert detect_outliers(_dataset(["a", "b"]), ["v"], notes) == []
        assert notes[0].kind == NoteKind.EMPTY_COLUMN
