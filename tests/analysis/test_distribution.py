"""Tests for distribution binning."""

import numpy as np
import pytest

from datascope.analysis.distribution import (
    NUMERIC_BUCKETS,
    TOP_CATEGORIES,
    bin_categorical,
    bin_numeric,
    compute_distributions,
)
from datascope.core.classify import ColumnType, classify_columns
from datascope.core.dataset import Dataset
from datascope.core.notes import NoteKind


class TestBinNumeric:
    """Tests for numeric histograms."""

    def test_five_buckets_over_range(self) -> None:
        """Test equal-width buckets spanning [min, max]."""
        entry = bin_numeric("a", np.array([1.0, 2.0, 3.0]))
        assert len(entry.buckets) == NUMERIC_BUCKETS
        assert entry.buckets[0].lower == 1.0
        assert entry.buckets[-1].upper == 3.0
        assert entry.buckets[0].label == "1.00 - 1.40"
        assert entry.buckets[-1].label == "2.60 - 3.00"
        assert [b.count for b in entry.buckets] == [1, 0, 1, 0, 1]

    def test_max_lands_in_last_bucket(self) -> None:
        """Test the maximum value is clamped into the last bucket."""
        entry = bin_numeric("v", np.array([0.0, 10.0]))
        assert entry.buckets[-1].count == 1
        assert entry.buckets[0].count == 1

    def test_counts_sum_to_filtered_total(self) -> None:
        """Test every value lands in exactly one bucket."""
        values = np.random.default_rng(5).normal(size=137)
        entry = bin_numeric("v", values)
        assert sum(b.count for b in entry.buckets) == 137
        assert entry.total == 137
        assert sum(b.percentage for b in entry.buckets) == pytest.approx(100.0)

    def test_constant_column(self) -> None:
        """Test zero width puts every value in the first bucket."""
        entry = bin_numeric("c", np.array([4.0, 4.0, 4.0]))
        assert [b.count for b in entry.buckets] == [3, 0, 0, 0, 0]
        assert entry.skewness is None

    def test_skewness(self) -> None:
        """Test a long right tail gives positive skewness."""
        entry = bin_numeric("v", np.array([1.0, 1.0, 2.0, 2.0, 3.0, 50.0]))
        assert entry.skewness is not None
        assert entry.skewness > 0.5

    def test_range_wider_than_largest_float(self) -> None:
        """Test extreme finite values still bin into the five buckets."""
        entry = bin_numeric("v", np.array([-1e308, 0.0, 1e308]))
        assert [b.count for b in entry.buckets] == [1, 0, 1, 0, 1]
        assert entry.buckets[0].lower == -1e308
        assert entry.buckets[-1].upper == 1e308
        assert all(np.isfinite(b.lower) and np.isfinite(b.upper) for b in entry.buckets)


class TestBinCategorical:
    """Tests for categorical frequency tables."""

    def test_city_example(self, city_records: list[dict]) -> None:
        """Test NY twice and LA once."""
        entry = bin_categorical("city", [r["city"] for r in city_records])
        assert [(b.value, b.count) for b in entry.buckets] == [("NY", 2), ("LA", 1)]
        shown = [b.to_dict(display=True)["percentage"] for b in entry.buckets]
        assert shown == ["66.7", "33.3"]
        assert entry.most_common.value == "NY"

    def test_top_ten_only(self) -> None:
        """Test only the ten most frequent values are kept."""
        values = [f"v{i}" for i in range(15) for _ in range(i + 1)]
        entry = bin_categorical("v", values)
        assert len(entry.buckets) == TOP_CATEGORIES
        assert entry.buckets[0].value == "v14"
        assert entry.unique_count == 15

    def test_percentage_over_row_count(self) -> None:
        """Test percentages use every row, nulls included."""
        entry = bin_categorical("v", ["a", None, "a", None])
        assert [(b.value, b.count, b.percentage) for b in entry.buckets] == [
            ("a", 2, 50.0),
            (None, 2, 50.0),
        ]

    def test_ties_keep_first_seen_order(self) -> None:
        """Test equal counts are listed in first-seen order."""
        entry = bin_categorical("v", ["b", "a", "a", "b", "c"])
        assert [b.value for b in entry.buckets] == ["b", "a", "c"]

    def test_non_string_values(self) -> None:
        """Test booleans and integral floats are keyed as a dashboard shows them."""
        entry = bin_categorical("v", [True, "true", False, 1.0, "1", 2.5])
        counts = {b.value: b.count for b in entry.buckets}
        assert counts == {"true": 2, "false": 1, "1": 2, "2.5": 1}
        assert entry.unique_count == 4


class TestComputeDistributions:
    """Tests for per-column distributions."""

    def test_one_entry_per_column(self) -> None:
        """Test numeric and categorical columns each get an entry in order."""
        ds = Dataset.from_records([{"n": 1, "c": "x"}, {"n": 2, "c": "y"}])
        entries = compute_distributions(ds, classify_columns(ds))
        assert [(e.column, e.kind) for e in entries] == [
            ("n", ColumnType.NUMERIC),
            ("c", ColumnType.CATEGORICAL),
        ]

    def test_empty_numeric_column_noted(self) -> None:
        """Test a numeric column with nothing parseable is skipped."""
        ds = Dataset.from_records([{"n": 1}, {"n": 2}])
        notes = []
        entries = compute_distributions(ds, {"m": ColumnType.NUMERIC}, notes)
        assert entries == []
        assert notes[0].kind == NoteKind.EMPTY_COLUMN
