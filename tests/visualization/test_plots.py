"""Tests for visualization plots module."""

import json

import pytest

from datascope.analysis.report import AnalysisReport, analyze
from datascope.core.dataset import Dataset
from datascope.visualization.plots import (
    NEGATIVE_COLOR,
    POSITIVE_COLOR,
    PlotResult,
    create_correlation_chart,
    create_distribution_chart,
    create_outlier_chart,
    create_scatter_plot,
    create_trend_chart,
)


class TestPlotResult:
    """Tests for PlotResult dataclass."""

    def test_create_result(self, sales_report: AnalysisReport) -> None:
        """Test that PlotResult has expected attributes."""
        result = create_distribution_chart(sales_report, "price")
        assert isinstance(result, PlotResult)
        assert result.title == "Distribution of price"
        assert result.description
        assert result.data_summary["column"] == "price"

    def test_to_html(self, sales_report: AnalysisReport) -> None:
        """Test converting to HTML."""
        html = create_outlier_chart(sales_report).to_html()
        assert isinstance(html, str)
        assert len(html) > 0

    def test_to_json(self, sales_report: AnalysisReport) -> None:
        """Test converting to JSON."""
        data = json.loads(create_outlier_chart(sales_report).to_json())
        assert "data" in data
        assert "layout" in data


class TestDistributionChart:
    """Tests for distribution bar charts."""

    def test_numeric_buckets(self, linear_records: list[dict]) -> None:
        """Test numeric bars are labelled by range."""
        result = create_distribution_chart(analyze(linear_records), "a")
        trace = result.figure.data[0]
        assert list(trace.x) == [
            "1.00 - 1.40",
            "1.40 - 1.80",
            "1.80 - 2.20",
            "2.20 - 2.60",
            "2.60 - 3.00",
        ]
        assert list(trace.y) == [1, 0, 1, 0, 1]

    def test_categorical_with_missing(self) -> None:
        """Test missing values get their own labelled bar."""
        report = analyze([{"c": "x"}, {"c": None}, {"c": "x"}])
        trace = create_distribution_chart(report, "c").figure.data[0]
        assert list(trace.x) == ["x", "(missing)"]

    def test_unknown_column(self, sales_report: AnalysisReport) -> None:
        """Test an unknown column is rejected."""
        with pytest.raises(ValueError):
            create_distribution_chart(sales_report, "nonexistent")


class TestCorrelationChart:
    """Tests for correlation bar charts."""

    def test_strongest_on_top(self, sales_report: AnalysisReport) -> None:
        """Test bars are ordered so the strongest pair is drawn last."""
        result = create_correlation_chart(sales_report)
        trace = result.figure.data[0]
        magnitudes = [abs(v) for v in trace.x]
        assert magnitudes == sorted(magnitudes)
        assert tuple(result.figure.layout.xaxis.range) == (-1, 1)

    def test_colors_follow_sign(self) -> None:
        """Test positive and negative pairs are coloured differently."""
        report = analyze(
            [{"x": 1, "up": 2, "down": 9}, {"x": 2, "up": 4, "down": 5}, {"x": 3, "up": 7, "down": 1}]
        )
        result = create_correlation_chart(report)
        colors = dict(zip(result.figure.data[0].y, result.figure.data[0].marker.color))
        assert colors["x / up"] == POSITIVE_COLOR
        assert colors["x / down"] == NEGATIVE_COLOR

    def test_top_n(self, sales_report: AnalysisReport) -> None:
        """Test the number of bars is capped."""
        result = create_correlation_chart(sales_report, top_n=2)
        assert len(result.figure.data[0].x) == 2
        assert result.data_summary["total_pairs"] == 3

    def test_no_correlations(self, city_records: list[dict]) -> None:
        """Test a report without correlations is rejected."""
        with pytest.raises(ValueError):
            create_correlation_chart(analyze(city_records))


class TestOutlierChart:
    """Tests for outlier charts."""

    def test_percentages(self, sales_report: AnalysisReport) -> None:
        """Test bars show outlier percentage per column."""
        result = create_outlier_chart(sales_report)
        assert list(result.figure.data[0].x) == ["price", "revenue"]
        assert list(result.figure.data[0].y) == [10.0, 10.0]
        assert result.data_summary["total_outliers"] == 2


class TestScatterAndTrend:
    """Tests for dataset-level charts."""

    def test_scatter_lock_step(self) -> None:
        """Test only rows where both columns parse are plotted."""
        ds = Dataset.from_records([{"x": 1, "y": 2}, {"x": "?", "y": 3}, {"x": 2, "y": 4}])
        result = create_scatter_plot(ds, "x", "y")
        assert result.data_summary["n_points"] == 2
        assert result.data_summary["correlation"] == 1.0

    def test_scatter_regression(self, sales_dataset: Dataset) -> None:
        """Test the regression line is added on request."""
        result = create_scatter_plot(sales_dataset, "quantity", "revenue", show_regression=True)
        assert len(result.figure.data) == 2

    def test_scatter_no_data(self) -> None:
        """Test a pair with no joint values is rejected."""
        ds = Dataset.from_records([{"x": "a", "y": 1}])
        with pytest.raises(ValueError):
            create_scatter_plot(ds, "x", "y")

    def test_trend(self, sales_dataset: Dataset) -> None:
        """Test the trend follows row order."""
        result = create_trend_chart(sales_dataset, "quantity", max_points=3)
        trace = result.figure.data[0]
        assert list(trace.x) == [1, 2, 3]
        assert list(trace.y) == [100.0, 97.0, 94.0]
