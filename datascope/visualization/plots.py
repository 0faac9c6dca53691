"""Chart builders for dashboard views.

This module renders analysis results as Plotly figures:
- Distribution bar charts (histogram buckets or category frequencies)
- Correlation bar charts for the strongest pairs
- Outlier percentage charts
- Two-column scatter plots with an optional regression line
- Row-order trend lines

Figures are built from precomputed report entries wherever possible, so a
chart always agrees with the numbers shown next to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import plotly.graph_objects as go

from datascope.analysis.correlation import CorrelationSign, pearson
from datascope.analysis.report import AnalysisReport
from datascope.core.classify import ColumnType
from datascope.core.dataset import Dataset
from datascope.core.values import parse_number

POSITIVE_COLOR = "rgba(46, 139, 87, 0.8)"
NEGATIVE_COLOR = "rgba(205, 92, 92, 0.8)"
BAR_COLOR = "rgba(100, 149, 237, 0.8)"
OUTLIER_COLOR = "rgba(255, 165, 0, 0.8)"


@dataclass
class PlotResult:
    """Result from a plot generation function.

    Attributes:
        figure: Plotly figure object
        title: Plot title
        description: Description of what the plot shows
        data_summary: Summary of data used
    """

    figure: go.Figure
    title: str
    description: str
    data_summary: dict[str, Any]

    def to_html(self, include_plotlyjs: bool = True) -> str:
        """Convert figure to HTML string.

        Args:
            include_plotlyjs: Include Plotly.js library in HTML

        Returns:
            HTML string
        """
        return self.figure.to_html(
            include_plotlyjs="cdn" if include_plotlyjs else False,
            full_html=False,
        )

    def to_json(self) -> str:
        """Convert figure to JSON for frontend rendering."""
        return self.figure.to_json()

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "data_summary": self.data_summary,
            "figure": self.to_json(),
        }


def _layout(fig: go.Figure, title: str, x_title: str, y_title: str) -> None:
    fig.update_layout(
        title=dict(text=title, x=0.5),
        xaxis_title=x_title,
        yaxis_title=y_title,
        template="plotly_white",
        bargap=0.05,
    )


def create_distribution_chart(
    report: AnalysisReport,
    column: str,
    title: str | None = None,
) -> PlotResult:
    """Create a bar chart of a column's distribution.

    Args:
        report: Analysis report
        column: Column to plot
        title: Plot title (auto-generated if None)

    Returns:
        PlotResult with bar chart figure

    Raises:
        ValueError: If the report has no distribution for the column
    """
    entry = report.distribution_for(column)
    if entry is None:
        raise ValueError(f"No distribution available for column {column}")

    if title is None:
        title = f"Distribution of {column}"

    if entry.kind == ColumnType.NUMERIC:
        labels = [b.label for b in entry.buckets]
        x_title = column
    else:
        labels = ["(missing)" if b.value is None else b.value for b in entry.buckets]
        x_title = "Value"

    counts = [b.count for b in entry.buckets]
    hover = [f"{b.count} ({b.percentage:.1f}%)" for b in entry.buckets]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=labels,
        y=counts,
        text=hover,
        hoverinfo="x+text",
        marker=dict(color=BAR_COLOR),
        name=column,
    ))
    _layout(fig, title, x_title, "Count")

    summary = {
        "column": column,
        "kind": entry.kind.value,
        "total": entry.total,
        "unique_count": entry.unique_count,
        "n_buckets": len(entry.buckets),
    }
    if entry.skewness is not None:
        summary["skewness"] = entry.skewness

    return PlotResult(
        figure=fig,
        title=title,
        description=f"Bar chart of the {entry.kind.value} distribution of {column}.",
        data_summary=summary,
    )


def create_correlation_chart(
    report: AnalysisReport,
    top_n: int = 10,
    title: str = "Strongest Correlations",
) -> PlotResult:
    """Create a horizontal bar chart of the strongest correlations.

    Args:
        report: Analysis report
        top_n: Number of pairs to show
        title: Plot title

    Returns:
        PlotResult with bar chart figure

    Raises:
        ValueError: If the report has no correlations
    """
    entries = report.top_correlations(top_n)
    if not entries:
        raise ValueError("No correlations available")

    # Plotly draws the first bar at the bottom
    entries = list(reversed(entries))

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[e.coefficient for e in entries],
        y=[f"{e.column_a} / {e.column_b}" for e in entries],
        orientation="h",
        text=[f"{e.coefficient:.2f} ({e.strength.value})" for e in entries],
        hoverinfo="y+text",
        marker=dict(
            color=[
                POSITIVE_COLOR if e.sign == CorrelationSign.POSITIVE else NEGATIVE_COLOR
                for e in entries
            ]
        ),
        name="Pearson r",
    ))
    _layout(fig, title, "Pearson r", "")
    fig.update_xaxes(range=[-1, 1])

    return PlotResult(
        figure=fig,
        title=title,
        description=f"Top {len(entries)} column pairs by absolute Pearson correlation.",
        data_summary={
            "n_pairs": len(entries),
            "total_pairs": len(report.correlations),
            "strongest": entries[-1].to_dict(),
        },
    )


def create_outlier_chart(
    report: AnalysisReport,
    title: str = "Outliers by Column",
) -> PlotResult:
    """Create a bar chart of outlier percentage per column.

    Args:
        report: Analysis report
        title: Plot title

    Returns:
        PlotResult with bar chart figure (no bars when nothing was flagged)
    """
    entries = report.outliers_by_percentage()

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=[e.column for e in entries],
        y=[e.percentage for e in entries],
        text=[f"{e.count} outliers" for e in entries],
        hoverinfo="x+text",
        marker=dict(color=OUTLIER_COLOR),
        name="Outliers",
    ))
    _layout(fig, title, "Column", "Outliers (%)")

    return PlotResult(
        figure=fig,
        title=title,
        description="Share of values outside the 1.5 x IQR fences per column.",
        data_summary={
            "n_columns": len(entries),
            "total_outliers": report.total_outliers,
        },
    )


def create_scatter_plot(
    dataset: Dataset,
    x_column: str,
    y_column: str,
    title: str | None = None,
    show_regression: bool = False,
) -> PlotResult:
    """Create a scatter plot of two numeric columns.

    Only rows where both columns parse as numbers are plotted.

    Args:
        dataset: Dataset snapshot
        x_column: X-axis column
        y_column: Y-axis column
        title: Plot title
        show_regression: Show linear regression line

    Returns:
        PlotResult with scatter plot

    Raises:
        ValueError: If no row has both columns numeric
    """
    x, y = dataset.paired_numeric_values(x_column, y_column)
    if len(x) == 0:
        raise ValueError(f"No rows with numeric {x_column} and {y_column}")

    if title is None:
        title = f"{y_column} vs {x_column}"

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=x,
        y=y,
        mode="markers",
        marker=dict(size=6, opacity=0.7),
        name="Records",
    ))

    if show_regression and len(x) > 2 and not np.all(x == x[0]):
        coeffs = np.polyfit(x, y, 1)
        x_line = np.linspace(x.min(), x.max(), 100)
        fig.add_trace(go.Scatter(
            x=x_line,
            y=np.polyval(coeffs, x_line),
            mode="lines",
            line=dict(color="red", dash="dash"),
            name=f"Fit (slope={coeffs[0]:.2f})",
        ))

    fig.update_layout(
        title=dict(text=title, x=0.5),
        xaxis_title=x_column,
        yaxis_title=y_column,
        template="plotly_white",
        hovermode="closest",
    )

    return PlotResult(
        figure=fig,
        title=title,
        description=f"Scatter plot of {y_column} vs {x_column}.",
        data_summary={
            "x_column": x_column,
            "y_column": y_column,
            "n_points": len(x),
            "correlation": pearson(x, y),
        },
    )


def create_trend_chart(
    dataset: Dataset,
    column: str,
    max_points: int = 20,
    title: str | None = None,
) -> PlotResult:
    """Create a line chart of a column's values in row order.

    Args:
        dataset: Dataset snapshot
        column: Numeric column to plot
        max_points: Number of leading records to consider
        title: Plot title

    Returns:
        PlotResult with line chart figure

    Raises:
        ValueError: If none of the leading records has a numeric value
    """
    rows, values = [], []
    for index, record in enumerate(dataset.records[:max_points]):
        value = parse_number(record.get(column))
        if value is not None:
            rows.append(index + 1)
            values.append(value)

    if not values:
        raise ValueError(f"No numeric values for column {column}")

    if title is None:
        title = f"Trend of {column}"

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=rows,
        y=values,
        mode="lines+markers",
        name=column,
    ))
    _layout(fig, title, "Record", column)

    return PlotResult(
        figure=fig,
        title=title,
        description=f"Values of {column} across the first {max_points} records.",
        data_summary={"column": column, "n_points": len(values)},
    )
