"""Visualization tools for Datascope dashboards."""

from datascope.visualization.plots import (
    PlotResult,
    create_correlation_chart,
    create_distribution_chart,
    create_outlier_chart,
    create_scatter_plot,
    create_trend_chart,
)

__all__ = [
    "PlotResult",
    "create_distribution_chart",
    "create_correlation_chart",
    "create_outlier_chart",
    "create_scatter_plot",
    "create_trend_chart",
]
