"""Insight narrative generated from an analysis report.

The narrative is templated, not model-generated: each insight is a fixed
sentence filled in from the report's statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from datascope.analysis.correlation import CorrelationEntry, CorrelationSign
from datascope.analysis.distribution import DistributionEntry
from datascope.analysis.outliers import OutlierEntry
from datascope.analysis.report import AnalysisReport
from datascope.core.classify import ColumnType

SKEW_THRESHOLD = 0.5
TOP_CORRELATIONS = 5
FEATURED_DISTRIBUTIONS = 4


class InsightKind(str, Enum):
    """Tone of an insight card."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class Insight:
    """A single narrative insight."""

    title: str
    description: str
    kind: InsightKind

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "kind": self.kind.value,
        }


@dataclass
class InsightSummary:
    """Insights plus the report slices featured alongside them.

    Attributes:
        insights: Narrative insights in display order
        top_correlations: Strongest correlations by |r|
        outliers: Outlier entries by descending percentage
        distributions: Distributions featured on the insights page
    """

    insights: list[Insight] = field(default_factory=list)
    top_correlations: list[CorrelationEntry] = field(default_factory=list)
    outliers: list[OutlierEntry] = field(default_factory=list)
    distributions: list[DistributionEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "insights": [i.to_dict() for i in self.insights],
            "top_correlations": [c.to_dict() for c in self.top_correlations],
            "outliers": [o.to_dict() for o in self.outliers],
            "distributions": [d.to_dict() for d in self.distributions],
        }

    def format_for_display(self) -> str:
        """Format as human-readable string."""
        if not self.insights:
            return "No insights available."
        return "\n".join(f"- **{i.title}**: {i.description}" for i in self.insights)


def _overview(report: AnalysisReport) -> Insight:
    numeric = len(report.numeric_columns)
    total = len(report.columns)
    return Insight(
        title="Dataset Overview",
        description=(
            f"Your dataset contains {report.row_count} records with {total} columns "
            f"({numeric} numeric, {total - numeric} categorical)."
        ),
        kind=InsightKind.INFO,
    )


def _outlier_insight(report: AnalysisReport) -> Insight:
    if not report.outliers:
        return Insight(
            title="Data Quality",
            description="No significant outliers detected in your dataset.",
            kind=InsightKind.SUCCESS,
        )

    data_points = report.row_count * len(report.numeric_columns)
    share = 100.0 * report.total_outliers / data_points
    return Insight(
        title="Outlier Detection",
        description=(
            f"Found {report.total_outliers} outliers ({share:.1f}% of data points) "
            f"across {len(report.outliers)} columns."
        ),
        kind=InsightKind.WARNING,
    )


def _relationship_insight(report: AnalysisReport) -> Insight | None:
    strongest = report.strongest_correlation()
    if strongest is None:
        return None

    positive = strongest.sign == CorrelationSign.POSITIVE
    return Insight(
        title="Key Relationship",
        description=(
            f"{strongest.strength.value} {strongest.sign.value} correlation "
            f"({strongest.coefficient:.2f}) between {strongest.column_a} "
            f"and {strongest.column_b}."
        ),
        kind=InsightKind.POSITIVE if positive else InsightKind.NEGATIVE,
    )


def _distribution_insight(report: AnalysisReport) -> Insight | None:
    skewed = [
        d
        for d in report.distributions
        if d.kind == ColumnType.NUMERIC and d.skewness is not None
    ]
    if not skewed:
        return None

    most = max(skewed, key=lambda d: abs(d.skewness or 0.0))
    if abs(most.skewness or 0.0) <= SKEW_THRESHOLD:
        return None

    side = "right" if most.skewness > 0 else "left"
    return Insight(
        title="Distribution Pattern",
        description=(
            f"The {most.column} distribution is {side}-skewed "
            f"(skew: {most.skewness:.2f}), indicating asymmetry."
        ),
        kind=InsightKind.INFO,
    )


def generate_insights(report: AnalysisReport) -> InsightSummary:
    """Build the insight narrative for a report.

    Args:
        report: Analysis report for the current dataset

    Returns:
        InsightSummary (empty for an empty report)

    Example:
        >>> summary = generate_insights(analyze(records))
        >>> summary.insights[0].title
        'Dataset Overview'
    """
    if report.is_empty:
        return InsightSummary()

    insights = [_overview(report), _outlier_insight(report)]
    for optional in (_relationship_insight(report), _distribution_insight(report)):
        if optional is not None:
            insights.append(optional)

    return InsightSummary(
        insights=insights,
        top_correlations=report.top_correlations(TOP_CORRELATIONS),
        outliers=report.outliers_by_percentage(),
        distributions=list(report.distributions[:FEATURED_DISTRIBUTIONS]),
    )
