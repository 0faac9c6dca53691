"""Templated question answering over an analysis report.

Questions are routed by keyword (first match wins) and answered from the
report's precomputed statistics; nothing is recomputed here. A column is
considered mentioned when its lower-cased name appears in the question.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from datascope.analysis.report import AnalysisReport
from datascope.core.classify import ColumnType
from datascope.core.dataset import Dataset
from datascope.core.values import parse_number

logger = logging.getLogger(__name__)

TREND_POINTS = 20

FALLBACK_MESSAGE = (
    "I'm not sure how to answer that question. Try asking about averages, "
    "trends, distributions, or insights about specific columns in your data."
)


@dataclass(frozen=True)
class ChatAnswer:
    """Answer to a dashboard question.

    Attributes:
        text: Answer text (may span several lines)
        intent: Keyword route that produced the answer
        chart_data: Rows for an accompanying chart, if any
        chart_type: "bar" or "line" when chart_data is set
    """

    text: str
    intent: str
    chart_data: list[dict[str, Any]] | None = None
    chart_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "intent": self.intent,
            "chart_data": self.chart_data,
            "chart_type": self.chart_type,
        }


def _mentioned(query: str, columns: list[str]) -> str | None:
    return next((c for c in columns if c.lower() in query), None)


def _statistic_answer(
    query: str, report: AnalysisReport, attribute: str, label: str
) -> str:
    column = _mentioned(query, report.numeric_columns)
    if column is not None and column in report.summary:
        value = getattr(report.summary[column], attribute)
        article = "average" if attribute == "mean" else label.lower()
        return f"The {article} {column} is {value:.2f}."

    plural = "averages" if attribute == "mean" else f"{label.lower()} values"
    lines = [f"Here are the {plural} for your numeric data:"]
    for col in report.numeric_columns:
        stats = report.summary.get(col)
        if stats is not None:
            lines.append(f"- {label} {col}: {getattr(stats, attribute):.2f}")
    return "\n".join(lines)


def _average(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    return ChatAnswer(_statistic_answer(query, report, "mean", "Average"), "average")


def _maximum(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    return ChatAnswer(_statistic_answer(query, report, "max", "Maximum"), "maximum")


def _minimum(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    return ChatAnswer(_statistic_answer(query, report, "min", "Minimum"), "minimum")


def _distribution(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    column = _mentioned(query, report.columns)
    if column is None:
        return ChatAnswer(
            "Please specify which column you want to see the distribution for.",
            "distribution",
        )

    entry = report.distribution_for(column)
    if entry is None:
        return ChatAnswer(f"I don't have distribution data for {column}.", "distribution")

    return ChatAnswer(
        f"Here's the distribution of {column}:",
        "distribution",
        chart_data=[b.to_dict(display=True) for b in entry.buckets],
        chart_type="bar",
    )


def _trend(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    column = _mentioned(query, report.numeric_columns)
    if column is None:
        return ChatAnswer("Please specify which metric you want to see the trend for.", "trend")
    if dataset is None:
        return ChatAnswer(f"I don't have the rows needed to chart {column}.", "trend")

    points = []
    for index, record in enumerate(dataset.records[:TREND_POINTS]):
        value = parse_number(record.get(column))
        if value is not None:
            points.append({"name": index + 1, "value": value})

    return ChatAnswer(
        f"Here's the trend of {column} across the first {len(points)} records:",
        "trend",
        chart_data=points,
        chart_type="line",
    )


def _correlation(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    strongest = report.strongest_correlation()
    if strongest is None:
        return ChatAnswer("I don't have correlation data for your dataset.", "correlation")

    return ChatAnswer(
        f"The strongest correlation is between {strongest.column_a} and "
        f"{strongest.column_b} with a correlation coefficient of "
        f"{strongest.coefficient:.2f}. This is a {strongest.strength.value.lower()} "
        f"{strongest.sign.value} correlation.",
        "correlation",
    )


def _outliers(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    if not report.outliers:
        return ChatAnswer("I didn't detect any significant outliers in your data.", "outlier")

    lines = ["I found the following outliers in your data:"]
    for entry in report.outliers:
        lines.append(
            f"- {entry.column}: {entry.count} outliers ({entry.percentage:.1f}% of values)"
        )
    return ChatAnswer("\n".join(lines), "outlier")


def _variability(std_dev: float, spread: float) -> str:
    ratio = std_dev / spread if spread else 0.0
    if ratio > 0.3:
        return "high"
    if ratio > 0.1:
        return "moderate"
    return "low"


def _numeric_insight(column: str, report: AnalysisReport) -> str:
    stats = report.summary.get(column)
    if stats is None:
        return f"I don't have detailed information about {column}."

    lines = [
        f"Here are some insights about {column}:",
        f"- The average value is {stats.mean:.2f}",
        f"- Values range from {stats.min:.2f} to {stats.max:.2f}",
        f"- The standard deviation is {stats.std_dev:.2f}, indicating "
        f"{_variability(stats.std_dev, stats.max - stats.min)} variability in the data.",
    ]

    outlier = report.outlier_for(column)
    if outlier is not None:
        lines.append(
            f"- There are {outlier.count} outliers ({outlier.percentage:.1f}% of values)"
        )

    strongest = report.strongest_correlation(column)
    if strongest is not None:
        lines.append(
            f"- {column} has a {strongest.strength.value.lower()} correlation with "
            f"{strongest.other(column)} ({strongest.coefficient:.2f})"
        )
    return "\n".join(lines)


def _general_insight(report: AnalysisReport) -> str:
    numeric = len(report.numeric_columns)
    lines = [
        "Here are some general insights about your data:",
        f"- Your dataset contains {report.row_count} records with {len(report.columns)} columns",
        f"- There are {numeric} numeric columns and "
        f"{len(report.columns) - numeric} categorical columns",
    ]

    strongest = report.strongest_correlation()
    if strongest is not None:
        lines.append(
            f"- The strongest relationship is between {strongest.column_a} "
            f"and {strongest.column_b}"
        )
    if report.outliers:
        lines.append(
            f"- I detected {report.total_outliers} outliers across "
            f"{len(report.outliers)} columns"
        )
    return "\n".join(lines)


def _insight(query: str, report: AnalysisReport, dataset: Dataset | None) -> ChatAnswer:
    column = _mentioned(query, report.columns)
    if column is None:
        return ChatAnswer(_general_insight(report), "insight")

    if report.classification.get(column) == ColumnType.NUMERIC:
        return ChatAnswer(_numeric_insight(column, report), "insight")

    entry = report.distribution_for(column)
    most_common = entry.most_common if entry is not None else None
    if most_common is None:
        return ChatAnswer(f"I don't have detailed information about {column}.", "insight")

    text = "\n".join(
        [
            f"Here are some insights about {column}:",
            f"- There are {entry.unique_count} unique values",
            f'- The most common value is "{most_common.value}" '
            f"({most_common.percentage:.1f}% of data)",
        ]
    )
    return ChatAnswer(
        text,
        "insight",
        chart_data=[b.to_dict(display=True) for b in entry.buckets],
        chart_type="bar",
    )


Handler = Callable[[str, AnalysisReport, Dataset | None], ChatAnswer]

# Order matters: the first route whose keyword occurs in the question wins
ROUTES: list[tuple[tuple[str, ...], Handler]] = [
    (("average", "mean"), _average),
    (("maximum", "max", "highest"), _maximum),
    (("minimum", "min", "lowest"), _minimum),
    (("distribution", "histogram"), _distribution),
    (("trend", "over time"), _trend),
    (("correlation", "relationship"), _correlation),
    (("outlier", "anomaly"), _outliers),
    (("insight", "tell me about"), _insight),
]


def answer_question(
    question: str,
    report: AnalysisReport,
    dataset: Dataset | None = None,
) -> ChatAnswer:
    """Answer a natural-language question about the current dataset.

    Args:
        question: User question
        report: Analysis report for the current dataset
        dataset: Current dataset (needed only for trend charts)

    Returns:
        ChatAnswer with text and optional chart data

    Example:
        >>> answer_question("What is the average price?", report).text
        'The average price is 12.50.'
    """
    query = question.lower()

    for keywords, handler in ROUTES:
        if any(keyword in query for keyword in keywords):
            answer = handler(query, report, dataset)
            logger.debug(f"Answered question via {answer.intent} route")
            return answer

    return ChatAnswer(FALLBACK_MESSAGE, "unknown")
