"""Datascope: statistical analysis engine for tabular dashboards.

This package computes column classification, summary statistics,
correlations, outliers and distributions for an uploaded dataset, and
serves them to dashboard views, an insight narrative and a templated
question-answering overlay.
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports for main package exports."""
    if name == "analyze":
        from datascope.analysis.report import analyze

        return analyze
    if name == "AnalysisReport":
        from datascope.analysis.report import AnalysisReport

        return AnalysisReport
    if name == "AnalysisSession":
        from datascope.analysis.report import AnalysisSession

        return AnalysisSession
    if name in ("Dataset", "InvalidDatasetShape"):
        from datascope.core import dataset

        return getattr(dataset, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AnalysisReport",
    "AnalysisSession",
    "Dataset",
    "InvalidDatasetShape",
    "__version__",
    "analyze",
]
