"""Statistical analysis engine for Datascope.

This module contains:
- Summary statistics (mean, median, population std, nearest-rank quartiles)
- Pairwise Pearson correlation with strength bands
- IQR-fence outlier detection
- Numeric histograms and categorical frequency tables
- Report assembly and the analysis session lifecycle
"""

from datascope.analysis.correlation import (
    CorrelationEntry,
    CorrelationSign,
    CorrelationStrength,
    compute_correlations,
    pearson,
)
from datascope.analysis.distribution import (
    CategoryBucket,
    DistributionEntry,
    RangeBucket,
    compute_distributions,
)
from datascope.analysis.outliers import OutlierEntry, detect_outliers
from datascope.analysis.report import (
    AnalysisReport,
    AnalysisSession,
    SessionState,
    analyze,
)
from datascope.analysis.summary import SummaryStats, compute_summary_statistics

__all__ = [
    # Entry point
    "analyze",
    "AnalysisReport",
    "AnalysisSession",
    "SessionState",
    # Calculators
    "compute_summary_statistics",
    "compute_correlations",
    "detect_outliers",
    "compute_distributions",
    "pearson",
    # Result types
    "SummaryStats",
    "CorrelationEntry",
    "CorrelationStrength",
    "CorrelationSign",
    "OutlierEntry",
    "DistributionEntry",
    "RangeBucket",
    "CategoryBucket",
]
