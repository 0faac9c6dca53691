"""Analysis report assembly.

``analyze`` is the engine's single entry point: it validates the input
shape, classifies the columns once, runs the four calculators (which do
not depend on each other) and merges their output into an immutable
``AnalysisReport``.

``AnalysisSession`` holds the current dataset/report pair for a hosting
application and implements the Empty -> Computing -> Ready lifecycle with
a last-run-wins policy keyed on run id.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from datascope.analysis.correlation import (
    CorrelationEntry,
    compute_correlations,
    strongest_correlation,
    top_correlations,
)
from datascope.analysis.distribution import DistributionEntry, compute_distributions
from datascope.analysis.outliers import OutlierEntry, detect_outliers
from datascope.analysis.summary import SummaryStats, compute_summary_statistics
from datascope.config import get_settings
from datascope.core.classify import (
    ColumnType,
    categorical_columns,
    classify_columns,
    numeric_columns,
)
from datascope.core.dataset import Dataset
from datascope.core.notes import (
    AnalysisNote,
    empty_dataset_note,
    mismatched_shape_note,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisReport:
    """Immutable aggregate of all statistics for one dataset snapshot.

    Attributes:
        run_id: Identifier of the run that produced the report
        row_count: Number of records analyzed
        classification: Column name to ColumnType
        summary: Column name to SummaryStats (numeric columns only)
        correlations: Pairwise correlations in enumeration order
        outliers: Outlier entries for columns with at least one outlier
        distributions: One distribution per column
        notes: Degradations recorded while computing
    """

    run_id: int
    row_count: int
    classification: Mapping[str, ColumnType] = field(
        default_factory=lambda: MappingProxyType({})
    )
    summary: Mapping[str, SummaryStats] = field(
        default_factory=lambda: MappingProxyType({})
    )
    correlations: tuple[CorrelationEntry, ...] = ()
    outliers: tuple[OutlierEntry, ...] = ()
    distributions: tuple[DistributionEntry, ...] = ()
    notes: tuple[AnalysisNote, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    @property
    def columns(self) -> list[str]:
        return list(self.classification)

    @property
    def numeric_columns(self) -> list[str]:
        return numeric_columns(dict(self.classification))

    @property
    def categorical_columns(self) -> list[str]:
        return categorical_columns(dict(self.classification))

    @property
    def total_outliers(self) -> int:
        return sum(entry.count for entry in self.outliers)

    def top_correlations(self, limit: int = 5) -> list[CorrelationEntry]:
        """Sorted copy of the correlations by descending |r|."""
        return top_correlations(list(self.correlations), limit=limit)

    def strongest_correlation(self, column: str | None = None) -> CorrelationEntry | None:
        return strongest_correlation(list(self.correlations), column=column)

    def outliers_by_percentage(self) -> list[OutlierEntry]:
        """Sorted copy of the outliers by descending percentage."""
        return sorted(self.outliers, key=lambda e: e.percentage, reverse=True)

    def outlier_for(self, column: str) -> OutlierEntry | None:
        return next((e for e in self.outliers if e.column == column), None)

    def distribution_for(self, column: str) -> DistributionEntry | None:
        return next((e for e in self.distributions if e.column == column), None)

    def to_dict(self, display: bool = False) -> dict[str, Any]:
        """Convert to dictionary.

        Args:
            display: Render numbers as fixed-decimal strings, the way the
                dashboard tables show them
        """
        return {
            "run_id": self.run_id,
            "row_count": self.row_count,
            "classification": {c: t.value for c, t in self.classification.items()},
            "summary": {
                c: s.to_dict(display=display) for c, s in self.summary.items()
            },
            "correlations": [c.to_dict(display=display) for c in self.correlations],
            "outliers": [o.to_dict(display=display) for o in self.outliers],
            "distributions": [d.to_dict(display=display) for d in self.distributions],
            "notes": [n.to_dict() for n in self.notes],
        }

    def format_for_display(self) -> str:
        """Format as human-readable string."""
        if self.is_empty:
            return "No data to analyze."

        parts = [
            f"**Dataset**: {self.row_count} records, "
            f"{len(self.numeric_columns)} numeric and "
            f"{len(self.categorical_columns)} categorical columns"
        ]
        parts.extend(s.format_for_display() for s in self.summary.values())
        parts.extend(c.format_for_display() for c in self.top_correlations())
        parts.extend(o.format_for_display() for o in self.outliers)
        return "\n\n".join(parts)


def _shape_notes(dataset: Dataset) -> list[AnalysisNote]:
    return [
        mismatched_shape_note(column, missing, len(dataset))
        for column, missing in dataset.missing_counts().items()
        if missing > 0
    ]


def _collect(calculator: Callable[[list[AnalysisNote]], Any]) -> tuple[Any, list[AnalysisNote]]:
    notes: list[AnalysisNote] = []
    return calculator(notes), notes


def _run_calculators(
    calculators: dict[str, Callable[[list[AnalysisNote]], Any]],
    parallel: bool,
    max_workers: int,
) -> dict[str, tuple[Any, list[AnalysisNote]]]:
    if not parallel:
        return {name: _collect(calc) for name, calc in calculators.items()}

    # All calculators read the same immutable snapshot; join before merging
    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="datascope-calc"
    ) as executor:
        futures = {
            name: executor.submit(_collect, calc) for name, calc in calculators.items()
        }
        return {name: future.result() for name, future in futures.items()}


def analyze(
    dataset: Any,
    *,
    parallel: bool | None = None,
    max_workers: int | None = None,
    run_id: int = 0,
) -> AnalysisReport:
    """Compute the full analysis report for a dataset.

    Args:
        dataset: A Dataset, a pandas DataFrame, or a sequence of mappings
        parallel: Run calculators on a thread pool (None = use settings)
        max_workers: Thread pool size (None = use settings)
        run_id: Identifier stamped on the report

    Returns:
        AnalysisReport. Degenerate inputs shrink the report; they never
        raise.

    Raises:
        InvalidDatasetShape: If the input is not a sequence of records

    Example:
        >>> report = analyze([{"a": 1, "b": 2}, {"a": 2, "b": 4}, {"a": 3, "b": 6}])
        >>> report.correlations[0].coefficient
        1.0
    """
    snapshot = Dataset.from_records(dataset)
    settings = get_settings()

    if parallel is None:
        parallel = settings.analysis_parallel
    if max_workers is None:
        max_workers = settings.analysis_max_workers

    if snapshot.is_empty:
        logger.debug("Empty dataset, returning empty report")
        return AnalysisReport(run_id=run_id, row_count=0, notes=(empty_dataset_note(),))

    started = time.perf_counter()
    classification = classify_columns(snapshot)
    numeric = numeric_columns(classification)

    results = _run_calculators(
        {
            "summary": lambda notes: compute_summary_statistics(snapshot, numeric, notes),
            "correlations": lambda notes: compute_correlations(snapshot, numeric, notes),
            "outliers": lambda notes: detect_outliers(snapshot, numeric, notes),
            "distributions": lambda notes: compute_distributions(
                snapshot, classification, notes
            ),
        },
        parallel=parallel,
        max_workers=max_workers,
    )

    notes = _shape_notes(snapshot)
    for _, calculator_notes in results.values():
        notes.extend(calculator_notes)

    report = AnalysisReport(
        run_id=run_id,
        row_count=len(snapshot),
        classification=MappingProxyType(dict(classification)),
        summary=MappingProxyType(results["summary"][0]),
        correlations=tuple(results["correlations"][0]),
        outliers=tuple(results["outliers"][0]),
        distributions=tuple(results["distributions"][0]),
        notes=tuple(notes),
    )

    logger.info(
        f"Analysis run {run_id}: {len(snapshot)} rows, {len(classification)} columns "
        f"in {time.perf_counter() - started:.3f}s"
    )
    return report


class SessionState(str, Enum):
    """Lifecycle of the current report."""

    EMPTY = "empty"
    COMPUTING = "computing"
    READY = "ready"


class AnalysisSession:
    """Current dataset and report of a hosting application.

    Each load starts a new run with a higher run id. A finished run only
    replaces the current report if no newer run has started since, so a
    slow stale run can never overwrite a newer dataset's report.

    Example:
        >>> session = AnalysisSession()
        >>> report = session.load([{"a": 1}, {"a": 2}])
        >>> session.state
        <SessionState.READY: 'ready'>
    """

    def __init__(
        self,
        parallel: bool | None = None,
        max_workers: int | None = None,
    ) -> None:
        """Initialize an empty session.

        Args:
            parallel: Passed through to ``analyze`` for each run
            max_workers: Passed through to ``analyze`` for each run
        """
        self.parallel = parallel
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._run_ids = itertools.count(1)
        self._latest_run_id = 0
        self._state = SessionState.EMPTY
        self._dataset: Dataset | None = None
        self._report: AnalysisReport | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def dataset(self) -> Dataset | None:
        with self._lock:
            return self._dataset

    @property
    def report(self) -> AnalysisReport | None:
        with self._lock:
            return self._report

    @property
    def latest_run_id(self) -> int:
        with self._lock:
            return self._latest_run_id

    def _begin(self, data: Any) -> tuple[int, Dataset]:
        # Validate before touching state so a bad upload keeps the old report
        dataset = Dataset.from_records(data)
        with self._lock:
            run_id = next(self._run_ids)
            self._latest_run_id = run_id
            self._state = SessionState.COMPUTING
            self._dataset = None
            self._report = None
        return run_id, dataset

    def _complete(self, run_id: int, dataset: Dataset, report: AnalysisReport) -> bool:
        with self._lock:
            if run_id != self._latest_run_id:
                logger.debug(
                    f"Discarding stale run {run_id} (latest is {self._latest_run_id})"
                )
                return False
            self._dataset = dataset
            self._report = report
            self._state = SessionState.READY
            return True

    def _fail(self, run_id: int) -> None:
        with self._lock:
            if run_id == self._latest_run_id:
                self._state = SessionState.EMPTY

    def _run(self, run_id: int, dataset: Dataset) -> AnalysisReport:
        try:
            report = analyze(
                dataset,
                parallel=self.parallel,
                max_workers=self.max_workers,
                run_id=run_id,
            )
        except Exception:
            logger.exception(f"Analysis run {run_id} failed")
            self._fail(run_id)
            raise
        self._complete(run_id, dataset, report)
        return report

    def load(self, data: Any) -> AnalysisReport:
        """Analyze a new dataset synchronously and make it current.

        Raises:
            InvalidDatasetShape: If the input is not a sequence of records
        """
        run_id, dataset = self._begin(data)
        return self._run(run_id, dataset)

    def submit(self, data: Any) -> Future[AnalysisReport]:
        """Analyze a new dataset in the background.

        The returned future resolves to the run's report even when a newer
        run has superseded it; only the session's current report is
        guarded by last-run-wins.

        Raises:
            InvalidDatasetShape: If the input is not a sequence of records
        """
        run_id, dataset = self._begin(data)
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=get_settings().analysis_max_workers,
                    thread_name_prefix="datascope-run",
                )
            executor = self._executor
        return executor.submit(self._run, run_id, dataset)

    def reset(self) -> None:
        """Drop the current dataset and invalidate in-flight runs."""
        with self._lock:
            self._latest_run_id = next(self._run_ids)
            self._state = SessionState.EMPTY
            self._dataset = None
            self._report = None

    def shutdown(self) -> None:
        """Stop the background executor, waiting for running analyses."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
