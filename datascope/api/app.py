"""FastAPI application for Datascope.

This module provides the REST API for dashboard views: dataset upload,
the analysis report, insights, transformation previews and charts. The
service owns one AnalysisSession, handed to views through a dependency.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from datascope import __version__
from datascope.analysis.report import AnalysisReport, AnalysisSession, analyze
from datascope.api.chat import router as chat_router
from datascope.api.deps import get_session, require_report, shutdown_session
from datascope.config import get_settings
from datascope.core.classify import infer_column_types
from datascope.core.dataset import Dataset, InvalidDatasetShape
from datascope.insights import generate_insights
from datascope.transform import Transformation, apply_transformations
from datascope.visualization import (
    PlotResult,
    create_correlation_chart,
    create_distribution_chart,
    create_outlier_chart,
    create_scatter_plot,
    create_trend_chart,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info(f"Starting Datascope API ({settings.environment})")

    yield

    shutdown_session()
    logger.info("Shutting down Datascope API")


# Create FastAPI app
app = FastAPI(
    title="Datascope API",
    description="Statistical analysis engine for tabular dashboards",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat_router)


# Request/Response models
class RecordsRequest(BaseModel):
    """Request body carrying a dataset."""

    records: list[dict[str, Any]] = Field(..., description="Dataset records")


class UploadRequest(RecordsRequest):
    """Request body for dataset upload."""

    transformations: list[Transformation] = Field(
        default_factory=list, description="Steps applied before analysis"
    )


class UploadResponse(BaseModel):
    """Response from dataset upload."""

    run_id: int
    row_count: int
    column_types: dict[str, str]
    preview: list[dict[str, Any]]
    report: dict[str, Any]


class TransformPreviewRequest(UploadRequest):
    """Request body for transformation preview."""


class TransformPreviewResponse(BaseModel):
    """Response with transformed rows."""

    row_count: int
    column_types: dict[str, str]
    preview: list[dict[str, Any]]


class PlotRequest(BaseModel):
    """Request for plot generation."""

    plot_type: str = Field(..., description="distribution, correlations, outliers, scatter or trend")
    options: dict[str, Any] = Field(default_factory=dict, description="Plot options")


class PlotResponse(BaseModel):
    """Response with plot data."""

    success: bool
    title: str | None = None
    plot_json: str | None = None
    data_summary: dict[str, Any] | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    session_state: str
    row_count: int | None = None


def _check_size(records: list[dict[str, Any]]) -> None:
    limit = get_settings().max_records
    if len(records) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Dataset has {len(records)} records; the limit is {limit}",
        )


def _transform(request: UploadRequest) -> list[dict[str, Any]]:
    _check_size(request.records)
    if not request.transformations:
        return request.records
    try:
        return apply_transformations(request.records, request.transformations)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _preview_types(records: list[dict[str, Any]]) -> dict[str, str]:
    return infer_column_types(records, sample_size=get_settings().preview_rows)


# Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check(session: AnalysisSession = Depends(get_session)) -> HealthResponse:
    """Check API health and session status."""
    dataset = session.dataset
    return HealthResponse(
        status="healthy",
        version=__version__,
        session_state=session.state.value,
        row_count=len(dataset) if dataset is not None else None,
    )


@app.post("/analyze")
def analyze_records(request: RecordsRequest) -> dict[str, Any]:
    """Analyze records without touching the current dataset."""
    _check_size(request.records)
    try:
        return analyze(request.records).to_dict()
    except InvalidDatasetShape as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Analysis failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )


@app.post("/datasets", response_model=UploadResponse)
def upload_dataset(
    request: UploadRequest,
    session: AnalysisSession = Depends(get_session),
) -> UploadResponse:
    """Upload a dataset, optionally transformed, and make it current."""
    records = _transform(request)

    try:
        report = session.load(records)
    except InvalidDatasetShape as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Dataset upload failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        )

    return UploadResponse(
        run_id=report.run_id,
        row_count=report.row_count,
        column_types=_preview_types(records),
        preview=records[: get_settings().preview_rows],
        report=report.to_dict(),
    )


@app.delete("/datasets", status_code=status.HTTP_204_NO_CONTENT)
async def clear_dataset(session: AnalysisSession = Depends(get_session)) -> None:
    """Drop the current dataset and report."""
    session.reset()


@app.get("/report")
async def get_report(
    display: bool = False,
    report: AnalysisReport = Depends(require_report),
) -> dict[str, Any]:
    """Get the current analysis report.

    With ``display=true`` numbers are rendered as fixed-decimal strings.
    """
    return report.to_dict(display=display)


@app.get("/insights")
async def get_insights(report: AnalysisReport = Depends(require_report)) -> dict[str, Any]:
    """Get the insight narrative for the current report."""
    return generate_insights(report).to_dict()


@app.post("/transform/preview", response_model=TransformPreviewResponse)
def preview_transformations(request: TransformPreviewRequest) -> TransformPreviewResponse:
    """Apply transformations and return the first rows, without analyzing."""
    records = _transform(request)
    return TransformPreviewResponse(
        row_count=len(records),
        column_types=_preview_types(records),
        preview=records[: get_settings().preview_rows],
    )


def _build_plot(
    plot_type: str,
    options: dict[str, Any],
    report: AnalysisReport,
    dataset: Dataset,
) -> PlotResult:
    if plot_type == "distribution":
        return create_distribution_chart(report, column=options["column"])
    if plot_type == "correlations":
        return create_correlation_chart(report, top_n=options.get("top_n", 10))
    if plot_type == "outliers":
        return create_outlier_chart(report)
    if plot_type == "scatter":
        return create_scatter_plot(
            dataset,
            x_column=options["x_column"],
            y_column=options["y_column"],
            show_regression=options.get("show_regression", False),
        )
    if plot_type == "trend":
        return create_trend_chart(
            dataset,
            column=options["column"],
            max_points=options.get("max_points", 20),
        )
    raise ValueError(f"Unknown plot type: {plot_type}")


@app.post("/plot", response_model=PlotResponse)
def generate_plot(
    request: PlotRequest,
    session: AnalysisSession = Depends(get_session),
) -> PlotResponse:
    """Generate a chart for the current dataset."""
    report, dataset = session.report, session.dataset
    if report is None or dataset is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No dataset loaded",
        )

    try:
        result = _build_plot(request.plot_type, request.options, report, dataset)
    except KeyError as e:
        return PlotResponse(success=False, error=f"Missing plot option: {e.args[0]}")
    except ValueError as e:
        return PlotResponse(success=False, error=str(e))
    except Exception as e:
        logger.exception("Plot generation failed")
        return PlotResponse(success=False, error=str(e))

    return PlotResponse(
        success=True,
        title=result.title,
        plot_json=result.to_json(),
        data_summary=result.data_summary,
    )
