"""Shared dependencies for API views."""

from __future__ import annotations

import threading

from fastapi import Depends, HTTPException, status

from datascope.analysis.report import AnalysisReport, AnalysisSession

# Global state
_session: AnalysisSession | None = None
_session_lock = threading.Lock()


def get_session() -> AnalysisSession:
    """Get the service's analysis session, creating it on first use."""
    global _session

    with _session_lock:
        if _session is None:
            _session = AnalysisSession()
        return _session


def require_report(session: AnalysisSession = Depends(get_session)) -> AnalysisReport:
    """Get the current report, or fail with 404 when no dataset is loaded."""
    report = session.report
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No dataset loaded",
        )
    return report


def shutdown_session() -> None:
    """Stop the session's background work and forget it."""
    global _session

    with _session_lock:
        session, _session = _session, None
    if session is not None:
        session.shutdown()
