"""FastAPI backend for Datascope.

This module contains:
- REST API endpoints for uploads, reports, insights and charts
- The templated chat endpoint
- The session dependency shared by all views
"""

from datascope.api.app import app
from datascope.api.chat import router as chat_router
from datascope.api.deps import get_session

__all__ = [
    "app",
    "chat_router",
    "get_session",
]
