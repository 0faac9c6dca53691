"""Chat endpoint answering questions about the current dataset.

Answers are templated from the current analysis report; see
``datascope.insights.qa`` for the keyword routing.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from datascope.analysis.report import AnalysisSession
from datascope.api.deps import get_session
from datascope.insights.qa import answer_question

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

WELCOME_MESSAGE = (
    "Ask me anything about your data, and I'll answer with statistics "
    "and charts from the current analysis."
)


class ChatMessage(BaseModel):
    """A single chat message."""

    role: str = Field(..., description="Message role: 'user' or 'assistant'")
    content: str = Field(..., description="Message content")


class ChatRequest(BaseModel):
    """Request body for chat endpoint."""

    messages: list[ChatMessage] = Field(..., min_length=1, description="Conversation history")


class ChatResponse(BaseModel):
    """Chat response."""

    response: str
    intent: str
    chart_data: list[dict[str, Any]] | None = None
    chart_type: str | None = None


@router.post("/", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    session: AnalysisSession = Depends(get_session),
) -> ChatResponse:
    """Answer the latest user message."""
    question = next(
        (m.content for m in reversed(request.messages) if m.role == "user"),
        None,
    )
    if question is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Conversation has no user message",
        )

    report, dataset = session.report, session.dataset
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No dataset loaded. Upload data before asking questions.",
        )

    answer = answer_question(question, report, dataset)
    logger.info(f"Chat question answered via {answer.intent} route")

    return ChatResponse(
        response=answer.text,
        intent=answer.intent,
        chart_data=answer.chart_data,
        chart_type=answer.chart_type,
    )


@router.get("/suggestions")
async def suggestions(session: AnalysisSession = Depends(get_session)) -> dict[str, Any]:
    """Get example questions for the current dataset."""
    report = session.report
    if report is None or report.is_empty:
        return {"welcome": WELCOME_MESSAGE, "suggestions": []}

    questions = []
    numeric = report.numeric_columns
    if numeric:
        questions.append(f"What's the average {numeric[0]}?")
        questions.append(f"Show me the trend of {numeric[-1]} over time")
    if report.correlations:
        questions.append("What is the strongest correlation?")
    if report.outliers:
        questions.append("Are there any outliers?")
    questions.append(f"What insights can you give me about {report.columns[0]}?")

    return {"welcome": WELCOME_MESSAGE, "suggestions": questions}
