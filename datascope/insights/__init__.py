"""Narrative insights and templated question answering for Datascope.

This module contains:
- Insight narrative built from an analysis report
- Keyword-routed answers to dashboard questions
"""

from datascope.insights.narrative import (
    Insight,
    InsightKind,
    InsightSummary,
    generate_insights,
)
from datascope.insights.qa import ChatAnswer, answer_question

__all__ = [
    "generate_insights",
    "Insight",
    "InsightKind",
    "InsightSummary",
    "answer_question",
    "ChatAnswer",
]
