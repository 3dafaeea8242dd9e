"""Tool handlers exposed by the MCP server.

The handlers are plain functions so they can be exercised without a running
server; :mod:`quizaurus.server.app` registers them with FastMCP and turns
domain errors into tool errors.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from mcp.types import CallToolResult, TextContent

from ..quiz.models import OptionPolicy, EXACTLY_FOUR
from ..quiz.scoring import score
from ..quiz.validator import load_question_set

__all__ = [
    "LOCALE_META_KEY",
    "OUTPUT_TEMPLATE_META_KEY",
    "render_quiz",
    "score_quiz_results",
]

logger = logging.getLogger(__name__)

OUTPUT_TEMPLATE_META_KEY = "openai/outputTemplate"
LOCALE_META_KEY = "openai/locale"


def render_quiz(
    topic: str,
    difficulty: str | None,
    questions: Sequence[Any] | None,
    *,
    policy: OptionPolicy = EXACTLY_FOUR,
    locale: str = "en",
) -> CallToolResult:
    """Validate the generated questions and hand them to the widget.

    Malformed questions are dropped, never reported back as a failure. An
    unknown ``difficulty`` raises ``ValueError``.
    """

    payload = {
        "topic": topic,
        "difficulty": difficulty,
        "questions": questions,
    }
    question_set, report = load_question_set(payload, policy)
    logger.info(
        "Rendering quiz on %r with %d question(s), %d dropped",
        question_set.topic,
        report.accepted_count,
        report.rejected_count,
        extra={
            "topic": question_set.topic,
            "difficulty": question_set.difficulty,
            "accepted": report.accepted_count,
            "rejected": report.rejected_count,
        },
    )
    narration = (
        f"Starting a {question_set.difficulty} quiz on {question_set.topic}."
    )
    return CallToolResult(
        content=[TextContent(type="text", text=narration)],
        structuredContent=question_set.to_wire(),
        _meta={LOCALE_META_KEY: locale},
    )


def score_quiz_results(
    correct_answers_count: int, total_questions_count: int
) -> CallToolResult:
    """Summarize a finished pass for the results screen."""

    summary = score(correct_answers_count, total_questions_count)
    logger.info(
        "Scored quiz %d/%d: %s",
        summary.correct_count,
        summary.total_count,
        summary.encouragement,
    )
    return CallToolResult(content=[], structuredContent=summary.to_wire())
