"""FastMCP server wiring for the quiz tools and widget resource."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import CallToolResult
from pydantic import Field

from ..config import QuizaurusConfig
from ..quiz.errors import QuizError
from ..quiz.models import Difficulty
from .tools import OUTPUT_TEMPLATE_META_KEY, render_quiz, score_quiz_results
from .widget import WIDGET_MIME_TYPE, render_widget_html

__all__ = [
    "RENDER_QUIZ_TOOL",
    "SCORE_QUIZ_TOOL",
    "WIDGET_RESOURCE_NAME",
    "build_server",
    "run_server",
]

logger = logging.getLogger(__name__)

RENDER_QUIZ_TOOL = "render-quiz"
SCORE_QUIZ_TOOL = "score-quiz-results"
WIDGET_RESOURCE_NAME = "interactive-quiz"

_RENDER_QUIZ_DESCRIPTION = (
    "Render an interactive multiple-choice quiz for the user. Generate the "
    "questions yourself: each needs the question text, {options} answer "
    "options, the zero-based index of the correct option and a short "
    "explanation shown after the user answers."
)
_SCORE_QUIZ_DESCRIPTION = (
    "Compute the success rate and an encouragement message for a finished "
    "quiz. Called by the quiz widget when the user reaches the results."
)


def build_server(config: QuizaurusConfig) -> FastMCP:
    """Create a server exposing the quiz tools and the widget resource.

    Each call returns an independent instance; nothing is registered at
    module import time.
    """

    settings = config.server
    server = FastMCP(
        settings.name,
        host=settings.host,
        port=settings.port,
        log_level=config.logging.level,
        streamable_http_path=settings.streamable_http_path,
        sse_path=settings.sse_path,
        message_path=settings.message_path,
        json_response=True,
        stateless_http=True,
    )
    _advertise_version(server, settings.version)

    policy = config.quiz.option_policy
    default_difficulty = config.quiz.default_difficulty
    widget = config.widget

    @server.tool(
        name=RENDER_QUIZ_TOOL,
        title="Render Quiz",
        description=_RENDER_QUIZ_DESCRIPTION.format(
            options=policy.describe()
        ),
        meta={OUTPUT_TEMPLATE_META_KEY: widget.uri},
    )
    def render_quiz_tool(
        topic: Annotated[str, Field(description="Topic the quiz covers.")],
        questions: Annotated[
            list[Any],
            Field(
                description=(
                    "Questions as objects with question, options, "
                    "correctIndex and explanation. Malformed entries are "
                    "dropped."
                )
            ),
        ],
        difficulty: Annotated[
            Difficulty, Field(description="Difficulty of the questions.")
        ] = default_difficulty,
    ) -> CallToolResult:
        try:
            return render_quiz(
                topic,
                difficulty,
                questions,
                policy=policy,
                locale=widget.locale,
            )
        except (QuizError, ValueError) as exc:
            logger.warning("render-quiz rejected: %s", exc)
            raise ToolError(str(exc)) from exc

    @server.tool(
        name=SCORE_QUIZ_TOOL,
        title="Prepare quiz results",
        description=_SCORE_QUIZ_DESCRIPTION,
    )
    def score_quiz_tool(
        correctAnswersCount: Annotated[
            int, Field(description="Number of correctly answered questions.")
        ],
        totalQuestionsCount: Annotated[
            int, Field(description="Number of questions in the quiz.")
        ],
    ) -> CallToolResult:
        try:
            return score_quiz_results(correctAnswersCount, totalQuestionsCount)
        except (QuizError, ValueError) as exc:
            logger.warning("score-quiz-results rejected: %s", exc)
            raise ToolError(str(exc)) from exc

    @server.resource(
        widget.uri,
        name=WIDGET_RESOURCE_NAME,
        title="Interactive quiz",
        description="Widget that runs the quiz inside the conversation.",
        mime_type=WIDGET_MIME_TYPE,
    )
    def quiz_widget() -> str:
        return render_widget_html(widget)

    logger.debug(
        "Built server %s with transport %s",
        settings.name,
        settings.transport,
    )
    return server


def run_server(config: QuizaurusConfig) -> None:
    """Build the server and block serving on the configured transport."""

    server = build_server(config)
    settings = config.server
    if settings.transport == "stdio":
        logger.info("Starting %s on stdio", settings.name)
    else:
        logger.info(
            "Starting %s on %s:%d via %s",
            settings.name,
            settings.host,
            settings.port,
            settings.transport,
            extra={"transport": settings.transport},
        )
    server.run(transport=settings.transport)


def _advertise_version(server: FastMCP, version: str) -> None:
    # FastMCP has no constructor argument for the version it reports, so set
    # it on the low-level server when this mcp release exposes one.
    lowlevel = getattr(server, "_mcp_server", None)
    if lowlevel is None or not hasattr(lowlevel, "version"):
        logger.warning(
            "Cannot advertise server version %s with this mcp release",
            version,
        )
        return
    lowlevel.version = version
