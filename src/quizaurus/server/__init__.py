"""MCP server exposing the quiz tools and widget."""

from .app import build_server, run_server
from .tools import render_quiz, score_quiz_results
from .widget import WIDGET_MIME_TYPE, render_widget_html

__all__ = [
    "WIDGET_MIME_TYPE",
    "build_server",
    "render_quiz",
    "render_widget_html",
    "run_server",
    "score_quiz_results",
]
