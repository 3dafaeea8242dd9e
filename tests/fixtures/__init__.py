"""Shared testing fixtures for the quizaurus test suite."""

from .bridge import RecordingBridge  # noqa: F401
from .questions import make_question, make_question_set, make_wire_question  # noqa: F401

__all__ = [
    "RecordingBridge",
    "make_question",
    "make_question_set",
    "make_wire_question",
]
