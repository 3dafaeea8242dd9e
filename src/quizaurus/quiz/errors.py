"""Exceptions raised by the quiz domain."""

from __future__ import annotations

__all__ = [
    "QuizError",
    "MalformedQuestionError",
    "InvalidAnswerIndexError",
    "IllegalTransitionError",
    "NoQuestionsError",
]


class QuizError(RuntimeError):
    """Base class for recoverable quiz failures."""


class MalformedQuestionError(QuizError):
    """Raised when a candidate question fails structural validation."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidAnswerIndexError(QuizError):
    """Raised when an answer index is outside the current question's options."""

    def __init__(self, index: object, option_count: int) -> None:
        super().__init__(
            f"Answer index {index!r} is out of range for "
            f"{option_count} option(s)."
        )
        self.index = index
        self.option_count = option_count


class IllegalTransitionError(QuizError):
    """Raised when a runner operation is invoked from a state that forbids it."""


class NoQuestionsError(QuizError):
    """Raised when a quiz or score is requested without any questions."""
