"""Structural validation for untrusted question payloads.

Questions arrive from the assistant as loosely shaped JSON. Each candidate is
checked independently: a malformed entry is dropped and reported, it never
fails the whole batch. Callers receive fully typed :class:`Question` objects
only.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedQuestionError
from .models import EXACTLY_FOUR, OptionPolicy, Question, QuestionSet
from .models import question_set_from_wire

__all__ = [
    "Rejection",
    "ValidationReport",
    "validate_question",
    "validate_questions",
    "load_question_set",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rejection:
    """A candidate that failed validation, kept for caller diagnostics."""

    index: int
    reason: str
    record: object


@dataclass(frozen=True)
class ValidationReport:
    questions: tuple[Question, ...] = ()
    rejections: tuple[Rejection, ...] = field(default_factory=tuple)

    @property
    def accepted_count(self) -> int:
        return len(self.questions)

    @property
    def rejected_count(self) -> int:
        return len(self.rejections)


def validate_question(
    record: object, policy: OptionPolicy = EXACTLY_FOUR
) -> Question:
    """Validate one candidate and return a typed question.

    Raises :class:`MalformedQuestionError` naming the first failed check.
    """

    if not isinstance(record, Mapping):
        raise MalformedQuestionError("question must be an object")

    text = record.get("question")
    if not isinstance(text, str) or not text.strip():
        raise MalformedQuestionError("question must be a non-empty string")

    options = record.get("options")
    if not isinstance(options, (list, tuple)):
        raise MalformedQuestionError("options must be a list of strings")
    if not all(isinstance(option, str) for option in options):
        raise MalformedQuestionError("options must contain only strings")
    if not policy.allows(len(options)):
        raise MalformedQuestionError(
            f"options must have {policy.describe()} entries, "
            f"got {len(options)}"
        )

    correct_index = record.get("correctIndex")
    # bool is an int subclass; True/False are not answer keys.
    if isinstance(correct_index, bool) or not isinstance(correct_index, int):
        raise MalformedQuestionError("correctIndex must be an integer")
    if not (0 <= correct_index < len(options)):
        raise MalformedQuestionError(
            f"correctIndex {correct_index} is outside 0..{len(options) - 1}"
        )

    explanation = record.get("explanation")
    if explanation is not None and not isinstance(explanation, str):
        raise MalformedQuestionError("explanation must be a string when set")

    return Question(
        question=text,
        options=tuple(options),
        correct_index=correct_index,
        explanation=explanation,
    )


def validate_questions(
    records: object, policy: OptionPolicy = EXACTLY_FOUR
) -> ValidationReport:
    """Keep the well-formed candidates of ``records`` in their original order."""

    if records is None:
        return ValidationReport()
    if isinstance(records, (str, bytes)) or not isinstance(records, Sequence):
        rejection = Rejection(0, "questions must be a list", records)
        _log_rejection(rejection)
        return ValidationReport(rejections=(rejection,))

    accepted: list[Question] = []
    rejected: list[Rejection] = []
    for index, record in enumerate(records):
        try:
            accepted.append(validate_question(record, policy))
        except MalformedQuestionError as exc:
            rejection = Rejection(index, exc.reason, record)
            _log_rejection(rejection)
            rejected.append(rejection)
    return ValidationReport(tuple(accepted), tuple(rejected))


def load_question_set(
    data: Mapping[str, Any], policy: OptionPolicy = EXACTLY_FOUR
) -> tuple[QuestionSet, ValidationReport]:
    """Validate a ``{topic, difficulty, questions}`` payload.

    ``difficulty`` outside the known values raises ``ValueError``; question
    problems are reported, not raised.
    """

    report = validate_questions(data.get("questions"), policy)
    return question_set_from_wire(data, report.questions), report


def _log_rejection(rejection: Rejection) -> None:
    logger.warning(
        "Invalid question #%d dropped: %s",
        rejection.index,
        rejection.reason,
        extra={"question_index": rejection.index, "record": rejection.record},
    )
