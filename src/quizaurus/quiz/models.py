"""Immutable quiz data structures and their wire representations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, get_args

Difficulty = Literal["easy", "medium", "hard"]
DIFFICULTIES: tuple[str, ...] = get_args(Difficulty)
DEFAULT_DIFFICULTY: Difficulty = "medium"


@dataclass(frozen=True)
class OptionPolicy:
    """Allowed number of options per question.

    ``max_options=None`` leaves the upper bound open.
    """

    min_options: int = 4
    max_options: int | None = 4

    def __post_init__(self) -> None:
        if self.min_options < 1:
            raise ValueError("min_options must be at least 1")
        if self.max_options is not None and self.max_options < self.min_options:
            raise ValueError("max_options must be >= min_options")

    def allows(self, count: int) -> bool:
        if count < self.min_options:
            return False
        return self.max_options is None or count <= self.max_options

    def describe(self) -> str:
        if self.max_options == self.min_options:
            return f"exactly {self.min_options}"
        if self.max_options is None:
            return f"at least {self.min_options}"
        return f"between {self.min_options} and {self.max_options}"


EXACTLY_FOUR = OptionPolicy(4, 4)
AT_LEAST_TWO = OptionPolicy(2, None)


@dataclass(frozen=True)
class Question:
    """A single-answer multiple-choice question."""

    question: str
    options: tuple[str, ...]
    correct_index: int
    explanation: str | None = None

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_index]

    def option_at(self, index: int | None) -> str | None:
        if index is None or not (0 <= index < len(self.options)):
            return None
        return self.options[index]

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "question": self.question,
            "options": list(self.options),
            "correctIndex": self.correct_index,
        }
        if self.explanation is not None:
            payload["explanation"] = self.explanation
        return payload


@dataclass(frozen=True)
class QuestionSet:
    """Validated questions for one topic, in display order."""

    topic: str
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    questions: tuple[Question, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.questions)

    def to_wire(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "difficulty": self.difficulty,
            "questions": [question.to_wire() for question in self.questions],
        }


@dataclass(frozen=True)
class ScoreSummary:
    """Outcome of a completed quiz pass."""

    correct_count: int
    total_count: int
    success_rate: float
    encouragement: str

    @property
    def mistakes_count(self) -> int:
        return self.total_count - self.correct_count

    @property
    def percent(self) -> str:
        return f"{self.success_rate * 100:.0f}%"

    def to_wire(self) -> dict[str, Any]:
        return {
            "encouragement": self.encouragement,
            "successRate": self.success_rate,
        }


def coerce_difficulty(value: object) -> Difficulty:
    """Normalize ``value`` into a known difficulty or raise ``ValueError``."""

    if value is None:
        return DEFAULT_DIFFICULTY
    text = str(value).strip().lower()
    if text not in DIFFICULTIES:
        raise ValueError(
            f"difficulty must be one of {', '.join(DIFFICULTIES)}; "
            f"got {value!r}"
        )
    return text  # type: ignore[return-value]


def question_set_from_wire(
    data: Mapping[str, Any],
    questions: tuple[Question, ...],
) -> QuestionSet:
    """Build a :class:`QuestionSet` from a wire payload and validated questions."""

    return QuestionSet(
        topic=str(data.get("topic", "")).strip(),
        difficulty=coerce_difficulty(data.get("difficulty")),
        questions=questions,
    )
