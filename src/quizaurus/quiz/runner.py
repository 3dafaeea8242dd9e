"""Quiz runner state machine.

One runner owns one attempt at a question set. The presentation layer (Rich
console loop, Textual app or the browser widget) only calls the transition
methods and reads the derived properties; it never mutates attempt state
directly.

States cycle ``AWAITING_ANSWER -> SHOWING_FEEDBACK`` per question and end in
``SHOWING_RESULTS`` after the last question, at which point the scorer runs
exactly once for the pass.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping

from .bridge import FollowUpRequest, HostBridge, WidgetStateUpdate, dispatch
from .errors import (
    IllegalTransitionError,
    InvalidAnswerIndexError,
    NoQuestionsError,
)
from .models import Question, QuestionSet, ScoreSummary
from .prompts import MORE_QUESTIONS_PROMPT, build_review_prompt
from .scoring import score

__all__ = ["QuizRunner", "RunnerState", "Scorer", "StateListener"]

logger = logging.getLogger(__name__)


class RunnerState(str, Enum):
    AWAITING_ANSWER = "question"
    SHOWING_FEEDBACK = "feedback"
    SHOWING_RESULTS = "results"


Scorer = Callable[[int, int], ScoreSummary]
StateListener = Callable[[RunnerState, int], None]


class QuizRunner:
    """Drive a user through ``question_set`` one question at a time."""

    def __init__(
        self,
        question_set: QuestionSet,
        *,
        bridge: HostBridge | None = None,
        scorer: Scorer = score,
    ) -> None:
        if not question_set.questions:
            raise NoQuestionsError("Question set is empty.")
        self.question_set = question_set
        self._bridge = bridge
        self._scorer = scorer
        self._listeners: list[StateListener] = []
        self._reset()

    def _reset(self) -> None:
        self._state = RunnerState.AWAITING_ANSWER
        self._index = 0
        self._answers: dict[int, int] = {}
        self._summary: ScoreSummary | None = None
        self._review_requested = False
        self._more_requested = False

    # Read-only views -----------------------------------------------------

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def answers(self) -> Mapping[int, int]:
        return MappingProxyType(self._answers)

    @property
    def user_answers(self) -> tuple[int, ...]:
        return tuple(self._answers[i] for i in sorted(self._answers))

    @property
    def summary(self) -> ScoreSummary | None:
        return self._summary

    @property
    def review_requested(self) -> bool:
        return self._review_requested

    @property
    def more_questions_requested(self) -> bool:
        return self._more_requested

    @property
    def questions(self) -> tuple[Question, ...]:
        return self.question_set.questions

    @property
    def total_questions(self) -> int:
        return len(self.question_set.questions)

    @property
    def current_question(self) -> Question:
        return self.question_set.questions[self._index]

    @property
    def is_last_question(self) -> bool:
        return self._index == self.total_questions - 1

    @property
    def selected_index(self) -> int | None:
        return self._answers.get(self._index)

    def is_correct(self, index: int) -> bool:
        answer = self._answers.get(index)
        if answer is None:
            return False
        return answer == self.question_set.questions[index].correct_index

    @property
    def correct_count(self) -> int:
        return sum(1 for index in self._answers if self.is_correct(index))

    @property
    def mistakes_count(self) -> int:
        return len(self._answers) - self.correct_count

    @property
    def progress(self) -> float:
        """Fraction of the quiz completed, counting an answered question."""

        done = self._index
        if self._state is not RunnerState.AWAITING_ANSWER:
            done += 1
        return done / self.total_questions

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    # Transitions ---------------------------------------------------------

    def submit_answer(self, index: int) -> bool:
        """Record ``index`` for the current question.

        Returns ``False`` without changing anything when the current question
        already has an answer on screen.
        """

        if self._state is RunnerState.SHOWING_FEEDBACK:
            logger.debug(
                "Ignoring repeated answer for question %d", self._index
            )
            return False
        if self._state is not RunnerState.AWAITING_ANSWER:
            raise IllegalTransitionError(
                f"Cannot submit an answer while in state '{self._state.value}'."
            )
        option_count = len(self.current_question.options)
        if (
            isinstance(index, bool)
            or not isinstance(index, int)
            or not (0 <= index < option_count)
        ):
            raise InvalidAnswerIndexError(index, option_count)

        self._answers[self._index] = index
        self._state = RunnerState.SHOWING_FEEDBACK
        logger.info(
            "Answered question %d with option %d (%s)",
            self._index,
            index,
            "correct" if self.is_correct(self._index) else "incorrect",
        )
        self._broadcast()
        self._notify_listeners()
        return True

    def advance(self) -> RunnerState:
        """Move past the feedback screen to the next question or the results."""

        if self._state is not RunnerState.SHOWING_FEEDBACK:
            raise IllegalTransitionError(
                f"Cannot advance while in state '{self._state.value}'."
            )
        if self.is_last_question:
            self._state = RunnerState.SHOWING_RESULTS
            self._summary = self._scorer(
                self.correct_count, self.total_questions
            )
            logger.info(
                "Quiz finished: %d/%d correct",
                self._summary.correct_count,
                self._summary.total_count,
            )
        else:
            self._index += 1
            self._state = RunnerState.AWAITING_ANSWER
        self._broadcast()
        self._notify_listeners()
        return self._state

    def restart(self) -> None:
        """Discard the attempt and start again from the first question."""

        self._reset()
        logger.info("Quiz restarted")
        self._notify_listeners()

    # Follow-ups ----------------------------------------------------------

    def review_items(self) -> list[dict[str, object]]:
        items: list[dict[str, object]] = []
        for index, question in enumerate(self.question_set.questions):
            items.append(
                {
                    "question": question.question,
                    "correctOption": question.correct_option,
                    "selectedOption": question.option_at(
                        self._answers.get(index)
                    ),
                }
            )
        return items

    def request_review(self) -> bool:
        """Ask the host to review the finished quiz; once per pass."""

        self._require_results("request a review")
        if self._review_requested:
            return False
        self._review_requested = True
        dispatch(
            self._bridge,
            FollowUpRequest(build_review_prompt(self.review_items())),
        )
        return True

    def request_more_questions(self) -> bool:
        """Ask the host for a fresh quiz on the same topic; once per pass."""

        self._require_results("request more questions")
        if self._more_requested:
            return False
        self._more_requested = True
        dispatch(self._bridge, FollowUpRequest(MORE_QUESTIONS_PROMPT))
        return True

    # Internals -----------------------------------------------------------

    def _require_results(self, action: str) -> None:
        if self._state is not RunnerState.SHOWING_RESULTS:
            raise IllegalTransitionError(
                f"Cannot {action} before the quiz is finished."
            )

    def _broadcast(self) -> None:
        dispatch(
            self._bridge,
            WidgetStateUpdate(self.user_answers, self._index),
        )

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            listener(self._state, self._index)
