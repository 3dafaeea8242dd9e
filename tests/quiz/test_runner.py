from __future__ import annotations

import json

import pytest

from fixtures import RecordingBridge, make_question_set
from quizaurus.quiz.bridge import WidgetStateUpdate
from quizaurus.quiz.errors import (
    IllegalTransitionError,
    InvalidAnswerIndexError,
    NoQuestionsError,
)
from quizaurus.quiz.models import QuestionSet, ScoreSummary
from quizaurus.quiz.prompts import MORE_QUESTIONS_PROMPT
from quizaurus.quiz.runner import QuizRunner, RunnerState


def _finish(runner: QuizRunner, answers) -> None:
    for answer in answers:
        runner.submit_answer(answer)
        runner.advance()


def test_empty_question_set_rejected():
    with pytest.raises(NoQuestionsError):
        QuizRunner(QuestionSet("Empty"))


def test_initial_state(question_set):
    runner = QuizRunner(question_set)

    assert runner.state is RunnerState.AWAITING_ANSWER
    assert runner.current_index == 0
    assert runner.user_answers == ()
    assert runner.summary is None
    assert runner.progress == 0


def test_submit_moves_to_feedback_and_broadcasts(question_set, bridge):
    runner = QuizRunner(question_set, bridge=bridge)

    assert runner.submit_answer(2) is True

    assert runner.state is RunnerState.SHOWING_FEEDBACK
    assert runner.selected_index == 2
    assert runner.is_correct(0) is False
    assert bridge.state_updates == [WidgetStateUpdate((2,), 0)]
    assert bridge.state_updates[0].to_wire() == {
        "userAnswers": [2],
        "currentQuestionIndex": 0,
    }


def test_second_submit_is_ignored(question_set, bridge):
    runner = QuizRunner(question_set, bridge=bridge)
    runner.submit_answer(0)

    assert runner.submit_answer(1) is False

    assert runner.answers == {0: 0}
    assert len(bridge.messages) == 1


@pytest.mark.parametrize("index", [-1, 4, True, "1", None])
def test_invalid_answer_index(question_set, index):
    runner = QuizRunner(question_set)

    with pytest.raises(InvalidAnswerIndexError):
        runner.submit_answer(index)

    assert runner.state is RunnerState.AWAITING_ANSWER
    assert runner.answers == {}


def test_advance_requires_feedback(question_set):
    runner = QuizRunner(question_set)

    with pytest.raises(IllegalTransitionError):
        runner.advance()


def test_full_pass_reaches_results(question_set, bridge):
    runner = QuizRunner(question_set, bridge=bridge)

    runner.submit_answer(0)
    assert runner.advance() is RunnerState.AWAITING_ANSWER
    assert runner.current_index == 1
    _finish(runner, [1])
    runner.submit_answer(0)
    assert runner.is_last_question
    assert runner.advance() is RunnerState.SHOWING_RESULTS

    assert runner.user_answers == (0, 1, 0)
    assert runner.correct_count == 2
    assert runner.mistakes_count == 1
    assert runner.progress == 1
    assert runner.summary is not None
    assert runner.summary.encouragement == "Not bad!"
    assert bridge.state_updates[-1].to_wire() == {
        "userAnswers": [0, 1, 0],
        "currentQuestionIndex": 2,
    }


def test_submit_after_results_rejected(question_set):
    runner = QuizRunner(question_set)
    _finish(runner, [0, 0, 0])

    with pytest.raises(IllegalTransitionError):
        runner.submit_answer(0)
    with pytest.raises(IllegalTransitionError):
        runner.advance()


def test_scorer_called_once_with_counts(question_set):
    calls = []

    def scorer(correct, total):
        calls.append((correct, total))
        return ScoreSummary(correct, total, correct / total, "custom")

    runner = QuizRunner(question_set, scorer=scorer)
    _finish(runner, [0, 2, 3])

    assert calls == [(1, 3)]
    assert runner.summary.encouragement == "custom"


def test_restart_from_results(question_set):
    runner = QuizRunner(question_set)
    _finish(runner, [0, 0, 0])

    runner.restart()

    assert runner.state is RunnerState.AWAITING_ANSWER
    assert runner.current_index == 0
    assert runner.user_answers == ()
    assert runner.summary is None


def test_restart_mid_quiz(question_set):
    runner = QuizRunner(question_set)
    _finish(runner, [1])
    runner.submit_answer(0)

    runner.restart()

    assert runner.state is RunnerState.AWAITING_ANSWER
    assert runner.answers == {}


def test_listeners_see_each_transition():
    seen = []
    runner = QuizRunner(make_question_set(1))
    runner.add_listener(lambda state, index: seen.append((state, index)))

    runner.submit_answer(0)
    runner.advance()
    runner.restart()

    assert seen == [
        (RunnerState.SHOWING_FEEDBACK, 0),
        (RunnerState.SHOWING_RESULTS, 0),
        (RunnerState.AWAITING_ANSWER, 0),
    ]


def test_review_items_pair_correct_and_selected(question_set):
    runner = QuizRunner(question_set)
    _finish(runner, [0, 2, 0])

    items = runner.review_items()

    assert items[1] == {
        "question": "Question 2?",
        "correctOption": "right 2",
        "selectedOption": "wrong b",
    }


def test_review_request_sent_once_per_pass(question_set, bridge):
    runner = QuizRunner(question_set, bridge=bridge)
    _finish(runner, [0, 1, 0])

    assert runner.request_review() is True
    assert runner.request_review() is False

    prompts = [m.prompt for m in bridge.follow_ups]
    assert len(prompts) == 1
    assert prompts[0].startswith("The user has completed a quiz.")
    payload = json.loads(prompts[0][prompts[0].index("[") :])
    assert payload[1]["selectedOption"] == "wrong a"

    runner.restart()
    _finish(runner, [0, 0, 0])
    assert runner.request_review() is True


def test_more_questions_request(question_set, bridge):
    runner = QuizRunner(question_set, bridge=bridge)
    _finish(runner, [0, 0, 0])

    assert runner.request_more_questions() is True
    assert runner.request_more_questions() is False
    assert runner.more_questions_requested
    assert [m.prompt for m in bridge.follow_ups] == [MORE_QUESTIONS_PROMPT]


def test_follow_ups_require_results(question_set):
    runner = QuizRunner(question_set)

    with pytest.raises(IllegalTransitionError):
        runner.request_review()
    with pytest.raises(IllegalTransitionError):
        runner.request_more_questions()


def test_bridge_failure_does_not_break_quiz(question_set):
    failing = RecordingBridge(fail_with=ConnectionError("host gone"))
    runner = QuizRunner(question_set, bridge=failing)

    _finish(runner, [0, 0, 0])

    assert runner.state is RunnerState.SHOWING_RESULTS
    assert runner.request_review() is True
    assert len(failing.messages) == 7


def test_works_without_bridge(question_set):
    runner = QuizRunner(question_set)
    _finish(runner, [0, 0, 0])

    assert runner.request_more_questions() is True
