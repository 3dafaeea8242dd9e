from typing import List, Optional

from textual.app import App, ComposeResult, ScreenStackError
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import Button, Static

from ..bridge import HostBridge
from ..errors import IllegalTransitionError, InvalidAnswerIndexError
from ..models import QuestionSet
from ..runner import QuizRunner, RunnerState


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#options Button { width: 100%; }
#options Button.correct { background: $success; color: black; }
#options Button.incorrect { background: $error; color: black; }
#feedback.correct { color: $success; }
#feedback.incorrect { color: $error; }
#status { color: $text-muted; }
"""
    BINDINGS = [
        ("a", "select(0)", "A"),
        ("b", "select(1)", "B"),
        ("c", "select(2)", "C"),
        ("d", "select(3)", "D"),
        ("e", "select(4)", "E"),
        ("f", "select(5)", "F"),
        ("n", "next", "Next"),
        ("enter", "next", "Next"),
        ("r", "restart", "Start over"),
        ("v", "review", "Review"),
        ("m", "more", "More questions"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        question_set: QuestionSet,
        *,
        bridge: Optional[HostBridge] = None,
        show_explanations: bool = True,
    ):
        super().__init__()
        self.runner = QuizRunner(question_set, bridge=bridge)
        self.show_explanations = show_explanations
        self._notice = ""
        self.runner.add_listener(lambda state, index: self._update_stage())

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            yield self._build_view()
        yield Static(self.status_text(), id="status")

    # Pure helpers for transitions (testable without running App)
    def select_answer(self, index: int) -> bool:
        try:
            accepted = self.runner.submit_answer(index)
        except (InvalidAnswerIndexError, IllegalTransitionError) as exc:
            self._set_message(str(exc))
            return False
        self._set_message("" if accepted else "Already answered.")
        return accepted

    def next_question(self) -> Optional[RunnerState]:
        try:
            return self.runner.advance()
        except IllegalTransitionError:
            self._set_message("Pick an answer first.")
            return None

    def start_over(self) -> None:
        self._set_message("")
        self.runner.restart()

    def request_review(self) -> bool:
        try:
            sent = self.runner.request_review()
        except IllegalTransitionError as exc:
            self._set_message(str(exc))
            return False
        if sent:
            self._set_message("Review requested.")
        self._update_stage()
        return sent

    def request_more(self) -> bool:
        try:
            sent = self.runner.request_more_questions()
        except IllegalTransitionError as exc:
            self._set_message(str(exc))
            return False
        if sent:
            self._set_message("More questions requested.")
        self._update_stage()
        return sent

    def status_text(self) -> str:
        answered = len(self.runner.answers)
        text = f"Answered: {answered}/{self.runner.total_questions}"
        if self._notice:
            text = f"{text}  {self._notice}"
        return text

    def action_select(self, index: int) -> None:
        self.select_answer(index)

    def action_next(self) -> None:
        self.next_question()

    def action_restart(self) -> None:
        self.start_over()

    def action_review(self) -> None:
        self.request_review()

    def action_more(self) -> None:
        self.request_more()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("option-"):
            self.select_answer(int(bid.split("-", 1)[1]))
        elif bid == "next":
            self.action_next()
        elif bid == "restart":
            self.action_restart()
        elif bid == "review":
            self.action_review()
        elif bid == "more":
            self.action_more()

    def _build_view(self) -> Widget:
        if self.runner.state is RunnerState.SHOWING_RESULTS:
            return ResultsView(self.runner)
        return QuestionView(self.runner, show_explanation=self.show_explanations)

    def _set_message(self, message: str) -> None:
        self._notice = message
        self._update_status()

    def _update_stage(self) -> None:
        try:
            stage = self.query_one("#stage", Container)
        except (NoMatches, ScreenStackError):
            return
        stage.remove_children()
        stage.mount(self._build_view())
        self._update_status()

    def _update_status(self) -> None:
        try:
            self.query_one("#status", Static).update(self.status_text())
        except (NoMatches, ScreenStackError):
            return


class QuestionView(Widget):
    """Question and feedback screen for the runner's current question."""

    def __init__(self, runner: QuizRunner, *, show_explanation: bool = True) -> None:
        super().__init__()
        self.runner = runner
        self.show_explanation = show_explanation

    def compose(self) -> ComposeResult:
        runner = self.runner
        question = runner.current_question
        feedback = runner.state is RunnerState.SHOWING_FEEDBACK
        qs = runner.question_set
        with Horizontal(id="header"):
            yield Static(f"{qs.topic} ({qs.difficulty})", id="badge")
            yield Static(
                f"Question {runner.current_index + 1} of {runner.total_questions}",
                id="counter",
            )
        yield Static(f"Progress: {runner.progress * 100:.0f}%", id="progress")
        yield Static(question.question, id="question")
        with Vertical(id="options"):
            for index, option in enumerate(question.options):
                btn = Button(
                    f"{chr(65 + index)}) {option}",
                    id=f"option-{index}",
                    disabled=feedback,
                )
                for cls in self.option_classes(index):
                    btn.add_class(cls)
                yield btn
        status = self.feedback_text() if feedback else ""
        fb = Static(status, id="feedback")
        if feedback:
            fb.add_class("correct" if self._answered_correctly() else "incorrect")
        yield fb
        label = "See Results" if runner.is_last_question else "Next Question"
        yield Button(label, id="next", disabled=not feedback)

    def option_classes(self, index: int) -> List[str]:
        if self.runner.state is not RunnerState.SHOWING_FEEDBACK:
            return []
        question = self.runner.current_question
        if index == question.correct_index:
            return ["correct"]
        if index == self.runner.selected_index:
            return ["incorrect"]
        return []

    def feedback_text(self) -> str:
        question = self.runner.current_question
        ok = self._answered_correctly()
        expl = question.explanation if self.show_explanation else None
        head = "✓ Correct." if ok else "✗ Incorrect."
        return f"{head} {expl}" if expl else head

    def _answered_correctly(self) -> bool:
        return self.runner.is_correct(self.runner.current_index)


class ResultsView(Widget):
    """Final screen with the score summary and follow-up actions."""

    def __init__(self, runner: QuizRunner) -> None:
        super().__init__()
        self.runner = runner

    def compose(self) -> ComposeResult:
        summary = self.runner.summary
        yield Static(summary.encouragement if summary else "...", id="encouragement")
        for line in self.stat_lines():
            yield Static(line)
        with Horizontal(id="actions"):
            yield Button("Start Over", id="restart")
            yield Button(
                "Review Results",
                id="review",
                disabled=self.runner.review_requested,
            )
            yield Button(
                "More Questions",
                id="more",
                disabled=self.runner.more_questions_requested,
            )

    def stat_lines(self) -> List[str]:
        summary = self.runner.summary
        return [
            f"TOTAL: {self.runner.total_questions}",
            f"CORRECT: {self.runner.correct_count}",
            f"MISTAKES: {self.runner.mistakes_count}",
            f"SCORE: {summary.percent if summary else '...'}",
        ]
