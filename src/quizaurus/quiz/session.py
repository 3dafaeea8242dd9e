"""Rich-powered console front end for :class:`QuizRunner`.

The loop renders whichever screen matches the runner state (question,
feedback or results), reads one command per turn from an injected input
provider and maps it onto a runner transition. Keeping the input provider and
console injectable lets tests drive a full quiz without a terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from .bridge import HostBridge
from .errors import IllegalTransitionError, InvalidAnswerIndexError
from .models import QuestionSet, ScoreSummary
from .runner import QuizRunner, RunnerState

__all__ = [
    "QuizSessionResult",
    "SessionCommand",
    "option_letter",
    "parse_session_command",
    "run_quiz_session",
]

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "quit"]
CommandType = Literal["select", "next", "restart", "review", "more", "quit"]

_KEYWORDS: dict[str, CommandType] = {
    "n": "next",
    "next": "next",
    "r": "restart",
    "restart": "restart",
    "review": "review",
    "more": "more",
    "q": "quit",
    "quit": "quit",
    "exit": "quit",
}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    choice: int | None = None


@dataclass(frozen=True)
class QuizSessionResult:
    """Return value from ``run_quiz_session``."""

    answers: tuple[int, ...]
    summary: ScoreSummary | None
    exit_action: ExitAction


def option_letter(index: int) -> str:
    return chr(ord("A") + index)


def parse_session_command(raw: str | None) -> SessionCommand | None:
    """Parse raw user input into a structured command.

    Option letters are case-insensitive (``a`` selects the first option) and
    1-based numbers are accepted as well.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    lowered = text.lower()
    if lowered in _KEYWORDS:
        return SessionCommand(_KEYWORDS[lowered])
    if lowered.isdigit():
        return SessionCommand("select", int(lowered) - 1)
    if len(lowered) == 1 and "a" <= lowered <= "z":
        return SessionCommand("select", ord(lowered) - ord("a"))
    return None


def run_quiz_session(
    question_set: QuestionSet,
    console: Console,
    input_provider: InputProvider,
    *,
    bridge: HostBridge | None = None,
    show_explanations: bool = True,
) -> QuizSessionResult:
    """Run an interactive quiz using Rich-rendered screens."""

    runner = QuizRunner(question_set, bridge=bridge)
    exit_action: ExitAction = "quit"
    while True:
        _render(console, runner, show_explanations=show_explanations)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            break
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            break
        _apply_command(command, runner, console)

    if runner.state is RunnerState.SHOWING_RESULTS:
        exit_action = "completed"
    else:
        console.print("[bold yellow]Ending quiz before the last question.[/]")
    return QuizSessionResult(runner.user_answers, runner.summary, exit_action)


def _apply_command(
    command: SessionCommand,
    runner: QuizRunner,
    console: Console,
) -> None:
    try:
        if command.type == "select" and command.choice is not None:
            if not runner.submit_answer(command.choice):
                console.print(
                    "[yellow]Already answered. Press n to continue.[/]"
                )
        elif command.type == "next":
            runner.advance()
        elif command.type == "restart":
            runner.restart()
            console.print("[bold]Starting over.[/]")
        elif command.type == "review":
            if runner.request_review():
                console.print("Review requested from the assistant.")
            else:
                console.print("[yellow]Review already requested.[/]")
        elif command.type == "more":
            if runner.request_more_questions():
                console.print("Asked the assistant for more questions.")
            else:
                console.print("[yellow]More questions already requested.[/]")
    except InvalidAnswerIndexError:
        letters = ", ".join(
            option_letter(i) for i in range(len(runner.current_question.options))
        )
        console.print(f"[red]Not a valid option. Choose one of {letters}.[/]")
    except IllegalTransitionError as exc:
        console.print(f"[red]{exc}[/]")


def _render(
    console: Console, runner: QuizRunner, *, show_explanations: bool
) -> None:
    if runner.state is RunnerState.SHOWING_RESULTS:
        _render_results(console, runner)
    else:
        _render_question(console, runner, show_explanations=show_explanations)


def _render_question(
    console: Console, runner: QuizRunner, *, show_explanations: bool
) -> None:
    question_set = runner.question_set
    question = runner.current_question
    feedback = runner.state is RunnerState.SHOWING_FEEDBACK
    selected = runner.selected_index

    header = Text.assemble(
        (f"{question_set.topic} ({question_set.difficulty})", "bold magenta"),
        "  ",
        (
            f"Question {runner.current_index + 1} of "
            f"{runner.total_questions}",
            "dim",
        ),
    )
    console.print()
    console.rule(header)
    console.print(ProgressBar(total=1.0, completed=runner.progress, width=40))
    console.print(Text(question.question, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Option")
    for index, option in enumerate(question.options):
        text = Text(option)
        if feedback and index == question.correct_index:
            text.stylize("bold green")
        elif feedback and index == selected:
            text.stylize("bold red")
        table.add_row(option_letter(index), text)
    console.print(table)

    if feedback:
        correct = runner.is_correct(runner.current_index)
        mark = "✓" if correct else "✗"
        body = question.explanation if show_explanations else None
        if not correct:
            answer = (
                f"Correct answer: {option_letter(question.correct_index)}) "
                f"{question.correct_option}"
            )
            body = f"{answer}\n{body}" if body else answer
        console.print(
            Panel(
                body or ("Correct!" if correct else "Incorrect."),
                title=f"{mark} {'Correct' if correct else 'Incorrect'}",
                border_style="green" if correct else "red",
            )
        )
        action = "see results" if runner.is_last_question else "next question"
        hint = f"Commands: n ({action}), restart, quit"
    else:
        letters = ", ".join(
            option_letter(i) for i in range(len(question.options))
        )
        hint = f"Commands: choices [{letters}], restart, quit"
    console.print(Text(hint, style="dim"))


def _render_results(console: Console, runner: QuizRunner) -> None:
    summary = runner.summary
    console.print()
    title = summary.encouragement if summary else "..."
    console.rule(Text(title, style="bold magenta"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("TOTAL", str(runner.total_questions))
    overview.add_row("CORRECT", str(runner.correct_count))
    overview.add_row("MISTAKES", str(runner.mistakes_count))
    overview.add_row("SCORE", summary.percent if summary else "...")
    console.print(overview)

    console.print(
        Text(
            "Commands: restart, review (ask for feedback), "
            "more (new questions), quit",
            style="dim",
        )
    )
