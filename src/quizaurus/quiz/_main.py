import argparse
import json
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .. import config as config_mod
from ..core.logging import LOGGER_NAME, configure_logger
from .bridge import LoggingBridge
from .errors import NoQuestionsError
from .scoring import score
from .session import run_quiz_session
from .validator import ValidationReport, load_question_set


class QuestionFileError(RuntimeError):
    """Raised when a question-set file cannot be read or decoded."""


def read_question_file(path: Path) -> Dict[str, Any]:
    """Load a question-set JSON file.

    A bare list is accepted as the questions of a quiz named after the file.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise QuestionFileError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise QuestionFileError(f"{path} is not valid JSON: {exc}") from exc
    if isinstance(data, list):
        return {"topic": path.stem, "questions": data}
    if not isinstance(data, dict):
        raise QuestionFileError(
            f"{path} must contain an object with a 'questions' list"
        )
    return data


def _load_config(args: argparse.Namespace) -> config_mod.QuizaurusConfig:
    explicit = getattr(args, "config", None)
    return config_mod.load_config(
        explicit_path=Path(explicit) if explicit else None
    )


def _setup_logging(cfg: config_mod.QuizaurusConfig) -> None:
    configure_logger(
        LOGGER_NAME,
        log_dir=cfg.logging.log_dir,
        level=cfg.logging.level,
        verbose=cfg.logging.verbose,
        filename="quiz.log",
    )


def _rejection_table(report: ValidationReport) -> Table:
    table = Table(title="Dropped questions", show_lines=False)
    table.add_column("#", justify="right", style="bold")
    table.add_column("Reason", style="red")
    table.add_column("Question")
    for rejection in report.rejections:
        record = rejection.record
        text = ""
        if isinstance(record, dict):
            text = str(record.get("question", ""))[:80]
        table.add_row(str(rejection.index + 1), rejection.reason, text)
    return table


def _cmd_init(args: argparse.Namespace) -> int:
    path = Path(args.path or config_mod.CONFIG_FILENAME).expanduser().resolve()
    if path.exists() and not args.force:
        print(f"{path.name} already exists at {path}")
        return 0
    try:
        config_mod.write_template(path, overwrite=bool(args.force))
    except config_mod.ConfigError as exc:
        print(f"Error: {exc}")
        return 2
    print(f"Created template {path}")
    return 0


def _cmd_validate(
    args: argparse.Namespace, console: Optional[Console] = None
) -> int:
    console = console or Console()
    try:
        cfg = _load_config(args)
        _setup_logging(cfg)
        data = read_question_file(Path(args.file))
        question_set, report = load_question_set(data, cfg.quiz.option_policy)
    except (config_mod.ConfigError, QuestionFileError, ValueError) as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 2
    console.print(
        f"Kept {report.accepted_count} of "
        f"{report.accepted_count + report.rejected_count} question(s) for "
        f"'{question_set.topic}' ({question_set.difficulty})."
    )
    if report.rejections:
        console.print(_rejection_table(report))
    return 0 if report.accepted_count else 1


def _cmd_play(args: argparse.Namespace, console: Optional[Console] = None) -> int:
    console = console or Console()
    try:
        cfg = _load_config(args)
        _setup_logging(cfg)
        data = read_question_file(Path(args.file))
        question_set, report = load_question_set(data, cfg.quiz.option_policy)
    except (config_mod.ConfigError, QuestionFileError, ValueError) as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 2
    if not question_set.questions:
        console.print("No valid questions to play.")
        return 1
    if report.rejections:
        console.print(
            f"[yellow]Skipped {report.rejected_count} malformed question(s).[/]"
        )
    bridge = LoggingBridge()
    if args.tui:
        from .view.quiz import QuizApp

        app = QuizApp(
            question_set, bridge=bridge, show_explanations=args.explain
        )
        app.run()
        return 0
    run_quiz_session(
        question_set,
        console,
        lambda: console.input("[bold cyan]> [/]"),
        bridge=bridge,
        show_explanations=args.explain,
    )
    return 0


def _cmd_score(args: argparse.Namespace) -> int:
    try:
        summary = score(args.correct, args.total)
    except (NoQuestionsError, ValueError) as exc:
        print(f"Error: {exc}")
        return 2
    print(
        f"{summary.encouragement} {summary.correct_count}/"
        f"{summary.total_count} correct ({summary.percent})"
    )
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quizaurus quiz",
        description="Validate, play and score quizzes locally",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser("init", help="Create a quizaurus.toml template")
    sp_init.add_argument("--path", help="Destination for the template")
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )

    sp_validate = sub.add_parser(
        "validate", help="Check a question-set JSON file"
    )
    sp_validate.add_argument("file")
    sp_validate.add_argument("--config", help="Path to quizaurus.toml")

    sp_play = sub.add_parser("play", help="Take a quiz in the terminal")
    sp_play.add_argument("file")
    sp_play.add_argument("--config", help="Path to quizaurus.toml")
    sp_play.add_argument(
        "--tui", action="store_true", help="Use the full-screen Textual UI"
    )
    sp_play.add_argument("--explain", dest="explain", action="store_true")
    sp_play.add_argument("--no-explain", dest="explain", action="store_false")
    sp_play.set_defaults(explain=True)

    sp_score = sub.add_parser("score", help="Score a finished quiz")
    sp_score.add_argument("correct", type=int)
    sp_score.add_argument("total", type=int)
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "init":
        code = _cmd_init(args)
    elif args.command == "validate":
        code = _cmd_validate(args)
    elif args.command == "play":
        code = _cmd_play(args)
    elif args.command == "score":
        code = _cmd_score(args)
    else:  # pragma: no cover - fallback guard
        parser.print_help()
        code = 2
    raise SystemExit(code)
