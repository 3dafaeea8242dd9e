from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import RecordingBridge, make_question_set  # noqa: E402

from quizaurus.core.logging import LOGGER_NAME  # noqa: E402
from quizaurus.quiz.models import QuestionSet  # noqa: E402


@pytest.fixture
def bridge() -> RecordingBridge:
    """Host bridge double that records every message."""

    return RecordingBridge()


@pytest.fixture
def question_set() -> QuestionSet:
    return make_question_set(3)


@pytest.fixture(autouse=True)
def _isolated_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Iterator[None]:
    """Keep config discovery and log files inside the test's tmp dir."""

    monkeypatch.delenv("QUIZAURUS_CONFIG", raising=False)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
