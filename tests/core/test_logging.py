from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from quizaurus.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "quizaurus.test",
        log_dir=tmp_path / "logs",
        level="INFO",
        filename="test.log",
    )

    logger.info("hello world", extra={"event": "unit", "value": 3})
    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={"payload": {"items": [Path("a"), 1]}, "obj": object()},
        )
    for handler in logger.handlers:
        handler.flush()

    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    first = json.loads(lines[0])
    assert first["message"] == "hello world"
    assert first["level"] == "INFO"
    assert first["extra"] == {"event": "unit", "value": 3}

    last = json.loads(lines[-1])
    assert "ValueError: boom" in last["exception"]
    assert last["extra"]["payload"]["items"] == ["a", 1]
    assert last["extra"]["obj"].startswith("<object")

    _close(logger)


def test_file_level_filters_debug_unless_verbose(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "quizaurus.test_level",
        log_dir=tmp_path,
        level="WARNING",
        filename="level.log",
    )
    logger.info("quiet")
    logger.warning("loud")
    for handler in logger.handlers:
        handler.flush()

    messages = [
        json.loads(line)["message"]
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]
    assert messages == ["loud"]
    _close(logger)


def test_child_loggers_propagate_into_managed_handler(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "quizaurus.test_parent",
        log_dir=tmp_path,
        filename="parent.log",
    )
    logging.getLogger("quizaurus.test_parent.child").info("from child")
    for handler in logger.handlers:
        handler.flush()

    payload = json.loads(log_path.read_text(encoding="utf-8").splitlines()[0])
    assert payload["logger"] == "quizaurus.test_parent.child"
    _close(logger)


def test_console_handler_toggle(tmp_path):
    name = "quizaurus.test_toggle"

    def consoles(logger):
        return [
            handler
            for handler in logger.handlers
            if getattr(handler, "_quizaurus_console", False)
        ]

    logger, _ = core_logging.configure_logger(
        name, log_dir=tmp_path, verbose=True, filename="toggle.log"
    )
    assert len(consoles(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=tmp_path, verbose=True, filename="toggle.log"
    )
    assert len(consoles(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=tmp_path, verbose=False, filename="toggle.log"
    )
    assert consoles(logger) == []
    _close(logger)


def test_file_handler_reused_for_same_path(tmp_path):
    name = "quizaurus.test_reuse"
    logger, _ = core_logging.configure_logger(
        name, log_dir=tmp_path, filename="reuse.log"
    )
    core_logging.configure_logger(name, log_dir=tmp_path, filename="reuse.log")
    files = [h for h in logger.handlers if getattr(h, "_quizaurus_file", False)]
    assert len(files) == 1

    core_logging.configure_logger(name, log_dir=tmp_path, filename="other.log")
    files = [h for h in logger.handlers if getattr(h, "_quizaurus_file", False)]
    assert len(files) == 1
    assert files[0].baseFilename.endswith("other.log")
    _close(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch):
    target = tmp_path / "blocked"
    fallback = tmp_path / "fallback"
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)

    logger, log_path = core_logging.configure_logger(
        "quizaurus.test_blocked", log_dir=target, filename="blocked.log"
    )

    assert log_path.parent == fallback
    assert log_path.exists()
    _close(logger)


def test_configure_logger_rotating_handler_fallback(tmp_path, monkeypatch):
    calls = {"count": 0}
    fallback_dir = tmp_path / "rotate-fallback"
    original_handler = core_logging.RotatingFileHandler

    def fake_handler(path, *args, **kwargs):  # noqa: ANN001
        calls["count"] += 1
        if calls["count"] == 1:
            raise PermissionError("denied")
        return original_handler(path, *args, **kwargs)

    monkeypatch.setattr(core_logging, "RotatingFileHandler", fake_handler)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback_dir)

    logger, log_path = core_logging.configure_logger(
        "quizaurus.test_rotating_fallback",
        log_dir=tmp_path / "primary",
        filename="rotate.log",
    )

    assert log_path.parent == fallback_dir
    assert calls["count"] == 2
    _close(logger)


def test_fallback_log_dir_uses_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))

    assert core_logging._fallback_log_dir() == tmp_path / "quizaurus-logs"


def test_default_log_dir_under_home(tmp_path):
    # HOME points into tmp_path via the autouse fixture.
    assert core_logging.default_log_dir() == (
        tmp_path / "home" / ".quizaurus" / "logs"
    )
