"""Logging helpers shared by the quizaurus server and CLI commands."""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "LOGGER_NAME",
    "JsonLogFormatter",
    "configure_logger",
    "default_log_dir",
]

LOGGER_NAME = "quizaurus"


class JsonLogFormatter(logging.Formatter):
    """Emit log records as structured JSON lines."""

    _RESERVED = set(
        logging.LogRecord(
            "", logging.INFO, "", 0, "", None, None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: _coerce_value(value)
            for key, value in record.__dict__.items()
            if key not in self._RESERVED
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def default_log_dir() -> Path:
    return Path.home() / ".quizaurus" / "logs"


def configure_logger(
    name: str = LOGGER_NAME,
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Configure the namespaced logger with JSON file output.

    Child loggers created with ``logging.getLogger(__name__)`` inside the
    package propagate into the handlers installed here. Calling this twice
    reuses the managed handlers instead of stacking duplicates.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    file_level = _coerce_level(level)
    if verbose:
        file_level = logging.DEBUG

    target_dir = _prepare_log_dir(log_dir or default_log_dir())
    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"

    file_handler, file_path = _ensure_file_handler(
        logger,
        path=target_dir / log_name,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    file_handler.setLevel(file_level)

    if verbose:
        _enable_console_handler(logger)
    else:
        _disable_console_handler(logger)

    return logger, file_path


def _coerce_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _ensure_file_handler(
    logger: logging.Logger,
    *,
    path: Path,
    max_bytes: int,
    backup_count: int,
) -> tuple[RotatingFileHandler, Path]:
    for handler in list(logger.handlers):
        if getattr(handler, "_quizaurus_file", False):
            if handler.baseFilename == os.path.abspath(path):  # type: ignore[attr-defined]
                return handler, path  # type: ignore[return-value]
            logger.removeHandler(handler)
            handler.close()
    try:
        managed = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        path = _prepare_log_dir(_fallback_log_dir()) / path.name
        managed = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    managed.setFormatter(JsonLogFormatter())
    managed._quizaurus_file = True  # type: ignore[attr-defined]
    logger.addHandler(managed)
    return managed, path


def _enable_console_handler(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if getattr(handler, "_quizaurus_console", False):
            handler.setLevel(logging.DEBUG)
            return
    # stderr keeps stdout clean for the stdio transport.
    console = logging.StreamHandler(stream=sys.stderr)
    console.setLevel(logging.DEBUG)
    console.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
    console._quizaurus_console = True  # type: ignore[attr-defined]
    logger.addHandler(console)


def _disable_console_handler(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, "_quizaurus_console", False):
            logger.removeHandler(handler)
            handler.close()


def _coerce_value(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _coerce_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_coerce_value(item) for item in value]
    return repr(value)


def _prepare_log_dir(log_dir: Path) -> Path:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return log_dir
    except PermissionError:
        fallback = _fallback_log_dir()
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "quizaurus-logs"
