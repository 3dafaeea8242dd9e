"""Core shared helpers for quizaurus commands."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    load_toml,
    merge_defaults,
    write_toml_template,
)
from .logging import (
    LOGGER_NAME,
    JsonLogFormatter,
    configure_logger,
    default_log_dir,
)

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
    "LOGGER_NAME",
    "JsonLogFormatter",
    "configure_logger",
    "default_log_dir",
]
