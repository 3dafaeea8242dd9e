"""Configuration for the quizaurus server and local quiz commands.

Settings live in a TOML file grouped by concern. Every key has a default, so
running without a config file is supported; a file only needs the keys it
changes. Unknown keys are rejected to catch typos early.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, get_args

from dotenv import load_dotenv

from .core.config import (
    TomlConfigError,
    load_toml,
    merge_defaults,
    write_toml_template,
)
from .core.logging import default_log_dir
from .quiz.models import (
    DEFAULT_DIFFICULTY,
    DIFFICULTIES,
    Difficulty,
    OptionPolicy,
)

__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_PATH_ENV",
    "PORT_ENV",
    "ConfigError",
    "LoggingConfig",
    "QuizConfig",
    "QuizaurusConfig",
    "ServerConfig",
    "Transport",
    "WidgetConfig",
    "config_template",
    "default_tree",
    "load_config",
    "resolve_config_path",
    "write_template",
]

CONFIG_FILENAME = "quizaurus.toml"
CONFIG_PATH_ENV = "QUIZAURUS_CONFIG"
PORT_ENV = "PORT"

Transport = Literal["streamable-http", "sse", "stdio"]
TRANSPORTS: tuple[str, ...] = get_args(Transport)


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ServerConfig:
    name: str
    version: str
    host: str
    port: int
    transport: Transport
    streamable_http_path: str
    sse_path: str
    message_path: str


@dataclass(frozen=True)
class QuizConfig:
    min_options: int
    max_options: Optional[int]
    default_difficulty: Difficulty

    @property
    def option_policy(self) -> OptionPolicy:
        return OptionPolicy(self.min_options, self.max_options)


@dataclass(frozen=True)
class WidgetConfig:
    uri: str
    assets_dir: Optional[Path]
    script: str
    stylesheet: str
    locale: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool
    log_dir: Path


@dataclass(frozen=True)
class QuizaurusConfig:
    server: ServerConfig
    quiz: QuizConfig
    widget: WidgetConfig
    logging: LoggingConfig


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_int_range(
    value: Any, *, field: str, min_value: int, max_value: int
) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{field}' must be an integer.")
    if not (min_value <= value <= max_value):
        raise ConfigError(
            f"'{field}' must be between {min_value} and {max_value}."
        )
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_path(value: Any, *, field: str) -> str:
    text = _require_string(value, field=field)
    if not text.startswith("/"):
        raise ConfigError(f"'{field}' must start with '/'.")
    return text


def _coerce_optional_path(value: Any, *, field: str) -> Optional[Path]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{field}' must be a string path when set.")
    return Path(value).expanduser().resolve()


def _build_server(
    section: Mapping[str, Any], env: Mapping[str, str]
) -> ServerConfig:
    port_value: Any = section.get("port")
    env_port = env.get(PORT_ENV)
    if env_port:
        try:
            port_value = int(env_port)
        except ValueError as exc:
            raise ConfigError(
                f"{PORT_ENV} must be an integer, got {env_port!r}."
            ) from exc
    transport = _require_string(section.get("transport"), field="server.transport")
    if transport not in TRANSPORTS:
        raise ConfigError(
            "server.transport must be one of " + ", ".join(TRANSPORTS) + "."
        )
    return ServerConfig(
        name=_require_string(section.get("name"), field="server.name"),
        version=_require_string(section.get("version"), field="server.version"),
        host=_require_string(section.get("host"), field="server.host"),
        port=_require_int_range(
            port_value, field="server.port", min_value=1, max_value=65535
        ),
        transport=transport,  # type: ignore[arg-type]
        streamable_http_path=_require_path(
            section.get("streamable_http_path"),
            field="server.streamable_http_path",
        ),
        sse_path=_require_path(section.get("sse_path"), field="server.sse_path"),
        message_path=_require_path(
            section.get("message_path"), field="server.message_path"
        ),
    )


def _build_quiz(section: Mapping[str, Any]) -> QuizConfig:
    min_options = _require_int_range(
        section.get("min_options"),
        field="quiz.min_options",
        min_value=1,
        max_value=26,
    )
    raw_max = _require_int_range(
        section.get("max_options"),
        field="quiz.max_options",
        min_value=0,
        max_value=26,
    )
    max_options = raw_max or None
    if max_options is not None and max_options < min_options:
        raise ConfigError("quiz.max_options must be 0 or >= quiz.min_options.")
    difficulty = _require_string(
        section.get("default_difficulty"), field="quiz.default_difficulty"
    ).lower()
    if difficulty not in DIFFICULTIES:
        raise ConfigError(
            "quiz.default_difficulty must be one of "
            + ", ".join(DIFFICULTIES)
            + "."
        )
    return QuizConfig(
        min_options=min_options,
        max_options=max_options,
        default_difficulty=difficulty,  # type: ignore[arg-type]
    )


def _build_widget(section: Mapping[str, Any]) -> WidgetConfig:
    uri = _require_string(section.get("uri"), field="widget.uri")
    if "://" not in uri:
        raise ConfigError("widget.uri must be an absolute URI.")
    return WidgetConfig(
        uri=uri,
        assets_dir=_coerce_optional_path(
            section.get("assets_dir"), field="widget.assets_dir"
        ),
        script=_require_string(section.get("script"), field="widget.script"),
        stylesheet=_require_string(
            section.get("stylesheet"), field="widget.stylesheet"
        ),
        locale=_require_string(section.get("locale"), field="widget.locale"),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if level not in allowed:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    log_dir = _coerce_optional_path(
        section.get("log_dir"), field="logging.log_dir"
    )
    return LoggingConfig(
        level=level,
        verbose=verbose,
        log_dir=log_dir or default_log_dir(),
    )


def _build_config(
    tree: Mapping[str, Any], env: Mapping[str, str]
) -> QuizaurusConfig:
    return QuizaurusConfig(
        server=_build_server(tree["server"], env),
        quiz=_build_quiz(tree["quiz"]),
        widget=_build_widget(tree["widget"]),
        logging=_build_logging(tree["logging"]),
    )


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> Optional[Path]:
    """Return the config file to read, or ``None`` to use defaults only.

    An explicit path or ``QUIZAURUS_CONFIG`` must point to an existing file;
    ``./quizaurus.toml`` is used only when present.
    """

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    env_override = env_map.get(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve()
    candidate = Path(CONFIG_FILENAME).resolve()
    return candidate if candidate.exists() else None


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> QuizaurusConfig:
    """Load settings from TOML and the environment, applying defaults."""

    if env is None:
        load_dotenv()
        env = os.environ
    path = resolve_config_path(explicit_path=explicit_path, env=env)
    tree = default_tree()
    if path is not None:
        try:
            data = load_toml(path)
            merge_defaults(tree, data)
        except TomlConfigError as exc:
            raise ConfigError(str(exc)) from exc
    return _build_config(tree, env)


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    """Return the TOML template recommended for new installs."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return write_toml_template(
            path, template=config_template(), overwrite=overwrite
        )
    except TomlConfigError as exc:
        raise ConfigError(str(exc)) from exc


_DEFAULTS: Dict[str, Any] = {
    "server": {
        "name": "quizaurus-server",
        "version": "1.0.0",
        "host": "127.0.0.1",
        "port": 8000,
        "transport": "streamable-http",
        "streamable_http_path": "/mcp",
        "sse_path": "/mcp",
        "message_path": "/mcp/messages/",
    },
    "quiz": {
        "min_options": 4,
        "max_options": 4,
        "default_difficulty": DEFAULT_DIFFICULTY,
    },
    "widget": {
        "uri": "ui://widget/interactive-quiz.html",
        "assets_dir": "",
        "script": "QuizaurusApp.js",
        "stylesheet": "QuizaurusApp.css",
        "locale": "en",
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
        "log_dir": "",
    },
}


_CONFIG_TEMPLATE = """
# Quizaurus configuration

[server]
name = "quizaurus-server"
version = "1.0.0"
host = "127.0.0.1"
# The PORT environment variable overrides this value
port = 8000
# One of "streamable-http", "sse" (legacy clients) or "stdio"
transport = "streamable-http"
streamable_http_path = "/mcp"
# SSE transport only: stream endpoint and message endpoint
sse_path = "/mcp"
message_path = "/mcp/messages/"

[quiz]
# Allowed number of options per question; max_options = 0 means unbounded.
# The default accepts exactly four options. Use min_options = 2 and
# max_options = 0 for the relaxed policy.
min_options = 4
max_options = 4
default_difficulty = "medium"

[widget]
# Must match the output template advertised by the render-quiz tool
uri = "ui://widget/interactive-quiz.html"
# Directory holding a built front end; leave empty for the bundled widget
assets_dir = ""
script = "QuizaurusApp.js"
stylesheet = "QuizaurusApp.css"
locale = "en"

[logging]
level = "INFO"
verbose = false
# Defaults to ~/.quizaurus/logs
log_dir = ""
"""
