"""Command-line entry point for running the quiz MCP server."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Sequence

from .. import config as config_mod
from ..core.logging import LOGGER_NAME, configure_logger
from . import app as app_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizaurus serve",
        description="Serve the quiz tools and widget over MCP.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help=(
            "Path to quizaurus.toml (defaults to $QUIZAURUS_CONFIG, then "
            "./quizaurus.toml)."
        ),
    )
    parser.add_argument(
        "--transport",
        choices=config_mod.TRANSPORTS,
        help="Override server.transport.",
    )
    parser.add_argument("--host", type=str, help="Override server.host.")
    parser.add_argument("--port", type=int, help="Override server.port.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to stderr as well as the log file.",
    )
    return parser


def apply_overrides(
    cfg: config_mod.QuizaurusConfig, args: argparse.Namespace
) -> config_mod.QuizaurusConfig:
    """Return ``cfg`` with command-line flags taking precedence."""

    server_changes = {
        key: value
        for key, value in (
            ("transport", args.transport),
            ("host", args.host),
            ("port", args.port),
        )
        if value is not None
    }
    if "port" in server_changes and not (1 <= server_changes["port"] <= 65535):
        raise config_mod.ConfigError("--port must be between 1 and 65535.")
    server = dataclasses.replace(cfg.server, **server_changes)
    logging_cfg = cfg.logging
    if args.verbose:
        logging_cfg = dataclasses.replace(logging_cfg, verbose=True)
    return dataclasses.replace(cfg, server=server, logging=logging_cfg)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    explicit = Path(args.config) if args.config else None
    try:
        cfg = apply_overrides(
            config_mod.load_config(explicit_path=explicit), args
        )
    except config_mod.ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=cfg.logging.log_dir,
        level=cfg.logging.level,
        verbose=cfg.logging.verbose,
        filename="server.log",
    )
    logger.info(
        "Server logging to %s",
        log_path,
        extra={"log_path": log_path},
    )
    try:
        app_mod.run_server(cfg)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
