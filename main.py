"""Command-line entry point for the moon mission administration console."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

try:
    import sqlalchemy  # noqa: F401
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'SQLAlchemy' package is required. Run `pip install -e .` to install dependencies."
    ) from exc

from moonadmin import create_console
from moonadmin.config import (
    ConfigurationError,
    DatabaseSettings,
    build_overrides,
    is_dev_mode,
    resolve_config_path,
)
from moonadmin.database import DataStoreError, open_data_store
from moonadmin.devdb import prepare_dev_database

logger = logging.getLogger("moonadmin.main")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Moon mission administration console")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Create and seed a development database before starting the console",
    )
    parser.add_argument(
        "-D",
        dest="define",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a configuration setting (e.g. -D APP_DB_USER=admin). May be repeated.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML file of configuration overrides (defaults to APP_CONFIG_FILE when set)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=_LOG_LEVELS,
        type=str.upper,
        help="Logging verbosity (default: WARNING)",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def _describe(exc: BaseException) -> str:
    cause = exc.__cause__
    if cause is not None and str(cause) and str(cause) not in str(exc):
        return f"{exc}: {cause}"
    return str(exc)


def _resolve_settings(args: argparse.Namespace, argv: Sequence[str]) -> DatabaseSettings:
    overrides = build_overrides(args.define, resolve_config_path(args.config))
    if args.dev or is_dev_mode(argv, overrides=overrides):
        overrides = prepare_dev_database(overrides)
    return DatabaseSettings.resolve(overrides)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args_list = list(argv) if argv is not None else sys.argv[1:]
    args = _parse_args(args_list)

    logging.basicConfig(level=args.log_level, format="%(asctime)s [%(levelname)s] %(message)s")

    try:
        settings = _resolve_settings(args, args_list)
    except (ConfigurationError, DataStoreError) as exc:
        logger.debug("Startup failed", exc_info=True)
        raise SystemExit(_describe(exc)) from exc

    try:
        with open_data_store(settings) as store:
            create_console(store).run()
    except (ConfigurationError, DataStoreError) as exc:
        logger.debug("Session terminated", exc_info=True)
        raise SystemExit(_describe(exc)) from exc

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
