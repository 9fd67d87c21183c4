"""Configuration resolution for the moon mission administration console."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Sequence

import yaml

DATABASE_URL_KEY = "APP_DATABASE_URL"
JDBC_URL_KEY = "APP_JDBC_URL"
DATABASE_USER_KEY = "APP_DB_USER"
DATABASE_PASSWORD_KEY = "APP_DB_PASS"

CONFIG_FILE_ENV = "APP_CONFIG_FILE"

DEV_MODE_PROPERTY = "devMode"
DEV_MODE_ENV = "DEV_MODE"
DEV_MODE_TOKEN = "--dev"


class ConfigurationError(RuntimeError):
    """Raised when mandatory configuration is missing or malformed."""


def _clean(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_setting(
    property_key: str,
    env_key: str,
    *,
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Return a trimmed value from the overrides, falling back to the environment.

    Blank values are treated as absent so that an empty override does not
    mask a usable environment variable.
    """

    overrides = overrides or {}
    environ = os.environ if environ is None else environ

    value = _clean(overrides.get(property_key))
    if value is None:
        value = _clean(environ.get(env_key))
    return value


def resolve_database_url(
    *,
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Resolve the connection string, accepting ``APP_JDBC_URL`` when ``APP_DATABASE_URL`` is unset."""

    for key in (DATABASE_URL_KEY, JDBC_URL_KEY):
        value = resolve_setting(key, key, overrides=overrides, environ=environ)
        if value is not None:
            return value
    return None


def resolve_flag(
    property_key: str,
    env_key: str,
    argv: Sequence[str],
    token: str,
    *,
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """Resolve a boolean switch from overrides, then the environment, then ``argv``."""

    overrides = overrides or {}
    environ = os.environ if environ is None else environ

    if (_clean(overrides.get(property_key)) or "").lower() == "true":
        return True
    if (_clean(environ.get(env_key)) or "").lower() == "true":
        return True
    return token in argv


def is_dev_mode(
    argv: Sequence[str],
    *,
    overrides: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    return resolve_flag(
        DEV_MODE_PROPERTY,
        DEV_MODE_ENV,
        argv,
        DEV_MODE_TOKEN,
        overrides=overrides,
        environ=environ,
    )


def parse_overrides(pairs: Iterable[str]) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` pairs given on the command line."""

    overrides: Dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        key = key.strip()
        if not separator or not key:
            raise ConfigurationError(f"Invalid override '{pair}'. Expected KEY=VALUE.")
        overrides[key] = value
    return overrides


def load_config_file(config_path: Path) -> Dict[str, str]:
    """Load a flat ``key: value`` mapping from a YAML file."""

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Configuration file {config_path} must contain a mapping of setting names to values"
        )

    return {str(key): "" if value is None else str(value) for key, value in raw.items()}


def resolve_config_path(
    explicit: Optional[str],
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    environ = os.environ if environ is None else environ
    raw = _clean(explicit) or _clean(environ.get(CONFIG_FILE_ENV))
    if raw is None:
        return None
    return Path(raw).expanduser().resolve(strict=False)


def build_overrides(
    defines: Iterable[str],
    config_path: Optional[Path] = None,
) -> Dict[str, str]:
    """Merge the configuration file with ``-D`` pairs; command line pairs win."""

    overrides: Dict[str, str] = {}
    if config_path is not None:
        overrides.update(load_config_file(config_path))
    overrides.update(parse_overrides(defines))
    return overrides


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection details for the relational store."""

    url: str
    username: str
    password: str

    def __repr__(self) -> str:
        return f"DatabaseSettings(url={self.url!r}, username={self.username!r}, password='***')"

    @staticmethod
    def resolve(
        overrides: Optional[Mapping[str, object]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "DatabaseSettings":
        """Resolve all mandatory database settings or fail naming the missing keys."""

        values = {DATABASE_URL_KEY: resolve_database_url(overrides=overrides, environ=environ)}
        for key in (DATABASE_USER_KEY, DATABASE_PASSWORD_KEY):
            values[key] = resolve_setting(key, key, overrides=overrides, environ=environ)
        missing = [
            f"{key} (or {JDBC_URL_KEY})" if key == DATABASE_URL_KEY else key
            for key, value in values.items()
            if value is None
        ]
        if missing:
            raise ConfigurationError(
                f"Missing DB configuration: {', '.join(missing)}. Provide them with "
                "-D KEY=VALUE, a configuration file, or environment variables."
            )

        return DatabaseSettings(
            url=values[DATABASE_URL_KEY],
            username=values[DATABASE_USER_KEY],
            password=values[DATABASE_PASSWORD_KEY],
        )


__all__ = [
    "ConfigurationError",
    "DatabaseSettings",
    "DATABASE_PASSWORD_KEY",
    "DATABASE_URL_KEY",
    "DATABASE_USER_KEY",
    "JDBC_URL_KEY",
    "build_overrides",
    "is_dev_mode",
    "load_config_file",
    "parse_overrides",
    "resolve_config_path",
    "resolve_database_url",
    "resolve_flag",
    "resolve_setting",
]
