"""Development database bootstrap: schema creation and seed data."""
from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Dict, Mapping, Optional

from sqlalchemy import Column, Date, Integer, MetaData, String, Table, func, select

from .config import (
    DATABASE_PASSWORD_KEY,
    DATABASE_URL_KEY,
    DATABASE_USER_KEY,
    DatabaseSettings,
    resolve_database_url,
    resolve_setting,
)
from .database import DataStore, open_data_store

logger = logging.getLogger("moonadmin.devdb")

DEV_DB_PATH_ENV = "APP_DEV_DB_PATH"
DEV_CREDENTIAL = "dev"

metadata = MetaData()

moon_mission = Table(
    "moon_mission",
    metadata,
    Column("mission_id", Integer, primary_key=True, autoincrement=True),
    Column("spacecraft", String(255), nullable=False),
    Column("launch_date", Date),
)

account = Table(
    "account",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("password", String(255), nullable=False),
    Column("first_name", String(255)),
    Column("last_name", String(255)),
    Column("ssn", String(32)),
)

SEED_MISSIONS = (
    ("Luna 1", date(1959, 1, 2)),
    ("Pioneer 4", date(1959, 3, 3)),
    ("Luna 2", date(1959, 9, 12)),
    ("Luna 3", date(1959, 10, 4)),
    ("Ranger 7", date(1964, 7, 28)),
    ("Luna 9", date(1966, 1, 31)),
    ("Surveyor 1", date(1966, 5, 30)),
    ("Lunar Orbiter 1", date(1966, 8, 10)),
    ("Apollo 8", date(1968, 12, 21)),
    ("Apollo 10", date(1969, 5, 18)),
    ("Apollo 11", date(1969, 7, 16)),
    ("Apollo 12", date(1969, 11, 14)),
    ("Luna 16", date(1970, 9, 12)),
    ("Apollo 15", date(1971, 7, 26)),
    ("Apollo 17", date(1972, 12, 7)),
    ("Clementine", date(1994, 1, 25)),
    ("Chang'e 4", date(2018, 12, 7)),
    ("Chandrayaan-3", date(2023, 7, 14)),
)

SEED_ACCOUNTS = (
    {"name": "NeiArm", "password": "tranquility", "first_name": "Neil", "last_name": "Armstrong", "ssn": "100-00-0001"},
    {"name": "BuzAld", "password": "eagle1969", "first_name": "Buzz", "last_name": "Aldrin", "ssn": "100-00-0002"},
)


def resolve_dev_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the development SQLite database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "moon_missions.sqlite3").resolve(strict=False)


def create_schema(store: DataStore) -> None:
    """Create the ``moon_mission`` and ``account`` tables if they are missing."""

    metadata.create_all(store.connection)
    store.connection.commit()


def _is_empty(store: DataStore, table: Table) -> bool:
    return store.scalar(select(func.count()).select_from(table)) == 0


def seed(store: DataStore) -> int:
    """Insert the demo missions and accounts into empty tables.

    Returns the number of missions inserted.
    """

    inserted = 0
    if _is_empty(store, moon_mission):
        for spacecraft, launch_date in SEED_MISSIONS:
            inserted += store.execute(
                moon_mission.insert(),
                {"spacecraft": spacecraft, "launch_date": launch_date},
                error="Failed to seed moon missions",
            )

    if _is_empty(store, account):
        for row in SEED_ACCOUNTS:
            store.execute(account.insert(), row, error="Failed to seed accounts")

    logger.info("Seeded %d moon mission(s)", inserted)
    return inserted


def prepare_dev_database(
    overrides: Mapping[str, str],
    *,
    environ: Optional[Mapping[str, str]] = None,
    path: Optional[Path] = None,
) -> Dict[str, str]:
    """Point the configuration at a development database and seed it.

    When no connection string is configured a local SQLite file is used with
    placeholder credentials. Returns the overrides to resolve settings from.
    """

    environ = os.environ if environ is None else environ
    prepared = dict(overrides)

    if resolve_database_url(overrides=prepared, environ=environ) is None:
        db_path = path or resolve_dev_database_path(environ.get(DEV_DB_PATH_ENV))
        db_path.parent.mkdir(parents=True, exist_ok=True)
        prepared[DATABASE_URL_KEY] = f"sqlite:///{db_path}"
        for key in (DATABASE_USER_KEY, DATABASE_PASSWORD_KEY):
            if resolve_setting(key, key, overrides=prepared, environ=environ) is None:
                prepared[key] = DEV_CREDENTIAL
        logger.info("Development mode: using SQLite database at %s", db_path)

    settings = DatabaseSettings.resolve(prepared, environ)
    with open_data_store(settings) as store:
        create_schema(store)
        seed(store)

    return prepared


__all__ = [
    "SEED_ACCOUNTS",
    "SEED_MISSIONS",
    "account",
    "create_schema",
    "metadata",
    "moon_mission",
    "prepare_dev_database",
    "resolve_dev_database_path",
    "seed",
]
