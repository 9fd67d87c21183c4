from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable, Iterator, List, Mapping

import pytest

from moonadmin.config import DatabaseSettings
from moonadmin.database import DataStore, open_data_store
from moonadmin.devdb import account, create_schema, moon_mission


@pytest.fixture()
def settings(tmp_path: Path) -> DatabaseSettings:
    db_path = tmp_path / "moon_missions.sqlite3"
    return DatabaseSettings(url=f"sqlite:///{db_path}", username="tester", password="secret")


@pytest.fixture()
def bare_store(settings: DatabaseSettings) -> Iterator[DataStore]:
    """A connected store whose tables have not been created."""

    with open_data_store(settings) as store:
        yield store


@pytest.fixture()
def store(bare_store: DataStore) -> DataStore:
    create_schema(bare_store)
    return bare_store


def _add_mission(store: DataStore, spacecraft: str, launch_date: date) -> None:
    store.execute(moon_mission.insert(), {"spacecraft": spacecraft, "launch_date": launch_date})


def _add_account(store: DataStore, name: str, password: str) -> None:
    store.execute(
        account.insert(),
        {"name": name, "password": password, "first_name": "", "last_name": "", "ssn": ""},
    )


def _account_rows(store: DataStore) -> List[Mapping]:
    return store.fetch_all("SELECT user_id, name, password FROM account ORDER BY user_id")


@pytest.fixture()
def add_mission() -> Callable[[DataStore, str, date], None]:
    """Insert a ``moon_mission`` row: ``add_mission(store, spacecraft, launch_date)``."""

    return _add_mission


@pytest.fixture()
def add_account() -> Callable[[DataStore, str, str], None]:
    """Insert an ``account`` row with blank personal details."""

    return _add_account


@pytest.fixture()
def account_rows() -> Callable[[DataStore], List[Mapping]]:
    return _account_rows
