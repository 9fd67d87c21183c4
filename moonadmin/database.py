"""SQLAlchemy-backed gateway to the mission and account tables."""
from __future__ import annotations

import logging
from contextlib import contextmanager, suppress
from typing import Any, Iterator, List, Mapping, Optional, Union

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Connection, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.sql.base import Executable

from .config import ConfigurationError, DatabaseSettings

logger = logging.getLogger("moonadmin.database")

Statement = Union[str, Executable]
Params = Optional[Mapping[str, Any]]

_JDBC_PREFIX = "jdbc:"


class DataStoreError(RuntimeError):
    """Raised when the relational store rejects or fails a statement."""


def build_database_url(settings: DatabaseSettings) -> URL:
    """Turn the configured connection string and credentials into a SQLAlchemy URL."""

    raw = settings.url
    if raw.lower().startswith(_JDBC_PREFIX):
        raw = raw[len(_JDBC_PREFIX):]

    try:
        url = make_url(raw)
    except ArgumentError as exc:
        raise ConfigurationError(f"Invalid connection string '{settings.url}': {exc}") from exc

    # SQLite URLs reject credentials outright.
    if url.get_backend_name() == "sqlite":
        return url
    return url.set(username=settings.username, password=settings.password)


def _prepare(statement: Statement) -> Executable:
    if isinstance(statement, str):
        return text(statement)
    return statement


class DataStore:
    """Thin wrapper around a single open connection.

    Every statement is committed on its own; a failure rolls the connection
    back and surfaces as :class:`DataStoreError`.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection

    @property
    def connection(self) -> Connection:
        return self._connection

    def scalar(self, statement: Statement, params: Params = None, *, error: str = "Query failed") -> Any:
        try:
            value = self._connection.execute(_prepare(statement), dict(params or {})).scalar()
            self._connection.commit()
        except (SQLAlchemyError, ValueError) as exc:
            self._rollback()
            raise DataStoreError(error) from exc
        return value

    def fetch_one(
        self, statement: Statement, params: Params = None, *, error: str = "Query failed"
    ) -> Optional[Mapping[str, Any]]:
        try:
            row = self._connection.execute(_prepare(statement), dict(params or {})).mappings().first()
            self._connection.commit()
        except (SQLAlchemyError, ValueError) as exc:
            self._rollback()
            raise DataStoreError(error) from exc
        return row

    def fetch_all(
        self, statement: Statement, params: Params = None, *, error: str = "Query failed"
    ) -> List[Mapping[str, Any]]:
        try:
            rows = self._connection.execute(_prepare(statement), dict(params or {})).mappings().all()
            self._connection.commit()
        except (SQLAlchemyError, ValueError) as exc:
            self._rollback()
            raise DataStoreError(error) from exc
        return list(rows)

    def execute(self, statement: Statement, params: Params = None, *, error: str = "Statement failed") -> int:
        """Run a mutating statement and return the number of affected rows."""

        try:
            result = self._connection.execute(_prepare(statement), dict(params or {}))
            affected = result.rowcount
            self._connection.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise DataStoreError(error) from exc
        return affected if affected is not None and affected > 0 else 0

    def _rollback(self) -> None:
        with suppress(SQLAlchemyError):
            self._connection.rollback()


@contextmanager
def open_data_store(settings: DatabaseSettings) -> Iterator[DataStore]:
    """Open the single connection used for the session and always release it."""

    url = build_database_url(settings)
    logger.info("Connecting to %s", url.render_as_string(hide_password=True))

    try:
        engine = create_engine(url)
    except (ArgumentError, SQLAlchemyError, ImportError) as exc:
        raise DataStoreError(f"Unable to configure database engine: {exc}") from exc

    try:
        try:
            connection = engine.connect()
        except SQLAlchemyError as exc:
            raise DataStoreError(f"Unable to connect to database: {exc}") from exc

        try:
            yield DataStore(connection)
        finally:
            connection.close()
            logger.info("Database connection closed")
    finally:
        engine.dispose()


__all__ = ["DataStore", "DataStoreError", "build_database_url", "open_data_store"]
