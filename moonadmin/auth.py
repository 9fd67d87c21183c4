"""Credential checks against the ``account`` table."""
from __future__ import annotations

import logging

from .database import DataStore

logger = logging.getLogger("moonadmin.auth")

_LOGIN_QUERY = "SELECT COUNT(*) FROM account WHERE name = :name AND password = :password"


class Authenticator:
    """Validate username/password pairs.

    Passwords are compared as stored plain text. A store failure raises
    :class:`~moonadmin.database.DataStoreError` rather than returning ``False``.
    """

    def __init__(self, store: DataStore) -> None:
        self._store = store

    def validate_login(self, username: str, password: str) -> bool:
        count = self._store.scalar(
            _LOGIN_QUERY,
            {"name": username, "password": password},
            error="Login query failed",
        )
        valid = count == 1
        if not valid:
            logger.info("Rejected login for %r (%s matching account(s))", username, count)
        return valid


__all__ = ["Authenticator"]
