"""Account creation and maintenance for the ``account`` table."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .database import DataStore
from .parsing import parse_int

logger = logging.getLogger("moonadmin.accounts")

NAME_FRAGMENT_LENGTH = 3

_INSERT_ACCOUNT = (
    "INSERT INTO account (name, password, first_name, last_name, ssn) "
    "VALUES (:name, :password, :first_name, :last_name, :ssn)"
)
_UPDATE_PASSWORD = "UPDATE account SET password = :password WHERE user_id = :user_id"
_DELETE_ACCOUNT = "DELETE FROM account WHERE user_id = :user_id"


class MutationOutcome(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    INVALID_ID = "invalid_id"


@dataclass(frozen=True)
class AccountCreation:
    name: str
    created: bool


def derive_login_name(first_name: str, last_name: str) -> str:
    """Build a login name from the first three characters of each name.

    Shorter names are used whole and nothing is validated, so blank input
    produces a blank name.
    """

    return first_name[:NAME_FRAGMENT_LENGTH] + last_name[:NAME_FRAGMENT_LENGTH]


class AccountService:
    """Create, update, and delete accounts.

    A statement that affects no rows is reported as a failed outcome; store
    errors propagate as :class:`~moonadmin.database.DataStoreError`.
    """

    def __init__(self, store: DataStore) -> None:
        self._store = store

    def create_account(self, first_name: str, last_name: str, ssn: str, password: str) -> AccountCreation:
        name = derive_login_name(first_name, last_name)
        affected = self._store.execute(
            _INSERT_ACCOUNT,
            {
                "name": name,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
                "ssn": ssn,
            },
            error="Failed to create account",
        )
        created = affected > 0
        if created:
            logger.info("Created account %r", name)
        return AccountCreation(name=name, created=created)

    def update_password(self, raw_user_id: str, new_password: str) -> MutationOutcome:
        user_id = parse_int(raw_user_id)
        if user_id is None:
            return MutationOutcome.INVALID_ID

        affected = self._store.execute(
            _UPDATE_PASSWORD,
            {"password": new_password, "user_id": user_id},
            error="Failed to update account password",
        )
        return self._outcome(affected, "Updated password for account %s", user_id)

    def delete_account(self, raw_user_id: str) -> MutationOutcome:
        user_id = parse_int(raw_user_id)
        if user_id is None:
            return MutationOutcome.INVALID_ID

        affected = self._store.execute(
            _DELETE_ACCOUNT,
            {"user_id": user_id},
            error="Failed to delete account",
        )
        return self._outcome(affected, "Deleted account %s", user_id)

    @staticmethod
    def _outcome(affected: int, message: str, user_id: Optional[int]) -> MutationOutcome:
        if affected > 0:
            logger.info(message, user_id)
            return MutationOutcome.SUCCESS
        return MutationOutcome.FAILED


__all__ = ["AccountCreation", "AccountService", "MutationOutcome", "derive_login_name"]
