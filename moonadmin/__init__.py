"""Core utilities for the moon mission administration console."""

from __future__ import annotations

from .accounts import AccountService
from .auth import Authenticator
from .config import ConfigurationError, DatabaseSettings
from .console import AdminConsole
from .database import DataStore, DataStoreError, open_data_store
from .missions import MissionQueryService


def create_console(store: DataStore, **kwargs) -> AdminConsole:
    """Wire the services around ``store`` into an :class:`AdminConsole`."""

    return AdminConsole(
        Authenticator(store),
        MissionQueryService(store),
        AccountService(store),
        **kwargs,
    )


__all__ = [
    "AccountService",
    "AdminConsole",
    "Authenticator",
    "ConfigurationError",
    "DataStore",
    "DataStoreError",
    "DatabaseSettings",
    "MissionQueryService",
    "create_console",
    "open_data_store",
]
