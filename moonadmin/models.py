"""Domain records for the moon mission administration console."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class MoonMission:
    """Represents a historical lunar mission from the ``moon_mission`` table."""

    mission_id: int
    spacecraft: str
    launch_date: Optional[date]


@dataclass
class Session:
    """In-memory state of the interactive console."""

    authenticated: bool = False
    username: Optional[str] = None


__all__ = ["MoonMission", "Session"]
