"""Read-only queries over the ``moon_mission`` table."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional

from sqlalchemy import Date, bindparam, text

from .database import DataStore, DataStoreError
from .models import MoonMission
from .parsing import parse_int

_LIST_QUERY = "SELECT spacecraft FROM moon_mission ORDER BY spacecraft"

# launch_date is read untyped: the column may hold a DATE or a timestamp.
_MISSION_BY_ID_QUERY = (
    "SELECT mission_id, spacecraft, launch_date FROM moon_mission "
    "WHERE mission_id = :mission_id"
)

_COUNT_BY_YEAR_QUERY = text(
    "SELECT COUNT(*) FROM moon_mission "
    "WHERE launch_date >= :year_start AND launch_date < :next_year_start"
).bindparams(
    bindparam("year_start", type_=Date),
    bindparam("next_year_start", type_=Date),
)

MIN_YEAR = 1


def to_launch_date(value: object) -> Optional[date]:
    """Normalise a stored launch date or timestamp to a :class:`date`.

    Drivers hand back ``date``/``datetime`` objects; SQLite returns the text
    as stored, so ``'1969-07-16'`` and ``'1969-07-16 13:32:00'`` are both
    accepted. Raises ``ValueError`` for anything else.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Unsupported launch_date value {value!r}")


class LookupStatus(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    INVALID_ID = "invalid_id"


@dataclass(frozen=True)
class MissionLookup:
    status: LookupStatus
    mission_id: Optional[int] = None
    mission: Optional[MoonMission] = None


class CountStatus(enum.Enum):
    COUNTED = "counted"
    INVALID_YEAR = "invalid_year"
    OUT_OF_RANGE = "out_of_range"


@dataclass(frozen=True)
class YearCount:
    status: CountStatus
    year: Optional[int] = None
    count: Optional[int] = None
    max_year: Optional[int] = None


class MissionQueryService:
    """Queries over historical moon missions.

    Malformed identifiers and years are reported through the returned
    outcome without touching the store. Store failures propagate as
    :class:`~moonadmin.database.DataStoreError`.
    """

    def __init__(self, store: DataStore, *, today: Callable[[], date] = date.today) -> None:
        self._store = store
        self._today = today

    def list_missions(self) -> List[str]:
        """Return every spacecraft name in ascending order."""

        rows = self._store.fetch_all(_LIST_QUERY, error="Failed to list moon missions")
        return [row["spacecraft"] for row in rows]

    def find_mission(self, raw_id: str) -> MissionLookup:
        mission_id = parse_int(raw_id)
        if mission_id is None:
            return MissionLookup(LookupStatus.INVALID_ID)

        row = self._store.fetch_one(
            _MISSION_BY_ID_QUERY,
            {"mission_id": mission_id},
            error="Failed to fetch moon mission",
        )
        if row is None:
            return MissionLookup(LookupStatus.NOT_FOUND, mission_id=mission_id)

        try:
            launch_date = to_launch_date(row["launch_date"])
        except ValueError as exc:
            raise DataStoreError(f"Unreadable launch_date for mission {mission_id}") from exc

        mission = MoonMission(
            mission_id=row["mission_id"],
            spacecraft=row["spacecraft"],
            launch_date=launch_date,
        )
        return MissionLookup(LookupStatus.FOUND, mission_id=mission_id, mission=mission)

    def count_missions_by_year(self, raw_year: str) -> YearCount:
        year = parse_int(raw_year)
        if year is None:
            return YearCount(CountStatus.INVALID_YEAR)

        max_year = self._today().year
        if year < MIN_YEAR or year > max_year:
            return YearCount(CountStatus.OUT_OF_RANGE, year=year, max_year=max_year)

        count = self._store.scalar(
            _COUNT_BY_YEAR_QUERY,
            {"year_start": date(year, 1, 1), "next_year_start": date(year + 1, 1, 1)},
            error="Failed to count moon missions",
        )
        return YearCount(CountStatus.COUNTED, year=year, count=int(count or 0), max_year=max_year)


__all__ = [
    "CountStatus",
    "LookupStatus",
    "MissionLookup",
    "MissionQueryService",
    "YearCount",
    "to_launch_date",
]
