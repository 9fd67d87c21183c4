"""Parsing helpers for numeric console input."""
from __future__ import annotations

import re
from typing import Optional

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


def parse_int(raw: Optional[str]) -> Optional[int]:
    """Parse a signed 32-bit integer, returning ``None`` for anything else.

    Surrounding whitespace is ignored; underscores, decimals and embedded
    spaces are rejected.
    """

    if raw is None:
        return None
    candidate = raw.strip()
    if not _INTEGER_PATTERN.fullmatch(candidate):
        return None
    value = int(candidate)
    if value < INT_MIN or value > INT_MAX:
        return None
    return value


__all__ = ["INT_MAX", "INT_MIN", "parse_int"]
