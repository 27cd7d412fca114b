# src/tasktree/tasks/timestamp.py

"""
Creation stamps in the DD/MM/YYYY format shared with the desktop tool.

Parsing is strict: no silent coercion of "1/2/2024" or "32/01/2024".
"""

from __future__ import annotations

import re
from datetime import date, datetime

TIMESTAMP_FORMAT = "%d/%m/%Y"

_TIMESTAMP_RE = re.compile(r"^\d{2}/\d{2}/\d{4}$")


class InvalidTimestampError(ValueError):
    pass


def now() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def parse(s: str) -> date:
    if not isinstance(s, str) or not _TIMESTAMP_RE.match(s):
        raise InvalidTimestampError(f"Timestamp {s!r} does not match DD/MM/YYYY")
    try:
        return datetime.strptime(s, TIMESTAMP_FORMAT).date()
    except ValueError as e:
        raise InvalidTimestampError(f"Timestamp {s!r} is not a calendar date") from e


def validate(s: str) -> bool:
    try:
        parsed = parse(s)
    except InvalidTimestampError:
        return False
    return parsed.strftime(TIMESTAMP_FORMAT) == s


def compare(a: str, b: str) -> int:
    da, db = parse(a), parse(b)
    if da < db:
        return -1
    if da > db:
        return 1
    return 0
