# tests/test_timestamp.py

from __future__ import annotations

import re

import pytest

from tasktree.tasks import timestamp
from tasktree.tasks.timestamp import InvalidTimestampError


def test_now_uses_day_month_year() -> None:
    assert re.fullmatch(r"\d{2}/\d{2}/\d{4}", timestamp.now())
    assert timestamp.validate(timestamp.now())


@pytest.mark.parametrize("raw", ["1/02/2024", "2024-01-31", "31/01/24", " 31/01/2024", ""])
def test_parse_rejects_wrong_shape(raw: str) -> None:
    with pytest.raises(InvalidTimestampError):
        timestamp.parse(raw)


def test_parse_and_validate_calendar() -> None:
    d = timestamp.parse("29/02/2024")
    assert (d.day, d.month, d.year) == (29, 2, 2024)

    assert timestamp.validate("31/12/2023")
    assert not timestamp.validate("32/01/2024")
    assert not timestamp.validate("29/02/2023")
    with pytest.raises(InvalidTimestampError):
        timestamp.parse("32/01/2024")


def test_compare_by_calendar_not_text() -> None:
    # Text order would put 02/01 before 31/12.
    assert timestamp.compare("02/01/2024", "31/12/2023") == 1
    assert timestamp.compare("31/12/2023", "02/01/2024") == -1
    assert timestamp.compare("05/05/2025", "05/05/2025") == 0
