"""Staleness decision for dated release tags.

A release dated the day after the installed build is usually that same build
(publishing lags the build by up to a day), so the installed date gets one
day of grace before comparing.
"""

from __future__ import annotations

import re
from datetime import date, timedelta

from core.errors import ParseError

DATE_FORMAT = "%Y-%m-%d"
GRACE_PERIOD = timedelta(days=1)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_date(value: str) -> date:
    """Parse a strict `YYYY-MM-DD` string.

    `date.fromisoformat` also accepts forms like `20220817` on recent Pythons,
    so the shape is checked first.
    """

    if not _DATE_RE.fullmatch(value):
        raise ParseError(f"invalid date '{value}'", details=f"expected {DATE_FORMAT}")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ParseError(f"invalid date '{value}'", details=str(exc)) from exc


def is_newer(current_date: str, candidate_tag: str) -> bool:
    """Whether `candidate_tag` is newer than the installed `current_date`.

    True iff candidate > current + 1 day; the day right after the installed
    build is "not newer". Written as `candidate - 1 day > current` so the
    grace day never overflows past `date.max`.

    Raises:
        ParseError: either value is not a `YYYY-MM-DD` date.
    """

    current = parse_date(current_date)
    candidate = parse_date(candidate_tag)
    if candidate == date.min:
        return False
    return candidate - GRACE_PERIOD > current
