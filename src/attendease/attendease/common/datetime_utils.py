from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.constants import WEEKDAYS

_CALENDAR_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_calendar_date(value: str) -> date:
    """Parse a timetable date (YYYY-MM-DD or YYYY/MM/DD).

    Raises ValueError when no accepted format matches.
    """
    text = (value or "").strip()
    for fmt in _CALENDAR_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized date: {value!r}")


def weekday_name(value: date) -> str:
    # date.weekday() is Monday=0; shift to Sunday=0.
    return WEEKDAYS[(value.weekday() + 1) % 7]


def normalize_weekday(value: str) -> Optional[str]:
    text = (value or "").strip().casefold()
    for name in WEEKDAYS:
        if name.casefold() == text:
            return name
    return None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
