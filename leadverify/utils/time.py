from __future__ import annotations

from contextlib import suppress
from datetime import UTC, date, datetime
from typing import Any


def now_utc() -> datetime:
    """Return timezone-aware UTC timestamp."""
    return datetime.now(tz=UTC)


def parse_date(value: Any) -> date | None:
    """Parse the date formats county sites print (ISO, US slashes, compact)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        with suppress(ValueError):
            return datetime.fromisoformat(raw).date()
        for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%Y %H:%M:%S", "%m-%d-%Y", "%Y%m%d"):
            with suppress(ValueError):
                return datetime.strptime(raw, fmt).date()
    return None
