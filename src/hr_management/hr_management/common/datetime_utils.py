from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

_DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y")
_TIME_SUFFIXES = ("", " %H:%M", " %H:%M:%S")
_ISO_FORMATS = ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M")
_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def now_utc() -> datetime:
    """Current UTC time as a naive datetime.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_flexible_date(value: Any) -> Optional[datetime]:
    """Parse dates as they show up in spreadsheets and forms.

    Accepts ``datetime``/``date`` objects as-is, and strings in day-first,
    ISO, month-first and dashed day-first layouts, each optionally followed by
    ``HH:MM`` or ``HH:MM:SS``. Returns ``None`` when nothing matches.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    text = str(value).strip()
    if not text:
        return None

    for fmt in _DATE_FORMATS:
        for suffix in _TIME_SUFFIXES:
            try:
                return datetime.strptime(text, fmt + suffix)
            except ValueError:
                continue

    for fmt in _ISO_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def as_date(value: Any) -> Optional[date]:
    parsed = parse_flexible_date(value)
    return parsed.date() if parsed else None


def parse_time_of_day(value: Any) -> Optional[time]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value

    text = str(value).strip()
    if not text:
        return None
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def parse_duration(value: Any) -> Optional[timedelta]:
    """Parse ``HH:MM[:SS]`` (optionally signed) or a number of minutes."""

    if value is None:
        return None
    if isinstance(value, timedelta):
        return value

    text = str(value).strip()
    if not text:
        return None

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if ":" in text:
        parts = text.split(":")
        if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
            return None
        hours, minutes = int(parts[0]), int(parts[1])
        seconds = int(parts[2]) if len(parts) == 3 else 0
        try:
            return sign * timedelta(hours=hours, minutes=minutes, seconds=seconds)
        except OverflowError:
            return None

    try:
        minutes = float(text)
        if not math.isfinite(minutes):
            return None
        return sign * timedelta(minutes=minutes)
    except (ValueError, OverflowError):
        return None


def format_duration(value: Optional[timedelta]) -> str:
    if value is None:
        return ""
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    return f"{sign}{total // 3600:02d}:{(total % 3600) // 60:02d}:{total % 60:02d}"
