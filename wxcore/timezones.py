"""Timezone resolution and local time formatting helpers."""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^(?:UTC|GMT)?\s*([+-])(\d{1,2})(?::?(\d{2}))?$", re.IGNORECASE)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Resolve an IANA name or an offset token such as ``+05:30``/``UTC-3``.

    Returns ``None`` when the value cannot be resolved.
    """
    if not name:
        return None
    value = name.strip()
    if value.upper() in ("UTC", "GMT", "Z"):
        return timezone.utc
    match = _OFFSET_RE.match(value)
    if match:
        sign, hours, minutes = match.groups()
        offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
        if offset > timedelta(hours=14) or (minutes and int(minutes) >= 60):
            return None
        return timezone(-offset if sign == "-" else offset)
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None


def canonical_timezone(name: Optional[str]) -> Optional[str]:
    """Single spelling for a zone: the IANA key, ``UTC`` or ``+HH:MM``.

    ``+0530``, ``UTC+5:30`` and ``GMT+05:30`` all become ``+05:30``.
    """
    tz = resolve_timezone(name)
    if tz is None:
        return None
    if isinstance(tz, ZoneInfo):
        return tz.key
    offset = tz.utcoffset(None) or timedelta(0)
    if not offset:
        return "UTC"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = int(abs(offset).total_seconds()) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def is_named_zone(tz: tzinfo) -> bool:
    return isinstance(tz, ZoneInfo)


def as_local(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def format_time(value: datetime, tz: tzinfo) -> str:
    return as_local(value, tz).strftime("%H:%M")


def format_date(value: date) -> str:
    return f"{value:%a}, {value:%b} {value.day}"


def utc_offset(tz: tzinfo, day: date) -> str:
    """Offset of ``tz`` at local noon on ``day`` formatted as ``+HH:MM``."""
    raw = datetime.combine(day, time(12), tzinfo=tz).strftime("%z") or "+0000"
    return f"{raw[:3]}:{raw[3:5]}"


__all__ = ["resolve_timezone", "canonical_timezone", "is_named_zone", "as_local", "format_time", "format_date", "utc_offset"]
