from __future__ import annotations

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_CENTS = Decimal("0.01")


def get_zone(timezone: str) -> ZoneInfo:
    name = (timezone or "").strip()
    if not name:
        raise ValueError("timezone is required")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {timezone!r}") from e


def parse_instant(value: str | dt.datetime) -> dt.datetime:
    """
    Parse an ISO-8601 timestamp (GitHub style, trailing "Z" allowed) into a
    timezone-aware datetime. Naive values are taken as UTC.
    """
    if isinstance(value, dt.datetime):
        d = value
    else:
        s = str(value or "").strip()
        if not s:
            raise ValueError("empty timestamp")
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            d = dt.datetime.fromisoformat(s)
        except ValueError as e:
            raise ValueError(f"Invalid timestamp: {value!r}") from e
    if d.tzinfo is None:
        d = d.replace(tzinfo=dt.timezone.utc)
    return d


def to_iso_instant(value: str | dt.datetime) -> str:
    if isinstance(value, str):
        return value
    d = parse_instant(value).astimezone(dt.timezone.utc)
    return d.strftime("%Y-%m-%dT%H:%M:%S.") + f"{d.microsecond // 1000:03d}Z"


def to_timezone(instant: dt.datetime, timezone: str) -> dt.datetime:
    return parse_instant(instant).astimezone(get_zone(timezone))


def to_iso_date(instant: dt.datetime, timezone: str) -> str:
    """Calendar day (YYYY-MM-DD) that `instant` falls on in `timezone`."""
    return to_timezone(instant, timezone).date().isoformat()


def diff_in_minutes(a: dt.datetime, b: dt.datetime) -> float:
    return abs((a - b).total_seconds()) / 60


def utc_day_name(instant: dt.datetime) -> str:
    # date.weekday() is Monday=0; DAY_NAMES starts on Sunday.
    return DAY_NAMES[(parse_instant(instant).astimezone(dt.timezone.utc).weekday() + 1) % 7]


def round2(value: float) -> float:
    """Round half away from zero to 2 decimal places."""
    return float(Decimal(repr(float(value))).quantize(_CENTS, rounding=ROUND_HALF_UP))
