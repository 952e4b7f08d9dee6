"""Local civil date/time to UTC instant and Julian Day (UT).

Parsing is an explicit, ordered strategy list: strict ISO 8601 first, then
every ``DATE_FORMATS`` x ``TIME_FORMATS`` combination in declaration order.
The first combination that parses wins, so an ambiguous ``01/02/1990`` is
read month-first.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import UnparseableDateTime, ValidationError

# strptime's %m, %d, %H and %I accept both padded and single-digit fields,
# which covers the M/D/Y and h:m variants.
DATE_FORMATS: Tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
)

TIME_FORMATS: Tuple[str, ...] = (
    "%H:%M:%S",
    "%H:%M",
    "%I:%M %p",
    "%I:%M:%S %p",
    "%I:%M%p",
    "%I:%M:%S%p",
)

# Legacy or swapped zone names seen in user input.
TZ_ALIASES = {
    "Chicago/America": "America/Chicago",
    "Kolkata/Asia": "Asia/Kolkata",
    "Calcutta/Asia": "Asia/Kolkata",
    "Bombay/Asia": "Asia/Kolkata",
    "Madras/Asia": "Asia/Kolkata",
}


@dataclass(frozen=True)
class BirthMoment:
    local: datetime
    utc: datetime
    jd_ut: float
    tz: str

    @property
    def ut_hour(self) -> float:
        return fractional_hour(self.utc)


def _zone(name: str) -> Optional[ZoneInfo]:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def normalize_timezone(raw: str) -> Tuple[str, Optional[str]]:
    """Return ``(tz, corrected)`` for an IANA zone name.

    ``corrected`` is set when the input had to be repaired (for example a
    swapped ``Kolkata/Asia``). Raises ``ValidationError`` when no valid zone
    can be derived.
    """

    tz = (raw or "").strip()
    if not tz:
        raise ValidationError("Missing timezone.", field="timezone")
    if _zone(tz) is not None:
        return tz, None
    if tz in TZ_ALIASES:
        return TZ_ALIASES[tz], TZ_ALIASES[tz]
    if "/" in tz:
        parts = tz.split("/")
        candidate = f"{parts[1]}/{parts[0]}".replace(" ", "_")
        if _zone(candidate) is not None:
            return candidate, candidate
    raise ValidationError(f"Unknown timezone {raw!r}.", field="timezone")


def iter_formats() -> Iterator[str]:
    for df in DATE_FORMATS:
        for tf in TIME_FORMATS:
            yield f"{df} {tf}"


def _parse_iso(date_str: str, time_str: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(f"{date_str}T{time_str}")
    except ValueError:
        return None


def parse_local(date_str: str, time_str: str, tz: str) -> datetime:
    """Parse a wall-clock date and time and attach the zone ``tz``.

    An ISO string that already carries an offset keeps it and is converted
    into ``tz``.
    """

    d = (date_str or "").strip()
    t = (time_str or "").strip().upper()
    zone = ZoneInfo(tz)

    dt = _parse_iso(d, t)
    if dt is None:
        for fmt in iter_formats():
            try:
                dt = datetime.strptime(f"{d} {t}", fmt)
                break
            except ValueError:
                continue
    if dt is None:
        raise UnparseableDateTime(
            "Unrecognized date/time. Try 1936-05-08 and 07:22:00 or 07:22:00 AM.",
            {"date": date_str, "time": time_str},
        )
    if dt.tzinfo is not None:
        return dt.astimezone(zone)
    return dt.replace(tzinfo=zone)


def fractional_hour(dt: datetime) -> float:
    return (
        dt.hour
        + dt.minute / 60
        + dt.second / 3600
        + dt.microsecond / 3_600_000_000
    )


def julian_day(year: int, month: int, day: int, hour: float = 0.0) -> float:
    """Gregorian calendar date plus UT hour to Julian Day (Meeus, ch. 7)."""

    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + b
        - 1524.5
        + hour / 24.0
    )


def jd_to_datetime(jd_ut: float) -> datetime:
    seconds = (jd_ut - 2440587.5) * 86400.0
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def resolve_birth_moment(date_str: str, time_str: str, tz: str) -> BirthMoment:
    local = parse_local(date_str, time_str, tz)
    utc = local.astimezone(timezone.utc)
    jd = julian_day(utc.year, utc.month, utc.day, fractional_hour(utc))
    return BirthMoment(local=local, utc=utc, jd_ut=jd, tz=tz)
