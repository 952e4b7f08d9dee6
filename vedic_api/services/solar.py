"""Sunrise and sunset for the birth date.

This is a best-effort lookup: any failure yields ``None`` for that event and
never fails the chart.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from .ephem import EphemerisAdapter
from .timeparse import jd_to_datetime, julian_day, fractional_hour

logger = logging.getLogger(__name__)


def _to_jd(moment: datetime) -> float:
    utc = moment.astimezone(timezone.utc)
    return julian_day(utc.year, utc.month, utc.day, fractional_hour(utc))


def _rise_or_set(
    adapter: EphemerisAdapter,
    start_of_day: datetime,
    rising: bool,
    lat: float,
    lon: float,
    flags: int,
    elevation: float = 0.0,
) -> Optional[datetime]:
    swe: Any = adapter.provider
    rise_trans = getattr(swe, "rise_trans", None)
    if rise_trans is None:
        return None

    geopos = (lon, lat, elevation)
    try:
        rsmi = swe.CALC_RISE if rising else swe.CALC_SET
        result, times = rise_trans(
            _to_jd(start_of_day), swe.SUN, rsmi | swe.BIT_DISC_CENTER, geopos, 0.0, 0.0, flags
        )
    except Exception:
        logger.warning("solar_event_failed", extra={"rising": rising, "lat": lat, "lon": lon}, exc_info=True)
        return None
    if result < 0 or not times:
        return None
    event_utc = jd_to_datetime(times[0])
    return event_utc.astimezone(start_of_day.tzinfo or timezone.utc)


def compute_solar_events(
    adapter: EphemerisAdapter, local_moment: datetime, lat: float, lon: float, flags: int
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Return sunrise and sunset for the local calendar day of ``local_moment``."""

    start_of_day = local_moment.replace(hour=0, minute=0, second=0, microsecond=0)
    sunrise = _rise_or_set(adapter, start_of_day, True, lat, lon, flags)
    sunset = _rise_or_set(adapter, start_of_day, False, lat, lon, flags)
    return sunrise, sunset
