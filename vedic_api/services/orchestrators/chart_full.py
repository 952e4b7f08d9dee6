"""Full chart report: D1, D9, nakshatras, dasha, panchanga and aspects."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional

from ...errors import ValidationError
from .. import aspects as aspects_svc
from ..constants import fmt_lst, norm24
from ..dashas_vimshottari import compute_vimshottari
from ..divisional import navamsa_frame
from ..ephem import ENGINE_FLAGS, EphemerisAdapter, ProviderError, get_adapter
from ..panchang_algos import panchanga_at
from ..positions import ChartFrame, compute_rasi, house_code, retrograde_flags
from ..solar import compute_solar_events
from ..timeparse import normalize_timezone, resolve_birth_moment
from ..vedic import nakshatra_table

logger = logging.getLogger(__name__)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat(timespec="milliseconds") if dt is not None else None


def _frame_out(frame: ChartFrame) -> Dict[str, Any]:
    return {
        "ascendant": frame.ascendant,
        "cusps": list(frame.cusps),
        "positions": dict(frame.positions),
    }


def validate_location(lat: Any, lon: Any) -> tuple[float, float]:
    if lat is None or lon is None:
        raise ValidationError("Missing required fields.", field="lat" if lat is None else "lon")
    try:
        lat_f, lon_f = float(lat), float(lon)
    except (TypeError, ValueError):
        raise ValidationError("Invalid latitude/longitude.", field="lat")
    if not math.isfinite(lat_f) or abs(lat_f) > 90:
        raise ValidationError("Invalid latitude/longitude.", field="lat")
    if not math.isfinite(lon_f) or abs(lon_f) > 180:
        raise ValidationError("Invalid latitude/longitude.", field="lon")
    return lat_f, lon_f


def build_chart(
    date: str,
    time: str,
    tz: str,
    lat: Any,
    lon: Any,
    house_system: Optional[str] = "P",
    force_engine: Optional[str] = None,
    adapter: Optional[EphemerisAdapter] = None,
) -> Dict[str, Any]:
    # every input check happens before the first ephemeris call
    for field_name, value in (("date", date), ("time", time), ("timezone", tz)):
        if value is None or not str(value).strip():
            raise ValidationError("Missing required fields.", field=field_name)
    lat_f, lon_f = validate_location(lat, lon)
    hsys = house_code(house_system)
    if hsys is None:
        raise ValidationError(f"Unknown house system {house_system!r}.", field="house_system")
    if force_engine is not None and force_engine.upper() not in ENGINE_FLAGS:
        raise ValidationError("force_engine must be SWIEPH or MOSEPH.", field="force_engine")
    tz_name, tz_corrected = normalize_timezone(str(tz))
    moment = resolve_birth_moment(str(date), str(time), tz_name)

    adapter = adapter or get_adapter()
    rasi = compute_rasi(adapter, moment.jd_ut, lat_f, lon_f, hsys, force_engine)
    d1 = rasi.frame
    d9 = navamsa_frame(d1)

    try:
        gst = adapter.sidereal_time(moment.jd_ut)
    except ProviderError:
        logger.warning("sidereal_time_unavailable", extra={"jd_ut": moment.jd_ut})
        gst = None
    lst_hours = norm24(gst + lon_f / 15.0) if gst is not None else None

    sunrise, sunset = compute_solar_events(adapter, moment.local, lat_f, lon_f, ENGINE_FLAGS[rasi.engine])

    nak_rows = nakshatra_table(d1.ascendant, d1.positions)
    dasha = compute_vimshottari(d1.positions["Moon"], moment.local)
    panchanga = panchanga_at(moment.local, d1.positions["Sun"], d1.positions["Moon"])
    aspects = aspects_svc.merge_aspects(
        aspects_svc.find_aspects(d1.positions),
        aspects_svc.ascendant_aspects(d1.ascendant, d1.positions),
    )

    return {
        "engine": rasi.engine,
        "jd_ut": moment.jd_ut,
        "lst_hours": lst_hours,
        "lst_hms": fmt_lst(lst_hours) if lst_hours is not None else None,
        "timezone": tz_name,
        "timezone_corrected": tz_corrected,
        "house_system": hsys,
        "ayanamsha": {"name": adapter.settings.ayanamsha, "value": rasi.ayanamsa},
        "d1": _frame_out(d1),
        "d9": _frame_out(d9),
        "retrograde": retrograde_flags(rasi.speeds),
        "sunrise": _iso(sunrise),
        "sunset": _iso(sunset),
        "nakshatras": [
            {
                "body": r.body,
                "sign": r.sign,
                "lon": r.lon,
                "position": r.position,
                "nakshatra": r.nakshatra,
                "pada": r.pada,
                "lord": r.lord,
            }
            for r in nak_rows
        ],
        "dasha": [
            {"lord": p.lord, "start": _iso(p.start), "end": _iso(p.end), "years": p.years}
            for p in dasha
        ],
        "panchanga": {
            "weekday": panchanga.weekday,
            "tithi_number": panchanga.tithi_number,
            "tithi_name": panchanga.tithi_name,
            "paksha": panchanga.paksha,
            "nakshatra": panchanga.nakshatra,
            "pada": panchanga.pada,
            "yoga": panchanga.yoga,
            "karana": panchanga.karana,
        },
        "aspects": [{"a": a.a, "b": a.b, "type": a.type, "delta": a.delta} for a in aspects],
    }
