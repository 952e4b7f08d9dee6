"""Place-name lookup against OpenStreetMap Nominatim with a maps.co fallback."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import EphemerisSettings, get_settings
from ..errors import GeocodeFailure, GeocodeTimeout

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
FALLBACK_URL = "https://geocode.maps.co/search"
MAX_RESULTS = 5


def _to_hit(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        lat = float(row["lat"])
        lon = float(row["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    label = row.get("display_name") or row.get("name") or f"{lat}, {lon}"
    return {
        "label": label,
        "lat": lat,
        "lon": lon,
        "category": row.get("class") or row.get("category"),
        "type": row.get("type"),
    }


def _hits(raw: Any) -> List[Dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    hits = (_to_hit(r) for r in raw[:MAX_RESULTS] if isinstance(r, dict))
    return [h for h in hits if h is not None]


def search_place(place: str, settings: Optional[EphemerisSettings] = None, session: Any = None) -> List[Dict[str, Any]]:
    """Return up to five candidates for ``place``; an empty list means no match."""

    settings = settings or get_settings()
    http = session or requests
    headers = {
        "User-Agent": settings.geocode_user_agent,
        "Accept": "application/json",
        "Accept-Language": "en",
    }
    params = {"format": "jsonv2", "q": place, "limit": str(MAX_RESULTS), "addressdetails": "1"}

    try:
        r = http.get(NOMINATIM_URL, params=params, headers=headers, timeout=settings.geocode_timeout)
        r.raise_for_status()
        results = _hits(r.json())
        if results:
            return results

        fb = http.get(
            FALLBACK_URL,
            params={"q": place, "format": "json"},
            headers={"User-Agent": settings.geocode_user_agent, "Accept": "application/json"},
            timeout=settings.geocode_timeout,
        )
        if fb.status_code != 200:
            logger.info("geocode_fallback_status", extra={"status": fb.status_code})
            return []
        return _hits(fb.json())
    except requests.Timeout as exc:
        raise GeocodeTimeout("Geocode timeout", {"place": place}) from exc
    except (requests.RequestException, ValueError) as exc:
        logger.warning("geocode_failed", extra={"place": place}, exc_info=True)
        raise GeocodeFailure(str(exc) or "Geocode failed", {"place": place}) from exc
