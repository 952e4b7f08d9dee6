from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import EphemerisFailure, HouseComputationFailed
from .constants import QUERIED_BODIES, norm360
from .ephem import BODIES, EngineAttemptFailed, EphemerisAdapter, ProviderError

HOUSE_CODE_MAP = {
    "placidus": "P",
    "koch": "K",
    "whole_sign": "W",
    "whole-sign": "W",
    "equal": "E",
    "regiomontanus": "R",
    "campanus": "C",
    "porphyry": "O",
    "alcabitius": "B",
    "morinus": "M",
}

# Single-letter codes understood by swe.houses(), less Gauquelin (G) whose
# 36 sectors do not map onto twelve houses
HOUSE_CODES = set("ABCDEFHIKLMNOPQRSTUVWXY")


def house_code(system: Optional[str]) -> Optional[str]:
    """Map a house-system name or letter to its one-letter code, or None."""

    raw = (system or "P").strip()
    if not raw:
        return "P"
    if raw.lower() in HOUSE_CODE_MAP:
        return HOUSE_CODE_MAP[raw.lower()]
    code = raw[0].upper()
    return code if code in HOUSE_CODES else None


@dataclass(frozen=True)
class ChartFrame:
    ascendant: float
    cusps: List[float]
    positions: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class RasiChart:
    engine: str
    jd_ut: float
    ayanamsa: float
    frame: ChartFrame
    speeds: Dict[str, Optional[float]] = field(default_factory=dict)


def _planets_for_engine(adapter: EphemerisAdapter, jd_ut: float, flags: int):
    positions: Dict[str, float] = {}
    speeds: Dict[str, Optional[float]] = {}
    serr_map: Dict[str, str] = {}
    for name in QUERIED_BODIES:
        try:
            res = adapter.compute_longitude(jd_ut, BODIES[name], flags)
        except ProviderError as exc:
            raise EngineAttemptFailed(name, str(exc) or "no longitude returned", serr_map)
        if not math.isfinite(res.lon):
            raise EngineAttemptFailed(name, res.serr or "no longitude returned", serr_map)
        if res.serr:
            serr_map[name] = res.serr
        positions[name] = norm360(res.lon)
        speeds[name] = res.speed
    positions["Ketu"] = norm360(positions["Rahu"] + 180.0)
    speeds["Ketu"] = speeds["Rahu"]
    return positions, speeds


def sidereal_houses(adapter: EphemerisAdapter, jd_ut: float, lat: float, lon: float, hsys: str, ayanamsa: float):
    cusps_trop, asc_trop = adapter.compute_houses(jd_ut, lat, lon, hsys)
    ascendant = norm360(asc_trop - ayanamsa)
    cusps = [0.0 if i == 0 else norm360(c - ayanamsa) for i, c in enumerate(cusps_trop)]
    return ascendant, cusps


def compute_rasi(
    adapter: EphemerisAdapter,
    jd_ut: float,
    lat: float,
    lon: float,
    hsys: str = "P",
    force_engine: Optional[str] = None,
) -> RasiChart:
    """Sidereal D1 chart: planets, ascendant and house cusps."""

    engine, (positions, speeds) = adapter.run_with_fallback(
        lambda _engine, flags: _planets_for_engine(adapter, jd_ut, flags),
        forced=force_engine,
        jd_ut=jd_ut,
    )

    try:
        ayanamsa = adapter.ayanamsa(jd_ut)
    except ProviderError as exc:
        raise EphemerisFailure(
            "Computation failed (ayanamsa).", {"serr": str(exc), "engine": engine, **adapter.diagnostics(jd_ut)}
        ) from exc
    try:
        ascendant, cusps = sidereal_houses(adapter, jd_ut, lat, lon, hsys, ayanamsa)
    except HouseComputationFailed as exc:
        exc.details.update(adapter.diagnostics(jd_ut))
        raise

    frame = ChartFrame(ascendant=ascendant, cusps=cusps, positions=positions)
    return RasiChart(engine=engine, jd_ut=jd_ut, ayanamsa=ayanamsa, frame=frame, speeds=speeds)


def retrograde_flags(speeds: Dict[str, Optional[float]]) -> Dict[str, bool]:
    """Bodies whose longitude speed is known, mapped to ``speed < 0``."""
    return {name: speed < 0 for name, speed in speeds.items() if speed is not None}
