"""Swiss Ephemeris adapter used by the chart pipeline.

The adapter is the only place that knows about provider quirks: bindings
that return a value directly versus ones that complete through a callback,
and results keyed as ``xx``/``longitude`` or ``cusp``/``cusps``/``house``/
``houses``. Everything downstream sees plain floats.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar

import swisseph as swe

from ..config import EphemerisSettings, get_settings
from ..errors import EphemerisFailure, HouseComputationFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Engine version for API responses
try:
    ENGINE_VERSION = f"swisseph-{swe.version}"
except AttributeError:
    ENGINE_VERSION = "swisseph-2.10"  # Fallback if version not available

BODIES: Dict[str, int] = {
    "Sun": swe.SUN,
    "Moon": swe.MOON,
    "Mercury": swe.MERCURY,
    "Venus": swe.VENUS,
    "Mars": swe.MARS,
    "Jupiter": swe.JUPITER,
    "Saturn": swe.SATURN,
    "Uranus": swe.URANUS,
    "Neptune": swe.NEPTUNE,
    "Pluto": swe.PLUTO,
    "Rahu": swe.TRUE_NODE,
}

AYANAMSHA_MAP = {
    "lahiri": swe.SIDM_LAHIRI,
    "krishnamurti": swe.SIDM_KRISHNAMURTI,
    "raman": swe.SIDM_RAMAN,
}

ENGINE_FLAGS = {
    "SWIEPH": swe.FLG_SWIEPH,
    "MOSEPH": swe.FLG_MOSEPH,
}

SIDEREAL_FLAGS = swe.FLG_SPEED | swe.FLG_SIDEREAL


@dataclass(frozen=True)
class LongitudeResult:
    lon: float
    speed: Optional[float] = None
    retflag: Optional[int] = None
    serr: str = ""


class ProviderError(Exception):
    """A single provider call failed or returned an unrecognised shape."""


class EngineAttemptFailed(Exception):
    def __init__(self, body: str, serr: str, partial: Optional[Dict[str, str]] = None) -> None:
        super().__init__(f"{body}: {serr}")
        self.body = body
        self.serr = serr
        self.serr_map = dict(partial or {})
        self.serr_map.setdefault(body, serr)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def call_dual(fn: Callable[..., Any], args: Sequence[Any], probe: Callable[[Any], bool]) -> Any:
    """Call ``fn`` directly; fall back to a trailing completion callback.

    Bindings that return their result are accepted as soon as ``probe``
    recognises it. Otherwise the call is repeated with a callback appended
    and the value passed to that callback is returned.
    """

    if not callable(fn):
        raise ProviderError("Function not available")
    try:
        result = fn(*args)
    except TypeError:
        result = None
    else:
        if result is not None and probe(result):
            return result

    box: List[Any] = []
    try:
        fn(*args, box.append)
    except TypeError as exc:
        if result is not None:
            return result
        raise ProviderError(str(exc)) from exc
    if not box:
        if result is not None:
            return result
        raise ProviderError("no result returned")
    return box[0]


def _field(obj: Any, *names: str) -> Any:
    if isinstance(obj, Mapping):
        for name in names:
            if obj.get(name) is not None:
                return obj[name]
        return None
    for name in names:
        value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _looks_like_calc(r: Any) -> bool:
    if isinstance(r, (tuple, list)):
        return len(r) > 0
    xx = _field(r, "xx")
    return isinstance(xx, (list, tuple)) or _is_number(_field(r, "longitude"))


def normalize_calc(raw: Any) -> LongitudeResult:
    """Reduce any supported ``calc_ut`` response to a ``LongitudeResult``."""

    if isinstance(raw, (tuple, list)):
        # pyswisseph: ((lon, lat, dist, lon_speed, ...), retflag); older builds
        # return the six floats bare.
        if len(raw) == 2 and isinstance(raw[0], (tuple, list)):
            values, retflag = raw
        else:
            values, retflag = raw, None
        if not values or not _is_number(values[0]):
            raise ProviderError("no longitude returned")
        speed = values[3] if len(values) > 3 and _is_number(values[3]) else None
        return LongitudeResult(float(values[0]), speed, retflag if isinstance(retflag, int) else None)

    serr = _field(raw, "serr", "error") or ""
    xx = _field(raw, "xx")
    lon: Any = None
    speed: Any = None
    if isinstance(xx, (tuple, list)) and xx:
        lon = xx[0]
        speed = xx[3] if len(xx) > 3 else None
    else:
        lon = _field(raw, "longitude")
        speed = _field(raw, "longitudeSpeed", "speed")
    if not _is_number(lon):
        raise ProviderError(str(serr) or "no longitude returned")
    retflag = _field(raw, "rflag", "retflag", "flag")
    return LongitudeResult(
        float(lon),
        float(speed) if _is_number(speed) else None,
        retflag if isinstance(retflag, int) else None,
        str(serr),
    )


def _looks_like_houses(r: Any) -> bool:
    try:
        normalize_houses(r)
    except HouseComputationFailed:
        return False
    return True


def normalize_houses(raw: Any) -> Tuple[List[float], float]:
    """Return ``(cusps[0..12], ascendant)`` with ``cusps[0]`` fixed at 0.

    pyswisseph tuples are 0-indexed (12 entries, 36 for Gauquelin sectors).
    Keyed shapes may instead carry 13 entries with a placeholder at index 0.
    """

    cusps: Any = None
    asc: Any = None
    one_indexed = False
    if isinstance(raw, (tuple, list)) and len(raw) == 2:
        cusps, ascmc = raw
        if isinstance(ascmc, (tuple, list)) and ascmc:
            asc = ascmc[0]
    elif raw is not None:
        cusps = _field(raw, "cusp", "cusps", "house", "houses")
        ascmc = _field(raw, "ascmc")
        asc = ascmc[0] if isinstance(ascmc, (tuple, list)) and ascmc else _field(raw, "ascendant", "asc")
        one_indexed = isinstance(cusps, (tuple, list)) and len(cusps) == 13

    if not isinstance(cusps, (tuple, list)) or not _is_number(asc):
        keys = sorted(raw.keys()) if isinstance(raw, Mapping) else type(raw).__name__
        raise HouseComputationFailed("Computation failed (houses).", {"shape": keys})
    if one_indexed:
        values = list(cusps[1:13])
    elif len(cusps) >= 12:
        values = list(cusps[:12])
    else:
        raise HouseComputationFailed("Computation failed (houses).", {"shape": f"{len(cusps)} cusps"})
    if not all(_is_number(c) for c in values):
        raise HouseComputationFailed("Computation failed (houses).", {"shape": "non-numeric cusp"})
    return [0.0] + [float(c) for c in values], float(asc)


def _number_from(raw: Any, *names: str) -> float:
    if _is_number(raw):
        return float(raw)
    if isinstance(raw, (tuple, list)):
        # get_ayanamsa_ex_ut style (retflag, value)
        for item in reversed(raw):
            if _is_number(item):
                return float(item)
    value = _field(raw, *names)
    if _is_number(value):
        return float(value)
    raise ProviderError("no numeric value returned")


class EphemerisAdapter:
    """Uniform access to longitude, house, ayanamsa and sidereal-time calls."""

    def __init__(self, settings: EphemerisSettings, provider: Any = None) -> None:
        self.settings = settings
        self.provider = provider if provider is not None else swe

    def _fn(self, *names: str) -> Optional[Callable[..., Any]]:
        for name in names:
            fn = getattr(self.provider, name, None)
            if callable(fn):
                return fn
        return None

    def engine_order(self, forced: Optional[str] = None) -> List[str]:
        forced = (forced or self.settings.default_engine or "").upper() or None
        if forced == "MOSEPH":
            return ["MOSEPH", "SWIEPH"]
        if forced == "SWIEPH":
            return ["SWIEPH", "MOSEPH"]
        if self.settings.swieph_available:
            return ["SWIEPH", "MOSEPH"]
        return ["MOSEPH"]

    def flags_for(self, engine: str) -> int:
        return ENGINE_FLAGS[engine] | SIDEREAL_FLAGS

    def compute_longitude(self, jd_ut: float, body_id: int, flags: int) -> LongitudeResult:
        fn = self._fn("calc_ut", "swe_calc_ut")
        try:
            raw = call_dual(fn, [jd_ut, body_id, flags], _looks_like_calc)
        except swe.Error as exc:
            raise ProviderError(str(exc)) from exc
        res = normalize_calc(raw)
        wanted_swieph = bool(flags & swe.FLG_SWIEPH)
        if wanted_swieph and res.retflag is not None and res.retflag & swe.FLG_MOSEPH:
            # the library silently downgrades to Moshier when data files are missing
            raise ProviderError(res.serr or "Swiss Ephemeris files not found")
        return res

    def compute_houses(self, jd_ut: float, lat: float, lon: float, hsys: str) -> Tuple[List[float], float]:
        fn = self._fn("houses", "swe_houses")
        code = hsys.encode() if self.provider is swe else hsys
        try:
            raw = call_dual(fn, [jd_ut, lat, lon, code], _looks_like_houses)
        except (swe.Error, ProviderError) as exc:
            raise HouseComputationFailed("Computation failed (houses).", {"serr": str(exc)}) from exc
        return normalize_houses(raw)

    def ayanamsa(self, jd_ut: float) -> float:
        fn = self._fn("get_ayanamsa_ut", "swe_get_ayanamsa_ut")
        raw = call_dual(fn, [jd_ut], lambda r: r is not None)
        return _number_from(raw, "ayanamsa", "ayanamsha", "value")

    def sidereal_time(self, jd_ut: float) -> float:
        """Greenwich sidereal time in hours."""
        fn = self._fn("sidtime", "swe_sidtime")
        raw = call_dual(fn, [jd_ut], lambda r: r is not None)
        return _number_from(raw, "siderealTime", "sidtime")

    def diagnostics(self, jd_ut: Optional[float] = None) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "ephe_path": self.settings.ephe_path,
            "ephe_files": list(self.settings.ephe_files),
            "version": ENGINE_VERSION,
        }
        if jd_ut is not None:
            info["jd_ut"] = jd_ut
        return info

    def run_with_fallback(
        self,
        attempt: Callable[[str, int], T],
        forced: Optional[str] = None,
        jd_ut: Optional[float] = None,
    ) -> Tuple[str, T]:
        """Run ``attempt(engine, flags)`` per engine until one succeeds.

        An attempt either returns its complete result or raises
        ``EngineAttemptFailed``; results from different engines are never
        combined.
        """

        order = self.engine_order(forced)
        failures: List[EngineAttemptFailed] = []
        for engine in order:
            try:
                return engine, attempt(engine, self.flags_for(engine))
            except EngineAttemptFailed as exc:
                logger.warning(
                    "ephemeris_engine_failed",
                    extra={"engine": engine, "body": exc.body, "serr": exc.serr},
                )
                failures.append(exc)

        first = failures[0]
        details = {
            "engine_tried": order[-1],
            "engines": order,
            "body": first.body,
            "serr": first.serr_map.get(first.body, "no detail"),
            **self.diagnostics(jd_ut),
        }
        raise EphemerisFailure(f"Computation failed for {first.body}.", details)


@lru_cache(maxsize=None)
def init_ephemeris(settings: EphemerisSettings) -> EphemerisSettings:
    """One-time native library setup: data path and sidereal mode."""

    if os.path.isdir(settings.ephe_path):
        swe.set_ephe_path(settings.ephe_path)
    swe.set_sid_mode(AYANAMSHA_MAP.get(settings.ayanamsha, swe.SIDM_LAHIRI), 0, 0)
    logger.info(
        "ephemeris_initialised",
        extra={
            "ephe_path": settings.ephe_path,
            "files": len(settings.ephe_files),
            "ayanamsha": settings.ayanamsha,
        },
    )
    return settings


def get_adapter() -> EphemerisAdapter:
    return EphemerisAdapter(init_ephemeris(get_settings()))
