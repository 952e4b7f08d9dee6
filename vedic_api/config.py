"""Process-wide configuration, read from the environment once."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

EPHE_FILE_RE = re.compile(r"\.se\d$|\.sef?$")

AYANAMSHA_NAMES = ("lahiri", "krishnamurti", "raman")
ENGINE_NAMES = ("SWIEPH", "MOSEPH")
DEFAULT_USER_AGENT = "vedic-chart-api/0.1 (contact: ops@localhost)"


@dataclass(frozen=True)
class EphemerisSettings:
    ephe_path: str
    ayanamsha: str = "lahiri"
    default_engine: Optional[str] = None
    ephe_files: Tuple[str, ...] = field(default_factory=tuple)
    geocode_timeout: float = 10.0
    geocode_user_agent: str = DEFAULT_USER_AGENT

    @property
    def swieph_available(self) -> bool:
        """True when the data directory holds at least one Swiss Ephemeris file."""
        return any(EPHE_FILE_RE.search(name) for name in self.ephe_files)


def list_ephe_files(path: str) -> Tuple[str, ...]:
    try:
        return tuple(sorted(os.listdir(path)))
    except OSError:
        return ()


def _engine_from_env(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    value = raw.strip().upper()
    return value if value in ENGINE_NAMES else None


def load_settings() -> EphemerisSettings:
    ephe_path = os.getenv("EPHEMERIS_DIR") or str(Path.cwd() / "ephe")
    ayanamsha = os.getenv("EPHEMERIS_AYANAMSHA", "lahiri").strip().lower()
    if ayanamsha not in AYANAMSHA_NAMES:
        ayanamsha = "lahiri"
    return EphemerisSettings(
        ephe_path=ephe_path,
        ayanamsha=ayanamsha,
        default_engine=_engine_from_env(os.getenv("EPHEMERIS_BACKEND")),
        ephe_files=list_ephe_files(ephe_path),
        geocode_timeout=float(os.getenv("GEOCODE_TIMEOUT_SECONDS", "10")),
        geocode_user_agent=os.getenv("GEOCODE_USER_AGENT") or DEFAULT_USER_AGENT,
    )


@lru_cache(maxsize=1)
def get_settings() -> EphemerisSettings:
    return load_settings()
