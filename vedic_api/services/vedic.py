from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .constants import TABLE_ORDER, fmt_sign_deg, norm360, sign_name_from_lon

NAKSHATRAS = [
  "Ashwini","Bharani","Krittika","Rohini","Mrigashira","Ardra","Punarvasu","Pushya","Ashlesha",
  "Magha","Purva Phalguni","Uttara Phalguni","Hasta","Chitra","Swati","Vishakha","Anuradha",
  "Jyeshtha","Mula","Purva Ashadha","Uttara Ashadha","Shravana","Dhanishta","Shatabhisha",
  "Purva Bhadrapada","Uttara Bhadrapada","Revati"
]

# Vimshottari lords, repeated three times around the 27 nakshatras
DASHA_ORDER = ["Ketu","Venus","Sun","Moon","Mars","Rahu","Jupiter","Saturn","Mercury"]

NAK_SIZE = 360.0 / 27.0  # 13°20′
PADA_SIZE = NAK_SIZE / 4.0  # 3°20′


@dataclass(frozen=True)
class Nakshatra:
    index: int
    name: str
    pada: int
    lord: str
    within: float  # degrees traversed inside the nakshatra


@dataclass(frozen=True)
class NakshatraEntry:
    body: str
    sign: str
    lon: float
    position: str
    nakshatra: str
    pada: int
    lord: str


def nakshatra_of(lon: float) -> Nakshatra:
    L = norm360(lon)
    idx = min(int(L // NAK_SIZE), 26)
    within = L - idx * NAK_SIZE
    pada = min(int(within // PADA_SIZE), 3) + 1
    return Nakshatra(index=idx, name=NAKSHATRAS[idx], pada=pada, lord=DASHA_ORDER[idx % 9], within=within)


def nakshatra_table(ascendant: float, positions: Dict[str, float]) -> List[NakshatraEntry]:
    """One row per reference point: Ascendant then the twelve chart bodies."""
    rows: List[NakshatraEntry] = []
    for body in TABLE_ORDER:
        lon = norm360(ascendant if body == "Ascendant" else positions[body])
        nk = nakshatra_of(lon)
        rows.append(NakshatraEntry(
            body=body,
            sign=sign_name_from_lon(lon),
            lon=lon,
            position=fmt_sign_deg(lon),
            nakshatra=nk.name,
            pada=nk.pada,
            lord=nk.lord,
        ))
    return rows
