"""Navamsa (D9) divisional chart."""

from __future__ import annotations

from typing import Dict

from .constants import norm360, sign_index_from_lon
from .positions import ChartFrame

NAVAMSA_SEGMENT = 30.0 / 9.0  # 3°20′


def navamsa_start_sign(sign: int) -> int:
    """First navamsa sign for a rasi, by modality.

    Movable signs start from themselves, fixed signs from the ninth sign,
    dual signs from the fifth.
    """

    modality = sign % 3
    if modality == 1:
        return (sign + 8) % 12
    if modality == 2:
        return (sign + 4) % 12
    return sign


def navamsa(lon: float) -> float:
    L = norm360(lon)
    s = sign_index_from_lon(L)
    within = L - s * 30.0
    # within can round to 30.0 - epsilon; keep n inside 0..8
    n = min(int(within // NAVAMSA_SEGMENT), 8)
    d9_sign = (navamsa_start_sign(s) + n) % 12
    d9_within = (within - n * NAVAMSA_SEGMENT) * 9.0
    return norm360(d9_sign * 30.0 + d9_within)


def whole_sign_cusps(asc: float) -> list[float]:
    start = sign_index_from_lon(asc) * 30.0
    return [0.0] + [(start + i * 30.0) % 360.0 for i in range(12)]


def navamsa_frame(d1: ChartFrame) -> ChartFrame:
    """D9 frame derived from D1.

    D9 cusps are a whole-sign layout anchored at the D9 ascendant's sign;
    they are not the navamsa of each D1 cusp.
    """

    positions: Dict[str, float] = {name: navamsa(lon) for name, lon in d1.positions.items()}
    asc = navamsa(d1.ascendant)
    return ChartFrame(ascendant=asc, cusps=whole_sign_cusps(asc), positions=positions)
