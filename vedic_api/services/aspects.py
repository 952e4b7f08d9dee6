from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from .constants import CHART_BODIES, CLASSICAL_BODIES, norm360

# Priority order: when orbs overlap the first matching type wins.
MAJOR: List[Tuple[str, float, float]] = [
    ("Conjunction", 0.0, 6.0),
    ("Opposition", 180.0, 6.0),
    ("Trine", 120.0, 5.0),
    ("Square", 90.0, 5.0),
    ("Sextile", 60.0, 4.0),
]


@dataclass(frozen=True)
class AspectRecord:
    a: str
    b: str
    type: str
    delta: float

    def key(self) -> Tuple[frozenset, str]:
        return frozenset((self.a, self.b)), self.type


def _angle_diff(a: float, b: float) -> float:
    """Return the minimal angular distance between two longitudes."""

    d = abs(norm360(a) - norm360(b))
    return 360.0 - d if d > 180.0 else d


def classify(a: float, b: float, table: Sequence[Tuple[str, float, float]] = MAJOR):
    """Return ``(type, deviation)`` for the first aspect within orb, else None."""
    d = _angle_diff(a, b)
    for name, exact, orb in table:
        if abs(d - exact) <= orb:
            return name, abs(d - exact)
    return None


def find_aspects(positions: Dict[str, float], names: Iterable[str] = CHART_BODIES) -> List[AspectRecord]:
    res: List[AspectRecord] = []
    names = [n for n in names if n in positions]
    for i in range(len(names)):
        for j in range(i+1, len(names)):
            p1, p2 = names[i], names[j]
            hit = classify(positions[p1], positions[p2])
            if hit:
                res.append(AspectRecord(p1, p2, hit[0], round(hit[1], 2)))
    return res


def ascendant_aspects(ascendant: float, positions: Dict[str, float], names: Iterable[str] = CLASSICAL_BODIES) -> List[AspectRecord]:
    res: List[AspectRecord] = []
    for name in names:
        if name not in positions:
            continue
        hit = classify(ascendant, positions[name])
        if hit:
            res.append(AspectRecord("Ascendant", name, hit[0], round(hit[1], 2)))
    return res


def merge_aspects(pairwise: Iterable[AspectRecord], asc: Iterable[AspectRecord]) -> List[AspectRecord]:
    """De-duplicate on the unordered pair plus type; ascendant rows win."""
    merged: Dict[Tuple[frozenset, str], AspectRecord] = {}
    for rec in pairwise:
        merged[rec.key()] = rec
    for rec in asc:
        merged[rec.key()] = rec
    return list(merged.values())
