from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List

from .vedic import DASHA_ORDER, NAK_SIZE, nakshatra_of

# Full years per Maha, in DASHA_ORDER
YEARS = [7, 20, 6, 10, 7, 18, 16, 19, 17]
LORD_YEARS = dict(zip(DASHA_ORDER, YEARS))

YEAR_DAYS = 365.2425


@dataclass(frozen=True)
class DashaPeriod:
    lord: str
    start: datetime
    end: datetime
    years: float


def balance_fraction(moon_lon: float) -> float:
    """Share of the Moon's nakshatra still ahead of it at birth."""
    nk = nakshatra_of(moon_lon)
    return (NAK_SIZE - nk.within) / NAK_SIZE


def compute_vimshottari(moon_lon: float, birth_local: datetime) -> List[DashaPeriod]:
    """
    Nine Mahadashas starting at birth.
      - Moon's nakshatra lord opens the sequence, then DASHA_ORDER wraps.
      - The first period only runs for the unexpired share of that nakshatra.
      - Each period starts exactly where the previous one ends.
    """
    nk = nakshatra_of(moon_lon)
    start_idx = DASHA_ORDER.index(nk.lord)
    first_share = balance_fraction(moon_lon)

    periods: List[DashaPeriod] = []
    cursor = birth_local
    for i in range(9):
        lord = DASHA_ORDER[(start_idx + i) % 9]
        years = LORD_YEARS[lord] * (first_share if i == 0 else 1.0)
        end = cursor + timedelta(days=years * YEAR_DAYS)
        periods.append(DashaPeriod(lord=lord, start=cursor, end=end, years=years))
        cursor = end
    return periods
