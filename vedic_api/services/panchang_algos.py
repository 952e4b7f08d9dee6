"""Panchanga elements at a single instant.

All values come from the sidereal Sun and Moon longitudes; the weekday is
read in the birth time zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from .constants import norm360
from .vedic import NAK_SIZE, nakshatra_of

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

TITHI_NAMES = [
    "Pratipada",
    "Dvitiya",
    "Tritiya",
    "Chaturthi",
    "Panchami",
    "Shashthi",
    "Saptami",
    "Ashtami",
    "Navami",
    "Dashami",
    "Ekadashi",
    "Dwadashi",
    "Trayodashi",
    "Chaturdashi",
    "Purnima",
]
NEW_MOON_TITHI = "Amavasya"

YOGA_NAMES = [
    "Vishkumbha",
    "Preeti",
    "Ayushman",
    "Saubhagya",
    "Shobhana",
    "Atiganda",
    "Sukarma",
    "Dhriti",
    "Shoola",
    "Ganda",
    "Vriddhi",
    "Dhruva",
    "Vyaghata",
    "Harshana",
    "Vajra",
    "Siddhi",
    "Vyatipata",
    "Variyan",
    "Parigha",
    "Shiva",
    "Siddha",
    "Sadhya",
    "Shubha",
    "Shukla",
    "Brahma",
    "Indra",
    "Vaidhriti",
]

MOBILE_KARANAS = [
    "Bava",
    "Balava",
    "Kaulava",
    "Taitila",
    "Garaja",
    "Vanija",
    "Vishti",
]

FIXED_KARANAS = [
    "Shakuni",
    "Chatushpada",
    "Naga",
    "Kimstughna",
]

TITHI_SPAN = 12.0
KARANA_SPAN = 6.0


@dataclass(frozen=True)
class PanchangaSnapshot:
    weekday: str
    tithi_number: int
    tithi_name: str
    paksha: str
    nakshatra: str
    pada: int
    yoga: str
    karana: str


def moon_sun_separation(moon_lon: float, sun_lon: float) -> float:
    return norm360(moon_lon - sun_lon)


def tithi_at_delta_deg(delta_deg: float) -> Tuple[int, str, str]:
    """Return ``(number 1..30, name, paksha)`` for a Moon-Sun separation."""

    d = norm360(delta_deg)
    number = min(int(d // TITHI_SPAN), 29) + 1
    paksha = "Shukla" if number <= 15 else "Krishna"
    if number == 30:
        return number, NEW_MOON_TITHI, paksha
    return number, TITHI_NAMES[(number - 1) % 15], paksha


def yoga_at(moon_lon: float, sun_lon: float) -> Tuple[int, str]:
    angle = norm360(moon_lon + sun_lon)
    idx = min(int(angle // NAK_SIZE), 26)
    return idx, YOGA_NAMES[idx]


# --- K A R A N A ---


def karana_at_delta_deg(delta_deg: float) -> Tuple[int, str]:
    """Resolve the half-tithi index (0..59) and karana name for a delta.

    The first half of Shukla Pratipada is Kimstughna and the last three
    half-tithis of the month are Shakuni, Chatushpada and Naga; all others
    rotate through the seven movable karanas.
    """

    d = norm360(delta_deg)
    half_tithi_index = min(int(d // KARANA_SPAN), 59)

    if half_tithi_index == 0:
        return 0, "Kimstughna"
    if half_tithi_index >= 57:
        return half_tithi_index, FIXED_KARANAS[half_tithi_index - 57]

    slot = (half_tithi_index - 1) % len(MOBILE_KARANAS)
    return half_tithi_index, MOBILE_KARANAS[slot]


def panchanga_at(moment_local: datetime, sun_lon: float, moon_lon: float) -> PanchangaSnapshot:
    delta = moon_sun_separation(moon_lon, sun_lon)
    tithi_number, tithi_name, paksha = tithi_at_delta_deg(delta)
    nk = nakshatra_of(moon_lon)
    _, yoga = yoga_at(moon_lon, sun_lon)
    _, karana = karana_at_delta_deg(delta)
    return PanchangaSnapshot(
        weekday=WEEKDAYS[moment_local.weekday()],
        tithi_number=tithi_number,
        tithi_name=tithi_name,
        paksha=paksha,
        nakshatra=nk.name,
        pada=nk.pada,
        yoga=yoga,
        karana=karana,
    )
