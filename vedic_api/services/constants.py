import math

SIGN_NAMES = ["Aries","Taurus","Gemini","Cancer","Leo","Virgo","Libra","Scorpio","Sagittarius","Capricorn","Aquarius","Pisces"]

# Bodies queried from the ephemeris; Ketu is always derived from Rahu.
QUERIED_BODIES = ["Sun","Moon","Mercury","Venus","Mars","Jupiter","Saturn","Uranus","Neptune","Pluto","Rahu"]
CHART_BODIES = ["Sun","Moon","Mercury","Venus","Mars","Jupiter","Saturn","Rahu","Ketu","Uranus","Neptune","Pluto"]
# the nine grahas; ascendant aspects leave out the outer planets
CLASSICAL_BODIES = CHART_BODIES[:9]
TABLE_ORDER = ["Ascendant"] + CHART_BODIES


def norm360(x: float) -> float:
    """Reduce an angle to [0, 360)."""
    y = math.fmod(x, 360.0)
    if y < 0:
        y += 360.0
    # -1e-17 + 360.0 rounds up to 360.0
    return 0.0 if y >= 360.0 else y

def norm24(x: float) -> float:
    y = math.fmod(x, 24.0)
    if y < 0:
        y += 24.0
    return 0.0 if y >= 24.0 else y

def sign_index_from_lon(lon: float) -> int:
    return int(norm360(lon) // 30) % 12

def sign_name_from_lon(lon: float) -> str:
    return SIGN_NAMES[sign_index_from_lon(lon)]

def to_dms(deg: float) -> tuple[int, int, int]:
    # rounded to the arc-second, carrying 60″ into minutes and 60′ into degrees
    total = round(norm360(deg) * 3600)
    d, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return d % 360, m, s

def fmt_dms(deg: float) -> str:
    d, m, s = to_dms(deg)
    return f"{d}° {m}′ {s}″"

def fmt_sign_deg(lon: float) -> str:
    # 0..360 to "Sign 12°34′56″"
    sidx = sign_index_from_lon(lon)
    within = norm360(lon) - sidx * 30
    d, m, s = to_dms(within)
    return f"{SIGN_NAMES[sidx]} {d}°{m:02d}′{s:02d}″"

def hours_to_hms(hours: float) -> tuple[int, int, int]:
    h = int(math.floor(hours))
    m_float = (hours - h) * 60
    m = int(math.floor(m_float))
    s = int(round((m_float - m) * 60))
    if s == 60:
        s = 0
        m += 1
    if m == 60:
        m = 0
        h += 1
    return h % 24, m, s

def fmt_lst(hours: float) -> str:
    h, m, s = hours_to_hms(hours)
    return f"{h:02d}:{m:02d}:{s:02d}"
