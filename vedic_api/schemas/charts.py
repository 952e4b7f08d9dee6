from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict

class ChartRequest(BaseModel):
    date: str  # YYYY-MM-DD, MM/DD/YYYY or DD/MM/YYYY
    time: str  # HH:MM[:SS] or h:mm[:ss] AM/PM
    timezone: str
    lat: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    lon: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)
    house_system: str = "P"
    force_engine: Optional[str] = None

    @field_validator("date", "time", "timezone")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("force_engine")
    @classmethod
    def _engine(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip().upper()
        if v not in ("SWIEPH", "MOSEPH"):
            raise ValueError("must be SWIEPH or MOSEPH")
        return v

class FrameOut(BaseModel):
    ascendant: float
    cusps: List[float]
    positions: Dict[str, float]

class AyanamshaOut(BaseModel):
    name: str
    value: float

class NakshatraRow(BaseModel):
    body: str
    sign: str
    lon: float
    position: str
    nakshatra: str
    pada: int
    lord: str

class DashaRow(BaseModel):
    lord: str
    start: str  # ISO instant in the birth zone
    end: str
    years: float

class PanchangaOut(BaseModel):
    weekday: str
    tithi_number: int
    tithi_name: str
    paksha: str
    nakshatra: str
    pada: int
    yoga: str
    karana: str

class AspectOut(BaseModel):
    a: str
    b: str
    type: str
    delta: float

class ChartResponse(BaseModel):
    engine: str
    jd_ut: float
    lst_hours: Optional[float] = None
    lst_hms: Optional[str] = None
    timezone: str
    timezone_corrected: Optional[str] = None
    house_system: str
    ayanamsha: AyanamshaOut
    d1: FrameOut
    d9: FrameOut
    retrograde: Dict[str, bool] = {}
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    nakshatras: List[NakshatraRow]
    dasha: List[DashaRow]
    panchanga: PanchangaOut
    aspects: List[AspectOut]
