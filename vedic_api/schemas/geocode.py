from pydantic import BaseModel
from typing import Optional, List

class GeoHit(BaseModel):
    label: str
    lat: float
    lon: float
    category: Optional[str] = None
    type: Optional[str] = None

class GeocodeResponse(BaseModel):
    results: List[GeoHit]
