from typing import Optional

from fastapi import APIRouter, Query
from ..errors import ValidationError
from ..schemas import GeocodeResponse
from ..services.geocode import search_place

router = APIRouter(prefix="/v1/geocode", tags=["geocode"])

@router.get("", response_model=GeocodeResponse)
def geocode(
    place: Optional[str] = Query(default=None),
    q: Optional[str] = Query(default=None),
):
    # older clients send ?q=
    text = (place or q or "").strip()
    if not text:
        raise ValidationError("Missing place", field="place")
    return GeocodeResponse(results=search_place(text))
