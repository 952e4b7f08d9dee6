from fastapi import APIRouter
from ..schemas import ChartRequest, ChartResponse
from ..services.orchestrators.chart_full import build_chart

router = APIRouter(prefix="/v1/charts", tags=["charts"])

@router.post("/compute", response_model=ChartResponse)
def compute_chart(req: ChartRequest):
    return build_chart(
        req.date,
        req.time,
        req.timezone,
        req.lat,
        req.lon,
        house_system=req.house_system,
        force_engine=req.force_engine,
    )
