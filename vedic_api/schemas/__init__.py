from .charts import ChartRequest, ChartResponse, FrameOut, NakshatraRow, DashaRow, PanchangaOut, AspectOut

from .geocode import GeoHit, GeocodeResponse
