import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .routers import charts as charts_router
from .routers import geocode as geocode_router
from .errors import ChartError
from .services.ephem import init_ephemeris
from .config import get_settings
from .middleware.auth import APIKeyMiddleware
from .middleware.ratelimit import RateLimitMiddleware
from .middleware.logging import LoggingMiddleware


app = FastAPI(title="vedic-chart-api", version="0.1.0")

# Configure CORS - localhost for development, production domains for production
app_env = os.getenv("APP_ENV")
is_dev = app_env is None or app_env.lower() in {"dev", "development"}

if is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Length","Content-Type"],
        max_age=86400,
    )
else:
    allowed = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
    preview = os.getenv("PREVIEW_ORIGIN")  # e.g., a preview deployment URL
    if preview:
        allowed.append(preview)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Length","Content-Type"],
        max_age=86400,
    )

# the last middleware added runs first: auth must resolve the key before rate limiting
app.add_middleware(RateLimitMiddleware)
app.add_middleware(APIKeyMiddleware)
app.add_middleware(LoggingMiddleware)

app.include_router(charts_router.router)
app.include_router(geocode_router.router)


@app.exception_handler(ChartError)
async def _chart_error(request: Request, exc: ChartError):
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _request_validation(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
        fields.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid")})
    missing = any(err.get("type") == "missing" for err in exc.errors())
    return JSONResponse(
        {
            "error": "Missing required fields." if missing else "Invalid request.",
            "kind": "ValidationError",
            "details": {"fields": fields},
        },
        status_code=400,
    )


@app.on_event("startup")
def _init_ephemeris() -> None:
    init_ephemeris(get_settings())


@app.get("/__health")
def health():
    return {"ok": True}


@app.get("/")
def root():
    return {"message": "vedic-chart-api is running. See /__health and /docs."}
