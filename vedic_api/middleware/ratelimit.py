import os
import time
from collections import defaultdict, deque
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .auth import OPEN_PATHS

WINDOW_SECONDS = 60

_counters = defaultdict(deque)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per API key (or client address)."""

    async def dispatch(self, request: Request, call_next):
        if os.getenv("RATE_LIMIT_ENABLED", "false").lower() != "true":
            return await call_next(request)
        if request.url.path in OPEN_PATHS:
            return await call_next(request)

        client = request.client.host if request.client else "anonymous"
        key = getattr(request.state, "api_key", client)
        limit = int(os.getenv("RATE_LIMIT_PER_MINUTE", "10"))
        now = time.time()

        window = _counters[key]
        while window and window[0] <= now - WINDOW_SECONDS:
            window.popleft()
        window.append(now)

        if len(window) > limit:
            retry_after = max(1, int(window[0] + WINDOW_SECONDS - now))
            return JSONResponse(
                {"error": "Rate limit exceeded", "kind": "RateLimited"},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
