#!/usr/bin/env python3
"""
Rate limiting - per-client-IP limits shared by all routers.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

GENERAL_LIMIT = "100/15 minutes"
ANALYSIS_LIMIT = "20/5 minutes"

limiter = Limiter(key_func=get_remote_address, default_limits=[GENERAL_LIMIT])


def add_rate_limit_handlers(app):
    """Attach the limiter, its middleware and the 429 handler to the FastAPI app."""
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": f"Too many requests: {exc.detail}",
            "type": "RateLimitExceeded"
        }
    )
