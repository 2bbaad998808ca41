#!/usr/bin/env python3
"""
LeetCode Companion - FastAPI Application

Caching proxy and scoring layer over a LeetCode data API.

Usage:
    python main.py serve

Then open:
    - http://localhost:5001/health - Health check (default port, configurable in config.yaml)
    - http://localhost:5001/docs - API Documentation (Swagger UI)
    - http://localhost:5001/redoc - Alternative API Documentation
"""

import asyncio
import sys
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.app_context import AppContext
from core.config_loader import AppConfig
from core.exceptions import CompanionError
from .config import get_config
from .exceptions import (
    companion_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from .models.responses import HealthResponse
from .rate_limit import add_rate_limit_handlers
from .routers import analysis_router, problems_router, users_router

logger = logging.getLogger(__name__)


def create_app(context: Optional[AppContext] = None, config: Optional[AppConfig] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        context: Pre-built context (tests inject one); built at startup when None.
        config: Configuration used when the context has to be built.
    """
    started_at = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = context is None
        ctx = context
        if ctx is None:
            app_config = config or get_config()
            ctx = AppContext.build(app_config)
            if app_config.database.create_tables:
                await asyncio.to_thread(ctx.database.create_tables)
            reachable = await asyncio.to_thread(ctx.leetcode_client.ping)
            if reachable:
                logger.info(f"LeetCode API reachable at {ctx.leetcode_client.base_url}")

        app.state.context = ctx
        logger.info("LeetCode Companion API started")
        try:
            yield
        finally:
            if owned:
                ctx.close()
            logger.info("LeetCode Companion API stopped")

    app = FastAPI(
        title="LeetCode Companion API",
        description="Problem analysis, scoring and cached LeetCode data",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    if context is not None:
        app.state.context = context

    frontend_url = (config or (context.config if context else None) or get_config()).web.frontend_url
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Configure rate limiting
    add_rate_limit_handlers(app)

    # Register exception handlers
    app.add_exception_handler(CompanionError, companion_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(analysis_router)
    app.include_router(problems_router)
    app.include_router(users_router)

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="OK",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=round(time.monotonic() - started_at, 3),
        )

    return app


app = create_app()


def main():
    """Run the web server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = get_config()

    logger.info(f"Starting LeetCode Companion API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
