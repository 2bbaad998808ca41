#!/usr/bin/env python3
"""
Error handlers for the web application.

Core exceptions map onto status codes:
NotFound 404, InvalidQuery 400, UpstreamUnavailable 503, StorageError 500.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.exceptions import (
    CompanionError,
    NotFound,
    InvalidQuery,
    UpstreamUnavailable,
    StorageError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "type": error_type
        }
    )


async def companion_exception_handler(
    request: Request,
    exc: CompanionError
) -> JSONResponse:
    """
    Handle core-layer exceptions.

    Args:
        request: The FastAPI request.
        exc: The core exception.

    Returns:
        JSONResponse with error details.
    """
    status_code = 500
    if isinstance(exc, NotFound):
        status_code = 404
    elif isinstance(exc, InvalidQuery):
        status_code = 400
    elif isinstance(exc, UpstreamUnavailable):
        status_code = 503

    if isinstance(exc, StorageError) or status_code == 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
        message = "Storage error" if isinstance(exc, StorageError) else "Internal server error"
        return _error_response(status_code, message, exc.__class__.__name__)

    logger.info(f"{exc.__class__.__name__} in {request.url.path}: {exc}")
    return _error_response(status_code, str(exc), exc.__class__.__name__)


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return _error_response(exc.status_code, exc.detail, "HTTPException")


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation failures with consistent format."""
    errors = [
        {"loc": list(e.get("loc", [])), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return _error_response(422, errors, "ValidationError")


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions.
    """
    logger.exception(f"Unexpected error in {request.url.path}")
    return _error_response(500, "Internal server error", "InternalError")
