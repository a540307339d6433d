"""
FastAPI exception handlers for custom exceptions.

WHY: Exception handlers convert our custom exceptions into properly
formatted JSON responses with correct HTTP status codes, ensuring
consistent error handling across the entire API.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pricing_api.core.exceptions import AppException


logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom AppException and its subclasses.

    Args:
        request: The FastAPI request object
        exc: The custom exception instance

    Returns:
        JSONResponse with error details
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    WHY: Request bodies that fail schema validation are reported in the same
    shape as our custom exceptions, with one entry per offending field.

    Args:
        request: The FastAPI request object
        exc: The Pydantic validation error

    Returns:
        JSONResponse with validation error details
    """
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )

    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "status_code": 400,
            "details": {"errors": errors},
        },
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle Starlette HTTP exceptions.

    WHY: Some HTTP exceptions (404, 405, the 403 raised by HTTPBearer when
    the Authorization header is missing) happen before reaching our routes.
    This handler ensures they match our error format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTPException",
            "message": exc.detail,
            "status_code": exc.status_code,
            "details": None,
        },
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    WHY: Log the full traceback but return a generic error to avoid leaking
    implementation details to API consumers.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)

    return JSONResponse(
        status_code=500,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred",
            "status_code": 500,
            "details": None,
        },
    )
