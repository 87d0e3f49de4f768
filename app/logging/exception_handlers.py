# app/logging/exception_handlers.py
"""Translate exceptions into the JSON error envelope and log them."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import QueryValidationError, StoreError
from app.transactions.schemas import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, errors=None) -> JSONResponse:
    content = ErrorResponse(message=message, errors=errors or None)
    return JSONResponse(status_code=status_code, content=content.model_dump(exclude_none=True))


async def query_validation_exception_handler(request: Request, exc: QueryValidationError):
    """Bad listing parameters -> 400 with every violation."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, "; ".join(exc.errors))
    return error_response(400, exc.message, exc.errors)


async def store_exception_handler(request: Request, exc: StoreError):
    """Store failures -> 503 when retrying may help, 500 otherwise."""
    status_code = 503 if exc.retryable else 500
    logger.error(
        "Store error on %s %s (operation=%s, retryable=%s): %s",
        request.method,
        request.url.path,
        exc.operation,
        exc.retryable,
        exc.message,
    )
    message = "Service temporarily unavailable" if exc.retryable else "Database error"
    return error_response(status_code, message)


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        errors.append(f"{location}: {error.get('msg')}")
    logger.info("Request validation failed on %s: %s", request.url.path, errors)
    return error_response(400, "Invalid query parameters", errors)


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    logger.error("Response validation failed on %s: %s", request.url.path, exc.errors())
    return error_response(500, "Internal server error")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions; unknown routes get the route-not-found envelope."""
    if exc.status_code == 404:
        return error_response(404, "Route not found")
    if exc.status_code >= 500:
        logger.error("HTTP %d on %s: %s", exc.status_code, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(500, "Internal server error")
