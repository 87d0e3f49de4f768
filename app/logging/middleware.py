# app/logging/middleware.py
"""Request timing middleware."""

import logging
import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.config import APPLICATION_ID

logger = logging.getLogger("app.requests")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and processing time of every API request."""

    def __init__(self, app: ASGIApp, application_id: str = APPLICATION_ID, path_prefix: str = "/api"):
        super().__init__(app)
        self.application_id = application_id
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: Callable):
        # Skip logging for non-API paths such as /health and the docs
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        # --- Start timer ---
        start_time = time.perf_counter()

        response = await call_next(request)

        # --- End timer ---
        duration_ms = (time.perf_counter() - start_time) * 1000

        query = f"?{request.url.query}" if request.url.query else ""
        logger.info(
            "[%s] %s %s%s -> %d (%.1f ms)",
            self.application_id,
            request.method,
            request.url.path,
            query,
            response.status_code,
            duration_ms,
        )
        return response
