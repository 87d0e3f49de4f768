"""FastAPI application entry point for the retail sales explorer."""

from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import FRONTEND_URL
from app.core.database import init_db
from app.core.exceptions import QueryValidationError, StoreError
from app.core.router import register_routes
from app.logging.config import configure_logging
from app.logging.middleware import RequestLoggingMiddleware
from app.logging.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    query_validation_exception_handler,
    request_validation_exception_handler,
    response_validation_exception_handler,
    store_exception_handler,
)


def create_app() -> FastAPI:

    configure_logging()

    app = FastAPI(
        title="Retail Sales Explorer",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    init_db()

    # Add request logger middleware
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(QueryValidationError, query_validation_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in FRONTEND_URL.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)

    @app.get("/health")
    def health() -> Any:
        return {
            "success": True,
            "message": "Server is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
