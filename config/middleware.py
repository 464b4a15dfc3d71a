# middleware.py
import os
import time
import logging
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger("storefront.access")


def add_cors_middleware(app):
    origins = [o.strip() for o in os.getenv("FRONTEND_URL", "http://localhost:8080").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


def add_request_logging(app):
    """Log one line per request with status and duration."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start) * 1000, 2)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response
