"""
API error taxonomy and the exception handlers that render it.

Routes and services raise these where a rule is broken; the handlers
registered in main.py turn them (and framework/database errors) into the
standard response envelope.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responses import error_envelope

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base class for errors that map to a client-visible response"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None, data: Any = None):
        self.message = message or self.default_message
        self.errors = errors
        self.data = data
        super().__init__(self.message)


class InputValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token. Please login again."


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Request conflicts with the current state of the resource"


class InsufficientStockError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}",
            data={"available": available, "requested": requested},
        )


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        # loc looks like ("body", "quantity") or ("path", "order_id")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc) or None,
            "message": err.get("msg"),
            "location": err.get("loc", ("body",))[0],
        })
    return errors


async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, errors=exc.errors, data=exc.data),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope("Validation failed", errors=_field_errors(exc)),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Internal Server Error"),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Internal Server Error"),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
