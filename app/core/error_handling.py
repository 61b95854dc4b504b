import logging
import traceback
from typing import Any, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import AppException
from app.core.security import cors_headers, security_headers

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND_MESSAGE = "Route not found. Please check the URL and HTTP method."


def error_response(
    status_code: int,
    message: str,
    errors: Optional[Any] = None,
    headers: Optional[dict] = None,
    **extra,
) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = jsonable_encoder(errors)
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def format_validation_errors(errors) -> list:
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        formatted.append({
            "field": ".".join(loc),
            "message": error.get("msg", "Invalid value"),
        })
    return formatted


def register_exception_handlers(app):

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Validation failed",
            errors=format_validation_errors(exc.errors()),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        headers = getattr(exc, "headers", None)
        if isinstance(exc, AppException):
            return error_response(exc.status_code, exc.message, errors=exc.errors, headers=headers)
        # Raised by the router itself for unknown paths or methods
        if type(exc) is StarletteHTTPException and exc.status_code in (
            status.HTTP_404_NOT_FOUND,
            status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return error_response(status.HTTP_404_NOT_FOUND, ROUTE_NOT_FOUND_MESSAGE)
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return error_response(exc.status_code, message, headers=headers)

    @app.exception_handler(IntegrityError)
    async def integrity_exception_handler(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return error_response(status.HTTP_409_CONFLICT, "Duplicate entry")

    @app.exception_handler(OperationalError)
    async def operational_exception_handler(request: Request, exc: OperationalError):
        logger.error(f"Database unavailable on {request.method} {request.url.path}: {exc}")
        return error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Database unavailable, try again later")

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.error(f"Unhandled error on {request.method} {request.url.path}:\n{stack}")
        # Rendered outside the CORS and header middleware
        headers = {**security_headers(), **cors_headers(request)}
        if settings.is_production:
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error occurred", headers=headers)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(exc) or "Server error occurred",
            headers=headers,
            errorDetails=stack,
        )
