"""Error taxonomy and its HTTP rendering.

Learn: Services raise AppError subclasses — they know nothing about HTTP.
The handlers registered here turn them into JSON responses:

    ValidationError   422  {"field": ..., "message": ...}
    UnauthorizedError 401  {"detail": ...}   (+ WWW-Authenticate: Bearer)
    ForbiddenError    403  {"detail": ...}
    NotFoundError     404  {"detail": ...}
    ConflictError     409  {"detail": ...}
    InternalError     500  {"detail": "Something went wrong"}

Anything that is not an AppError is caught by ErrorBoundaryMiddleware
and also becomes a generic 500.
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()

GENERIC_ERROR_MESSAGE = "Something went wrong"


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_message = GENERIC_ERROR_MESSAGE

    def __init__(self, message: Optional[str] = None, field: Optional[str] = None):
        self.message = message or self.default_message
        self.field = field
        super().__init__(self.message)


class ValidationError(AppError):
    """Bad or missing input field."""

    status_code = 422
    default_message = "Invalid value"


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(AppError):
    """Authenticated, but not allowed to touch this resource."""

    status_code = 403
    default_message = "Not allowed"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Already exists"


class InternalError(AppError):
    status_code = 500


def error_body(exc: AppError) -> dict:
    if isinstance(exc, ValidationError):
        return {"field": exc.field, "message": exc.message}
    if isinstance(exc, InternalError):
        return {"detail": GENERIC_ERROR_MESSAGE}
    body = {"detail": exc.message}
    if exc.field:
        body["field"] = exc.field
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("request.internal_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=exc.status_code, content=error_body(exc), headers=headers
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report only the first failing field."""
    errors = exc.errors()
    first = errors[0] if errors else {"loc": (), "msg": "Invalid request"}
    loc = [str(part) for part in first.get("loc", ())]
    # ("body", "title") → "title"; a missing body reports "body"
    field = loc[-1] if loc else None
    return JSONResponse(
        status_code=422,
        content={"field": field, "message": first.get("msg", "Invalid value")},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
