"""Error boundary middleware — last line before the client.

Learn: AppError subclasses are rendered by the exception handlers in
marketplace.errors. Anything else that escapes a handler (a store
failure, a bcrypt error, a bug) lands here: it is logged with its
traceback and the client gets a generic 500 without internals.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from marketplace.errors import GENERIC_ERROR_MESSAGE

logger = structlog.get_logger()


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Turn unexpected exceptions into a generic 500 response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "request.unhandled_error",
                method=request.method,
                path=request.url.path,
            )
            return JSONResponse(
                status_code=500, content={"detail": GENERIC_ERROR_MESSAGE}
            )
