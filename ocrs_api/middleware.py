"""
Request logging and error translation for OCRS API Server.

All error outcomes leave the server in the response envelope. Exceptions
are translated by the handlers registered here; error responses produced
without an exception are rewritten by ErrorEnvelopeMiddleware.
"""

import logging
import time
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .forms import MultipartError
from .schemas.response import error_response

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("ocrs_api.access")


def message_for_status(status: int) -> str:
    """Fixed message for error responses that carry no error detail."""
    if status == 404:
        return "Not Found"
    return "Something went wrong"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and latency of every request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # The 500 envelope is built outside this middleware
            self._log(request, 500, start)
            raise
        self._log(request, response.status_code, start)
        return response

    @staticmethod
    def _log(request: Request, status: int, start: float) -> None:
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        access_logger.info(
            f'{client} - "{request.method} {request.url.path}" {status} {elapsed_ms:.2f}ms'
        )


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Rewrites non-JSON error responses into the envelope."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if response.status_code < 400:
            return response

        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            return response

        return error_response(response.status_code, message_for_status(response.status_code))


async def multipart_error_handler(request: Request, exc: MultipartError) -> Response:
    logger.error(f"Multipart error: {exc}")
    return error_response(400, str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    detail = exc.detail
    try:
        default_detail = HTTPStatus(exc.status_code).phrase
    except ValueError:
        default_detail = None

    if detail is None or detail == default_detail:
        message = message_for_status(exc.status_code)
    else:
        message = str(detail)
    return error_response(exc.status_code, message, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> Response:
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return error_response(422, message or message_for_status(422))


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return error_response(500, message_for_status(500))


def register_error_handlers(app: FastAPI) -> None:
    """Install the exception handlers and logging/envelope middleware."""
    app.add_exception_handler(MultipartError, multipart_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Added first so it sits inside the envelope middleware and sees raw statuses
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(ErrorEnvelopeMiddleware)
