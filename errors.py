"""
Tracking error hierarchy and FastAPI exception handlers.

TrackingError is the base for every rejection the ingestion pipeline can
produce. Each subclass pins an HTTP status and an opaque error code; the
client only ever sees ``{"error": "Forbidden", "code": <code>}``. The
``reason`` passed at raise time is for logs only and never leaves the server.

Non-TrackingError exceptions are converted to an opaque 500 (Sentry captures
them first when configured).
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.http_headers import security_headers
from shared.logging import get_logger

log = get_logger(__name__)

ERROR_MESSAGE = "Forbidden"


class TrackingError(Exception):
    """Base tracking error. All typed rejections inherit from this."""

    status_code: int = 500
    error_code: str = "SRV-500X"

    def __init__(
        self,
        reason: str = "",
        *,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(reason or self.error_code)
        self.reason = reason
        self.headers = headers or {}

    def to_dict(self) -> dict:
        return {"error": ERROR_MESSAGE, "code": self.error_code}


class OriginMissingError(TrackingError):
    status_code = 403
    error_code = "XJ4Q8A12"


class OriginDeniedError(TrackingError):
    status_code = 403
    error_code = "FOB-002"


class MethodNotAllowedError(TrackingError):
    status_code = 405
    error_code = "M7DL-403"

    def __init__(self, reason: str = "") -> None:
        super().__init__(reason, headers={"Allow": "POST, OPTIONS"})


class RateLimitError(TrackingError):
    status_code = 429
    error_code = "RAT-LMT9"


class InvalidJSONError(TrackingError):
    status_code = 400
    error_code = "J5N-ERR9"


class InvalidDataError(TrackingError):
    status_code = 400
    error_code = "DTX-22B3"


class StorageError(TrackingError):
    status_code = 500
    error_code = "STR-505E"


class IPMissingError(TrackingError):
    status_code = 403
    error_code = "IP-403"


def tracking_error_response(request: Request, exc: TrackingError) -> JSONResponse:
    """Log *exc* and render it as the opaque JSON error body."""
    log_fn = log.error if exc.status_code >= 500 else log.warning
    log_fn(
        "tracking_rejected",
        code=exc.error_code,
        status_code=exc.status_code,
        reason=exc.reason,
        method=request.method,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={**exc.headers, **security_headers()},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(TrackingError)
    async def tracking_error_handler(
        request: Request, exc: TrackingError
    ) -> JSONResponse:
        return tracking_error_response(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Methods outside the routed set are rejected by the router itself
        if exc.status_code == 405:
            return tracking_error_response(
                request, MethodNotAllowedError(f"unrouted method {request.method}")
            )
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Runs outside the request middleware, so HSTS is attached here
        log.error(
            "unhandled_exception",
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=TrackingError().to_dict(),
            headers=security_headers(),
        )
