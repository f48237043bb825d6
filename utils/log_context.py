"""
FastAPI middleware for request logging and context management.

Provides:
- Request ID generation for correlation (bound into structlog contextvars)
- Request completion logging with timing
- HSTS stamped onto every response that passes through the app, including
  framework-generated ones (unmatched methods, unknown routes)
"""

import time
import uuid

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from shared.http_headers import HSTS_HEADER, HSTS_VALUE

from .logger import get_logger

log = get_logger("tracker.request")


def generate_request_id() -> str:
    """Generate a unique request ID for correlation."""
    return f"req_{uuid.uuid4().hex[:12]}"


def log_request_end(
    method: str, path: str, status_code: int, duration_ms: int
) -> None:
    """Log the end of a request with timing and status."""
    if status_code >= 500:
        log_fn = log.error
    elif status_code >= 400:
        log_fn = log.warning
    else:
        log_fn = log.info

    log_fn(
        "request_completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def register_request_logging(app: FastAPI) -> None:
    """
    Register the request logging middleware on a FastAPI app.

    Example:
        >>> app = FastAPI()
        >>> register_request_logging(app)
    """

    @app.middleware("http")
    async def request_context(request: Request, call_next) -> Response:
        start = time.perf_counter()
        request_id = generate_request_id()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
            duration_ms = int((time.perf_counter() - start) * 1000)
            log_request_end(
                request.method, request.url.path, response.status_code, duration_ms
            )
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers["X-Request-ID"] = request_id
        response.headers.setdefault(HSTS_HEADER, HSTS_VALUE)
        return response
