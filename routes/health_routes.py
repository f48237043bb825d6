"""
Health check endpoint.

<any method> /status: fixed plaintext liveness answer. It does not touch the
stores and bypasses every tracking gate (method, origin, client IP).
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from shared.http_headers import health_headers

router = APIRouter(tags=["health"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]


@router.api_route("/status", methods=ALL_METHODS)
async def status() -> PlainTextResponse:
    return PlainTextResponse("We are up", status_code=200, headers=health_headers())
