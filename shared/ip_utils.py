"""
Client identity extraction for FastAPI requests.

Only the header set by the edge platform is trusted. Unlike generic proxy
resolution there is no fallback to ``X-Forwarded-For`` or the socket peer:
those are client-controllable (or the edge itself) and would let a caller
pick its own rate-limit bucket.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request


def get_client_ip(request: Request, header: str = "CF-Connecting-IP") -> Optional[str]:
    """Return the trusted client IP from *header*, or ``None`` if absent/blank.

    Args:
        request: The current FastAPI ``Request`` object.
        header: Name of the platform-supplied client IP header.
    """
    value: Optional[str] = request.headers.get(header)
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_client_country(
    request: Request, header: str = "CF-IPCountry", default: str = "Unknown"
) -> str:
    """Return the platform geolocation country code, or *default*."""
    value: Optional[str] = request.headers.get(header)
    if value:
        value = value.strip()
    return value or default
