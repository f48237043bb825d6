"""
Response header sets used by the tracking endpoints: framework-agnostic.

CORS headers always name the single validated origin; the wildcard is only
used by the health check, which carries no credentials.
"""

from __future__ import annotations

HSTS_HEADER = "Strict-Transport-Security"
HSTS_VALUE = "max-age=31536000; includeSubDomains"

ALLOWED_METHODS = "POST, OPTIONS"


def security_headers() -> dict[str, str]:
    """Headers attached to every response."""
    return {HSTS_HEADER: HSTS_VALUE}


def cors_headers(origin: str) -> dict[str, str]:
    """CORS headers for an allow-listed *origin*, plus anti-sniffing."""
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Credentials": "true",
        "X-Content-Type-Options": "nosniff",
        **security_headers(),
    }


def preflight_headers(origin: str) -> dict[str, str]:
    return {"Access-Control-Allow-Methods": ALLOWED_METHODS, **cors_headers(origin)}


def health_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type",
        **security_headers(),
    }
