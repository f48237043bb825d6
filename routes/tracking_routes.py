"""
Visit ingestion endpoint.

Every path other than the health path lands here, as the beacon posts to the
site root. HTTP-level gates run in this order before the body is touched:

1. OPTIONS preflight: 204 for an allow-listed Origin, else 403.
2. Method gate: only POST continues (405 otherwise).
3. Origin gate: Origin must be present and allow-listed (403).
4. Client IP gate: the edge-platform IP header must be present (403).

The rest of the pipeline lives in TrackingService.track().
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse

from dependencies import get_tracking_service
from errors import IPMissingError, MethodNotAllowedError, OriginDeniedError
from routes.health_routes import ALL_METHODS
from services.tracking_service import ClientContext, TrackingService
from shared.http_headers import cors_headers, preflight_headers
from shared.ip_utils import get_client_country, get_client_ip

router = APIRouter(tags=["tracking"])


@router.api_route("/{full_path:path}", methods=ALL_METHODS)
async def track_visit(
    request: Request,
    service: TrackingService = Depends(get_tracking_service),
) -> Response:
    policy = service.policy
    origin = request.headers.get("Origin")

    if request.method == "OPTIONS":
        if policy.is_origin_allowed(origin):
            return Response(status_code=204, headers=preflight_headers(origin))
        raise OriginDeniedError("preflight from missing or unknown origin")

    if request.method != "POST":
        raise MethodNotAllowedError(f"method {request.method}")

    origin = service.check_origin(origin)

    client_ip = get_client_ip(request, policy.client_ip_header)
    if client_ip is None:
        raise IPMissingError(f"no {policy.client_ip_header} header")

    client = ClientContext(
        origin=origin,
        ip=client_ip,
        country=get_client_country(
            request, policy.country_header, policy.default_country
        ),
        user_agent=request.headers.get("User-Agent"),
    )

    await service.track(client, await request.body())

    return PlainTextResponse("Tracked", status_code=200, headers=cors_headers(origin))
