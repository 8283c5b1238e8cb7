"""Redirect endpoints for short links and universal links."""

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from deeplink_router.api.deps import ClientIP, Resolver
from deeplink_router.core.middleware import redirect_page_csp
from deeplink_router.core.observability import record_short_link_resolution, record_universal_request

logger = structlog.get_logger()

router = APIRouter(tags=["redirect"])


@router.get("/s/{slug}")
async def resolve_short_link(
    request: Request,
    slug: str,
    resolver: Resolver,
    client_ip: ClientIP,
) -> RedirectResponse:
    """Record a click and redirect a short link to its universal link.

    Unknown or inactive slugs return 404; storage failures return 500.
    """
    target = await resolver.resolve_short_link(
        slug,
        requester_ip=client_ip,
        user_agent=request.headers.get("User-Agent"),
    )
    logger.info("Short link resolved", slug=slug)
    record_short_link_resolution("redirected")
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)


@router.get("/u/{app_id}")
async def open_universal_link(
    request: Request,
    app_id: str,
    resolver: Resolver,
) -> Response:
    """Send a universal link request on to the app's web fallback.

    Desktop browsers get a 302. Mobile browsers get a small HTML page that
    performs the redirect client-side.
    """
    resolution = resolver.resolve_universal_request(
        app_id,
        request.query_params.multi_items(),
        request.headers.get("User-Agent"),
    )
    record_universal_request(resolution.is_mobile)

    if not resolution.is_mobile:
        return RedirectResponse(url=resolution.fallback_url, status_code=status.HTTP_302_FOUND)

    return HTMLResponse(
        content=resolution.html_body,
        headers={"Content-Security-Policy": redirect_page_csp(resolution.csp_nonce)},
    )
