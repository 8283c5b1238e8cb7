"""Link generation endpoint."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Body

from deeplink_router.api.deps import Resolver
from deeplink_router.core.observability import record_link_generated
from deeplink_router.schemas.link import ErrorResponse, GenerateLinkRequest, GenerateLinkResponse

logger = structlog.get_logger()

router = APIRouter(tags=["links"])


@router.post(
    "/generate-link",
    response_model=GenerateLinkResponse,
    response_model_exclude_none=True,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_link(
    resolver: Resolver,
    link_data: Annotated[GenerateLinkRequest | None, Body()] = None,
) -> GenerateLinkResponse:
    """Generate a universal link for an app route.

    With `useShort`, a short link is also stored and returned as `url`,
    with the universal link as `longUrl`. A missing body is treated as an
    empty one, so it fails with 400 like an unknown `appId`.
    """
    link_data = link_data or GenerateLinkRequest()
    link = await resolver.generate_link(
        app_id=link_data.app_id,
        route=link_data.route,
        params=link_data.params,
        use_short=link_data.use_short,
    )
    record_link_generated(short=link_data.use_short)
    return GenerateLinkResponse(url=link.url, long_url=link.long_url)
