"""Resolution engine: link generation and short/universal link resolution."""

import secrets
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import structlog

from deeplink_router.core.app_config import ConfigTable
from deeplink_router.services.exceptions import (
    InvalidApplicationError,
    LinkNotFoundError,
    LinkPersistError,
    PersistenceError,
    ResolutionError,
)
from deeplink_router.services.link_store import LinkStore
from deeplink_router.services.platform import is_mobile_client
from deeplink_router.services.redirect_page import render_redirect_page
from deeplink_router.services.url_builder import (
    ROUTE_KEY,
    build_fallback_url,
    build_short_url,
    build_universal_url,
    stringify_params,
)

DEFAULT_ROUTE = "/"
QueryItems = Mapping[str, str] | Iterable[tuple[str, str]]


def collapse_query(query_params: QueryItems) -> dict[str, str]:
    """Flatten query parameters, joining repeated keys with commas."""
    items = query_params.items() if isinstance(query_params, Mapping) else query_params
    collapsed: dict[str, str] = {}
    for key, value in items:
        collapsed[key] = f"{collapsed[key]},{value}" if key in collapsed else value
    return collapsed


@dataclass(frozen=True)
class GeneratedLink:
    """Result of link generation; long_url is set only for short links."""

    url: str
    long_url: str | None = None


@dataclass(frozen=True)
class UniversalResolution:
    """Where to send a client that opened a universal link.

    Desktop clients are redirected to fallback_url directly. Mobile clients
    get html_body, whose inline script is allowed by csp_nonce.
    """

    is_mobile: bool
    fallback_url: str
    html_body: str | None = None
    csp_nonce: str | None = None


class ResolutionEngine:
    """Answers link generation and resolution requests.

    The config table and link store are supplied at construction and shared
    across requests; the engine itself holds no per-request state.
    """

    def __init__(
        self,
        config_table: ConfigTable,
        link_store: LinkStore,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self.config_table = config_table
        self.link_store = link_store
        self._logger = logger or structlog.get_logger()

    async def generate_link(
        self,
        app_id: str | None,
        route: str | None = None,
        params: Mapping[str, object] | None = None,
        use_short: bool = False,
    ) -> GeneratedLink:
        """Build a universal link, optionally backed by a stored short link.

        Raises InvalidApplicationError for unknown apps and LinkPersistError
        if the short link cannot be saved.
        """
        app = self.config_table.get(app_id)
        if app is None:
            raise InvalidApplicationError(app_id)

        route = route or app.default_route
        params = stringify_params(params)
        long_url = build_universal_url(self.config_table.domain, app_id, route, params)
        if not use_short:
            return GeneratedLink(url=long_url)

        try:
            slug = await self.link_store.create(app_id, route, params)
        except PersistenceError as e:
            self._logger.error("Error saving deep link", app_id=app_id, error=str(e), exc_info=True)
            raise LinkPersistError("Failed to save deep link") from e

        self._logger.info("Short link created", app_id=app_id, slug=slug)
        return GeneratedLink(
            url=build_short_url(self.config_table.domain, slug),
            long_url=long_url,
        )

    async def resolve_short_link(
        self,
        slug: str,
        requester_ip: str | None,
        user_agent: str | None,
    ) -> str:
        """Record a click on a short link and return its universal URL.

        Raises LinkNotFoundError for unknown or inactive slugs, including a
        cached link deactivated since it was cached, and ResolutionError if
        the lookup or the click append fails.
        """
        try:
            link = await self.link_store.find_active_by_slug(slug)
            if link is None:
                raise LinkNotFoundError(slug)
            await self.link_store.append_click(slug, requester_ip, user_agent)
        except PersistenceError as e:
            self._logger.error("Error resolving short link", slug=slug, error=str(e), exc_info=True)
            raise ResolutionError("Failed to resolve short link") from e

        return build_universal_url(self.config_table.domain, link.app_id, link.route, link.params)

    def resolve_universal_request(
        self,
        app_id: str,
        query_params: QueryItems,
        user_agent: str | None,
    ) -> UniversalResolution:
        """Decide where a universal link request should land.

        Unknown apps are not an error; they use the global default fallback.
        A repeated query key is passed on once, with its values joined by
        commas.
        """
        params = collapse_query(query_params)
        route = params.pop(ROUTE_KEY, None)
        if not route:
            app = self.config_table.get(app_id)
            route = app.default_route if app else DEFAULT_ROUTE

        fallback_url = build_fallback_url(self.config_table.fallback_for(app_id), route, params)

        if not is_mobile_client(user_agent):
            return UniversalResolution(is_mobile=False, fallback_url=fallback_url)

        # TODO: attempt a custom-scheme app open before falling back once
        # app schemes are added to the routing table.
        nonce = secrets.token_urlsafe(16)
        return UniversalResolution(
            is_mobile=True,
            fallback_url=fallback_url,
            html_body=render_redirect_page(fallback_url, nonce),
            csp_nonce=nonce,
        )
