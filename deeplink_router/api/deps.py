"""Dependency injection utilities for FastAPI routes."""

from typing import Annotated

from fastapi import Depends, Request

from deeplink_router.core.app_config import ConfigTable
from deeplink_router.services.resolver import ResolutionEngine


def get_resolver(request: Request) -> ResolutionEngine:
    """Resolution engine built by the application factory."""
    return request.app.state.resolver


def get_config_table(request: Request) -> ConfigTable:
    """Routing table loaded at startup."""
    return request.app.state.config_table


def get_client_ip(request: Request) -> str | None:
    """Extract client IP address from request.

    Handles X-Forwarded-For header for requests behind proxies/load balancers.
    """
    # X-Forwarded-For can contain multiple IPs: client, proxy1, proxy2
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # Common in nginx setups
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return None


# Type aliases for dependency injection
Resolver = Annotated[ResolutionEngine, Depends(get_resolver)]
AppConfig = Annotated[ConfigTable, Depends(get_config_table)]
ClientIP = Annotated[str | None, Depends(get_client_ip)]
