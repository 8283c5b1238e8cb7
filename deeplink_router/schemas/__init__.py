"""Pydantic schemas."""

from deeplink_router.schemas.link import (
    DeepLinkRecord,
    ErrorResponse,
    GenerateLinkRequest,
    GenerateLinkResponse,
)

__all__ = [
    "DeepLinkRecord",
    "ErrorResponse",
    "GenerateLinkRequest",
    "GenerateLinkResponse",
]
