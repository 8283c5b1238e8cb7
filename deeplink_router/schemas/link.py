"""Deep link Pydantic schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from deeplink_router.services.url_builder import stringify_params


class DeepLinkRecord(BaseModel):
    """Stored deep link as returned by the link store and cached in Redis."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    slug: str
    app_id: str
    route: str = "/"
    params: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True


class GenerateLinkRequest(BaseModel):
    """Schema for POST /generate-link."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    app_id: str | None = Field(default=None, description="Application id from the routing table")
    route: str | None = Field(
        default=None,
        description="App route; defaults to the application's default route",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Route parameters; values must be strings, numbers or booleans",
    )
    use_short: bool = Field(default=False, description="Also create a short link")

    @field_validator("params")
    @classmethod
    def validate_params(cls, v: dict[str, Any]) -> dict[str, str]:
        """Stringify scalar values and reject nested ones."""
        return stringify_params(v)


class GenerateLinkResponse(BaseModel):
    """Schema for a generated link."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str
    long_url: str | None = None


class ErrorResponse(BaseModel):
    """Schema for JSON error bodies."""

    error: str
