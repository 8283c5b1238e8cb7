"""Association manifests served under /.well-known/."""

import json
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from deeplink_router.api.deps import AppConfig
from deeplink_router.services.manifests import build_android_association, build_apple_association

router = APIRouter(prefix="/.well-known", tags=["well-known"])


class PrettyJSONResponse(JSONResponse):
    """JSON response indented by two spaces."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


@router.get("/apple-app-site-association")
async def apple_app_site_association(config_table: AppConfig) -> JSONResponse:
    """Apple universal links association file."""
    return JSONResponse(content=build_apple_association(config_table))


@router.get("/assetlinks.json")
async def assetlinks(config_table: AppConfig) -> PrettyJSONResponse:
    """Android Digital Asset Links statements."""
    return PrettyJSONResponse(content=build_android_association(config_table))
