"""Exception handlers mapping deep link errors to HTTP responses."""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from deeplink_router.core.observability import record_short_link_resolution
from deeplink_router.services.exceptions import (
    InvalidApplicationError,
    LinkNotFoundError,
    LinkPersistError,
    ResolutionError,
)

logger = structlog.get_logger()


async def invalid_application_handler(request: Request, exc: InvalidApplicationError) -> JSONResponse:
    logger.info("Link generation rejected - unknown app", app_id=exc.app_id)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid appId"},
    )


async def link_persist_handler(request: Request, exc: LinkPersistError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Failed to save deep link"},
    )


async def link_not_found_handler(request: Request, exc: LinkNotFoundError) -> PlainTextResponse:
    logger.info("Redirect failed - link not found", slug=exc.slug)
    record_short_link_resolution("not_found")
    return PlainTextResponse("Link not found", status_code=status.HTTP_404_NOT_FOUND)


async def resolution_error_handler(request: Request, exc: ResolutionError) -> PlainTextResponse:
    record_short_link_resolution("error")
    return PlainTextResponse(
        "Internal Server Error",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for the deep link error taxonomy."""
    app.add_exception_handler(InvalidApplicationError, invalid_application_handler)
    app.add_exception_handler(LinkPersistError, link_persist_handler)
    app.add_exception_handler(LinkNotFoundError, link_not_found_handler)
    app.add_exception_handler(ResolutionError, resolution_error_handler)
