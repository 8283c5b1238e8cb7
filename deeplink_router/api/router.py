"""Top-level router - aggregates all endpoints."""

from fastapi import APIRouter

from deeplink_router.api.links import router as links_router
from deeplink_router.api.redirect import router as redirect_router
from deeplink_router.api.well_known import router as well_known_router

router = APIRouter()

router.include_router(well_known_router)
router.include_router(links_router)
router.include_router(redirect_router)


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
