"""V1 API router - aggregates all versioned endpoints."""

from fastapi import APIRouter

from api.routers import analytics, analyzer, monetize, sites, webhooks

router = APIRouter()

# Plugin decision endpoint
router.include_router(monetize.router)

# Exposure analyzer
router.include_router(analyzer.router)

# Site registration and analytics
router.include_router(sites.router)
router.include_router(analytics.router)

# Payment provider callbacks
router.include_router(webhooks.router)


@router.get("/")
async def v1_root() -> dict[str, str]:
    """V1 API root endpoint."""
    return {
        "version": "1",
        "status": "active",
    }
