"""System health endpoints."""

from fastapi import APIRouter

# Create router
router = APIRouter(tags=["System"])


@router.get("/healthz")
async def healthz():
    """Liveness check."""
    return {"status": "alive"}


# Export the router
__all__ = ['router']
