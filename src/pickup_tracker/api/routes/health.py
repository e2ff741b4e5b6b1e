"""Service info and health routes."""

from fastapi import APIRouter

from pickup_tracker import __version__

router = APIRouter(tags=["Health"])


@router.get("/", summary="API root")
def root() -> dict:
    """Return API information and documentation links."""
    return {
        "name": "Pickup Tracker API",
        "version": __version__,
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/health",
    }


@router.get("/health", summary="Health check")
def health() -> dict:
    return {"ok": True}
