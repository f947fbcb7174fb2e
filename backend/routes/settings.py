"""Health check and settings endpoints."""

from fastapi import APIRouter

from backend import runtime

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get the dialogue provider settings (the credential is never returned)."""
    return runtime.settings().public()
