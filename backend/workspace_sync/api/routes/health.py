"""Health check."""

from fastapi import APIRouter

from workspace_sync import __version__
from workspace_sync.config import settings
from workspace_sync.schemas.system import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight connectivity check."""
    return HealthResponse(version=__version__, mode=settings.mode)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
