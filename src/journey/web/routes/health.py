"""Health check endpoint (F9)."""

from fastapi import APIRouter

from journey.utils.time_utils import now_iso
from journey.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check API health status."""
    return HealthResponse(status="ok", version="0.1.0", timestamp=now_iso())
