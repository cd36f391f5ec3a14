"""Health endpoints."""
from fastapi import APIRouter, Depends

from ..dependencies import get_settings
from ..schemas import HealthStatus
from ..settings import RelaySettings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
def get_health(settings: RelaySettings = Depends(get_settings)) -> HealthStatus:
    """Return service heartbeat information."""

    return HealthStatus(max_attempts=settings.max_attempts)
