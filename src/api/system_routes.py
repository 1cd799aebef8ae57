"""
System health and network maintenance API routes
"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, timezone
import logging

from exceptions import SpeakerNetworkError
from .speaker_routes import http_error

logger = logging.getLogger(__name__)

# Response models
class NetworkStatusResponse(BaseModel):
    discovered: bool
    speaker_count: int
    controller_count: int
    group_count: int
    cache_enabled: bool
    last_discovery: Optional[datetime] = None
    discovery_method: Optional[str] = None
    discovery_duration_seconds: Optional[float] = None

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    network: NetworkStatusResponse

def create_system_routes(network):
    """Create system monitoring routes"""
    router = APIRouter(prefix="/api", tags=["system"])

    @router.get("/system/health", response_model=HealthResponse)
    async def system_health():
        """System health check; does not trigger discovery"""
        status = network.get_status()
        if not status['discovered']:
            health = "pending"
        elif status['controller_count'] == 0:
            health = "degraded"
        else:
            health = "healthy"

        return HealthResponse(
            status=health,
            timestamp=datetime.now(timezone.utc),
            network=NetworkStatusResponse(**status)
        )

    @router.post("/network/refresh", response_model=NetworkStatusResponse)
    async def refresh_network():
        """Drop the snapshot and cached addresses, then rediscover"""
        logger.info("[REFRESH] Network refresh requested via API")
        try:
            await network.refresh()
        except SpeakerNetworkError as e:
            raise http_error(e)
        return NetworkStatusResponse(**network.get_status())

    return router
