"""Health check API endpoints."""

from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from meeting_summarizer.core.config import settings
from meeting_summarizer.core.database import DatabaseClient
from meeting_summarizer.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Health check status")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check endpoint",
    description="Check if the service is running and its database reachable",
    operation_id="get_service_health_status",
)
async def health_check(request: Request) -> HealthCheckResponse:
    """Report ``healthy`` or ``degraded`` depending on the database."""
    db_client: Optional[DatabaseClient] = getattr(request.app.state, "db_client", None)
    healthy = False
    if db_client is not None:
        db_health = await db_client.health_check()
        healthy = db_health["status"] == "healthy"

    if not healthy:
        LOGGER.warning("Health check degraded: database unavailable")

    return HealthCheckResponse(
        status="healthy" if healthy else "degraded",
        version=settings.app_version,
        service=settings.app_name,
    )
