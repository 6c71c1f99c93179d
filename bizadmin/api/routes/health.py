"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Request
from pydantic import BaseModel

from bizadmin import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    services: Dict[str, str]


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request) -> HealthResponse:
    status = request.app.state.biz.get_status()
    services = {name: info["status"] for name, info in status.items()}
    return HealthResponse(
        status="healthy" if services.get("database") == "ok" else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        services=services,
    )
