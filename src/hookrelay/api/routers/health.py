"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hookrelay.api.dependencies import Services, get_services
from hookrelay.api.schemas import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check — confirms the service is running."""
    return HealthResponse(status="healthy", services={"api": "running"})


@router.get("/readiness", response_model=HealthResponse)
async def readiness_check(services: Services = Depends(get_services)) -> HealthResponse:
    """Readiness check — reports whether a GitHub credential is stored."""
    return HealthResponse(
        status="ready",
        services={
            "api": "ready",
            "github_token": "stored" if services.vault.has_token() else "missing",
        },
    )
