"""API request/response schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field

from hookrelay.core.constants import APP_VERSION


class WebhookResponse(BaseModel):
    """Outcome of one webhook delivery."""

    status: str = Field(..., description="sent, filtered_out or ignored")
    delivery_id: str
    event: str
    destination: str | None = None
    reason: str = ""


class ReplayResponse(BaseModel):
    """Outcome of a manual replay."""

    status: str = "sent"
    kind: str
    repository: str
    reference: str
    destination: str
    branch: str | None = None


class RepositoriesResponse(BaseModel):
    repositories: list[str] = []


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = APP_VERSION
    services: dict[str, str] = {}


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: str = ""
