"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service liveness plus account database reachability."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="APP_ENV the service runs with (dev or prod)")
    database: Literal["connected", "disconnected"] = Field(
        description="Whether the account database answered a trivial query",
    )
