"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (dev or prod)")
    database: Literal["connected", "disconnected"]
    audit: Literal["running", "stopped"] = Field(description="Audit log consumer state")
    authenticated: bool = Field(default=False, description="Whether a valid bearer token was sent")
    role: str | None = Field(default=None, description="Caller role when authenticated")
