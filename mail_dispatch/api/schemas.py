"""API response schemas.

Request bodies live in mail_dispatch.models.requests; these models only
describe what the HTTP layer returns.

Version: 1.0.0
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ApiIndexResponse(BaseModel):
    """Response model for GET /api."""

    status: str = Field(default="ok", description="Service status")
    message: str = Field(description="Service description")
    version: str = Field(description="Service version")


class StatusResponse(BaseModel):
    """Response model for GET /api/status."""

    status: str = Field(default="ok", description="Service status")
    message: str = Field(default="Email server is running")


class SendResponse(BaseModel):
    """Response model for successful POST /api/email/* requests."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(default=True)
    message_id: str = Field(alias="messageId", description="Message-ID of sent email")


class ErrorResponse(BaseModel):
    """Error response model.

    ``stack`` is only included in development.
    """

    success: bool = Field(default=False)
    error: str = Field(description="Error description")
    stack: str | None = Field(default=None, description="Traceback (development)")
