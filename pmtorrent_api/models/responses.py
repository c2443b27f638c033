"""
API Response Models

Pydantic models for API response serialization. File listings and pieces
use the wire schemas from pmtorrent.schemas.pieces directly.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "pmtorrent-api"
    version: str = "v1"
    files: int = Field(default=0, description="Number of served files")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = Field(default=False)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
