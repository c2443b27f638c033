"""API response models."""

from pmtorrent_api.models.responses import (
    HealthResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "HealthResponse",
    "ErrorDetail",
    "ErrorResponse",
]
