"""
API Error Handling

Standardized error handling for the API.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from pmtorrent.schemas.errors import ErrorCodes
from pmtorrent_api.models.responses import ErrorResponse, ErrorDetail


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class FileNotServedError(APIError):
    """Requested file hash is not served."""

    def __init__(self, hash_id: str):
        super().__init__(
            code=ErrorCodes.FILE_NOT_FOUND,
            message="Requested data does not exist",
            status_code=404,
            details={"hash": hash_id},
        )


class PieceNotFoundError(APIError):
    """Requested piece index is outside the file."""

    def __init__(self, hash_id: str, index: int, pieces: int):
        super().__init__(
            code=ErrorCodes.PIECE_NOT_FOUND,
            message="Requested data does not exist",
            status_code=404,
            details={"hash": hash_id, "index": index, "pieces": pieces},
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="Something went wrong",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
