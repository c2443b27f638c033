"""
Error taxonomy for pmtorrent.

Defines both Pydantic models for structured error communication
(e.g. in HTTP responses) and Python exceptions for control flow.

Verification mismatches are NOT errors: proof checks return False so a
tampered chunk is ordinary data for the caller.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Merkle tree errors
    EMPTY_INPUT = "EMPTY_INPUT"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    LEAF_COUNT = "LEAF_COUNT"

    # File & repository errors
    CHUNK_NOT_FOUND = "CHUNK_NOT_FOUND"
    PIECE_NOT_FOUND = "PIECE_NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"

    # Client-side verification
    PIECE_VERIFICATION_FAILED = "PIECE_VERIFICATION_FAILED"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class PMTorrentError(BaseModel):
    """
    Error model for passing errors between layers without exceptions.

    The HTTP API serializes this shape; the client turns it back into an
    exception with ``to_exception``.
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "PMTorrentException":
        """Convert this error model to a raisable exception."""
        return PMTorrentException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class PMTorrentException(Exception):
    """
    Base exception for all pmtorrent errors.

    Carries structured error information and can be converted to a
    PMTorrentError model.
    """

    default_code = "PMTORRENT_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> PMTorrentError:
        """Convert this exception to a PMTorrentError model."""
        return PMTorrentError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptyInputError(PMTorrentException, ValueError):
    """Raised when a tree is built from zero leaves."""

    default_code = ErrorCodes.EMPTY_INPUT

    def __init__(self, message: str = "Cannot build a Merkle tree from zero leaves") -> None:
        super().__init__(message)


class IndexOutOfRangeError(PMTorrentException, IndexError):
    """Raised when a leaf or node position lies outside the tree."""

    default_code = ErrorCodes.INDEX_OUT_OF_RANGE

    def __init__(self, index: int, size: int, what: str = "leaf") -> None:
        super().__init__(
            f"{what.capitalize()} index {index} out of range (size {size})",
            details={"index": index, "size": size},
        )
        self.index = index
        self.size = size


class LeafCountError(PMTorrentException, ValueError):
    """Raised when the odd-node policy rejects a leaf count."""

    default_code = ErrorCodes.LEAF_COUNT

    def __init__(self, leaf_count: int) -> None:
        super().__init__(
            f"Leaf count {leaf_count} is not a power of two",
            details={"leaf_count": leaf_count},
        )
        self.leaf_count = leaf_count


class ChunkNotFoundError(IndexOutOfRangeError):
    """Raised when a file has no chunk at the requested index."""

    default_code = ErrorCodes.CHUNK_NOT_FOUND

    def __init__(self, index: int, size: int) -> None:
        super().__init__(index, size, what="chunk")


class FileNotFoundInRepoError(PMTorrentException, KeyError):
    """Raised when no file with the given hash is served."""

    default_code = ErrorCodes.FILE_NOT_FOUND

    def __init__(self, hash_id: str) -> None:
        super().__init__(
            f"No file with hash {hash_id}",
            details={"hash": hash_id},
        )
        self.hash_id = hash_id

    # KeyError.__str__ would quote the message
    def __str__(self) -> str:
        return self.message


class FileReadError(PMTorrentException):
    """Raised when the source of a file cannot be read."""

    default_code = ErrorCodes.FILE_READ_ERROR


class PieceVerificationError(PMTorrentException):
    """
    Raised by the download client when a received piece fails its proof,
    or (with index None) when the file listing describes no possible tree.
    """

    default_code = ErrorCodes.PIECE_VERIFICATION_FAILED

    def __init__(self, hash_id: str, index: Optional[int], reason: Optional[str] = None) -> None:
        if index is None:
            message = f"Listing of {hash_id} is inconsistent: {reason}"
        else:
            message = f"Piece {index} of {hash_id} does not match the trusted root"
        details: dict[str, Any] = {"hash": hash_id, "index": index}
        if reason is not None:
            details["reason"] = reason
        super().__init__(message, details=details, retryable=index is not None)
        self.hash_id = hash_id
        self.index = index
