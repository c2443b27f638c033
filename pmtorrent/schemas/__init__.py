"""
Schemas: error taxonomy and wire models.

Import wire models from pmtorrent.schemas.pieces; they depend on the
Merkle package, which itself depends on the errors defined here.
"""

from .errors import (
    ErrorCodes,
    PMTorrentError,
    PMTorrentException,
    EmptyInputError,
    IndexOutOfRangeError,
    LeafCountError,
    ChunkNotFoundError,
    FileNotFoundInRepoError,
    FileReadError,
    PieceVerificationError,
)

__all__ = [
    "ErrorCodes",
    "PMTorrentError",
    "PMTorrentException",
    "EmptyInputError",
    "IndexOutOfRangeError",
    "LeafCountError",
    "ChunkNotFoundError",
    "FileNotFoundInRepoError",
    "FileReadError",
    "PieceVerificationError",
]
