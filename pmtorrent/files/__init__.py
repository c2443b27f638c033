"""
File chunking and per-file Merkle trees.
"""
from .chunk import (
    CHUNK_BYTES,
    FILLER_HASH,
    Chunk,
    filler_hash,
    leaf_digest,
    next_pow2,
    pad_chunk,
    to_chunks,
)
from .file import File, verify_chunk

__all__ = [
    "CHUNK_BYTES",
    "FILLER_HASH",
    "Chunk",
    "File",
    "filler_hash",
    "leaf_digest",
    "next_pow2",
    "pad_chunk",
    "to_chunks",
    "verify_chunk",
]
