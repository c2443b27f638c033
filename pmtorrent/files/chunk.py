"""
Chunking helpers.

A file is split into fixed-size chunks; the last one may be short. Leaves
are the hash of each chunk zero-padded to the chunk size, so the server and
a downloading client derive the same leaf from the same bytes.
"""
from __future__ import annotations

from dataclasses import dataclass

from pmtorrent.crypto.hashing import Hasher


CHUNK_BYTES = 1024

# Leaf used to pad the leaf level up to a power of two
FILLER_HASH: bytes = bytes(32)


@dataclass(frozen=True)
class Chunk:
    """
    One fixed-size slice of a file.

    Attributes:
        data: Raw chunk bytes (at most the chunk size)
        leaf_idx: Index of the chunk's leaf in the Merkle tree
    """
    data: bytes
    leaf_idx: int

    def __len__(self) -> int:
        return len(self.data)

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0


def to_chunks(data: bytes, chunk_size: int = CHUNK_BYTES) -> list[Chunk]:
    """
    Split bytes into chunks of chunk_size; the final chunk may be shorter.

    Example:
        >>> len(to_chunks(bytes(6145)))
        7
    """
    if chunk_size <= 0:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")
    return [
        Chunk(data=data[offset:offset + chunk_size], leaf_idx=i)
        for i, offset in enumerate(range(0, len(data), chunk_size))
    ]


def pad_chunk(data: bytes, chunk_size: int = CHUNK_BYTES) -> bytes:
    """Zero-pad a short chunk to chunk_size."""
    if len(data) >= chunk_size:
        return data
    return data + bytes(chunk_size - len(data))


def leaf_digest(data: bytes, chunk_size: int, hasher: Hasher) -> bytes:
    """Leaf digest of a chunk: hash of the zero-padded chunk bytes."""
    return hasher.hash(pad_chunk(data, chunk_size))


def filler_hash(hasher: Hasher) -> bytes:
    """All-zero digest with the hasher's digest size."""
    if hasher.digest_size == len(FILLER_HASH):
        return FILLER_HASH
    return bytes(hasher.digest_size)


def next_pow2(n: int) -> int:
    """
    Smallest power of two >= n.

    Example:
        >>> next_pow2(6)
        8
    """
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()
