"""
Common test fixtures shared by all modules.

Provides factory functions for:
- Leaf digests (distinct, deterministic)
- File contents and File objects
- Populated FileRepo instances
- An independent recursive root computation used as an oracle
"""

from typing import Optional, Sequence

from pmtorrent.crypto.hashing import Hasher, Sha256Hasher, sha256
from pmtorrent.files.chunk import CHUNK_BYTES
from pmtorrent.files.file import File
from pmtorrent.merkle.indexing import OddNodePolicy
from pmtorrent.repo import FileRepo


def make_leaves(count: int, prefix: str = "leaf") -> list[bytes]:
    """Create `count` distinct SHA-256 leaf digests."""
    return [sha256(f"{prefix}-{i}".encode()) for i in range(count)]


def make_data(size: int, seed: int = 7) -> bytes:
    """Create `size` deterministic, non-repeating-looking bytes."""
    return bytes((i * 31 + seed) % 251 for i in range(size))


def make_file(
    size: int = 3 * CHUNK_BYTES + 100,
    *,
    chunk_size: int = CHUNK_BYTES,
    seed: int = 7,
    **kwargs,
) -> File:
    """Create a File over make_data(size)."""
    return File.from_bytes(make_data(size, seed), chunk_size=chunk_size, **kwargs)


def make_repo(*files: File) -> FileRepo:
    """Create a FileRepo holding the given files (one default file if none)."""
    repo = FileRepo()
    for file in files or (make_file(),):
        repo.add(file)
    return repo


def reference_root(
    leaves: Sequence[bytes],
    hasher: Optional[Hasher] = None,
    policy: OddNodePolicy = OddNodePolicy.DUPLICATE,
) -> bytes:
    """
    Compute a root level by level, without any index arithmetic.

    Used to cross-check the flat-array construction.
    """
    hasher = hasher or Sha256Hasher()
    level = list(leaves)
    while len(level) > 1:
        nxt = []
        for i in range(0, len(level), 2):
            if i + 1 < len(level):
                nxt.append(hasher.combine(level[i], level[i + 1]))
            elif policy is OddNodePolicy.PROMOTE:
                nxt.append(level[i])
            else:
                nxt.append(hasher.combine(level[i], level[i]))
        level = nxt
    return level[0]
