"""
Chunked files with a Merkle tree over their chunks.

A File holds the chunks of one file together with the tree built from
their leaf digests, and answers chunk requests with (chunk, proof) pairs.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Sequence

from pmtorrent.crypto.hashing import Hasher, Sha256Hasher, encode_hex
from pmtorrent.files.chunk import (
    CHUNK_BYTES,
    Chunk,
    filler_hash,
    leaf_digest,
    next_pow2,
    to_chunks,
)
from pmtorrent.merkle.indexing import OddNodePolicy, Side, TreeLayout
from pmtorrent.merkle.merkle_tree import FlatMerkleTree, Proof, build, verify_at
from pmtorrent.schemas.errors import ChunkNotFoundError, FileReadError


logger = logging.getLogger(__name__)


class File:
    """
    Bytes of a file in chunks together with a Merkle tree over them.

    Args:
        chunks: Chunks in file order (leaf_idx must equal the position)
        chunk_size: Size every chunk is padded to before hashing
        hasher: Hashing capability (defaults to SHA-256)
        policy: Odd-node policy of the tree
        pad_to_pow2: Append filler leaves up to the next power of two

    Raises:
        EmptyInputError: If there are no chunks
    """

    def __init__(
        self,
        chunks: Sequence[Chunk],
        *,
        chunk_size: int = CHUNK_BYTES,
        hasher: Optional[Hasher] = None,
        policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
        pad_to_pow2: bool = False,
    ) -> None:
        self.chunk_size = chunk_size
        self.hasher = hasher or Sha256Hasher()
        self.chunks: tuple[Chunk, ...] = tuple(chunks)
        self.pad_to_pow2 = pad_to_pow2

        leaves = [leaf_digest(c.data, chunk_size, self.hasher) for c in self.chunks]
        if pad_to_pow2 and leaves:
            leaves.extend([filler_hash(self.hasher)] * (next_pow2(len(leaves)) - len(leaves)))

        self.tree: FlatMerkleTree = build(leaves, hasher=self.hasher, policy=policy)
        logger.debug(
            f"File with {len(self.chunks)} chunks, root {encode_hex(self.get_root())}"
        )

    @classmethod
    def from_bytes(cls, data: bytes, *, chunk_size: int = CHUNK_BYTES, **kwargs) -> "File":
        return cls(to_chunks(data, chunk_size), chunk_size=chunk_size, **kwargs)

    @classmethod
    def from_reader(cls, reader: BinaryIO, *, chunk_size: int = CHUNK_BYTES, **kwargs) -> "File":
        """
        Build a File by reading a binary stream chunk by chunk.

        Short reads are accumulated until a full chunk or end of stream.

        Raises:
            FileReadError: If reading the stream fails
        """
        return cls(
            list(_read_chunks(reader, chunk_size)),
            chunk_size=chunk_size,
            **kwargs,
        )

    @classmethod
    def from_path(cls, path: str | Path, *, chunk_size: int = CHUNK_BYTES, **kwargs) -> "File":
        path = Path(path)
        try:
            with open(path, "rb") as f:
                file = cls.from_reader(f, chunk_size=chunk_size, **kwargs)
        except OSError as e:
            raise FileReadError(f"Cannot read {path}: {e}", details={"path": str(path)}) from e
        logger.info(f"Loaded {path} ({file.get_size()} chunks)")
        return file

    @property
    def leaf_count(self) -> int:
        return self.tree.leaf_count

    def get_root(self) -> bytes:
        return self.tree.root()

    def get_size(self) -> int:
        """Number of chunks (filler leaves excluded)."""
        return len(self.chunks)

    def get_chunk(self, idx: int) -> tuple[Chunk, Proof]:
        """
        Get a chunk and its inclusion proof.

        Raises:
            ChunkNotFoundError: If the file has no chunk at idx
        """
        if not 0 <= idx < len(self.chunks):
            raise ChunkNotFoundError(idx, len(self.chunks))
        chunk = self.chunks[idx]
        return chunk, self.tree.prove_at(chunk.leaf_idx)


def _read_chunks(reader: BinaryIO, chunk_size: int) -> Iterable[Chunk]:
    idx = 0
    buf = b""
    while True:
        try:
            data = reader.read(chunk_size - len(buf))
        except OSError as e:
            raise FileReadError(f"Failed to read chunk {idx}: {e}") from e

        if not data:
            break

        buf += data
        if len(buf) == chunk_size:
            yield Chunk(data=buf, leaf_idx=idx)
            idx += 1
            buf = b""

    if buf:
        yield Chunk(data=buf, leaf_idx=idx)


def verify_chunk(
    data: bytes,
    leaf_idx: int,
    proof: Iterable[tuple[bytes, Side | str]],
    root: bytes,
    *,
    leaf_count: int,
    chunk_count: Optional[int] = None,
    chunk_size: int = CHUNK_BYTES,
    hasher: Optional[Hasher] = None,
    policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
) -> bool:
    """
    Client-side check that received chunk bytes are chunk leaf_idx of the
    file committed to by a trusted root.

    The proof is checked against the tree shape implied by leaf_count and
    policy, so a genuine chunk served under another index is rejected. When
    chunk_count is smaller than leaf_count the file is padded, and every
    sibling standing for filler leaves must really be filler; for the last
    chunk this proves no chunk follows it.

    Args:
        data: Raw chunk bytes as received
        leaf_idx: Index the chunk was requested for
        proof: Proof steps as received
        root: Root obtained out-of-band (the file hash)
        leaf_count: Number of tree leaves, filler included
        chunk_count: Number of real chunks (defaults to leaf_count)
        chunk_size: Chunk size the file was published with
        hasher: Hasher the file was published with
        policy: Odd-node policy the file was published with

    Returns:
        True if the chunk is authentic and sits at leaf_idx
    """
    if len(data) > chunk_size:
        return False
    if chunk_count is None:
        chunk_count = leaf_count
    if chunk_count > leaf_count or not 0 <= leaf_idx < chunk_count:
        return False

    hasher = hasher or Sha256Hasher()
    try:
        layout = TreeLayout.for_leaves(leaf_count, policy)
    except ValueError as e:
        logger.debug(f"Cannot lay out {leaf_count} leaves: {e}")
        return False

    return verify_at(
        leaf_digest(data, chunk_size, hasher),
        leaf_idx,
        proof,
        root,
        layout,
        hasher,
        filler_from=chunk_count if chunk_count < leaf_count else None,
        filler=filler_hash(hasher),
    )
