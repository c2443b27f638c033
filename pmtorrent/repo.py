"""
File repository.

Holds every served File keyed by the hex encoding of its Merkle root and
answers listing and piece requests. A repository is populated once at
startup and only read afterwards, so request handlers can share it.
"""
from __future__ import annotations

import logging
from typing import Iterator

from pmtorrent.crypto.hashing import encode_hex
from pmtorrent.files.file import File
from pmtorrent.schemas.errors import FileNotFoundInRepoError
from pmtorrent.schemas.pieces import FileDescription, Piece


logger = logging.getLogger(__name__)


class FileRepo:
    """Files served by hash."""

    def __init__(self) -> None:
        self._files: dict[str, File] = {}

    def add(self, file: File) -> str:
        """Register a file and return its hash id."""
        hash_id = encode_hex(file.get_root())
        if hash_id in self._files:
            logger.info(f"File {hash_id} already registered")
        self._files[hash_id] = file
        logger.info(f"Added file {hash_id} ({file.get_size()} pieces)")
        return hash_id

    def get(self, hash_id: str) -> File:
        """
        Raises:
            FileNotFoundInRepoError: If no file has this hash
        """
        try:
            return self._files[hash_id.lower()]
        except KeyError:
            raise FileNotFoundInRepoError(hash_id) from None

    def get_available(self) -> list[FileDescription]:
        return [
            FileDescription(
                hash=hash_id,
                pieces=file.get_size(),
                leaf_count=file.leaf_count,
                chunk_size=file.chunk_size,
                policy=file.tree.policy,
            )
            for hash_id, file in sorted(self._files.items())
        ]

    def get_piece(self, hash_id: str, piece: int) -> Piece:
        """
        Get one piece of a file with its proof.

        Raises:
            FileNotFoundInRepoError: If no file has this hash
            ChunkNotFoundError: If the file has no such piece
        """
        file = self.get(hash_id)
        chunk, proof = file.get_chunk(piece)
        return Piece.from_chunk(hash_id.lower(), file.leaf_count, chunk, proof)

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, hash_id: object) -> bool:
        return isinstance(hash_id, str) and hash_id.lower() in self._files

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._files))
