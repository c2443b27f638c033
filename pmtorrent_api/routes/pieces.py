"""
Piece Routes

List served files and hand out pieces with their inclusion proofs. The
client verifies each piece against the file hash it already trusts.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Path

from pmtorrent.repo import FileRepo
from pmtorrent.schemas.errors import ChunkNotFoundError, FileNotFoundInRepoError
from pmtorrent.schemas.pieces import FileDescription, Piece
from pmtorrent_api.deps import get_repo
from pmtorrent_api.errors import FileNotServedError, PieceNotFoundError


logger = logging.getLogger(__name__)

router = APIRouter(tags=["pieces"])


@router.get("/hashes", response_model=list[FileDescription])
async def get_hashes(repo: FileRepo = Depends(get_repo)) -> list[FileDescription]:
    """List every served file by hash."""
    return repo.get_available()


@router.get("/piece/{hash_id}/{piece_idx}", response_model=Piece)
async def get_piece(
    hash_id: str,
    piece_idx: int = Path(..., ge=0),
    repo: FileRepo = Depends(get_repo),
) -> Piece:
    """
    Get one piece of a file with its proof.

    Errors:
        404 FILE_NOT_FOUND: unknown hash
        404 PIECE_NOT_FOUND: index past the last piece
    """
    try:
        return repo.get_piece(hash_id, piece_idx)
    except FileNotFoundInRepoError:
        logger.info(f"Piece request for unknown file {hash_id}")
        raise FileNotServedError(hash_id)
    except ChunkNotFoundError as e:
        logger.info(f"Piece request for {hash_id} index {piece_idx} out of range")
        raise PieceNotFoundError(hash_id, piece_idx, e.size)
