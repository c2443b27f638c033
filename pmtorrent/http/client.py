"""
HTTP Client

Download client for a pmtorrent server. Every received piece is checked
against the file hash, which is the Merkle root the client trusts.
"""

from __future__ import annotations

import json as _json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from pmtorrent.crypto.hashing import Hasher, Sha256Hasher, decode_hex
from pmtorrent.files.chunk import next_pow2
from pmtorrent.files.file import verify_chunk
from pmtorrent.schemas.errors import PMTorrentError, PieceVerificationError
from pmtorrent.schemas.pieces import FileDescription, Piece


logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """
    Response from an HTTP request.
    """
    status_code: int
    content: bytes
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        """Check if request was successful (2xx status)."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return _json.loads(self.content)

    def raise_for_status(self) -> None:
        """Raise HttpError if status is not 2xx."""
        if self.ok:
            return
        message = f"HTTP {self.status_code}"
        error: Optional[PMTorrentError] = None
        try:
            body = self.json()
            if isinstance(body, dict) and isinstance(body.get("error"), dict):
                error = PMTorrentError.model_validate(body["error"])
                message = f"{message}: {error.message}"
        except ValueError:
            pass
        raise HttpError(message, status_code=self.status_code, response=self, error=error)


class HttpError(Exception):
    """HTTP request error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[HttpResponse] = None,
        error: Optional[PMTorrentError] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response
        self.error = error


class PieceClient:
    """
    Client for the piece-serving API.

    Usage:
        client = PieceClient("http://127.0.0.1:8080")

        for desc in client.list_files():
            data = client.download(desc.hash)
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        hasher: Optional[Hasher] = None,
        session: Any = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Server URL, e.g. "http://127.0.0.1:8080"
            timeout: Request timeout in seconds
            hasher: Hasher the server publishes with (defaults to SHA-256)
            session: Object with a requests-compatible ``request`` method;
                a requests.Session is created lazily when omitted
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.hasher = hasher or Sha256Hasher()
        self._session = session

    def _get_session(self):
        """Lazy-load requests session."""
        if self._session is None:
            import requests
            self._session = requests.Session()
        return self._session

    def get(self, path: str) -> HttpResponse:
        """
        GET a server path.

        Raises:
            HttpError: If the request fails before a response arrives
        """
        import requests

        url = f"{self.base_url}{path}"
        start = time.monotonic()
        try:
            response = self._get_session().request("GET", url, timeout=self.timeout)
        except requests.RequestException as e:
            raise HttpError(str(e)) from e
        elapsed_ms = (time.monotonic() - start) * 1000

        result = HttpResponse(
            status_code=response.status_code,
            content=response.content,
            headers=dict(response.headers),
            url=str(response.url),
            elapsed_ms=elapsed_ms,
        )
        logger.debug(f"GET {url} -> {result.status_code} ({elapsed_ms:.1f} ms)")
        return result

    def list_files(self) -> list[FileDescription]:
        response = self.get("/hashes")
        response.raise_for_status()
        return [FileDescription.model_validate(item) for item in response.json()]

    def describe(self, hash_id: str) -> FileDescription:
        """
        Raises:
            HttpError: If the server does not list the file (status 404)
        """
        for desc in self.list_files():
            if desc.hash == hash_id.lower():
                return desc
        raise HttpError(f"File {hash_id} is not served", status_code=404)

    def fetch_piece(self, hash_id: str, index: int) -> Piece:
        response = self.get(f"/piece/{hash_id}/{index}")
        response.raise_for_status()
        return Piece.model_validate(response.json())

    def check_listing(self, desc: FileDescription) -> None:
        """
        Check that a listing entry describes a tree that can exist: either
        every leaf is a chunk, or the chunks are padded with filler leaves
        up to the next power of two.

        Raises:
            PieceVerificationError: If pieces and leaf_count disagree
        """
        if not 1 <= desc.pieces <= desc.leaf_count:
            reason = f"{desc.pieces} pieces for {desc.leaf_count} leaves"
        elif desc.pieces < desc.leaf_count and desc.leaf_count != next_pow2(desc.pieces):
            reason = f"{desc.leaf_count} leaves is not {desc.pieces} pieces padded to a power of two"
        else:
            return
        logger.warning(f"Listing of {desc.hash} rejected: {reason}")
        raise PieceVerificationError(desc.hash, None, reason)

    def verify_piece(self, desc: FileDescription, piece: Piece, index: int) -> bool:
        """
        Check that a piece is chunk `index` of the file the trusted root
        (the file hash) commits to.

        The index and the tree shape come from the request and the listing,
        never from the labels inside the piece.
        """
        if piece.leaf_count != desc.leaf_count:
            return False
        return verify_chunk(
            piece.chunk_bytes(),
            index,
            piece.proof_steps(),
            decode_hex(desc.hash),
            leaf_count=desc.leaf_count,
            chunk_count=desc.pieces,
            chunk_size=desc.chunk_size,
            hasher=self.hasher,
            policy=desc.policy,
        )

    def download(self, hash_id: str) -> bytes:
        """
        Download and verify every piece of a file.

        The listing is not trusted beyond the file hash: each piece must sit
        at the index it was requested for, and the proof of the last piece
        shows that no chunk follows it.

        Raises:
            HttpError: On a non-2xx response
            PieceVerificationError: If the listing is inconsistent, or on
                the first piece that fails its proof
        """
        desc = self.describe(hash_id)
        self.check_listing(desc)
        parts: list[bytes] = []

        for index in range(desc.pieces):
            piece = self.fetch_piece(desc.hash, index)
            if piece.index != index or not self.verify_piece(desc, piece, index):
                logger.warning(f"Piece {index} of {desc.hash} failed verification")
                raise PieceVerificationError(desc.hash, index)
            parts.append(piece.chunk_bytes())

        logger.info(f"Downloaded {desc.hash} ({desc.pieces} pieces)")
        return b"".join(parts)
