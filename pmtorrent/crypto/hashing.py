"""
Hashing Utilities

Pluggable hashing capability used for Merkle leaves and parent nodes.

This module provides:
- Hasher: the narrow interface the Merkle tree depends on (hash + combine)
- Sha256Hasher: the production hasher (32-byte digests)
- EmojiHasher: a toy 4-byte hasher for readable debug output
- Hex encoding/decoding helpers for digests on the wire

Determinism Notes:
- Every hasher must be a pure function of its input bytes
- combine(left, right) always hashes left || right, in that order
"""
from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences.

    This is the default Merkle parent rule: parent = sha256(left + right)
    """
    return sha256(left + right)


class Hasher(ABC):
    """
    Hashing capability consumed by the Merkle tree.

    Implementations only need to provide ``hash``; ``combine`` hashes the
    concatenation of two child digests in left-then-right order.
    """

    name: str = ""
    digest_size: int = 0

    @abstractmethod
    def hash(self, data: bytes) -> bytes:
        """Hash an arbitrary byte sequence to a fixed-size digest."""

    def combine(self, left: bytes, right: bytes) -> bytes:
        """Hash the concatenation of two child digests."""
        return self.hash(left + right)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class Sha256Hasher(Hasher):
    """A hasher that hashes provided data with the SHA-256 algorithm."""

    name = "sha256"
    digest_size = 32

    def hash(self, data: bytes) -> bytes:
        return sha256(data)

    def combine(self, left: bytes, right: bytes) -> bytes:
        return hash_concat(left, right)


# 182 sequential emoji code points start at U+1F442
_EMOJI_BASE = 0x1F442
_EMOJI_PRIME = 181


class EmojiHasher(Hasher):
    """
    Toy hasher producing one emoji per digest.

    The digest is the big-endian code point of ``U+1F442 + (byte sum mod 181)``,
    so a small tree can be printed and compared by eye. It has almost no
    collision resistance and must never be used to protect real data.
    """

    name = "emoji"
    digest_size = 4

    def hash(self, data: bytes) -> bytes:
        acc = 0
        for value in data:
            acc = ((acc % _EMOJI_PRIME) + value) & 0xFF
        acc %= _EMOJI_PRIME
        return (_EMOJI_BASE + acc).to_bytes(4, "big")

    @staticmethod
    def emoji(digest: bytes) -> str:
        """Render a digest produced by this hasher as its emoji."""
        return chr(int.from_bytes(digest, "big"))


_HASHERS: dict[str, type[Hasher]] = {
    Sha256Hasher.name: Sha256Hasher,
    EmojiHasher.name: EmojiHasher,
}


def get_hasher(name: str) -> Hasher:
    """
    Resolve a hasher by name.

    Args:
        name: Hasher name ("sha256" or "emoji"), case-insensitive

    Returns:
        A new Hasher instance

    Raises:
        ValueError: If no hasher is registered under that name
    """
    try:
        return _HASHERS[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown hasher '{name}', expected one of: {', '.join(sorted(_HASHERS))}"
        ) from None


def encode_hex(digest: bytes) -> str:
    """
    Encode a digest as lowercase hex without prefix.

    File ids and proof digests travel in this form (URL friendly).

    Example:
        >>> encode_hex(bytes.fromhex("deadbeef"))
        'deadbeef'
    """
    return digest.hex()


def decode_hex(text: str) -> bytes:
    """
    Decode a hex string (optional 0x prefix) to bytes.

    Args:
        text: Hex string

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the string has odd length or contains invalid hex characters
    """
    hex_content = text[2:] if text.startswith("0x") else text

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length, got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "sha256",
    "hash_concat",
    "Hasher",
    "Sha256Hasher",
    "EmojiHasher",
    "get_hasher",
    "encode_hex",
    "decode_hex",
]
