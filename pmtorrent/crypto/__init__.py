"""
Core cryptographic utilities.

Provides the pluggable hashing capability used by the Merkle tree.
"""
from .hashing import (
    sha256,
    hash_concat,
    Hasher,
    Sha256Hasher,
    EmojiHasher,
    get_hasher,
    encode_hex,
    decode_hex,
)

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
