"""
Merkle Proofs Convenience Wrappers

Class-based interfaces over the functions in merkle_tree.py:
- MerkleProver: build trees / proofs from leaf digests or raw chunks
- MerkleVerifier: verify proofs from leaf digests or raw chunks
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

from pmtorrent.crypto.hashing import Hasher, Sha256Hasher
from pmtorrent.merkle.indexing import OddNodePolicy, Side
from pmtorrent.merkle.merkle_tree import Proof, build, verify


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> leaves = [sha256(b"a"), sha256(b"b"), sha256(b"c")]
        >>> proof = MerkleProver.prove(leaves, index=1)
        >>> MerkleVerifier.verify(leaves[1], 1, proof, MerkleProver.compute_root(leaves))
        True
    """

    @staticmethod
    def prove(
        leaves: Sequence[bytes],
        index: int,
        hasher: Optional[Hasher] = None,
        policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
    ) -> Proof:
        """
        Generate a proof for the leaf at the given index.

        Raises:
            IndexOutOfRangeError: If index is out of range
            EmptyInputError: If leaves is empty
        """
        return build(leaves, hasher=hasher, policy=policy).prove_at(index)

    @staticmethod
    def prove_data(
        chunks: Sequence[bytes],
        index: int,
        hasher: Optional[Hasher] = None,
        policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
    ) -> Proof:
        """Generate a proof for a raw chunk; chunks are hashed to leaves first."""
        hasher = hasher or Sha256Hasher()
        leaves = [hasher.hash(chunk) for chunk in chunks]
        return build(leaves, hasher=hasher, policy=policy).prove_at(index)

    @staticmethod
    def compute_root(
        leaves: Sequence[bytes],
        hasher: Optional[Hasher] = None,
        policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
    ) -> bytes:
        return build(leaves, hasher=hasher, policy=policy).root()


class MerkleVerifier:
    """Convenience class for verifying Merkle proofs."""

    @staticmethod
    def verify(
        leaf: bytes,
        index: int,
        proof: Iterable[tuple[bytes, Side | str]],
        root: bytes,
        hasher: Optional[Hasher] = None,
    ) -> bool:
        return verify(leaf, index, proof, root, hasher=hasher)

    @staticmethod
    def verify_data(
        chunk: bytes,
        index: int,
        proof: Iterable[tuple[bytes, Side | str]],
        root: bytes,
        hasher: Optional[Hasher] = None,
    ) -> bool:
        """
        Verify a raw chunk is included in a Merkle root.

        The chunk is hashed with the same hasher to produce the leaf digest.
        """
        hasher = hasher or Sha256Hasher()
        return verify(hasher.hash(chunk), index, proof, root, hasher=hasher)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
