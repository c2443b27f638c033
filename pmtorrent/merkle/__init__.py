"""
Merkle Tree and Inclusion Proofs

Flat-array Merkle tree stored root-last, with proof generation and
verification.

This module provides:
- TreeLayout / OddNodePolicy: position arithmetic for the root-last layout
- MerkleTree / FlatMerkleTree: read-only trees and the build() constructor
- ProofStep / verify / verify_at / verify_tree: proof checking and whole-tree audit

Usage:
    from pmtorrent.crypto import sha256
    from pmtorrent.merkle import build, verify

    leaves = [sha256(chunk) for chunk in chunks]
    tree = build(leaves)

    proof = tree.prove_at(2)
    assert verify(leaves[2], 2, proof, tree.root())
"""
from .indexing import (
    OddNodePolicy,
    PathStep,
    Side,
    TreeLayout,
    is_pow_of_two,
    level_sizes,
    node_count,
)

from .merkle_tree import (
    ProofStep,
    Proof,
    MerkleTree,
    FlatMerkleTree,
    build,
    filler_roots,
    root_from_proof,
    verify,
    verify_at,
    verify_tree,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)


__all__ = [
    # Layout
    "OddNodePolicy",
    "PathStep",
    "Side",
    "TreeLayout",
    "is_pow_of_two",
    "level_sizes",
    "node_count",
    # Tree
    "ProofStep",
    "Proof",
    "MerkleTree",
    "FlatMerkleTree",
    "build",
    "filler_roots",
    "root_from_proof",
    "verify",
    "verify_at",
    "verify_tree",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
