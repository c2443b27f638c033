"""
Merkle Tree Implementation

Construction, inclusion-proof generation and verification over a flat
array of digests stored root-last (see indexing.py for the layout).

Commitment Rules:
1. Leaves are digests supplied by the caller, kept in input order
2. Parent hashing: parent = hasher.combine(left, right) = hash(left + right)
3. Odd levels follow the tree's OddNodePolicy (DUPLICATE by default)
4. Empty input: build([]) raises EmptyInputError
5. Single leaf: root = leaf, proofs are empty

Layering:
MerkleTree exposes a small set of primitives (layout, hasher, node access).
Everything else (root, parent/sibling lookups, proofs, self-check) is
derived from those primitives, so another storage backend only needs to
implement the primitives.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Iterable, NamedTuple, Optional, Sequence

from pmtorrent.crypto.hashing import Hasher, Sha256Hasher, encode_hex
from pmtorrent.merkle.indexing import OddNodePolicy, Side, TreeLayout
from pmtorrent.schemas.errors import EmptyInputError, IndexOutOfRangeError


logger = logging.getLogger(__name__)


class ProofStep(NamedTuple):
    """
    One level of an inclusion proof.

    Attributes:
        digest: Digest of the sibling node at this level
        side: Side on which the sibling sits (LEFT means hash(sibling + current))
    """
    digest: bytes
    side: Side


Proof = list[ProofStep]


class MerkleTree(ABC):
    """
    Read-only Merkle tree over a root-last node array.

    Subclasses provide ``layout``, ``hasher`` and ``node``.
    """

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def layout(self) -> TreeLayout:
        """Shape of the tree."""

    @property
    @abstractmethod
    def hasher(self) -> Hasher:
        """Hasher the tree was built with."""

    @abstractmethod
    def node(self, position: int) -> bytes:
        """Digest stored at an array position."""

    # ------------------------------------------------------------------
    # Derived operations
    # ------------------------------------------------------------------

    @property
    def leaf_count(self) -> int:
        return self.layout.leaf_count

    @property
    def node_count(self) -> int:
        return self.layout.node_count

    @property
    def height(self) -> int:
        return self.layout.height

    @property
    def policy(self) -> OddNodePolicy:
        return self.layout.policy

    def __len__(self) -> int:
        return self.layout.node_count

    def root(self) -> bytes:
        """The root digest, stored last."""
        return self.node(self.layout.root_position)

    def leaf(self, leaf_index: int) -> bytes:
        return self.node(self.layout.leaf_position(leaf_index))

    def leaves(self) -> list[bytes]:
        return [self.node(p) for p in range(self.layout.leaf_count)]

    def nodes(self) -> list[bytes]:
        return [self.node(p) for p in range(self.layout.node_count)]

    def parent(self, position: int) -> Optional[tuple[bytes, int]]:
        """(digest, position) of the parent, or None for the root."""
        parent = self.layout.parent(position)
        if parent is None:
            return None
        return self.node(parent), parent

    def sibling(self, position: int) -> Optional[tuple[bytes, int]]:
        """(digest, position) of the sibling, or None when there is none."""
        sibling = self.layout.sibling(position)
        if sibling is None:
            return None
        return self.node(sibling), sibling

    def children(self, position: int) -> list[tuple[bytes, int]]:
        """(digest, position) of each child; empty for a leaf."""
        children = self.layout.children(position)
        if children is None:
            return []
        return [(self.node(c), c) for c in children if c is not None]

    def prove_at(self, leaf_index: int) -> Proof:
        """
        Generate an inclusion proof for a leaf.

        Algorithm:
        1. Start at the leaf position
        2. While the current node is not the root:
           - If it has a sibling, record (sibling digest, sibling side)
           - Move to the parent
        3. The root itself is never part of the proof

        Args:
            leaf_index: 0-based index of the leaf

        Returns:
            Proof steps ordered from the leaf level upwards

        Raises:
            IndexOutOfRangeError: If leaf_index is outside [0, leaf_count)
        """
        return [
            ProofStep(self.node(step.sibling), step.side)
            for step in self.layout.proof_path(leaf_index)
        ]

    def verify_tree(self) -> bool:
        """Recompute every internal node and compare with the stored digest."""
        return verify_tree(self)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(leaves={self.leaf_count}, "
            f"nodes={self.node_count}, root={encode_hex(self.root())[:16]}...)"
        )


class FlatMerkleTree(MerkleTree):
    """In-memory tree backed by an immutable tuple of digests."""

    def __init__(
        self,
        nodes: Sequence[bytes],
        layout: TreeLayout,
        hasher: Optional[Hasher] = None,
    ) -> None:
        if len(nodes) != layout.node_count:
            raise ValueError(
                f"Expected {layout.node_count} nodes for {layout.leaf_count} leaves, "
                f"got {len(nodes)}"
            )
        self._nodes: tuple[bytes, ...] = tuple(nodes)
        self._layout = layout
        self._hasher = hasher or Sha256Hasher()

    @classmethod
    def from_leaves(
        cls,
        leaves: Iterable[bytes],
        hasher: Optional[Hasher] = None,
        policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
    ) -> "FlatMerkleTree":
        return build(leaves, hasher=hasher, policy=policy)

    @property
    def layout(self) -> TreeLayout:
        return self._layout

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    def node(self, position: int) -> bytes:
        if not 0 <= position < len(self._nodes):
            raise IndexOutOfRangeError(position, len(self._nodes), what="node")
        return self._nodes[position]

    def nodes(self) -> list[bytes]:
        return list(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlatMerkleTree):
            return NotImplemented
        return self._layout == other._layout and self._nodes == other._nodes

    __hash__ = None  # type: ignore[assignment]


def _parent_digest(
    hasher: Hasher,
    node: Callable[[int], bytes],
    children: tuple[int, Optional[int]],
) -> bytes:
    left, right = children
    if right is None:
        # promoted odd node
        return node(left)
    return hasher.combine(node(left), node(right))


def build(
    leaves: Iterable[bytes],
    hasher: Optional[Hasher] = None,
    policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
) -> FlatMerkleTree:
    """
    Build a Merkle tree from an ordered sequence of leaf digests.

    Algorithm:
    1. Allocate the full node array (size N, from the layout)
    2. Copy the leaves into positions 0..L-1
    3. Level by level from the bottom, combine adjacent pairs into the
       parent slot, applying the odd-node policy to a trailing node
    4. The single node of the last level is the root

    Example: [a, b, c] with DUPLICATE
        -> [a, b, c, parent(a,b), parent(c,c), parent(parent(a,b), parent(c,c))]

    Args:
        leaves: Leaf digests; order matters and is preserved
        hasher: Hashing capability (defaults to SHA-256)
        policy: Odd-node policy

    Returns:
        A fully populated FlatMerkleTree

    Raises:
        EmptyInputError: If leaves is empty
        LeafCountError: If policy is REJECT and the leaf count is not a power of two
    """
    leaf_list = [bytes(leaf) for leaf in leaves]
    if not leaf_list:
        raise EmptyInputError()

    hasher = hasher or Sha256Hasher()
    layout = TreeLayout.for_leaves(len(leaf_list), policy)

    nodes: list[bytes] = [b""] * layout.node_count
    nodes[: layout.leaf_count] = leaf_list

    for level in range(1, len(layout.level_sizes)):
        for position in layout.level_range(level):
            nodes[position] = _parent_digest(
                hasher, nodes.__getitem__, layout.children(position)
            )

    logger.debug(
        f"Built Merkle tree: {layout.leaf_count} leaves, {layout.node_count} nodes, "
        f"policy={layout.policy.value}"
    )
    return FlatMerkleTree(nodes, layout, hasher)


def root_from_proof(
    leaf_digest: bytes,
    proof: Iterable[tuple[bytes, Side | str]],
    hasher: Optional[Hasher] = None,
) -> bytes:
    """
    Recompute a root from a leaf digest and its proof.

    Raises:
        ValueError: If a step carries an unknown side
        TypeError: If a step digest is not bytes
    """
    hasher = hasher or Sha256Hasher()
    current = leaf_digest
    for sibling, side in proof:
        if Side(side) is Side.LEFT:
            current = hasher.combine(sibling, current)
        else:
            current = hasher.combine(current, sibling)
    return current


def verify(
    leaf_digest: bytes,
    leaf_index: int,
    proof: Iterable[tuple[bytes, Side | str]],
    claimed_root: bytes,
    hasher: Optional[Hasher] = None,
) -> bool:
    """
    Verify an inclusion proof against a trusted root.

    The side of each sibling travels with the proof, so leaf_index does not
    take part in the recomputation: only its type and sign are checked, and
    a proof for one leaf verifies under any non-negative index. Use
    verify_at() when the tree shape is known and the position matters.

    Args:
        leaf_digest: Digest of the leaf being proven
        leaf_index: Claimed 0-based index of the leaf
        proof: Proof steps, leaf level first
        claimed_root: Root the caller trusts (obtained out-of-band)
        hasher: Hashing capability (defaults to SHA-256)

    Returns:
        True if the recomputed root equals claimed_root, False otherwise
        (including malformed proofs and non-integer indices)
    """
    if not isinstance(leaf_index, int) or leaf_index < 0:
        logger.debug(f"Rejecting proof for leaf index {leaf_index!r}")
        return False

    try:
        computed = root_from_proof(leaf_digest, proof, hasher)
    except (TypeError, ValueError) as e:
        logger.debug(f"Malformed proof for leaf {leaf_index}: {e}")
        return False

    if computed != claimed_root:
        logger.debug(f"Proof for leaf {leaf_index} does not match claimed root")
        return False
    return True


def filler_roots(filler: bytes, height: int, hasher: Optional[Hasher] = None) -> list[bytes]:
    """Digest of a full subtree of filler leaves, for each height 0..height."""
    hasher = hasher or Sha256Hasher()
    roots = [filler]
    for _ in range(height):
        roots.append(hasher.combine(roots[-1], roots[-1]))
    return roots


def verify_at(
    leaf_digest: bytes,
    leaf_index: int,
    proof: Iterable[tuple[bytes, Side | str]],
    claimed_root: bytes,
    layout: TreeLayout,
    hasher: Optional[Hasher] = None,
    *,
    filler_from: Optional[int] = None,
    filler: Optional[bytes] = None,
) -> bool:
    """
    Verify an inclusion proof for a specific leaf of a tree of known shape.

    On top of the root recomputation done by verify():
    1. The proof must have exactly the steps layout.proof_path(leaf_index)
       prescribes, with the same sides. Different leaves have different
       paths, so a proof for one leaf cannot be replayed for another
    2. A step whose sibling is the node itself (a duplicated trailing
       node) must carry the current digest
    3. With filler_from set, leaves from that index on are filler; a sibling
       whose subtree holds only filler must equal the filler subtree digest

    Args:
        leaf_digest: Digest of the leaf being proven
        leaf_index: 0-based index the leaf must sit at
        proof: Proof steps, leaf level first
        claimed_root: Root the caller trusts
        layout: Shape of the tree the root commits to
        hasher: Hashing capability (defaults to SHA-256)
        filler_from: Index of the first filler leaf, if the tree is padded
        filler: Filler leaf digest (required with filler_from)

    Returns:
        True if every check holds, False otherwise (never raises)
    """
    hasher = hasher or Sha256Hasher()
    try:
        path = layout.proof_path(leaf_index)
        steps = [(digest, Side(side)) for digest, side in proof]
    except (TypeError, ValueError, IndexError) as e:
        logger.debug(f"Malformed proof for leaf {leaf_index!r}: {e}")
        return False

    if len(steps) != len(path):
        logger.debug(f"Proof for leaf {leaf_index} has {len(steps)} steps, expected {len(path)}")
        return False

    padding = None
    if filler_from is not None and filler is not None:
        padding = filler_roots(filler, layout.height, hasher)

    current = leaf_digest
    try:
        for (digest, side), expected in zip(steps, path):
            if side is not expected.side:
                logger.debug(f"Proof for leaf {leaf_index} has a {side.value} step at level {expected.level}")
                return False
            if expected.sibling == expected.position and digest != current:
                logger.debug(f"Proof for leaf {leaf_index} breaks the duplicate at level {expected.level}")
                return False
            if padding is not None:
                span = layout.leaf_span(expected.sibling)
                if (
                    span.start >= filler_from
                    and len(span) == 1 << expected.level
                    and digest != padding[expected.level]
                ):
                    logger.debug(f"Proof for leaf {leaf_index} has non-filler padding at level {expected.level}")
                    return False
            if side is Side.LEFT:
                current = hasher.combine(digest, current)
            else:
                current = hasher.combine(current, digest)
    except TypeError as e:
        logger.debug(f"Malformed proof for leaf {leaf_index}: {e}")
        return False

    if current != claimed_root:
        logger.debug(f"Proof for leaf {leaf_index} does not match claimed root")
        return False
    return True


def verify_tree(tree: MerkleTree) -> bool:
    """
    Audit a whole tree: recompute every internal node bottom-up.

    Args:
        tree: Tree to check (e.g. after loading it from storage)

    Returns:
        True if every internal node matches, False on the first mismatch
    """
    layout = tree.layout
    for level in range(1, len(layout.level_sizes)):
        for position in layout.level_range(level):
            expected = _parent_digest(tree.hasher, tree.node, layout.children(position))
            if expected != tree.node(position):
                logger.debug(f"Tree node {position} (level {level}) does not match its children")
                return False
    return True


__all__ = [
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
]
