"""
Merkle Tree Index Arithmetic

Pure, stateless position arithmetic for the flat "root-last" tree layout.

Layout Rules:
1. Levels are stored lowest first: leaves occupy positions 0..L-1
2. Within a level, nodes are stored left to right
3. Level k+1 has ceil(size(k) / 2) nodes; the last level has one node (the root)
4. The root is the last entry of the array (position N - 1)

Example (4 leaves, 7 nodes):

        6
      /   \\
     4     5
    / \\   / \\
   0   1 2   3

For power-of-two leaf counts, positions agree with the binary heap relations
applied to the depth-from-root r = N - 1 - p (parent (r - 1) // 2, children
2r + 1 and 2r + 2). For any other leaf count the heap formulas would cross
level boundaries, so every relation here is computed from the level offsets.

Odd Levels:
The handling of a trailing unpaired node is an OddNodePolicy:
- DUPLICATE: the node is paired with itself (it is its own sibling)
- PROMOTE: the node is carried upward unchanged (it has no sibling)
- REJECT: only power-of-two leaf counts are accepted
"""
from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional

from pmtorrent.schemas.errors import EmptyInputError, IndexOutOfRangeError, LeafCountError


class OddNodePolicy(str, Enum):
    """How a trailing unpaired node at any level is turned into a parent."""

    DUPLICATE = "duplicate"
    PROMOTE = "promote"
    REJECT = "reject"


class Side(str, Enum):
    """Side of a node relative to its sibling."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Side":
        return Side.RIGHT if self is Side.LEFT else Side.LEFT


def is_pow_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def level_sizes(leaf_count: int, policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE) -> list[int]:
    """
    Compute the number of nodes at every level, leaves first.

    Args:
        leaf_count: Number of leaves (L)
        policy: Odd-node policy

    Returns:
        List of level sizes ending with 1 (the root level)

    Raises:
        EmptyInputError: If leaf_count is zero or negative
        LeafCountError: If policy is REJECT and leaf_count is not a power of two

    Example:
        >>> level_sizes(5)
        [5, 3, 2, 1]
    """
    policy = OddNodePolicy(policy)
    if leaf_count <= 0:
        raise EmptyInputError()
    if policy is OddNodePolicy.REJECT and not is_pow_of_two(leaf_count):
        raise LeafCountError(leaf_count)

    sizes = [leaf_count]
    while sizes[-1] > 1:
        sizes.append((sizes[-1] + 1) // 2)
    return sizes


def node_count(leaf_count: int, policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE) -> int:
    """Total node count N for a tree with leaf_count leaves."""
    return sum(level_sizes(leaf_count, policy))


@dataclass(frozen=True)
class TreeLayout:
    """
    Position arithmetic for one tree shape.

    A layout depends only on the leaf count and the odd-node policy, so it
    can be computed on either side of the wire without the tree itself.

    Attributes:
        leaf_count: Number of leaves (L)
        policy: Odd-node policy the tree was built with
        level_sizes: Node count of each level, leaves first
        level_offsets: Array position of the first node of each level
    """

    leaf_count: int
    policy: OddNodePolicy
    level_sizes: tuple[int, ...]
    level_offsets: tuple[int, ...]

    @classmethod
    def for_leaves(
        cls,
        leaf_count: int,
        policy: OddNodePolicy | str = OddNodePolicy.DUPLICATE,
    ) -> "TreeLayout":
        policy = OddNodePolicy(policy)
        sizes = level_sizes(leaf_count, policy)

        offsets = []
        offset = 0
        for size in sizes:
            offsets.append(offset)
            offset += size

        return cls(
            leaf_count=leaf_count,
            policy=policy,
            level_sizes=tuple(sizes),
            level_offsets=tuple(offsets),
        )

    @property
    def node_count(self) -> int:
        return self.level_offsets[-1] + 1

    @property
    def height(self) -> int:
        """Number of levels above the leaves."""
        return len(self.level_sizes) - 1

    @property
    def root_position(self) -> int:
        return self.node_count - 1

    def level_range(self, level: int) -> range:
        """Array positions occupied by a level."""
        start = self.level_offsets[level]
        return range(start, start + self.level_sizes[level])

    def leaf_position(self, leaf_index: int) -> int:
        """Validate a leaf index; leaves sit at the front of the array."""
        if not 0 <= leaf_index < self.leaf_count:
            raise IndexOutOfRangeError(leaf_index, self.leaf_count)
        return leaf_index

    def level_of(self, position: int) -> int:
        return self.locate(position)[0]

    def locate(self, position: int) -> tuple[int, int]:
        """
        Find the level of a position and its index within that level.

        Raises:
            IndexOutOfRangeError: If position is outside [0, N)
        """
        if not 0 <= position < self.node_count:
            raise IndexOutOfRangeError(position, self.node_count, what="node")
        level = bisect_right(self.level_offsets, position) - 1
        return level, position - self.level_offsets[level]

    def depth_from_root(self, position: int) -> int:
        """Distance of a position from the end of the array (root is 0)."""
        self.locate(position)
        return self.node_count - 1 - position

    def position_of(self, depth_from_root: int) -> int:
        """Inverse of depth_from_root."""
        if not 0 <= depth_from_root < self.node_count:
            raise IndexOutOfRangeError(depth_from_root, self.node_count, what="node")
        return self.node_count - 1 - depth_from_root

    def parent(self, position: int) -> Optional[int]:
        """Parent position, or None for the root."""
        level, index = self.locate(position)
        if level == self.height:
            return None
        return self.level_offsets[level + 1] + index // 2

    def children(self, position: int) -> Optional[tuple[int, Optional[int]]]:
        """
        Child positions (left, right), or None for a leaf.

        A parent formed from a trailing odd node has right == left under
        DUPLICATE and right is None under PROMOTE.
        """
        level, index = self.locate(position)
        if level == 0:
            return None

        below = level - 1
        left = self.level_offsets[below] + 2 * index
        if 2 * index + 1 < self.level_sizes[below]:
            return left, left + 1
        if self.policy is OddNodePolicy.DUPLICATE:
            return left, left
        return left, None

    def sibling(self, position: int) -> Optional[int]:
        """
        Sibling position, or None when the node has no sibling.

        The root never has a sibling. A trailing odd node is its own sibling
        under DUPLICATE and has none under PROMOTE.
        """
        level, index = self.locate(position)
        if level == self.height:
            return None

        other = index ^ 1
        if other < self.level_sizes[level]:
            return self.level_offsets[level] + other
        if self.policy is OddNodePolicy.DUPLICATE:
            return position
        return None

    def side_of(self, position: int) -> Side:
        """Whether the node is the left or right member of its pair."""
        _, index = self.locate(position)
        return Side.LEFT if index % 2 == 0 else Side.RIGHT

    def leaf_span(self, position: int) -> range:
        """Leaf indices covered by the subtree rooted at a position."""
        level, index = self.locate(position)
        start = index << level
        return range(start, min((index + 1) << level, self.leaf_count))

    def proof_path(self, leaf_index: int) -> list[PathStep]:
        """
        The proof steps a leaf's inclusion proof must consist of.

        One entry per ancestor level that has a sibling, leaf level first.
        Levels where a trailing node is promoted contribute no entry. Since
        the shape depends only on (leaf_count, policy, leaf_index), a verifier
        can compare a received proof against it step by step.

        Raises:
            IndexOutOfRangeError: If leaf_index is outside [0, leaf_count)
        """
        position = self.leaf_position(leaf_index)

        path: list[PathStep] = []
        parent = self.parent(position)
        while parent is not None:
            sibling = self.sibling(position)
            if sibling is not None:
                path.append(PathStep(
                    level=self.level_of(position),
                    position=position,
                    sibling=sibling,
                    side=self.side_of(position).opposite,
                ))
            position = parent
            parent = self.parent(position)
        return path


class PathStep(NamedTuple):
    """
    Expected shape of one proof step.

    Attributes:
        level: Level of the node being hashed upward (0 = leaves)
        position: Array position of that node
        sibling: Array position of its sibling (== position for a duplicate)
        side: Side on which the sibling sits
    """
    level: int
    position: int
    sibling: int
    side: Side


__all__ = [
    "OddNodePolicy",
    "PathStep",
    "Side",
    "TreeLayout",
    "is_pow_of_two",
    "level_sizes",
    "node_count",
]
