"""
Index arithmetic tests for pmtorrent/merkle/indexing.py

Covers:
1. Level sizes and node counts for small leaf counts
2. Agreement with the reversed binary-heap relations for power-of-two trees
3. Parent / children / sibling relations across odd levels
4. Odd-node policies (duplicate, promote, reject)
5. Range checks
6. Proof paths and subtree leaf spans
"""
import pytest

from pmtorrent.merkle.indexing import (
    OddNodePolicy,
    PathStep,
    Side,
    TreeLayout,
    is_pow_of_two,
    level_sizes,
    node_count,
)
from pmtorrent.schemas.errors import EmptyInputError, IndexOutOfRangeError, LeafCountError


class TestLevelSizes:
    """Tests for level sizes and node counts."""

    @pytest.mark.parametrize(
        "leaves,sizes",
        [
            (1, [1]),
            (2, [2, 1]),
            (3, [3, 2, 1]),
            (4, [4, 2, 1]),
            (5, [5, 3, 2, 1]),
            (6, [6, 3, 2, 1]),
            (7, [7, 4, 2, 1]),
            (8, [8, 4, 2, 1]),
        ],
    )
    def test_level_sizes(self, leaves, sizes):
        assert level_sizes(leaves) == sizes
        assert node_count(leaves) == sum(sizes)

    def test_power_of_two_node_count(self):
        """A full tree over 2^k leaves has 2^(k+1) - 1 nodes."""
        for k in range(6):
            assert node_count(2 ** k) == 2 ** (k + 1) - 1

    def test_three_leaves_has_six_nodes(self):
        """The padded pair at level 1 is stored, so 3 leaves need 6 slots."""
        assert node_count(3) == 6

    def test_zero_leaves_raises(self):
        with pytest.raises(EmptyInputError):
            level_sizes(0)

    def test_empty_input_is_value_error(self):
        with pytest.raises(ValueError):
            node_count(-1)

    def test_is_pow_of_two(self):
        assert [n for n in range(0, 20) if is_pow_of_two(n)] == [1, 2, 4, 8, 16]


class TestLayout:
    """Tests for TreeLayout offsets and positions."""

    def test_offsets(self):
        layout = TreeLayout.for_leaves(5)
        assert layout.level_sizes == (5, 3, 2, 1)
        assert layout.level_offsets == (0, 5, 8, 10)
        assert layout.node_count == 11
        assert layout.height == 3
        assert layout.root_position == 10

    def test_single_leaf_is_root(self):
        layout = TreeLayout.for_leaves(1)
        assert layout.node_count == 1
        assert layout.height == 0
        assert layout.parent(0) is None
        assert layout.sibling(0) is None

    def test_level_range(self):
        layout = TreeLayout.for_leaves(5)
        assert list(layout.level_range(0)) == [0, 1, 2, 3, 4]
        assert list(layout.level_range(1)) == [5, 6, 7]
        assert list(layout.level_range(3)) == [10]

    def test_locate(self):
        layout = TreeLayout.for_leaves(5)
        assert layout.locate(0) == (0, 0)
        assert layout.locate(7) == (1, 2)
        assert layout.locate(9) == (2, 1)
        assert layout.locate(10) == (3, 0)
        assert layout.level_of(8) == 2

    def test_depth_from_root_round_trip(self):
        layout = TreeLayout.for_leaves(6)
        assert layout.depth_from_root(layout.root_position) == 0
        for p in range(layout.node_count):
            assert layout.position_of(layout.depth_from_root(p)) == p

    def test_policy_accepts_string(self):
        assert TreeLayout.for_leaves(4, "promote").policy is OddNodePolicy.PROMOTE


class TestHeapEquivalence:
    """For 2^k leaves the level arithmetic matches the reversed heap formulas."""

    @pytest.mark.parametrize("leaves", [1, 2, 4, 8, 16, 32])
    def test_parent_children_sibling(self, leaves):
        layout = TreeLayout.for_leaves(leaves)
        n = layout.node_count

        def pos(r):
            return n - 1 - r

        for p in range(n):
            r = n - 1 - p

            if r == 0:
                assert layout.parent(p) is None
                assert layout.sibling(p) is None
            else:
                assert layout.parent(p) == pos((r - 1) // 2)
                expected_sibling = r + 1 if r % 2 == 1 else r - 1
                assert layout.sibling(p) == pos(expected_sibling)

            if 2 * r + 2 < n:
                assert set(layout.children(p)) == {pos(2 * r + 1), pos(2 * r + 2)}
            else:
                assert layout.children(p) is None


class TestRelations:
    """Parent / children / sibling across odd levels."""

    def test_three_leaves_duplicate(self):
        layout = TreeLayout.for_leaves(3)
        assert layout.level_offsets == (0, 3, 5)
        assert layout.parent(0) == 3
        assert layout.parent(1) == 3
        assert layout.parent(2) == 4
        assert layout.parent(3) == 5
        assert layout.parent(4) == 5
        assert layout.parent(5) is None

        assert layout.sibling(0) == 1
        assert layout.sibling(2) == 2
        assert layout.children(4) == (2, 2)
        assert layout.children(5) == (3, 4)
        assert layout.children(1) is None

    def test_three_leaves_promote(self):
        layout = TreeLayout.for_leaves(3, OddNodePolicy.PROMOTE)
        assert layout.sibling(2) is None
        assert layout.children(4) == (2, None)
        assert layout.sibling(3) == 4

    def test_five_leaves_odd_middle_level(self):
        layout = TreeLayout.for_leaves(5)
        # level 1 = [5, 6, 7]; 7 is the trailing node
        assert layout.parent(4) == 7
        assert layout.sibling(7) == 7
        assert layout.parent(7) == 9
        assert layout.children(9) == (7, 7)
        assert layout.children(8) == (5, 6)

    def test_every_parent_lists_child(self):
        for leaves in range(1, 20):
            for policy in (OddNodePolicy.DUPLICATE, OddNodePolicy.PROMOTE):
                layout = TreeLayout.for_leaves(leaves, policy)
                for p in range(layout.node_count - 1):
                    assert p in layout.children(layout.parent(p))

    def test_sibling_shares_parent(self):
        for leaves in range(1, 20):
            layout = TreeLayout.for_leaves(leaves)
            for p in range(layout.node_count):
                s = layout.sibling(p)
                if s is not None:
                    assert layout.parent(s) == layout.parent(p)
                    assert layout.sibling(s) == p

    def test_side_of(self):
        layout = TreeLayout.for_leaves(4)
        assert layout.side_of(0) is Side.LEFT
        assert layout.side_of(1) is Side.RIGHT
        assert layout.side_of(5) is Side.RIGHT
        assert Side.LEFT.opposite is Side.RIGHT
        assert Side.RIGHT.opposite is Side.LEFT


class TestProofPath:
    """Tests for proof_path and leaf_span."""

    def test_four_leaves(self):
        layout = TreeLayout.for_leaves(4)
        assert layout.proof_path(2) == [
            PathStep(level=0, position=2, sibling=3, side=Side.RIGHT),
            PathStep(level=1, position=5, sibling=4, side=Side.LEFT),
        ]

    def test_three_leaves_duplicate(self):
        layout = TreeLayout.for_leaves(3)
        assert layout.proof_path(2) == [
            PathStep(level=0, position=2, sibling=2, side=Side.RIGHT),
            PathStep(level=1, position=4, sibling=3, side=Side.LEFT),
        ]

    def test_three_leaves_promote(self):
        layout = TreeLayout.for_leaves(3, OddNodePolicy.PROMOTE)
        assert layout.proof_path(2) == [
            PathStep(level=1, position=4, sibling=3, side=Side.LEFT),
        ]

    def test_single_leaf_has_empty_path(self):
        assert TreeLayout.for_leaves(1).proof_path(0) == []

    @pytest.mark.parametrize("policy", [OddNodePolicy.DUPLICATE, OddNodePolicy.PROMOTE])
    def test_side_patterns_identify_the_leaf(self, policy):
        for leaves in range(1, 17):
            layout = TreeLayout.for_leaves(leaves, policy)
            patterns = {
                tuple(step.side for step in layout.proof_path(i)) for i in range(leaves)
            }
            assert len(patterns) == leaves

    def test_out_of_range(self):
        with pytest.raises(IndexOutOfRangeError):
            TreeLayout.for_leaves(4).proof_path(4)

    def test_leaf_span(self):
        layout = TreeLayout.for_leaves(5)  # offsets 0, 5, 8, 10
        assert layout.leaf_span(3) == range(3, 4)
        assert layout.leaf_span(6) == range(2, 4)
        assert layout.leaf_span(7) == range(4, 5)
        assert layout.leaf_span(9) == range(4, 5)
        assert layout.leaf_span(10) == range(0, 5)


class TestRejectPolicy:
    """Tests for the power-of-two-only policy."""

    def test_rejects_odd_count(self):
        with pytest.raises(LeafCountError) as exc_info:
            TreeLayout.for_leaves(3, OddNodePolicy.REJECT)
        assert exc_info.value.details["leaf_count"] == 3

    def test_leaf_count_error_is_value_error(self):
        with pytest.raises(ValueError):
            level_sizes(6, "reject")

    @pytest.mark.parametrize("leaves", [1, 2, 4, 8])
    def test_accepts_power_of_two(self, leaves):
        assert TreeLayout.for_leaves(leaves, OddNodePolicy.REJECT).leaf_count == leaves


class TestRangeChecks:
    """Tests for out-of-range positions."""

    def test_locate_out_of_range(self):
        layout = TreeLayout.for_leaves(4)
        with pytest.raises(IndexOutOfRangeError):
            layout.locate(7)
        with pytest.raises(IndexOutOfRangeError):
            layout.locate(-1)

    def test_leaf_position_out_of_range(self):
        layout = TreeLayout.for_leaves(4)
        with pytest.raises(IndexOutOfRangeError) as exc_info:
            layout.leaf_position(4)
        assert exc_info.value.index == 4
        assert exc_info.value.size == 4

    def test_index_error_compatible(self):
        layout = TreeLayout.for_leaves(2)
        with pytest.raises(IndexError):
            layout.parent(3)
