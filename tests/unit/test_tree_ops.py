"""
Unit tests for the tree primitives.
"""

import itertools

from page_builder.services.tree_ops import (
    clone_subtree,
    collect_ids,
    count_nodes,
    find_node,
    find_parent,
    flatten_tree,
    insert_child,
    is_descendant,
    move_node,
    remove_child,
    update_node,
)
from tests.helpers.factories import make_container, make_leaf


def child_ids(node):
    return [child.id for child in node.children or []]


class TestLookup:
    """Tests for find_node, find_parent and is_descendant."""

    def test_find_node_root_and_nested(self, sample_tree):
        """Test finding the root and a deeply nested node."""
        assert find_node(sample_tree, "root") is sample_tree
        assert find_node(sample_tree, "t1").props["content"] == "Body"

    def test_find_node_missing(self, sample_tree):
        assert find_node(sample_tree, "nope") is None

    def test_find_parent(self, sample_tree):
        """Test that find_parent returns the parent and child index."""
        ref = find_parent(sample_tree, "b2")

        assert ref is not None
        assert ref.parent.id == "row1"
        assert ref.index == 1

    def test_find_parent_of_root_is_none(self, sample_tree):
        assert find_parent(sample_tree, "root") is None

    def test_is_descendant_strict(self, sample_tree):
        """Test that a node is not its own descendant."""
        assert is_descendant(sample_tree, "t1", "card1")
        assert is_descendant(sample_tree, "b1", "root")
        assert not is_descendant(sample_tree, "card1", "card1")
        assert not is_descendant(sample_tree, "row1", "b1")
        assert not is_descendant(sample_tree, "t1", "row1")

    def test_is_descendant_missing_ancestor(self, sample_tree):
        assert not is_descendant(sample_tree, "t1", "ghost")


class TestStructuralEdits:
    """Tests for insert, remove, move and update."""

    def test_insert_child_at_index(self, sample_tree):
        """Test inserting between existing children."""
        result = insert_child(sample_tree, "row1", 1, make_leaf("b3", "button"))

        assert child_ids(find_node(result, "row1")) == ["b1", "b3", "b2"]

    def test_insert_child_append_at_length(self, sample_tree):
        result = insert_child(sample_tree, "row1", 2, make_leaf("b3", "button"))

        assert child_ids(find_node(result, "row1")) == ["b1", "b2", "b3"]

    def test_insert_child_index_is_clamped(self, sample_tree):
        result = insert_child(sample_tree, "row1", 99, make_leaf("b3", "button"))

        assert child_ids(find_node(result, "row1"))[-1] == "b3"

    def test_insert_into_missing_parent_is_noop(self, sample_tree):
        result = insert_child(sample_tree, "ghost", 0, make_leaf("x"))

        assert result is sample_tree

    def test_insert_into_leaf_is_noop(self, sample_tree):
        """Test that leaves never gain a children list."""
        result = insert_child(sample_tree, "h1", 0, make_leaf("x"))

        assert result == sample_tree
        assert find_node(result, "h1").children is None

    def test_remove_child(self, sample_tree):
        result = remove_child(sample_tree, "row1")

        assert child_ids(result) == ["h1", "card1"]
        assert find_node(result, "b1") is None

    def test_remove_missing_is_noop(self, sample_tree):
        assert remove_child(sample_tree, "ghost") is sample_tree

    def test_remove_shares_untouched_subtrees(self, sample_tree):
        """Test that only the path to the change is rebuilt."""
        result = remove_child(sample_tree, "b1")

        assert result is not sample_tree
        assert find_node(result, "card1") is find_node(sample_tree, "card1")
        assert find_node(result, "h1") is find_node(sample_tree, "h1")

    def test_move_to_other_parent(self, sample_tree):
        result = move_node(sample_tree, "b1", "card1", 0)

        assert child_ids(find_node(result, "card1")) == ["b1", "t1"]
        assert child_ids(find_node(result, "row1")) == ["b2"]

    def test_move_same_parent_later_index(self, sample_tree):
        """Test the index correction when moving forward in the same parent."""
        # h1 at 0 moved to "after card1" (index 3 before removal)
        result = move_node(sample_tree, "h1", "root", 3)

        assert child_ids(result) == ["row1", "card1", "h1"]

    def test_move_same_parent_earlier_index(self, sample_tree):
        result = move_node(sample_tree, "card1", "root", 0)

        assert child_ids(result) == ["card1", "h1", "row1"]

    def test_move_missing_node_is_noop(self, sample_tree):
        assert move_node(sample_tree, "ghost", "root", 0) is sample_tree

    def test_move_into_leaf_is_noop(self, sample_tree):
        assert move_node(sample_tree, "b1", "h1", 0) is sample_tree

    def test_update_node(self, sample_tree):
        result = update_node(
            sample_tree, "t1", lambda n: n.model_copy(update={"props": {"content": "New"}})
        )

        assert find_node(result, "t1").props == {"content": "New"}
        assert find_node(sample_tree, "t1").props == {"content": "Body"}

    def test_update_missing_node_is_noop(self, sample_tree):
        assert update_node(sample_tree, "ghost", lambda n: n) is sample_tree


class TestImmutability:
    """Every primitive leaves its input tree untouched."""

    def test_primitives_do_not_mutate_input(self, sample_tree):
        snapshot = sample_tree.model_copy(deep=True)

        insert_child(sample_tree, "root", 0, make_leaf("x"))
        remove_child(sample_tree, "t1")
        move_node(sample_tree, "b2", "card1", 1)
        update_node(sample_tree, "h1", lambda n: n.model_copy(update={"props": {}}))
        clone_subtree(sample_tree)
        flatten_tree(sample_tree)

        assert sample_tree == snapshot


class TestCloneSubtree:
    """Tests for clone_subtree."""

    def test_clone_ids_are_disjoint(self, sample_tree):
        """Test that the clone shares no id with the original."""
        clone = clone_subtree(sample_tree)

        assert collect_ids(clone).isdisjoint(collect_ids(sample_tree))
        assert count_nodes(clone) == count_nodes(sample_tree)

    def test_clone_preserves_shape_and_props(self, sample_tree):
        clone = clone_subtree(find_node(sample_tree, "row1"))

        assert clone.type == "row"
        assert [c.props for c in clone.children] == [{"label": "Save"}, {"label": "Cancel"}]

    def test_clone_props_are_independent(self):
        original = make_leaf("tbl", "table", columns=[{"key": "a"}])

        clone = clone_subtree(original)

        assert clone.props == original.props
        assert clone.props["columns"] is not original.props["columns"]

    def test_clone_uses_id_factory(self):
        counter = itertools.count(1)
        tree = make_container("s", [make_leaf("a"), make_leaf("b")])

        clone = clone_subtree(tree, lambda kind: f"{kind}-{next(counter)}")

        assert clone.id == "stack-1"
        assert child_ids(clone) == ["text-2", "text-3"]

    def test_leaf_clone_stays_leaf(self):
        assert clone_subtree(make_leaf("a")).children is None


class TestFlattenTree:
    """Tests for flatten_tree and the counting helpers."""

    def test_preorder_with_depth_and_parent(self, sample_tree):
        flat = flatten_tree(sample_tree)

        assert [(e.node.id, e.depth, e.parent_id) for e in flat] == [
            ("root", 0, None),
            ("h1", 1, "root"),
            ("row1", 1, "root"),
            ("b1", 2, "row1"),
            ("b2", 2, "row1"),
            ("card1", 1, "root"),
            ("t1", 2, "card1"),
        ]

    def test_count_and_collect(self, sample_tree):
        assert count_nodes(sample_tree) == 7
        assert collect_ids(sample_tree) == {"root", "h1", "row1", "b1", "b2", "card1", "t1"}
