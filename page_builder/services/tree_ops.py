"""
Tree Operations

Pure functions over the immutable page tree:
- Lookup (find_node, find_parent, is_descendant)
- Structural edits (insert_child, remove_child, move_node, update_node)
- Copying (clone_subtree) and traversal (flatten_tree)

Every edit takes a root and returns a root; the input tree is never
mutated. Only nodes on the path to the change are rebuilt, everything else
is shared with the input. Edits that target a missing id return the input
unchanged.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Callable

from page_builder.models.contracts.nodes import Node
from page_builder.services.node_catalog import generate_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParentRef:
    """A node's parent and its position among the parent's children."""

    parent: Node
    index: int


@dataclass(frozen=True)
class FlatNode:
    """One entry of a pre-order flattening."""

    node: Node
    depth: int
    parent_id: str | None


# =============================================================================
# Lookup
# =============================================================================


def find_node(root: Node, node_id: str) -> Node | None:
    """Depth-first search for a node by id (the root included)."""
    if root.id == node_id:
        return root
    for child in root.children or []:
        found = find_node(child, node_id)
        if found is not None:
            return found
    return None


def find_parent(root: Node, node_id: str) -> ParentRef | None:
    """Find the parent of a node. The root has no parent."""
    for index, child in enumerate(root.children or []):
        if child.id == node_id:
            return ParentRef(parent=root, index=index)
        found = find_parent(child, node_id)
        if found is not None:
            return found
    return None


def is_descendant(root: Node, candidate_id: str, ancestor_id: str) -> bool:
    """
    Whether `candidate_id` sits strictly inside the subtree of `ancestor_id`.

    A node is not its own descendant.
    """
    ancestor = find_node(root, ancestor_id)
    if ancestor is None:
        return False
    return any(find_node(child, candidate_id) is not None for child in ancestor.children or [])


# =============================================================================
# Structural Edits
# =============================================================================


def _with_children(node: Node, children: list[Node]) -> Node:
    return node.model_copy(update={"children": children})


def update_node(root: Node, node_id: str, updater: Callable[[Node], Node]) -> Node:
    """Replace the node with `updater(node)`, rebuilding only its ancestors."""
    if root.id == node_id:
        return updater(root)
    if not root.children:
        return root

    changed = False
    children: list[Node] = []
    for child in root.children:
        new_child = update_node(child, node_id, updater)
        if new_child is not child:
            changed = True
        children.append(new_child)

    return _with_children(root, children) if changed else root


def insert_child(root: Node, parent_id: str, index: int, node: Node) -> Node:
    """
    Insert `node` into the parent's children at `index`.

    The index is clamped to 0..len(children); len appends. Inserting into
    a missing parent, or into a leaf (no children list), changes nothing.
    """

    def insert(parent: Node) -> Node:
        if parent.children is None:
            logger.debug(f"Refusing to insert into leaf node {parent.id} ({parent.type})")
            return parent
        children = list(parent.children)
        position = max(0, min(index, len(children)))
        children.insert(position, node)
        return _with_children(parent, children)

    return update_node(root, parent_id, insert)


def remove_child(root: Node, node_id: str) -> Node:
    """Remove a node (and its subtree) from wherever it is in the tree."""
    if not root.children:
        return root

    changed = False
    children: list[Node] = []
    for child in root.children:
        if child.id == node_id:
            changed = True
            continue
        new_child = remove_child(child, node_id)
        if new_child is not child:
            changed = True
        children.append(new_child)

    return _with_children(root, children) if changed else root


def move_node(root: Node, node_id: str, new_parent_id: str, new_index: int) -> Node:
    """
    Move a node under a new parent at `new_index`.

    Implemented as remove then insert. When moving within the same parent
    to a later index, the index is decremented to account for the removal.
    Callers are responsible for rejecting moves into the node's own subtree.
    """
    node = find_node(root, node_id)
    location = find_parent(root, node_id)
    if node is None or location is None:
        return root

    if location.parent.id == new_parent_id and new_index > location.index:
        new_index -= 1

    without = remove_child(root, node_id)
    target = find_node(without, new_parent_id)
    if target is None or target.children is None:
        # Destination vanished with the removal or cannot hold children
        return root

    return insert_child(without, new_parent_id, new_index, node)


# =============================================================================
# Copying and Traversal
# =============================================================================


def clone_subtree(node: Node, id_factory: Callable[[str], str] | None = None) -> Node:
    """
    Deep copy a subtree, giving every node a fresh id.

    Args:
        node: Subtree root
        id_factory: Maps a node kind to a new id (defaults to generate_id)
    """
    make_id = id_factory or generate_id
    new_id = make_id(node.type)
    children = None
    if node.children is not None:
        children = [clone_subtree(child, make_id) for child in node.children]
    return Node(
        id=new_id,
        type=node.type,
        props=copy.deepcopy(node.props),
        children=children,
        style=copy.deepcopy(node.style),
    )


def flatten_tree(root: Node) -> list[FlatNode]:
    """Pre-order list of (node, depth, parent_id), root first at depth 0."""
    result: list[FlatNode] = []

    def visit(node: Node, depth: int, parent_id: str | None) -> None:
        result.append(FlatNode(node=node, depth=depth, parent_id=parent_id))
        for child in node.children or []:
            visit(child, depth + 1, node.id)

    visit(root, 0, None)
    return result


def collect_ids(root: Node) -> set[str]:
    """All node ids in the tree."""
    return {entry.node.id for entry in flatten_tree(root)}


def count_nodes(root: Node) -> int:
    return len(flatten_tree(root))
