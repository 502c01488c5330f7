"""
Grid Converter

Maps between the tree's linear child order and a 2-D grid layout.

tree_to_grid is a deterministic projection: the i-th flattened descendant
lands at column (i % columns) + 1, row (i // columns) + 1, span 1x1. No
bin-packing, no span-aware placement.

grid_to_tree is a best-effort inverse: items are read in row-major order
and rebuilt as the flat children of one stack. Nested hierarchy does not
survive the round trip, only the reading order does.
"""

import logging
from collections.abc import Mapping

from page_builder.config import get_settings
from page_builder.models.contracts.grid import GridItem, GridLayoutConfig
from page_builder.models.contracts.nodes import Node
from page_builder.services.node_catalog import DEFAULT_CATALOG, NodeCatalog
from page_builder.services.tree_ops import flatten_tree

logger = logging.getLogger(__name__)


def tree_to_grid(
    node: Node,
    columns: int,
    *,
    row_height: str | None = None,
    gap: str | None = None,
) -> GridLayoutConfig:
    """
    Project a subtree onto a grid.

    Args:
        node: Subtree root (not placed itself)
        columns: Grid column count (values below 1 are treated as 1)
        row_height: CSS row height (defaults to Settings.grid_row_height)
        gap: CSS gap (defaults to Settings.grid_gap)
    """
    settings = get_settings()
    columns = max(1, columns)

    descendants = flatten_tree(node)[1:]
    items = [
        GridItem(
            component=entry.node.id,
            col_start=(index % columns) + 1,
            row_start=(index // columns) + 1,
            col_span=1,
            row_span=1,
        )
        for index, entry in enumerate(descendants)
    ]

    return GridLayoutConfig(
        columns=columns,
        row_height=row_height or settings.grid_row_height,
        gap=gap or settings.grid_gap,
        items=items,
    )


def build_node_lookup(root: Node) -> dict[str, Node]:
    """Index every node of a tree by id."""
    return {entry.node.id: entry.node for entry in flatten_tree(root)}


def grid_to_tree(
    grid: GridLayoutConfig,
    node_lookup: Mapping[str, Node],
    *,
    container_id: str | None = None,
    catalog: NodeCatalog = DEFAULT_CATALOG,
) -> Node:
    """
    Rebuild a flat stack from a grid layout.

    Items are ordered by (row_start, col_start). Each referenced node keeps
    its id, type and style; its props are shallow-merged with the item's
    prop overrides. Containers come back empty so that no node appears
    twice. An item is skipped when its node is missing from the lookup or
    was already placed, or when it points at the container itself.

    Args:
        grid: Grid layout to read
        node_lookup: Node id -> Node (see build_node_lookup)
        container_id: Id for the synthetic stack (fresh id when omitted)
        catalog: Catalog providing the stack's default props
    """
    ordered = sorted(grid.items, key=lambda item: (item.row_start, item.col_start))

    children: list[Node] = []
    placed: set[str] = set()
    for item in ordered:
        if item.component in placed or item.component == container_id:
            logger.debug(f"Grid item {item.component} already placed, skipping")
            continue
        source = node_lookup.get(item.component)
        if source is None:
            logger.debug(f"Grid item references unknown node {item.component}, skipping")
            continue
        placed.add(item.component)
        children.append(
            source.model_copy(
                update={
                    "props": {**source.props, **item.props},
                    "children": [] if source.children is not None else None,
                }
            )
        )

    stack = catalog.create_node("stack")
    if container_id is not None:
        stack = stack.model_copy(update={"id": container_id})
    return stack.model_copy(update={"children": children})
