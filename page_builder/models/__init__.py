"""
Page Builder Models

Pydantic contracts (documents, grid layouts, editor state, actions):
    from page_builder.models import Node, Page, DocumentState
    from page_builder.models.contracts.actions import UpdateNodeProps  # Granular access
"""

from page_builder.models.contracts.editor import (
    CanvasDragSource,
    DocumentState,
    DragSource,
    DragState,
    DropTarget,
    PaletteDragSource,
)
from page_builder.models.contracts.grid import GridItem, GridItemUpdate, GridLayoutConfig
from page_builder.models.contracts.nodes import Node, Page

__all__ = [
    "CanvasDragSource",
    "DocumentState",
    "DragSource",
    "DragState",
    "DropTarget",
    "GridItem",
    "GridItemUpdate",
    "GridLayoutConfig",
    "Node",
    "Page",
    "PaletteDragSource",
]
