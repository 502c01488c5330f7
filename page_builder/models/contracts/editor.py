"""
Editor State Definitions

The document state owned by PageEditorEngine, plus the drag-and-drop
vocabulary (drag sources and drop targets).
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from page_builder.models.contracts.grid import GridLayoutConfig
from page_builder.models.contracts.nodes import Node, Page


# -----------------------------------------------------------------------------
# Drag and Drop
# -----------------------------------------------------------------------------


class PaletteDragSource(BaseModel):
    """A new node of `node_type` being dragged out of the palette."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["palette"] = "palette"
    node_type: str = Field(alias="nodeType", description="Kind of node to create on drop")


class CanvasDragSource(BaseModel):
    """An existing node being dragged around the canvas."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["canvas"] = "canvas"
    node_id: str = Field(alias="nodeId", description="Id of the node being moved")


DragSource = Annotated[
    Union[PaletteDragSource, CanvasDragSource],
    Field(discriminator="type"),
]


class DropTarget(BaseModel):
    """Insertion point under a container."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    parent_id: str = Field(alias="parentId", description="Container receiving the drop")
    index: int = Field(ge=0, description="Insertion index among the container's children")


class DragState(BaseModel):
    """Drag lifecycle: idle, or dragging a fixed source with an optional target."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    active: bool = False
    source: DragSource | None = None
    drop_target: DropTarget | None = Field(default=None, alias="dropTarget")

    @property
    def phase(self) -> Literal["idle", "dragging"]:
        return "dragging" if self.active else "idle"


IDLE_DRAG = DragState()


# -----------------------------------------------------------------------------
# Document State
# -----------------------------------------------------------------------------


class DocumentState(BaseModel):
    """
    Complete editor state.

    Owned exclusively by PageEditorEngine. Consumers only ever see
    immutable snapshots of it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pages: dict[str, Page] = Field(default_factory=dict)
    current_page_id: str | None = Field(default=None, alias="currentPageId")
    selected_node_id: str | None = Field(default=None, alias="selectedNodeId")
    drag: DragState = Field(default=IDLE_DRAG)
    clipboard: Node | None = Field(default=None, description="Single-slot cloned subtree")
    grid_layouts: dict[str, GridLayoutConfig] = Field(
        default_factory=dict, alias="gridLayouts", description="Grid layouts by page id"
    )

    @property
    def current_page(self) -> Page | None:
        if self.current_page_id is None:
            return None
        return self.pages.get(self.current_page_id)

    @property
    def current_content(self) -> Node | None:
        page = self.current_page
        return page.content if page else None
