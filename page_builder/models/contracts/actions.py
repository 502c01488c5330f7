"""
Editor Actions

The action vocabulary accepted by PageEditorEngine.dispatch().

Actions are either undoable (they change page content and are recorded in
history) or transient (selection, drag lifecycle, clipboard copy). Each
action is a pydantic model discriminated on `type`, so hosts can dispatch
either model instances or plain dicts:

    engine.dispatch(UpdateNodeProps(node_id="h1", props={"content": "Hi"}))
    engine.dispatch({"type": "UPDATE_NODE_PROPS", "nodeId": "h1", "props": {...}})
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from page_builder.models.contracts.editor import DragSource, DropTarget
from page_builder.models.contracts.grid import GridItemUpdate, GridLayoutConfig
from page_builder.models.contracts.nodes import Node, Page


class ActionBase(BaseModel):
    """Shared configuration for all actions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


# -----------------------------------------------------------------------------
# Undoable: pages
# -----------------------------------------------------------------------------


class AddPage(ActionBase):
    type: Literal["ADD_PAGE"] = "ADD_PAGE"
    page: Page


class RemovePage(ActionBase):
    type: Literal["REMOVE_PAGE"] = "REMOVE_PAGE"
    page_id: str = Field(alias="pageId")


class UpdatePageMeta(ActionBase):
    """Update page metadata; fields left as None keep their current value."""

    type: Literal["UPDATE_PAGE_META"] = "UPDATE_PAGE_META"
    page_id: str = Field(alias="pageId")
    label: str | None = None
    route: str | None = None
    browser_title: str | None = Field(default=None, alias="browserTitle")


class SetPages(ActionBase):
    """Bulk replace of every page (import)."""

    type: Literal["SET_PAGES"] = "SET_PAGES"
    pages: dict[str, Page]


# -----------------------------------------------------------------------------
# Undoable: nodes
# -----------------------------------------------------------------------------


class AddNode(ActionBase):
    type: Literal["ADD_NODE"] = "ADD_NODE"
    parent_id: str = Field(alias="parentId")
    index: int
    node: Node


class RemoveNode(ActionBase):
    type: Literal["REMOVE_NODE"] = "REMOVE_NODE"
    node_id: str = Field(alias="nodeId")


class MoveNode(ActionBase):
    type: Literal["MOVE_NODE"] = "MOVE_NODE"
    node_id: str = Field(alias="nodeId")
    new_parent_id: str = Field(alias="newParentId")
    new_index: int = Field(alias="newIndex")


class UpdateNodeProps(ActionBase):
    """Shallow-merge props into a node. Batched when repeated rapidly."""

    type: Literal["UPDATE_NODE_PROPS"] = "UPDATE_NODE_PROPS"
    node_id: str = Field(alias="nodeId")
    props: dict[str, Any]


class UpdateNodeStyle(ActionBase):
    """Shallow-merge style overrides into a node. Batched when repeated rapidly."""

    type: Literal["UPDATE_NODE_STYLE"] = "UPDATE_NODE_STYLE"
    node_id: str = Field(alias="nodeId")
    style: dict[str, Any]


class DuplicateNode(ActionBase):
    type: Literal["DUPLICATE_NODE"] = "DUPLICATE_NODE"
    node_id: str = Field(alias="nodeId")


class WrapInContainer(ActionBase):
    type: Literal["WRAP_IN_CONTAINER"] = "WRAP_IN_CONTAINER"
    node_id: str = Field(alias="nodeId")
    container_type: str = Field(default="stack", alias="containerType")


class Drop(ActionBase):
    """Commit the active drag at its recorded drop target."""

    type: Literal["DROP"] = "DROP"


class PasteNode(ActionBase):
    type: Literal["PASTE_NODE"] = "PASTE_NODE"
    parent_id: str = Field(alias="parentId")
    index: int


# -----------------------------------------------------------------------------
# Undoable: grid layouts
# -----------------------------------------------------------------------------


class SetGridLayout(ActionBase):
    type: Literal["SET_GRID_LAYOUT"] = "SET_GRID_LAYOUT"
    page_id: str = Field(alias="pageId")
    layout: GridLayoutConfig


class UpdateGridItem(ActionBase):
    """Move, resize, or override props of one grid item. Batched when repeated rapidly."""

    type: Literal["UPDATE_GRID_ITEM"] = "UPDATE_GRID_ITEM"
    page_id: str = Field(alias="pageId")
    item_id: str = Field(alias="itemId")
    updates: GridItemUpdate


class ApplyGridLayout(ActionBase):
    """Rebuild the page tree from its grid layout (grid -> tree)."""

    type: Literal["APPLY_GRID_LAYOUT"] = "APPLY_GRID_LAYOUT"
    page_id: str = Field(alias="pageId")


class ClearGridLayout(ActionBase):
    type: Literal["CLEAR_GRID_LAYOUT"] = "CLEAR_GRID_LAYOUT"
    page_id: str = Field(alias="pageId")


# -----------------------------------------------------------------------------
# Transient
# -----------------------------------------------------------------------------


class SelectPage(ActionBase):
    type: Literal["SELECT_PAGE"] = "SELECT_PAGE"
    page_id: str = Field(alias="pageId")


class SelectNode(ActionBase):
    type: Literal["SELECT_NODE"] = "SELECT_NODE"
    node_id: str | None = Field(default=None, alias="nodeId")


class DragStart(ActionBase):
    type: Literal["DRAG_START"] = "DRAG_START"
    source: DragSource


class DragOver(ActionBase):
    type: Literal["DRAG_OVER"] = "DRAG_OVER"
    target: DropTarget | None = None


class DragEnd(ActionBase):
    """Cancel the active drag without mutating anything."""

    type: Literal["DRAG_END"] = "DRAG_END"


class CopyNode(ActionBase):
    type: Literal["COPY_NODE"] = "COPY_NODE"
    node_id: str = Field(alias="nodeId")


UndoableAction = Union[
    AddPage,
    RemovePage,
    UpdatePageMeta,
    SetPages,
    AddNode,
    RemoveNode,
    MoveNode,
    UpdateNodeProps,
    UpdateNodeStyle,
    DuplicateNode,
    WrapInContainer,
    Drop,
    PasteNode,
    SetGridLayout,
    UpdateGridItem,
    ApplyGridLayout,
    ClearGridLayout,
]

TransientAction = Union[
    SelectPage,
    SelectNode,
    DragStart,
    DragOver,
    DragEnd,
    CopyNode,
]

EditorAction = Annotated[
    Union[UndoableAction, TransientAction],
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(EditorAction)

TRANSIENT_TYPES = frozenset(
    ["SELECT_PAGE", "SELECT_NODE", "DRAG_START", "DRAG_OVER", "DRAG_END", "COPY_NODE"]
)

# Rapid edits of these kinds against one target coalesce into one undo step
BATCHABLE_TYPES = frozenset(["UPDATE_NODE_PROPS", "UPDATE_NODE_STYLE", "UPDATE_GRID_ITEM"])
