"""
Page Editor Engine

The state container at the center of the editor. Holds one DocumentState
and exposes a single entry point, dispatch(action).

Actions are either:
- Transient (selection, drag lifecycle, clipboard copy): applied directly,
  never recorded in history.
- Undoable (page CRUD, node edits, drop, paste, grid layouts): applied as a
  candidate state; structural no-ops are discarded, everything else is
  recorded in EditHistory before the candidate becomes current.

Interactive problems (stale ids, drops onto invalid targets, cycle moves)
are silent no-ops. Only misuse of the engine raises.
"""

import logging
import time
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import ValidationError

from page_builder.config import Settings, get_settings
from page_builder.core.exceptions import InvalidActionError, NoCurrentPageError
from page_builder.models.contracts.actions import (
    ACTION_ADAPTER,
    BATCHABLE_TYPES,
    TRANSIENT_TYPES,
    ActionBase,
    AddNode,
    AddPage,
    ApplyGridLayout,
    ClearGridLayout,
    CopyNode,
    DragEnd,
    DragOver,
    DragStart,
    Drop,
    DuplicateNode,
    MoveNode,
    PasteNode,
    RemoveNode,
    RemovePage,
    SelectNode,
    SelectPage,
    SetGridLayout,
    SetPages,
    UpdateGridItem,
    UpdateNodeProps,
    UpdateNodeStyle,
    UpdatePageMeta,
    WrapInContainer,
)
from page_builder.models.contracts.editor import (
    IDLE_DRAG,
    CanvasDragSource,
    DocumentState,
    DragState,
    DropTarget,
    PaletteDragSource,
)
from page_builder.models.contracts.grid import GridLayoutConfig
from page_builder.models.contracts.nodes import Node, Page
from page_builder.services.edit_history import EditHistory
from page_builder.services.grid_converter import build_node_lookup, grid_to_tree, tree_to_grid
from page_builder.services.node_catalog import DEFAULT_CATALOG, NodeCatalog
from page_builder.services.tree_ops import (
    clone_subtree,
    collect_ids,
    find_node,
    find_parent,
    flatten_tree,
    insert_child,
    is_descendant,
    move_node,
    remove_child,
    update_node,
)

logger = logging.getLogger(__name__)

# Actions that operate on the current page's tree
NODE_LEVEL_TYPES = frozenset(
    [
        "ADD_NODE",
        "REMOVE_NODE",
        "MOVE_NODE",
        "UPDATE_NODE_PROPS",
        "UPDATE_NODE_STYLE",
        "DUPLICATE_NODE",
        "WRAP_IN_CONTAINER",
        "PASTE_NODE",
        "COPY_NODE",
    ]
)


def _batch_target(action: ActionBase) -> str | None:
    if isinstance(action, (UpdateNodeProps, UpdateNodeStyle)):
        return action.node_id
    if isinstance(action, UpdateGridItem):
        return f"{action.page_id}:{action.item_id}"
    return None


class PageEditorEngine:
    """
    Owns the document state and its undo/redo history.

    Usage:
        engine = PageEditorEngine({"home": create_default_page("home", "Home", "/")})
        engine.dispatch(DragStart(source=PaletteDragSource(node_type="heading")))
        engine.dispatch(DragOver(target=DropTarget(parent_id=root_id, index=0)))
        engine.dispatch(Drop())
        engine.undo()
    """

    def __init__(
        self,
        initial_pages: Mapping[str, Page] | None = None,
        *,
        catalog: NodeCatalog = DEFAULT_CATALOG,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            initial_pages: Pages keyed by id; the first one becomes current
            catalog: Node kinds available to palette drops and wrapping
            settings: Engine settings (defaults to get_settings())
            clock: Monotonic time source in seconds, used for edit batching
        """
        self.catalog = catalog
        self.settings = settings or get_settings()
        self._clock = clock
        self._history: EditHistory[DocumentState] = EditHistory(
            limit=self.settings.history_limit,
            batch_window=self.settings.batch_window_seconds,
        )

        pages = dict(initial_pages or {})
        self._state = DocumentState(
            pages=pages,
            current_page_id=next(iter(pages), None),
        )

        self._handlers: dict[str, Callable[[DocumentState, Any], DocumentState]] = {
            # Undoable
            "ADD_PAGE": self._add_page,
            "REMOVE_PAGE": self._remove_page,
            "UPDATE_PAGE_META": self._update_page_meta,
            "SET_PAGES": self._set_pages,
            "ADD_NODE": self._add_node,
            "REMOVE_NODE": self._remove_node,
            "MOVE_NODE": self._move_node,
            "UPDATE_NODE_PROPS": self._update_node_props,
            "UPDATE_NODE_STYLE": self._update_node_style,
            "DUPLICATE_NODE": self._duplicate_node,
            "WRAP_IN_CONTAINER": self._wrap_in_container,
            "DROP": self._drop,
            "PASTE_NODE": self._paste_node,
            "SET_GRID_LAYOUT": self._set_grid_layout,
            "UPDATE_GRID_ITEM": self._update_grid_item,
            "APPLY_GRID_LAYOUT": self._apply_grid_layout,
            "CLEAR_GRID_LAYOUT": self._clear_grid_layout,
            # Transient
            "SELECT_PAGE": self._select_page,
            "SELECT_NODE": self._select_node,
            "DRAG_START": self._drag_start,
            "DRAG_OVER": self._drag_over,
            "DRAG_END": self._drag_end,
            "COPY_NODE": self._copy_node,
        }

    # =========================================================================
    # Read Accessors
    # =========================================================================

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def pages(self) -> dict[str, Page]:
        return self._state.pages

    @property
    def current_page(self) -> Page | None:
        return self._state.current_page

    @property
    def current_content(self) -> Node | None:
        return self._state.current_content

    @property
    def selected_node(self) -> Node | None:
        content = self._state.current_content
        if content is None or self._state.selected_node_id is None:
            return None
        return find_node(content, self._state.selected_node_id)

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def history_size(self) -> int:
        return self._history.size

    def grid_layout(self, page_id: str | None = None) -> GridLayoutConfig | None:
        """Grid layout of a page (the current page by default)."""
        page_id = page_id or self._state.current_page_id
        if page_id is None:
            return None
        return self._state.grid_layouts.get(page_id)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def dispatch(self, action: ActionBase | Mapping[str, Any]) -> bool:
        """
        Apply an action.

        Args:
            action: Action model, or its dict form ({"type": "ADD_NODE", ...})

        Returns:
            True if the document state changed

        Raises:
            InvalidActionError: If the payload is not a known action
            NoCurrentPageError: If a node-level action arrives with no current page
        """
        if isinstance(action, Mapping):
            try:
                action = ACTION_ADAPTER.validate_python(dict(action))
            except ValidationError as e:
                raise InvalidActionError(f"Invalid action payload: {e}") from e
        if not isinstance(action, ActionBase):
            raise InvalidActionError(f"Not an editor action: {type(action).__name__}")

        kind = action.type  # type: ignore[attr-defined]
        handler = self._handlers.get(kind)
        if handler is None:
            raise InvalidActionError(f"Unhandled action type: {kind}")

        if kind in NODE_LEVEL_TYPES and self._state.current_content is None:
            raise NoCurrentPageError(kind)

        previous = self._state

        if kind in TRANSIENT_TYPES:
            self._history.close_batch()
            self._state = handler(previous, action)
            return self._state is not previous and self._state != previous

        candidate = handler(previous, action)
        settled = self._settled(previous, action)
        if candidate is settled or candidate == settled:
            logger.debug(f"Discarded no-op {kind}")
            self._history.interrupt_batch(kind, _batch_target(action))
            self._state = settled
            return settled is not previous and settled != previous

        batched = self._history.record(
            previous,
            kind,
            self._clock(),
            target_id=_batch_target(action),
            batchable=kind in BATCHABLE_TYPES,
        )
        logger.debug(f"Applied {kind}{' (batched)' if batched else ''}")
        self._state = candidate
        return True

    @staticmethod
    def _settled(state: DocumentState, action: ActionBase) -> DocumentState:
        """The state an undoable action leaves behind when it changes nothing."""
        if isinstance(action, Drop) and state.drag != IDLE_DRAG:
            return state.model_copy(update={"drag": IDLE_DRAG})
        return state

    def undo(self) -> bool:
        """Restore the previous snapshot. Returns False when there is nothing to undo."""
        restored = self._history.undo(self._state)
        if restored is None:
            return False
        self._state = self._restore(restored)
        return True

    def redo(self) -> bool:
        """Re-apply the last undone snapshot. Returns False when there is nothing to redo."""
        restored = self._history.redo(self._state)
        if restored is None:
            return False
        self._state = self._restore(restored)
        return True

    def _restore(self, snapshot: DocumentState) -> DocumentState:
        # Clipboard and drag are UI state, not document history
        return snapshot.model_copy(
            update={"clipboard": self._state.clipboard, "drag": IDLE_DRAG}
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _with_content(state: DocumentState, content: Node) -> DocumentState:
        """Replace the current page's tree; unchanged content returns state."""
        page = state.current_page
        if page is None or content is page.content:
            return state
        pages = {**state.pages, page.id: page.model_copy(update={"content": content})}
        return state.model_copy(update={"pages": pages})

    @staticmethod
    def _selection_in(content: Node, selected_id: str | None) -> str | None:
        if selected_id is None or find_node(content, selected_id) is None:
            return None
        return selected_id

    def _rejects_move(self, content: Node, node_id: str, new_parent_id: str) -> bool:
        """Moving a node into itself or its own subtree would create a cycle."""
        if new_parent_id == node_id or is_descendant(content, new_parent_id, node_id):
            logger.debug(f"Rejected move of {node_id} into its own subtree ({new_parent_id})")
            return True
        return False

    def _rejects_subtree(self, content: Node, node: Node) -> bool:
        """An inserted subtree must keep ids unique and leaves childless."""
        entries = flatten_tree(node)
        ids = [entry.node.id for entry in entries]
        if len(ids) != len(set(ids)):
            logger.debug(f"Rejected insert of {node.id}: repeated ids inside subtree")
            return True
        if collect_ids(content).intersection(ids):
            logger.debug(f"Rejected insert of {node.id}: id already in tree")
            return True
        for entry in entries:
            if entry.node.children is not None and not self.catalog.is_container(entry.node.type):
                logger.debug(f"Rejected insert of {node.id}: {entry.node.type} cannot own children")
                return True
        return False

    def _insert_fresh(
        self, state: DocumentState, parent_id: str, index: int, node: Node
    ) -> DocumentState:
        """Insert a subtree whose ids must not collide with the tree, selecting it."""
        content = state.current_content
        assert content is not None
        if self._rejects_subtree(content, node):
            return state
        new_content = insert_child(content, parent_id, index, node)
        if new_content is content:
            return state
        return self._with_content(state, new_content).model_copy(
            update={"selected_node_id": node.id}
        )

    # =========================================================================
    # Undoable: Pages
    # =========================================================================

    def _add_page(self, state: DocumentState, action: AddPage) -> DocumentState:
        return state.model_copy(
            update={
                "pages": {**state.pages, action.page.id: action.page},
                "current_page_id": action.page.id,
                "selected_node_id": None,
            }
        )

    def _remove_page(self, state: DocumentState, action: RemovePage) -> DocumentState:
        if action.page_id not in state.pages:
            return state
        pages = {pid: page for pid, page in state.pages.items() if pid != action.page_id}
        layouts = {pid: g for pid, g in state.grid_layouts.items() if pid != action.page_id}
        update: dict[str, Any] = {"pages": pages, "grid_layouts": layouts}
        if state.current_page_id == action.page_id:
            update["current_page_id"] = next(iter(pages), None)
            update["selected_node_id"] = None
        return state.model_copy(update=update)

    def _update_page_meta(self, state: DocumentState, action: UpdatePageMeta) -> DocumentState:
        page = state.pages.get(action.page_id)
        if page is None:
            return state
        updated = page.model_copy(
            update={
                "label": action.label if action.label is not None else page.label,
                "route": action.route if action.route is not None else page.route,
                "browser_title": (
                    action.browser_title if action.browser_title is not None else page.browser_title
                ),
            }
        )
        return state.model_copy(update={"pages": {**state.pages, page.id: updated}})

    def _set_pages(self, state: DocumentState, action: SetPages) -> DocumentState:
        pages = dict(action.pages)
        current = state.current_page_id
        if current is None or current not in pages:
            current = next(iter(pages), None)
        return state.model_copy(
            update={
                "pages": pages,
                "current_page_id": current,
                "selected_node_id": None,
                "grid_layouts": {
                    pid: g for pid, g in state.grid_layouts.items() if pid in pages
                },
            }
        )

    # =========================================================================
    # Undoable: Nodes
    # =========================================================================

    def _add_node(self, state: DocumentState, action: AddNode) -> DocumentState:
        content = state.current_content
        assert content is not None
        if self._rejects_subtree(content, action.node):
            return state
        return self._with_content(
            state, insert_child(content, action.parent_id, action.index, action.node)
        )

    def _remove_node(self, state: DocumentState, action: RemoveNode) -> DocumentState:
        content = state.current_content
        assert content is not None
        new_content = remove_child(content, action.node_id)
        if new_content is content:
            return state
        return self._with_content(state, new_content).model_copy(
            update={"selected_node_id": self._selection_in(new_content, state.selected_node_id)}
        )

    def _move_node(self, state: DocumentState, action: MoveNode) -> DocumentState:
        content = state.current_content
        assert content is not None
        if self._rejects_move(content, action.node_id, action.new_parent_id):
            return state
        return self._with_content(
            state, move_node(content, action.node_id, action.new_parent_id, action.new_index)
        )

    def _update_node_props(self, state: DocumentState, action: UpdateNodeProps) -> DocumentState:
        content = state.current_content
        assert content is not None
        return self._with_content(
            state,
            update_node(
                content,
                action.node_id,
                lambda node: node.model_copy(update={"props": {**node.props, **action.props}}),
            ),
        )

    def _update_node_style(self, state: DocumentState, action: UpdateNodeStyle) -> DocumentState:
        content = state.current_content
        assert content is not None
        return self._with_content(
            state,
            update_node(
                content,
                action.node_id,
                lambda node: node.model_copy(
                    update={"style": {**(node.style or {}), **action.style}}
                ),
            ),
        )

    def _duplicate_node(self, state: DocumentState, action: DuplicateNode) -> DocumentState:
        content = state.current_content
        assert content is not None
        node = find_node(content, action.node_id)
        location = find_parent(content, action.node_id)
        if node is None or location is None:
            return state
        return self._insert_fresh(
            state, location.parent.id, location.index + 1, clone_subtree(node)
        )

    def _wrap_in_container(self, state: DocumentState, action: WrapInContainer) -> DocumentState:
        content = state.current_content
        assert content is not None
        if not self.catalog.is_container(action.container_type):
            logger.debug(f"Cannot wrap in {action.container_type}: not a container kind")
            return state
        node = find_node(content, action.node_id)
        location = find_parent(content, action.node_id)
        if node is None or location is None:
            return state

        wrapper = self.catalog.create_node(action.container_type)
        wrapper = wrapper.model_copy(update={"children": [node]})
        tree = remove_child(content, action.node_id)
        tree = insert_child(tree, location.parent.id, location.index, wrapper)
        return self._with_content(state, tree).model_copy(
            update={"selected_node_id": wrapper.id}
        )

    def _drop(self, state: DocumentState, action: Drop) -> DocumentState:
        idle = state.model_copy(update={"drag": IDLE_DRAG})
        source, target = state.drag.source, state.drag.drop_target
        if not state.drag.active or source is None or target is None:
            return idle

        content = state.current_content
        if content is None:
            raise NoCurrentPageError(action.type)

        if isinstance(source, PaletteDragSource):
            if not self.catalog.is_known(source.node_type):
                logger.warning(f"Dropped unknown node type {source.node_type}, ignoring")
                return idle
            node = self.catalog.create_node(source.node_type)
            return self._insert_fresh(idle, target.parent_id, target.index, node)

        if self._rejects_move(content, source.node_id, target.parent_id):
            return idle
        return self._with_content(
            idle, move_node(content, source.node_id, target.parent_id, target.index)
        )

    def _paste_node(self, state: DocumentState, action: PasteNode) -> DocumentState:
        if state.clipboard is None:
            return state
        return self._insert_fresh(
            state, action.parent_id, action.index, clone_subtree(state.clipboard)
        )

    # =========================================================================
    # Undoable: Grid Layouts
    # =========================================================================

    def _set_grid_layout(self, state: DocumentState, action: SetGridLayout) -> DocumentState:
        if action.page_id not in state.pages:
            return state
        return state.model_copy(
            update={"grid_layouts": {**state.grid_layouts, action.page_id: action.layout}}
        )

    def _update_grid_item(self, state: DocumentState, action: UpdateGridItem) -> DocumentState:
        layout = state.grid_layouts.get(action.page_id)
        item = layout.find_item(action.item_id) if layout else None
        if layout is None or item is None:
            return state

        changes = action.updates.model_dump(exclude_none=True, exclude={"props"})
        if action.updates.props is not None:
            changes["props"] = {**item.props, **action.updates.props}
        updated = item.model_copy(update=changes)
        items = [updated if i.component == action.item_id else i for i in layout.items]
        return state.model_copy(
            update={
                "grid_layouts": {
                    **state.grid_layouts,
                    action.page_id: layout.model_copy(update={"items": items}),
                }
            }
        )

    def _apply_grid_layout(self, state: DocumentState, action: ApplyGridLayout) -> DocumentState:
        page = state.pages.get(action.page_id)
        layout = state.grid_layouts.get(action.page_id)
        if page is None or layout is None:
            return state

        stack = grid_to_tree(
            layout,
            build_node_lookup(page.content),
            container_id=page.content.id,
            catalog=self.catalog,
        )
        content = page.content.model_copy(update={"children": stack.children})
        update: dict[str, Any] = {
            "pages": {**state.pages, page.id: page.model_copy(update={"content": content})}
        }
        if state.current_page_id == page.id:
            update["selected_node_id"] = self._selection_in(content, state.selected_node_id)
        return state.model_copy(update=update)

    def _clear_grid_layout(self, state: DocumentState, action: ClearGridLayout) -> DocumentState:
        if action.page_id not in state.grid_layouts:
            return state
        return state.model_copy(
            update={
                "grid_layouts": {
                    pid: g for pid, g in state.grid_layouts.items() if pid != action.page_id
                }
            }
        )

    # =========================================================================
    # Transient
    # =========================================================================

    def _select_page(self, state: DocumentState, action: SelectPage) -> DocumentState:
        if action.page_id not in state.pages:
            return state
        return state.model_copy(
            update={"current_page_id": action.page_id, "selected_node_id": None}
        )

    def _select_node(self, state: DocumentState, action: SelectNode) -> DocumentState:
        if action.node_id is None:
            return state.model_copy(update={"selected_node_id": None})
        content = state.current_content
        if content is None or find_node(content, action.node_id) is None:
            return state
        return state.model_copy(update={"selected_node_id": action.node_id})

    def _drag_start(self, state: DocumentState, action: DragStart) -> DocumentState:
        return state.model_copy(update={"drag": DragState(active=True, source=action.source)})

    def _drag_over(self, state: DocumentState, action: DragOver) -> DocumentState:
        if not state.drag.active:
            return state
        return state.model_copy(
            update={"drag": state.drag.model_copy(update={"drop_target": action.target})}
        )

    def _drag_end(self, state: DocumentState, action: DragEnd) -> DocumentState:
        return state.model_copy(update={"drag": IDLE_DRAG})

    def _copy_node(self, state: DocumentState, action: CopyNode) -> DocumentState:
        content = state.current_content
        assert content is not None
        node = find_node(content, action.node_id)
        if node is None:
            return state
        return state.model_copy(update={"clipboard": clone_subtree(node)})

    # =========================================================================
    # Convenience API
    # =========================================================================

    def add_page(self, page: Page) -> bool:
        return self.dispatch(AddPage(page=page))

    def remove_page(self, page_id: str) -> bool:
        return self.dispatch(RemovePage(page_id=page_id))

    def update_page_meta(
        self,
        page_id: str,
        *,
        label: str | None = None,
        route: str | None = None,
        browser_title: str | None = None,
    ) -> bool:
        return self.dispatch(
            UpdatePageMeta(page_id=page_id, label=label, route=route, browser_title=browser_title)
        )

    def select_page(self, page_id: str) -> bool:
        return self.dispatch(SelectPage(page_id=page_id))

    def select_node(self, node_id: str | None) -> bool:
        return self.dispatch(SelectNode(node_id=node_id))

    def add_node(self, parent_id: str, index: int, node: Node | str) -> Node | None:
        """
        Insert a node (or a fresh node of a catalog kind) under a parent and
        select it.

        Returns:
            The inserted node, or None if the insert was rejected
        """
        if isinstance(node, str):
            node = self.catalog.create_node(node)
        if not self.dispatch(AddNode(parent_id=parent_id, index=index, node=node)):
            return None
        self.dispatch(SelectNode(node_id=node.id))
        return node

    def remove_node(self, node_id: str) -> bool:
        return self.dispatch(RemoveNode(node_id=node_id))

    def move_node(self, node_id: str, new_parent_id: str, new_index: int) -> bool:
        return self.dispatch(
            MoveNode(node_id=node_id, new_parent_id=new_parent_id, new_index=new_index)
        )

    def update_props(self, node_id: str, props: dict[str, Any]) -> bool:
        return self.dispatch(UpdateNodeProps(node_id=node_id, props=props))

    def update_style(self, node_id: str, style: dict[str, Any]) -> bool:
        return self.dispatch(UpdateNodeStyle(node_id=node_id, style=style))

    def duplicate_node(self, node_id: str) -> str | None:
        """Duplicate a node; returns the clone's id (it becomes selected)."""
        if not self.dispatch(DuplicateNode(node_id=node_id)):
            return None
        return self._state.selected_node_id

    def wrap_in_container(self, node_id: str, container_type: str = "stack") -> str | None:
        """Wrap a node; returns the wrapper's id (it becomes selected)."""
        if not self.dispatch(WrapInContainer(node_id=node_id, container_type=container_type)):
            return None
        return self._state.selected_node_id

    def copy_node(self, node_id: str) -> bool:
        return self.dispatch(CopyNode(node_id=node_id))

    def paste_node(self, parent_id: str, index: int) -> str | None:
        """Paste a fresh clone of the clipboard; returns its id."""
        if not self.dispatch(PasteNode(parent_id=parent_id, index=index)):
            return None
        return self._state.selected_node_id

    def start_drag_from_palette(self, node_type: str) -> None:
        self.dispatch(DragStart(source=PaletteDragSource(node_type=node_type)))

    def start_drag_from_canvas(self, node_id: str) -> None:
        self.dispatch(DragStart(source=CanvasDragSource(node_id=node_id)))

    def set_drop_target(self, parent_id: str | None, index: int = 0) -> None:
        target = DropTarget(parent_id=parent_id, index=index) if parent_id is not None else None
        self.dispatch(DragOver(target=target))

    def end_drag(self) -> None:
        self.dispatch(DragEnd())

    def drop(self) -> bool:
        return self.dispatch(Drop())

    def convert_to_grid(self, columns: int | None = None) -> GridLayoutConfig | None:
        """
        Project the current page's tree onto a grid and store it as the page's layout.

        Positions are always recomputed from the current tree order.
        """
        page = self._state.current_page
        if page is None:
            return None
        layout = tree_to_grid(
            page.content,
            columns if columns is not None else self.settings.default_grid_columns,
            row_height=self.settings.grid_row_height,
            gap=self.settings.grid_gap,
        )
        self.dispatch(SetGridLayout(page_id=page.id, layout=layout))
        return layout

    def apply_grid_layout(self, page_id: str | None = None) -> bool:
        """Rebuild a page's tree (the current page by default) from its grid layout."""
        page_id = page_id or self._state.current_page_id
        if page_id is None:
            return False
        return self.dispatch(ApplyGridLayout(page_id=page_id))
