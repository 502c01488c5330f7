"""
Node Catalog

Registry of node kinds: label, icon, category, container-vs-leaf, and
default props. Kinds are registered once at import time and looked up by
the engine and the node factories; nothing re-derives kind behavior ad hoc.
"""

import copy
import logging
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from page_builder.core.exceptions import UnknownNodeTypeError
from page_builder.models.contracts.nodes import Node, Page

logger = logging.getLogger(__name__)


class NodeTypeDescriptor(BaseModel):
    """Descriptor for one node kind."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(description="Node type tag (e.g. stack, heading)")
    label: str = Field(description="Human label shown in the palette")
    icon: str = Field(default="", description="Palette icon")
    description: str = Field(default="", description="Short palette description")
    category: str = Field(description="Palette category id")
    is_container: bool = Field(default=False, description="Whether the kind owns children")
    default_props: dict[str, Any] = Field(default_factory=dict)


CATEGORIES: list[dict[str, str]] = [
    {"id": "layout", "label": "Layout"},
    {"id": "content", "label": "Content"},
    {"id": "data", "label": "Data"},
]


class NodeCatalog:
    """Lookup table of node kinds."""

    def __init__(self, descriptors: list[NodeTypeDescriptor] | None = None):
        self._descriptors: dict[str, NodeTypeDescriptor] = {}
        for descriptor in descriptors or []:
            self.register(descriptor)

    def register(self, descriptor: NodeTypeDescriptor) -> None:
        """Add or replace a kind."""
        if descriptor.kind in self._descriptors:
            logger.debug(f"Replacing node kind descriptor: {descriptor.kind}")
        self._descriptors[descriptor.kind] = descriptor

    def get(self, kind: str) -> NodeTypeDescriptor:
        """
        Get the descriptor for a kind.

        Raises:
            UnknownNodeTypeError: If the kind is not registered
        """
        try:
            return self._descriptors[kind]
        except KeyError:
            raise UnknownNodeTypeError(kind) from None

    def is_known(self, kind: str) -> bool:
        return kind in self._descriptors

    def is_container(self, kind: str) -> bool:
        """Whether a kind owns children. Unknown kinds are leaves."""
        descriptor = self._descriptors.get(kind)
        return descriptor.is_container if descriptor else False

    def kinds(self) -> list[str]:
        return list(self._descriptors)

    def by_category(self, category: str) -> list[NodeTypeDescriptor]:
        return [d for d in self._descriptors.values() if d.category == category]

    def create_node(self, kind: str, props: dict[str, Any] | None = None) -> Node:
        """
        Create a node of a registered kind with a fresh id.

        Args:
            kind: Registered node kind
            props: Props merged over the kind's defaults

        Raises:
            UnknownNodeTypeError: If the kind is not registered
        """
        descriptor = self.get(kind)
        node_props = copy.deepcopy(descriptor.default_props)
        if props:
            node_props.update(props)
        return Node(
            id=generate_id(kind),
            type=kind,
            props=node_props,
            children=[] if descriptor.is_container else None,
        )


def generate_id(kind: str) -> str:
    """Generate a node id such as 'heading-1a2b3c4d'."""
    return f"{kind}-{uuid4().hex[:8]}"


DEFAULT_CATALOG = NodeCatalog(
    [
        # Layout
        NodeTypeDescriptor(
            kind="stack", label="Stack", icon="☰", description="Vertical stack",
            category="layout", is_container=True, default_props={"gap": "16px"},
        ),
        NodeTypeDescriptor(
            kind="row", label="Row", icon="≡", description="Horizontal row",
            category="layout", is_container=True, default_props={"gap": "8px", "align": "center"},
        ),
        NodeTypeDescriptor(
            kind="grid", label="Grid", icon="⊞", description="Column grid",
            category="layout", is_container=True, default_props={"columns": 2, "gap": "16px"},
        ),
        NodeTypeDescriptor(
            kind="container", label="Container", icon="☐", description="Padded wrapper",
            category="layout", is_container=True, default_props={"padding": "16px"},
        ),
        # Content
        NodeTypeDescriptor(
            kind="heading", label="Heading", icon="H", description="H1-H6 title",
            category="content", default_props={"content": "Title", "level": 2},
        ),
        NodeTypeDescriptor(
            kind="text", label="Text", icon="T", description="Paragraph",
            category="content", default_props={"content": "Sample text"},
        ),
        NodeTypeDescriptor(
            kind="button", label="Button", icon="▣", description="Clickable button",
            category="content", default_props={"label": "Button", "variant": "primary"},
        ),
        NodeTypeDescriptor(
            kind="badge", label="Badge", icon="●", description="Status tag",
            category="content", default_props={"content": "Status", "color": "accent"},
        ),
        NodeTypeDescriptor(
            kind="image", label="Image", icon="◻", description="Image or avatar",
            category="content", default_props={"src": "", "size": 48, "rounded": False, "alt": "image"},
        ),
        NodeTypeDescriptor(
            kind="divider", label="Divider", icon="—", description="Separator line",
            category="content", default_props={"color": "#2a2a33"},
        ),
        # Data
        NodeTypeDescriptor(
            kind="card", label="Card", icon="▭", description="Generic card",
            category="data", is_container=True, default_props={"title": "Card", "padding": "16px"},
        ),
        NodeTypeDescriptor(
            kind="table", label="Table", icon="▤", description="Data table",
            category="data",
            default_props={
                "dataSource": "items",
                "columns": [
                    {"key": "col1", "label": "Column 1", "width": "50%"},
                    {"key": "col2", "label": "Column 2", "width": "50%"},
                ],
            },
        ),
    ]
)


def create_default_node(kind: str, catalog: NodeCatalog = DEFAULT_CATALOG) -> Node:
    """Create a node of `kind` with catalog default props and a fresh id."""
    return catalog.create_node(kind)


def create_default_page(
    page_id: str,
    label: str,
    route: str,
    catalog: NodeCatalog = DEFAULT_CATALOG,
) -> Page:
    """Create an empty page whose content is a single stack."""
    root = catalog.create_node("stack", {"gap": "24px"})
    return Page(id=page_id, label=label, route=route, content=root)
