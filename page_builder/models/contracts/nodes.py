"""
Page Document Definitions

Core types for the page document tree.

- Node: a typed tree entity (container nodes own ordered children)
- Page: a named document whose content is a single root Node

Props and style are open string-keyed maps; the engine never interprets
them, so any renderer can own a typed view of its own kinds.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Node(BaseModel):
    """
    A node in the page tree.

    Instances are frozen. Tree edits go through page_builder.services.tree_ops,
    which returns new roots and never mutates the nodes it was given.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Unique node identifier, stable for the node's lifetime")
    type: str = Field(description="Node kind, resolved against the node catalog")
    props: dict[str, Any] = Field(
        default_factory=dict, description="Kind-specific attributes (may hold template strings)"
    )
    children: list[Node] | None = Field(
        default=None, description="Ordered children; None for leaf kinds"
    )
    style: dict[str, Any] | None = Field(
        default=None, description="Presentation overrides, orthogonal to props"
    )

    @property
    def is_container(self) -> bool:
        """Whether this node carries a children list."""
        return self.children is not None


class Page(BaseModel):
    """A named page document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Page identifier")
    label: str = Field(description="Human-readable page name")
    route: str = Field(description="Page route (e.g. /runs)")
    browser_title: str | None = Field(
        default=None, alias="browserTitle", description="Browser tab title"
    )
    content: Node = Field(description="Root node of the page tree")


Node.model_rebuild()
