"""
Grid Layout Definitions

A grid layout is a secondary, derived view of a page's children keyed by
node id. It is reconciled with the tree only through the grid converter.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GridItem(BaseModel):
    """Placement of one node inside a grid layout."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    component: str = Field(description="Id of the node placed in this cell")
    col_start: int = Field(default=1, ge=1, alias="colStart", description="1-based start column")
    row_start: int = Field(default=1, ge=1, alias="rowStart", description="1-based start row")
    col_span: int = Field(default=1, ge=1, alias="colSpan", description="Columns spanned")
    row_span: int = Field(default=1, ge=1, alias="rowSpan", description="Rows spanned")
    props: dict[str, Any] = Field(
        default_factory=dict, description="Per-item prop overrides merged over the node's props"
    )


class GridLayoutConfig(BaseModel):
    """Grid layout for a page."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    columns: int = Field(ge=1, description="Number of grid columns")
    row_height: str = Field(alias="rowHeight", description="CSS row height (e.g. 100px)")
    gap: str = Field(description="CSS gap between cells")
    items: list[GridItem] = Field(default_factory=list, description="Placed items")

    def find_item(self, component: str) -> GridItem | None:
        """Return the item placing the given node id, if any."""
        for item in self.items:
            if item.component == component:
                return item
        return None


class GridItemUpdate(BaseModel):
    """Partial update for a grid item (position, span, or prop overrides)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    col_start: int | None = Field(default=None, ge=1, alias="colStart")
    row_start: int | None = Field(default=None, ge=1, alias="rowStart")
    col_span: int | None = Field(default=None, ge=1, alias="colSpan")
    row_span: int | None = Field(default=None, ge=1, alias="rowSpan")
    props: dict[str, Any] | None = Field(
        default=None, description="Props merged into the item's existing overrides"
    )
