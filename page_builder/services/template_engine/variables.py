"""
Variable Schema

The variables a page's templates can bind to, with mock values the editor
previews against. Variables come from two places: the ones the user
declares on the page contract, and the ones the hosting application
provides. merge_variables() combines them and build_mock_data() turns the
result into the data context handed to resolve_template().

    variables = merge_variables(user_section, host_section)
    data = build_mock_data(variables.items)
    resolve_template("{{run.status | badge}}", data)
"""

import logging
from collections.abc import Iterable, MutableMapping
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

VariableType = Literal["string", "number", "boolean", "date", "array", "object"]
VariableSource = Literal["user", "external"]

ORPHAN_CATEGORY_ICON = "📦"


class VariableInfo(BaseModel):
    """One bindable data path."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str = Field(..., description='Dotted data path, e.g. "run.status" or "$app.name"')
    label: str = Field(..., description="Human-readable name")
    type: VariableType = Field(default="string")
    category: str = Field(..., description="Grouping key, e.g. run, user, stats")
    description: str | None = Field(default=None)
    mock_value: Any = Field(default=None, alias="mockValue", description="Preview value")
    source: VariableSource | None = Field(default=None, description="Set when merged")


class VariableCategory(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    label: str
    icon: str = ORPHAN_CATEGORY_ICON
    description: str | None = None
    source: VariableSource | None = None


class VariablesSection(BaseModel):
    """Variables as stored on a page contract (and as returned by a merge)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    categories: list[VariableCategory] = Field(default_factory=list)
    items: list[VariableInfo] = Field(default_factory=list)


# =============================================================================
# Merge
# =============================================================================


def merge_variables(
    user: VariablesSection | None, external: VariablesSection | None
) -> VariablesSection:
    """
    Merge user-declared variables with host-provided ones.

    Every item and category is tagged with its source. On a path (or
    category id) collision the user's entry wins, which lets a user
    override a host variable's mock value. Categories that items refer to
    but nobody declared are appended with the id as label.
    """
    user = user or VariablesSection()
    external = external or VariablesSection()

    user_items = [v.model_copy(update={"source": "user"}) for v in user.items]
    user_paths = {v.path for v in user_items}
    items = user_items + [
        v.model_copy(update={"source": "external"})
        for v in external.items
        if v.path not in user_paths
    ]

    user_categories = [c.model_copy(update={"source": "user"}) for c in user.categories]
    user_category_ids = {c.id for c in user_categories}
    categories = user_categories + [
        c.model_copy(update={"source": "external"})
        for c in external.categories
        if c.id not in user_category_ids
    ]

    known = {c.id for c in categories}
    for item in items:
        if item.category not in known:
            logger.debug(f"Creating undeclared variable category {item.category}")
            categories.append(VariableCategory(id=item.category, label=item.category))
            known.add(item.category)

    return VariablesSection(categories=categories, items=items)


# =============================================================================
# Mock Data
# =============================================================================


def set_nested_value(obj: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set obj[a][b][c] = value for path "a.b.c", creating dicts on the way."""
    parts = path.split(".")
    current = obj
    for key in parts[:-1]:
        if not isinstance(current.get(key), MutableMapping):
            current[key] = {}
        current = current[key]
    current[parts[-1]] = value


def build_mock_data(variables: Iterable[VariableInfo]) -> dict[str, Any]:
    """Data context built from each variable's mock value, nested by path."""
    data: dict[str, Any] = {}
    for variable in variables:
        set_nested_value(data, variable.path, variable.mock_value)
    return data


def default_mock_value(variable_type: str) -> Any:
    if variable_type == "string":
        return "exemplo"
    if variable_type == "number":
        return 42
    if variable_type == "boolean":
        return True
    if variable_type == "date":
        return datetime.now(timezone.utc).isoformat()
    if variable_type == "array":
        return []
    if variable_type == "object":
        return {}
    return ""


# =============================================================================
# Lookup Helpers
# =============================================================================


def search_variables(query: str, variables: list[VariableInfo]) -> list[VariableInfo]:
    """Case-insensitive match on path, label, description or category."""
    if not query.strip():
        return variables
    q = query.lower()
    return [
        v
        for v in variables
        if q in v.path.lower()
        or q in v.label.lower()
        or q in (v.description or "").lower()
        or q in v.category.lower()
    ]


def get_variable_info(path: str, variables: Iterable[VariableInfo]) -> VariableInfo | None:
    return next((v for v in variables if v.path == path), None)


def group_by_category(variables: Iterable[VariableInfo]) -> dict[str, list[VariableInfo]]:
    groups: dict[str, list[VariableInfo]] = {}
    for variable in variables:
        groups.setdefault(variable.category, []).append(variable)
    return groups


def format_mock(value: Any) -> str:
    """Short preview of a mock value for the variable picker."""
    if value is None:
        return "—"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value[:16] + "…" if len(value) > 16 else value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return f"[{len(value)}]"
    return "{…}"
