"""
Page Serialization

A page's serialized form (id, label, route, browserTitle, content tree) is
the unit a host persists or imports. No extra framing: camelCase keys,
None fields omitted. Import validates with pydantic and keeps ids as-is.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter

from page_builder.models.contracts.nodes import Page

logger = logging.getLogger(__name__)

_PAGES_ADAPTER: TypeAdapter[dict[str, Page]] = TypeAdapter(dict[str, Page])


def export_page(page: Page) -> dict[str, Any]:
    return page.model_dump(by_alias=True, exclude_none=True)


def export_pages(pages: Mapping[str, Page]) -> dict[str, Any]:
    return {page_id: export_page(page) for page_id, page in pages.items()}


def import_page(data: Mapping[str, Any]) -> Page:
    """
    Validate one serialized page.

    Raises:
        pydantic.ValidationError: If the payload is not a page
    """
    return Page.model_validate(data)


def import_pages(data: Mapping[str, Any]) -> dict[str, Page]:
    """Validate a mapping of page id to serialized page."""
    pages = _PAGES_ADAPTER.validate_python(dict(data))
    for key, page in pages.items():
        if key != page.id:
            logger.warning(f"Page stored under key {key} has id {page.id}")
    return pages


def dumps_pages(pages: Mapping[str, Page], *, indent: int | None = 2) -> str:
    """Serialize pages to JSON text."""
    return _PAGES_ADAPTER.dump_json(
        dict(pages), by_alias=True, exclude_none=True, indent=indent
    ).decode("utf-8")


def loads_pages(text: str | bytes) -> dict[str, Page]:
    """Parse pages from JSON text."""
    return _PAGES_ADAPTER.validate_json(text)
