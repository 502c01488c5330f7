"""
Template Resolver

Resolves parsed templates against a data context. Resolution never
raises: missing paths resolve to None and render as an empty string, so
half-typed templates stay renderable while the user edits them.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from page_builder.config import get_settings
from page_builder.services.template_engine.formatters import (
    DISPLAY_HINTS,
    FormatterContext,
    apply_formatter,
    stringify,
)
from page_builder.services.template_engine.parser import (
    SPECIAL_PREFIXES,
    TemplateToken,
    parse_template,
)

logger = logging.getLogger(__name__)


def resolve_path(data: Any, path: str | None) -> Any:
    """
    Resolve a dotted path ("run.status", "items.0.id", "$app.name") in data.

    $app., $page. and $enum. paths are looked up in data["$app"],
    data["$page"] and data["$enum"]. Returns None for any missing segment.
    """
    if not path:
        return None

    for prefix in SPECIAL_PREFIXES:
        if path.startswith(prefix + "."):
            namespace = _segment(data, prefix)
            return resolve_path(namespace if namespace is not None else {}, path[len(prefix) + 1:])

    current = data
    for part in path.split("."):
        if current is None:
            return None
        current = _segment(current, part.strip())
    return current


def _segment(current: Any, part: str) -> Any:
    """Look up one path segment in a mapping, sequence or object."""
    if isinstance(current, Mapping):
        return current.get(part)
    if isinstance(current, (str, bytes)):
        return len(current) if part == "length" else None
    if isinstance(current, Sequence):
        if part == "length":
            return len(current)
        if not part.isdigit():
            return None
        try:
            return current[int(part)]
        except (ValueError, IndexError):
            return None
    if part.startswith("_"):
        return None
    try:
        return getattr(current, part, None)
    except Exception as e:
        logger.debug(f"Reading attribute {part} failed: {e}")
        return None


def build_context(locale: str | None = None, now: datetime | None = None) -> FormatterContext:
    """Formatter context from explicit values, falling back to settings."""
    settings = get_settings()
    return FormatterContext(
        locale=locale or settings.locale,
        currency=settings.default_currency,
        now=now,
    )


def resolve_expression(token_path: str | None, pipes: list, data: Any, ctx: FormatterContext) -> Any:
    """Resolve one expression's value and thread it through its pipes."""
    value = resolve_path(data, token_path)
    for pipe in pipes or []:
        value = apply_formatter(value, pipe, ctx)
    return value


def resolve_template(
    template: Any,
    data: Mapping[str, Any] | None,
    *,
    locale: str | None = None,
    now: datetime | None = None,
) -> str:
    """
    Resolve a template string against data, returning the final text.

    Args:
        template: Text possibly containing {{path | formatter:args}} expressions
        data: Data context (mock or real)
        locale: Formatter locale (defaults to Settings.locale)
        now: Reference time for relative dates (defaults to the current time)
    """
    tokens = parse_template(template)
    if len(tokens) == 1 and tokens[0].type == "text":
        return tokens[0].raw
    return _render(tokens, data, build_context(locale, now))


def _render(tokens: list[TemplateToken], data: Mapping[str, Any] | None, ctx: FormatterContext) -> str:
    context = data if data is not None else {}
    parts: list[str] = []
    for token in tokens:
        if token.type == "text":
            parts.append(token.raw)
            continue
        value = resolve_expression(token.path, token.pipes or [], context, ctx)
        if value is None:
            logger.debug(f"Template expression {token.raw} resolved to nothing")
        parts.append(stringify(value))
    return "".join(parts)


# =============================================================================
# Batch Resolution
# =============================================================================


def resolve_template_record(
    templates: Mapping[str, Any],
    data: Mapping[str, Any] | None,
    *,
    locale: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Resolve every string value of a record, e.g. all props of a node.

    Non-string values such as numbers or lists are returned unchanged.
    """
    ctx = build_context(locale, now)
    return {
        key: _render(parse_template(value), data, ctx) if isinstance(value, str) else value
        for key, value in templates.items()
    }


def resolve_template_for_list(
    template: Any,
    entity_name: str,
    items: Iterable[Any],
    *,
    locale: str | None = None,
    now: datetime | None = None,
) -> list[str]:
    """
    Resolve one template per item, parsing it only once.

    Each item becomes the data context of its row under `entity_name`:

        resolve_template_for_list("{{run.id}}", "run", runs)
    """
    tokens = parse_template(template)
    ctx = build_context(locale, now)
    return [_render(tokens, {entity_name: item}, ctx) for item in items]


def get_display_hint(template: Any) -> str | None:
    """Return the display hint ("badge") carried by any expression's pipes."""
    for token in parse_template(template):
        if token.type != "expression":
            continue
        for pipe in token.pipes or []:
            if pipe.name in DISPLAY_HINTS:
                return pipe.name
    return None
