"""
Visibility Evaluator

Evaluates visibility rules and conditions such as:

    "{{user.role}} === 'admin'"
    "{{items.length}} >= 5"
    "{{feature.enabled}}"            (truthiness check)

Evaluation never raises; a condition that cannot be understood is a
truthiness check on its resolved text.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from page_builder.services.template_engine.resolver import resolve_template

logger = logging.getLogger(__name__)

Breakpoint = Literal["mobile", "tablet", "desktop"]

# Longest first so "!==" wins over "!=" and ">=" over ">"
OPERATORS = ("!==", "===", ">=", "<=", "!=", "==", ">", "<")

_FALSY_TEXT = frozenset(["", "0", "false", "null", "undefined", "none"])


class VisibilityRule(BaseModel):
    """When an element is shown."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pages: list[str] | None = Field(
        default=None, description='Page ids where visible; ["*"] means every page'
    )
    condition: str | None = Field(default=None, description="Conditional expression")
    hidden_breakpoints: list[Breakpoint] | None = Field(
        default=None, alias="hiddenBreakpoints", description="Breakpoints where hidden"
    )


def is_truthy(text: str) -> bool:
    """Empty, "0", "false", "null" and "undefined" are falsy; anything else is truthy."""
    return text.strip().lower() not in _FALSY_TEXT


def _parse_comparison(condition: str) -> tuple[str, str, str] | None:
    for op in OPERATORS:
        idx = condition.find(op)
        while idx != -1:
            before = condition[:idx]
            # Operator must sit outside any {{ }} block
            if before.count("{{") == before.count("}}"):
                left = before.strip()
                right = _strip_quotes(condition[idx + len(op):].strip())
                return left, op, right
            idx = condition.find(op, idx + 1)
    return None


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def _as_number(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def _compare(left: str, op: str, right: str) -> bool:
    if right in ("true", "false"):
        expected = right == "true"
        matches = is_truthy(left) == expected
        return not matches if "!" in op else matches

    left_num, right_num = _as_number(left), _as_number(right)
    lhs: Any
    rhs: Any
    if left_num is not None and right_num is not None:
        lhs, rhs = left_num, right_num
    else:
        lhs, rhs = left, right

    if op in ("===", "=="):
        return lhs == rhs
    if op in ("!==", "!="):
        return lhs != rhs
    if op == ">":
        return lhs > rhs
    if op == ">=":
        return lhs >= rhs
    if op == "<":
        return lhs < rhs
    return lhs <= rhs


def evaluate_condition(condition: str | None, data: Mapping[str, Any] | None = None) -> bool:
    """Evaluate a condition against data. Empty conditions are true."""
    if not condition or not condition.strip():
        return True
    text = condition.strip()

    comparison = _parse_comparison(text)
    if comparison is not None:
        left, op, right = comparison
        return _compare(resolve_template(left, data), op, right)

    return is_truthy(resolve_template(text, data))


def evaluate_visibility(
    rule: VisibilityRule | None,
    current_page: str,
    data: Mapping[str, Any] | None = None,
    breakpoint: Breakpoint | None = None,
) -> bool:
    """Whether an element with `rule` is visible on `current_page`."""
    if rule is None:
        return True

    if rule.pages and "*" not in rule.pages and current_page not in rule.pages:
        return False

    if breakpoint is not None and rule.hidden_breakpoints and breakpoint in rule.hidden_breakpoints:
        return False

    if rule.condition:
        return evaluate_condition(rule.condition, data)

    return True


T = TypeVar("T")


def filter_by_visibility(
    items: Iterable[T],
    current_page: str,
    data: Mapping[str, Any] | None = None,
    breakpoint: Breakpoint | None = None,
    rule_attr: str = "visibility",
) -> list[T]:
    """Keep the items whose `visibility` rule (attribute or key) passes."""
    visible: list[T] = []
    for item in items:
        if isinstance(item, Mapping):
            rule = item.get(rule_attr)
        else:
            rule = getattr(item, rule_attr, None)
        if isinstance(rule, Mapping):
            try:
                rule = VisibilityRule.model_validate(rule)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed visibility rule {rule!r}: {e}")
                rule = None
        if evaluate_visibility(rule, current_page, data, breakpoint):
            visible.append(item)
    return visible
