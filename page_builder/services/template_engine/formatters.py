"""
Template Formatters

Built-in formatters for the {{value | formatter:arg}} syntax, grouped by
category (text, number, date, display).

A formatter receives the resolved value, its argument list and a
FormatterContext, and returns the formatted value (usually a string).
Formatters are total: input they cannot interpret comes back as the
stringified original instead of raising.

Register additional formatters with the decorator:

    @register_formatter("reverse", category="text", label="Reverse")
    def _reverse(value, args, ctx):
        return stringify(value)[::-1]
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable

from page_builder.services.template_engine.locales import LocaleInfo, get_locale
from page_builder.services.template_engine.parser import PipeCall

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormatterContext:
    """Inputs formatters may depend on besides the value itself."""

    locale: str = "pt-BR"
    currency: str = "BRL"
    now: datetime | None = None

    @property
    def locale_info(self) -> LocaleInfo:
        return get_locale(self.locale)


FormatterFn = Callable[[Any, list[str], FormatterContext], Any]


@dataclass(frozen=True)
class FormatterInfo:
    """Catalog entry for a formatter (also drives the editor's picker)."""

    name: str
    label: str
    category: str
    fn: FormatterFn
    description: str = ""
    args: str | None = None
    example: str = ""


FORMATTER_CATEGORIES = [
    {"id": "text", "label": "Text"},
    {"id": "number", "label": "Number"},
    {"id": "date", "label": "Date/Time"},
    {"id": "display", "label": "Display"},
]

# Formatters that only hint at presentation and leave the value untouched
DISPLAY_HINTS = frozenset(["badge"])

_formatters: dict[str, FormatterInfo] = {}


def register_formatter(
    name: str,
    *,
    category: str,
    label: str,
    description: str = "",
    args: str | None = None,
    example: str = "",
) -> Callable[[FormatterFn], FormatterFn]:
    """Decorator registering a formatter under `name` (replacing any existing one)."""

    def decorator(fn: FormatterFn) -> FormatterFn:
        _formatters[name] = FormatterInfo(
            name=name,
            label=label,
            category=category,
            fn=fn,
            description=description,
            args=args,
            example=example,
        )
        return fn

    return decorator


def get_formatter(name: str) -> FormatterInfo | None:
    return _formatters.get(name)


def list_formatters(category: str | None = None) -> list[FormatterInfo]:
    """Registered formatters, optionally filtered by category."""
    return [f for f in _formatters.values() if category is None or f.category == category]


def apply_formatter(value: Any, pipe: PipeCall, ctx: FormatterContext) -> Any:
    """
    Apply one pipe to a value.

    Unknown formatter names pass the value through. A formatter that
    fails anyway (e.g. a custom one) is logged and leaves the value as is.
    """
    info = _formatters.get(pipe.name)
    if info is None:
        logger.debug(f"Unknown formatter '{pipe.name}', passing value through")
        return value
    try:
        return info.fn(value, pipe.args, ctx)
    except (ValueError, TypeError, ArithmeticError, LookupError) as e:
        logger.warning(f"Formatter '{pipe.name}' failed on {value!r}: {e}")
        return value


# =============================================================================
# Helpers
# =============================================================================

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def stringify(value: Any) -> str:
    """
    Convert a resolved value to display text.

    None becomes "", booleans become "true"/"false", integral floats drop
    their ".0", lists are comma-joined and mappings are rendered as JSON.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, default=str)
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _parse_int(arg: str | None) -> int | None:
    """Leading-integer parse: "20px" -> 20, "abc" -> None."""
    if not arg:
        return None
    match = _INT_RE.match(arg)
    return int(match.group(1)) if match else None


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        match = _FLOAT_RE.match(value)
        if match:
            return float(match.group(0))
    return None


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Numeric timestamps are epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _format_decimal(number: float, decimals: int, loc: LocaleInfo) -> str:
    """Fixed-point, half-up, grouped, with the locale's separators."""
    decimals = max(0, min(decimals, 20))
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{decimals}f}"
    return text.replace(",", "\0").replace(".", loc.decimal_sep).replace("\0", loc.group_sep)


def _arg_text(args: list[str]) -> str:
    """Free-text argument, restoring commas the pipe parser split on."""
    return ",".join(args)


def _now_for(moment: datetime, ctx: FormatterContext) -> datetime:
    now = ctx.now or datetime.now(timezone.utc)
    if moment.tzinfo is None and now.tzinfo is not None:
        return now.replace(tzinfo=None) if ctx.now else datetime.now()
    if moment.tzinfo is not None and now.tzinfo is None:
        return now.replace(tzinfo=moment.tzinfo)
    return now


def _relative_time(moment: datetime, ctx: FormatterContext) -> str:
    loc = ctx.locale_info
    minutes = math.floor((_now_for(moment, ctx) - moment).total_seconds() / 60)
    if minutes < 1:
        return loc.just_now
    if minutes < 60:
        return loc.minutes_ago.format(n=minutes)
    hours = minutes // 60
    if hours < 24:
        return loc.hours_ago.format(n=hours)
    days = hours // 24
    if days < 30:
        return loc.days_ago.format(n=days)
    return moment.strftime(loc.date_pattern)


# =============================================================================
# Text
# =============================================================================


@register_formatter(
    "uppercase", category="text", label="Uppercase",
    description="Convert to upper case", example="{{name | uppercase}} -> NAME",
)
def _uppercase(value: Any, args: list[str], ctx: FormatterContext) -> str:
    return stringify(value).upper()


@register_formatter(
    "lowercase", category="text", label="Lowercase",
    description="Convert to lower case", example="{{name | lowercase}} -> name",
)
def _lowercase(value: Any, args: list[str], ctx: FormatterContext) -> str:
    return stringify(value).lower()


@register_formatter(
    "capitalize", category="text", label="Capitalize",
    description="Upper-case the first letter", example="{{name | capitalize}} -> Name",
)
def _capitalize(value: Any, args: list[str], ctx: FormatterContext) -> str:
    text = stringify(value)
    return text[:1].upper() + text[1:]


@register_formatter(
    "truncate", category="text", label="Truncate", args="max",
    description="Limit text length", example="{{desc | truncate:20}}",
)
def _truncate(value: Any, args: list[str], ctx: FormatterContext) -> str:
    text = stringify(value)
    limit = _parse_int(args[0] if args else None) or 20
    if limit < 1:
        limit = 20
    return text[:limit] + "…" if len(text) > limit else text


@register_formatter(
    "trim", category="text", label="Trim",
    description="Strip surrounding whitespace", example="{{text | trim}}",
)
def _trim(value: Any, args: list[str], ctx: FormatterContext) -> str:
    return stringify(value).strip()


# =============================================================================
# Number
# =============================================================================


@register_formatter(
    "number", category="number", label="Number", args="decimals|compact",
    description="Localized number", example="{{total | number:compact}} -> 1,2K",
)
def _number(value: Any, args: list[str], ctx: FormatterContext) -> str:
    number = _to_number(value)
    if number is None:
        return stringify(value)
    loc = ctx.locale_info
    if args and args[0] == "compact":
        if abs(number) >= 1_000_000:
            return _format_decimal(number / 1_000_000, 1, loc) + "M"
        if abs(number) >= 1_000:
            return _format_decimal(number / 1_000, 1, loc) + "K"
        return stringify(number)
    decimals = _parse_int(args[0] if args else None) or 0
    return _format_decimal(number, decimals, loc)


@register_formatter(
    "currency", category="number", label="Currency", args="code",
    description="Localized currency amount", example="{{price | currency:BRL}} -> R$ 1.234,00",
)
def _currency(value: Any, args: list[str], ctx: FormatterContext) -> str:
    number = _to_number(value)
    if number is None:
        return stringify(value)
    loc = ctx.locale_info
    code = (args[0] if args and args[0] else ctx.currency).upper()
    symbol = loc.currency_symbols.get(code, code)
    amount = loc.currency_pattern.format(symbol=symbol, amount=_format_decimal(abs(number), 2, loc))
    return f"-{amount}" if number < 0 else amount


@register_formatter(
    "percent", category="number", label="Percent", args="decimals",
    description="Multiply by 100 and append %", example="{{rate | percent:1}} -> 94,2%",
)
def _percent(value: Any, args: list[str], ctx: FormatterContext) -> str:
    number = _to_number(value)
    if number is None:
        return stringify(value)
    decimals = _parse_int(args[0] if args else None)
    if decimals is None:
        decimals = 1
    return _format_decimal(number * 100, decimals, ctx.locale_info) + "%"


# =============================================================================
# Date
# =============================================================================


@register_formatter(
    "date", category="date", label="Date", args="short|long|iso|relative",
    description="Localized date", example="{{created | date:relative}} -> 3d ago",
)
def _date(value: Any, args: list[str], ctx: FormatterContext) -> str:
    moment = _to_datetime(value)
    if moment is None:
        return stringify(value)
    loc = ctx.locale_info
    style = args[0] if args and args[0] else "short"
    if style == "long":
        return loc.long_date.format(day=moment.day, month=loc.months[moment.month - 1], year=moment.year)
    if style == "iso":
        return moment.date().isoformat()
    if style == "relative":
        return _relative_time(moment, ctx)
    return moment.strftime(loc.date_pattern)


@register_formatter(
    "time", category="date", label="Time",
    description="Localized hour and minute", example="{{created | time}} -> 14:30",
)
def _time(value: Any, args: list[str], ctx: FormatterContext) -> str:
    moment = _to_datetime(value)
    if moment is None:
        return stringify(value)
    return moment.strftime(ctx.locale_info.time_pattern)


@register_formatter(
    "datetime", category="date", label="Date and time",
    description="Localized date with time", example="{{created | datetime}}",
)
def _datetime(value: Any, args: list[str], ctx: FormatterContext) -> str:
    moment = _to_datetime(value)
    if moment is None:
        return stringify(value)
    loc = ctx.locale_info
    return f"{moment.strftime(loc.date_pattern)} {moment.strftime(loc.time_pattern)}"


@register_formatter(
    "duration", category="date", label="Duration",
    description="Milliseconds as a human duration", example="{{elapsed | duration}} -> 3m 12s",
)
def _duration(value: Any, args: list[str], ctx: FormatterContext) -> str:
    ms = _to_number(value)
    if ms is None:
        return stringify(value)
    if ms < 1_000:
        return f"{stringify(ms)}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    if ms < 3_600_000:
        return f"{int(ms // 60_000)}m {int((ms % 60_000) // 1000)}s"
    return f"{int(ms // 3_600_000)}h {int((ms % 3_600_000) // 60_000)}m"


# =============================================================================
# Display
# =============================================================================


@register_formatter(
    "badge", category="display", label="Badge",
    description="Render as a colored badge (display hint)", example="{{status | badge}}",
)
def _badge(value: Any, args: list[str], ctx: FormatterContext) -> Any:
    return value


@register_formatter(
    "default", category="display", label="Default", args="value",
    description="Fallback when the value is empty", example="{{name | default:N/A}}",
)
def _default(value: Any, args: list[str], ctx: FormatterContext) -> Any:
    if value is None or value == "":
        return _arg_text(args) or "—"
    return value


@register_formatter(
    "prefix", category="display", label="Prefix", args="text",
    description="Prepend text", example="{{id | prefix:#}}",
)
def _prefix(value: Any, args: list[str], ctx: FormatterContext) -> str:
    return _arg_text(args) + stringify(value)


@register_formatter(
    "suffix", category="display", label="Suffix", args="text",
    description="Append text", example="{{count | suffix:items}}",
)
def _suffix(value: Any, args: list[str], ctx: FormatterContext) -> str:
    return stringify(value) + _arg_text(args)


@register_formatter(
    "json", category="display", label="JSON",
    description="Pretty-printed JSON (debugging)", example="{{run | json}}",
)
def _json(value: Any, args: list[str], ctx: FormatterContext) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


@register_formatter(
    "boolean", category="display", label="Boolean", args="yes/no",
    description="Words for true/false", example="{{active | boolean:On/Off}}",
)
def _boolean(value: Any, args: list[str], ctx: FormatterContext) -> str:
    if isinstance(value, str):
        flag = value.strip().lower() in ("true", "1", "yes", "sim")
    else:
        flag = bool(value)
    if len(args) == 1 and "/" in args[0]:
        yes, _, no = args[0].partition("/")
        return yes if flag else no
    if len(args) >= 2:
        return args[0] if flag else args[1]
    yes, no = ctx.locale_info.boolean_words
    return yes if flag else no


@register_formatter(
    "count", category="display", label="Count",
    description="Number of items in a list", example="{{runs | count}}",
)
def _count(value: Any, args: list[str], ctx: FormatterContext) -> str:
    if isinstance(value, (list, tuple, set, dict)):
        return str(len(value))
    return stringify(value) or "0"


@register_formatter(
    "join", category="display", label="Join", args="separator",
    description="Join list items", example="{{tags | join: / }}",
)
def _join(value: Any, args: list[str], ctx: FormatterContext) -> str:
    if not isinstance(value, (list, tuple)):
        return stringify(value)
    separator = _arg_text(args) or ", "
    return separator.join(stringify(item) for item in value)


@register_formatter(
    "first", category="display", label="First",
    description="First list item", example="{{tags | first}}",
)
def _first(value: Any, args: list[str], ctx: FormatterContext) -> str:
    if isinstance(value, (list, tuple)):
        return stringify(value[0]) if value else ""
    return stringify(value)


@register_formatter(
    "last", category="display", label="Last",
    description="Last list item", example="{{tags | last}}",
)
def _last(value: Any, args: list[str], ctx: FormatterContext) -> str:
    if isinstance(value, (list, tuple)):
        return stringify(value[-1]) if value else ""
    return stringify(value)
