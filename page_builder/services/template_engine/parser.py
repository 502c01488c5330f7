"""
Template Parser

Parses strings such as "Hello {{user.name | uppercase}}!" into text and
expression tokens. Expression syntax:

    {{ path | formatter:arg1,arg2 | formatter2 }}

Parsing never fails: unclosed or empty braces stay literal text.
"""

import re
from dataclasses import dataclass, field

EXPR_RE = re.compile(r"\{\{(.+?)\}\}")

# Top-level namespaces that redirect resolution into data["$app"], etc.
SPECIAL_PREFIXES = ("$app", "$page", "$enum")


@dataclass(frozen=True)
class PipeCall:
    """A formatter applied to an expression value."""

    name: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TemplateToken:
    """
    One piece of a parsed template.

    Text tokens only carry `raw`. Expression tokens also carry the data
    `path` and the ordered `pipes`.
    """

    type: str  # "text" | "expression"
    raw: str
    path: str | None = None
    pipes: list[PipeCall] | None = None


def parse_template(text: object) -> list[TemplateToken]:
    """Parse a template string into text and expression tokens."""
    if not isinstance(text, str) or not text:
        raw = "" if text is None else str(text)
        return [TemplateToken(type="text", raw=raw)]

    tokens: list[TemplateToken] = []
    last_index = 0

    for match in EXPR_RE.finditer(text):
        if match.start() > last_index:
            tokens.append(TemplateToken(type="text", raw=text[last_index:match.start()]))

        parts = [part.strip() for part in match.group(1).split("|")]
        tokens.append(
            TemplateToken(
                type="expression",
                raw=match.group(0),
                path=parts[0],
                pipes=[_parse_pipe(part) for part in parts[1:] if part],
            )
        )
        last_index = match.end()

    if last_index < len(text):
        tokens.append(TemplateToken(type="text", raw=text[last_index:]))

    return tokens or [TemplateToken(type="text", raw=text)]


def _parse_pipe(raw: str) -> PipeCall:
    """Parse "truncate:20" into PipeCall("truncate", ["20"])."""
    name, sep, arg_str = raw.partition(":")
    if not sep:
        return PipeCall(name=name.strip())
    return PipeCall(name=name.strip(), args=[arg.strip() for arg in arg_str.split(",")])


def has_template_expr(text: object) -> bool:
    """Whether a string contains at least one {{ }} expression."""
    return isinstance(text, str) and EXPR_RE.search(text) is not None


def extract_variable_paths(text: object) -> list[str]:
    """
    List the data paths a template depends on, in order of appearance.

    Paths under $enum are static lookups and are left out. Duplicates are
    reported once.
    """
    paths: list[str] = []
    for token in parse_template(text):
        if token.type != "expression" or not token.path:
            continue
        if token.path == "$enum" or token.path.startswith("$enum."):
            continue
        if token.path not in paths:
            paths.append(token.path)
    return paths
