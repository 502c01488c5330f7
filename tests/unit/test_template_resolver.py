"""
Unit tests for template resolution.
"""

from dataclasses import dataclass
from datetime import datetime

import pytest

from page_builder.services.template_engine import (
    get_display_hint,
    has_template_expr,
    resolve_path,
    resolve_template,
    resolve_template_for_list,
    resolve_template_record,
)


@dataclass
class Run:
    status: str
    _secret: str = "hidden"


class LazyRun:
    """Object whose attribute read fails until loaded."""

    @property
    def status(self):
        raise ValueError("not loaded")


class TestResolvePath:
    """Tests for resolve_path."""

    def test_dotted_mapping_path(self):
        assert resolve_path({"a": {"b": {"c": 1}}}, "a.b.c") == 1

    def test_sequence_index_and_length(self):
        data = {"items": [{"id": "x"}, {"id": "y"}], "name": "ana"}

        assert resolve_path(data, "items.1.id") == "y"
        assert resolve_path(data, "items.length") == 2
        assert resolve_path(data, "name.length") == 3

    def test_attribute_access(self):
        data = {"run": Run(status="passed")}

        assert resolve_path(data, "run.status") == "passed"
        assert resolve_path(data, "run._secret") is None

    @pytest.mark.parametrize("path", ["missing", "a.missing.deep", "items.9", "items.x", ""])
    def test_missing_segments_are_none(self, path):
        assert resolve_path({"a": {}, "items": [1]}, path) is None

    @pytest.mark.parametrize("path", ["items.-1", "items.+0", "items. 1x"])
    def test_only_plain_digits_index_sequences(self, path):
        assert resolve_path({"items": ["a", "b"]}, path) is None

    def test_failing_attribute_read_is_none(self):
        assert resolve_path({"run": LazyRun()}, "run.status") is None
        assert resolve_template("s={{run.status}}", {"run": LazyRun()}) == "s="

    def test_special_namespaces(self):
        data = {
            "$app": {"name": "Gatekeeper"},
            "$page": {"id": "runs"},
            "$enum": {"status": {"ok": "Passou"}},
        }

        assert resolve_path(data, "$app.name") == "Gatekeeper"
        assert resolve_path(data, "$page.id") == "runs"
        assert resolve_path(data, "$enum.status.ok") == "Passou"

    def test_missing_namespace(self):
        assert resolve_path({}, "$app.name") is None


class TestResolveTemplate:
    """Tests for resolve_template."""

    def test_greeting_with_pipe(self):
        """Test resolving an expression through a formatter."""
        result = resolve_template("Olá {{user.name | uppercase}}!", {"user": {"name": "ana"}})

        assert result == "Olá ANA!"

    def test_missing_path_is_empty_string(self):
        assert resolve_template("{{x.y}}", {}) == ""

    def test_missing_data_context(self):
        assert resolve_template("Hi {{user.name}}", None) == "Hi "

    @pytest.mark.parametrize(
        "text",
        ["plain text", "", "price: R$ 10", "{{unclosed", "{ {not} }", "ends with }}"],
    )
    def test_plain_text_round_trip(self, text):
        """Test that text without expressions comes back unchanged."""
        assert not has_template_expr(text)
        assert resolve_template(text, {"anything": 1}) == text

    def test_pipes_apply_left_to_right(self):
        data = {"desc": "  a long description  "}

        assert resolve_template("{{desc | trim | truncate:6 | uppercase}}", data) == "A LONG…"

    def test_value_stringification(self):
        data = {"ok": True, "n": 3.0, "tags": ["a", "b"]}

        assert resolve_template("{{ok}} {{n}} {{tags}}", data) == "true 3 a,b"

    def test_unknown_formatter_keeps_value(self):
        assert resolve_template("{{name | sparkle}}", {"name": "ana"}) == "ana"

    def test_locale_override(self):
        assert resolve_template("{{v | number:2}}", {"v": 1234.5}, locale="en-US") == "1,234.50"
        assert resolve_template("{{v | number:2}}", {"v": 1234.5}, locale="pt-BR") == "1.234,50"

    def test_relative_date_uses_now(self):
        now = datetime(2024, 1, 15, 12, 0, 0)
        data = {"run": {"created": "2024-01-15T10:00:00"}}

        result = resolve_template("{{run.created | date:relative}}", data, locale="pt-BR", now=now)

        assert result == "2h atrás"

    def test_default_fills_missing(self):
        assert resolve_template("{{owner | default:Ninguém}}", {}) == "Ninguém"

    def test_non_string_template(self):
        assert resolve_template(None, {}) == ""
        assert resolve_template(42, {}) == "42"


class TestDisplayHint:
    """Tests for get_display_hint."""

    def test_badge_hint(self):
        assert get_display_hint("{{run.status | badge}}") == "badge"

    def test_no_hint(self):
        assert get_display_hint("{{run.status | uppercase}}") is None
        assert get_display_hint("plain") is None

    def test_badge_does_not_change_value(self):
        assert resolve_template("{{s | badge}}", {"s": "passed"}) == "passed"


class TestBatchResolution:
    """Tests for resolving records and per-item rows."""

    def test_record_resolves_string_values(self):
        props = {"title": "{{run.id}}", "subtitle": "Status: {{run.status | uppercase}}", "level": 2}

        resolved = resolve_template_record(props, {"run": {"id": "r-1", "status": "ok"}})

        assert resolved == {"title": "r-1", "subtitle": "Status: OK", "level": 2}

    def test_record_with_missing_data(self):
        assert resolve_template_record({"a": "{{x}}!"}, None) == {"a": "!"}

    def test_one_row_per_item(self):
        runs = [{"id": "r-1", "total": 3}, {"id": "r-2", "total": 0}]

        rows = resolve_template_for_list("{{run.id}} ({{run.total}})", "run", runs)

        assert rows == ["r-1 (3)", "r-2 (0)"]

    def test_rows_for_objects_and_empty_list(self):
        assert resolve_template_for_list("{{run.status}}", "run", [Run(status="passed")]) == ["passed"]
        assert resolve_template_for_list("{{run.status}}", "run", []) == []
