"""
Unit tests for the template parser.
"""

import pytest

from page_builder.services.template_engine.parser import (
    PipeCall,
    extract_variable_paths,
    has_template_expr,
    parse_template,
)


class TestParseTemplate:
    """Tests for parse_template."""

    def test_plain_text_is_single_token(self):
        tokens = parse_template("Hello world")

        assert len(tokens) == 1
        assert tokens[0].type == "text"
        assert tokens[0].raw == "Hello world"

    def test_text_and_expression(self):
        """Test splitting literal text around an expression."""
        tokens = parse_template("Olá {{user.name | uppercase}}!")

        assert [t.type for t in tokens] == ["text", "expression", "text"]
        assert tokens[0].raw == "Olá "
        assert tokens[1].raw == "{{user.name | uppercase}}"
        assert tokens[1].path == "user.name"
        assert tokens[1].pipes == [PipeCall(name="uppercase")]
        assert tokens[2].raw == "!"

    def test_pipe_args(self):
        """Test that formatter args are split on commas and trimmed."""
        tokens = parse_template("{{ price | currency:BRL | truncate: 5 }}")

        assert tokens[0].path == "price"
        assert tokens[0].pipes == [
            PipeCall(name="currency", args=["BRL"]),
            PipeCall(name="truncate", args=["5"]),
        ]

    def test_multiple_args(self):
        tokens = parse_template("{{active | boolean:On,Off}}")

        assert tokens[0].pipes == [PipeCall(name="boolean", args=["On", "Off"])]

    def test_adjacent_expressions(self):
        tokens = parse_template("{{a}}{{b}}")

        assert [t.path for t in tokens] == ["a", "b"]

    @pytest.mark.parametrize("text", ["{{unclosed", "closed}}", "{{}}", "{ {a} }"])
    def test_malformed_braces_stay_text(self, text):
        """Test that malformed templates degrade to literal text."""
        tokens = parse_template(text)

        assert all(t.type == "text" for t in tokens)
        assert "".join(t.raw for t in tokens) == text

    @pytest.mark.parametrize("value,expected", [(None, ""), (42, "42"), ("", "")])
    def test_non_string_input(self, value, expected):
        tokens = parse_template(value)

        assert len(tokens) == 1
        assert tokens[0].type == "text"
        assert tokens[0].raw == expected


class TestHasTemplateExpr:
    """Tests for has_template_expr."""

    def test_detects_expression(self):
        assert has_template_expr("Total: {{stats.total}}")

    def test_plain_text(self):
        assert not has_template_expr("Total: 42")
        assert not has_template_expr("{{}}")

    def test_non_string(self):
        assert not has_template_expr(None)
        assert not has_template_expr(123)


class TestExtractVariablePaths:
    """Tests for extract_variable_paths."""

    def test_paths_in_order_without_duplicates(self):
        text = "{{user.name}} ({{user.email}}) - {{user.name | uppercase}}"

        assert extract_variable_paths(text) == ["user.name", "user.email"]

    def test_enum_paths_are_skipped(self):
        text = "{{$enum.status.ok}} {{$app.name}} {{$page.id}}"

        assert extract_variable_paths(text) == ["$app.name", "$page.id"]

    def test_plain_text_has_no_paths(self):
        assert extract_variable_paths("no bindings") == []
