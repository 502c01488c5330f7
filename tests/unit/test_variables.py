"""
Unit tests for the variable schema: merging, mock data and lookups.
"""

import pytest

from page_builder.services.template_engine import resolve_template
from page_builder.services.template_engine.variables import (
    VariableCategory,
    VariableInfo,
    VariablesSection,
    build_mock_data,
    default_mock_value,
    format_mock,
    get_variable_info,
    group_by_category,
    merge_variables,
    search_variables,
    set_nested_value,
)


def var(path, category, mock=None, **extra):
    return VariableInfo(path=path, label=path, category=category, mock_value=mock, **extra)


class TestMergeVariables:
    """Tests for merging user and host variables."""

    def test_sources_are_tagged(self):
        merged = merge_variables(
            VariablesSection(items=[var("user.name", "user")]),
            VariablesSection(items=[var("run.id", "run")]),
        )

        assert [(v.path, v.source) for v in merged.items] == [
            ("user.name", "user"),
            ("run.id", "external"),
        ]

    def test_user_wins_on_path_collision(self):
        merged = merge_variables(
            VariablesSection(items=[var("run.status", "run", mock="failed")]),
            VariablesSection(items=[var("run.status", "run", mock="passed")]),
        )

        assert len(merged.items) == 1
        assert merged.items[0].mock_value == "failed"
        assert merged.items[0].source == "user"

    def test_user_category_wins_and_orphans_are_created(self):
        merged = merge_variables(
            VariablesSection(
                categories=[VariableCategory(id="run", label="Execução", icon="▶")],
                items=[var("stats.total", "stats")],
            ),
            VariablesSection(
                categories=[VariableCategory(id="run", label="Run", icon="R")],
                items=[var("run.id", "run")],
            ),
        )

        assert [(c.id, c.label, c.source) for c in merged.categories] == [
            ("run", "Execução", "user"),
            ("stats", "stats", None),
        ]
        assert merged.categories[1].icon == "📦"

    def test_both_sides_missing(self):
        merged = merge_variables(None, None)

        assert merged.items == []
        assert merged.categories == []

    def test_camel_case_mock_value(self):
        info = VariableInfo.model_validate(
            {"path": "run.id", "label": "Id", "category": "run", "mockValue": "r-1"}
        )

        assert info.mock_value == "r-1"
        assert info.type == "string"


class TestMockData:
    """Tests for building the preview data context."""

    def test_build_nested_data(self):
        data = build_mock_data(
            [
                var("run.id", "run", mock="r-1"),
                var("run.owner.name", "run", mock="Ana"),
                var("stats.total", "stats", mock=12),
            ]
        )

        assert data == {"run": {"id": "r-1", "owner": {"name": "Ana"}}, "stats": {"total": 12}}
        assert resolve_template("{{run.owner.name}} / {{stats.total}}", data) == "Ana / 12"

    def test_set_nested_value_replaces_scalars(self):
        data = {"run": "pending"}

        set_nested_value(data, "run.status", "ok")

        assert data == {"run": {"status": "ok"}}

    def test_later_variable_overwrites_leaf(self):
        data = build_mock_data([var("run", "run", mock="x"), var("run.id", "run", mock="r-1")])

        assert data == {"run": {"id": "r-1"}}

    @pytest.mark.parametrize(
        "variable_type,expected",
        [("string", "exemplo"), ("number", 42), ("boolean", True), ("array", []), ("object", {})],
    )
    def test_default_mock_value(self, variable_type, expected):
        assert default_mock_value(variable_type) == expected

    def test_default_mock_date_is_iso(self):
        assert "T" in default_mock_value("date")


class TestLookups:
    """Tests for search, lookup and grouping helpers."""

    @pytest.fixture
    def variables(self):
        return [
            var("run.status", "run", description="Situação da execução"),
            var("run.id", "run"),
            var("user.email", "user"),
        ]

    def test_search_matches_any_field(self, variables):
        assert [v.path for v in search_variables("STATUS", variables)] == ["run.status"]
        assert [v.path for v in search_variables("execução", variables)] == ["run.status"]
        assert [v.path for v in search_variables("user", variables)] == ["user.email"]

    def test_blank_search_returns_all(self, variables):
        assert search_variables("   ", variables) == variables

    def test_get_variable_info(self, variables):
        assert get_variable_info("run.id", variables) is variables[1]
        assert get_variable_info("run.missing", variables) is None

    def test_group_by_category(self, variables):
        groups = group_by_category(variables)

        assert list(groups) == ["run", "user"]
        assert [v.path for v in groups["run"]] == ["run.status", "run.id"]


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "—"),
        ("curto", "curto"),
        ("a" * 20, "a" * 16 + "…"),
        (3.5, "3.5"),
        (False, "false"),
        ([1, 2], "[2]"),
        ({"a": 1}, "{…}"),
    ],
)
def test_format_mock(value, expected):
    assert format_mock(value) == expected
