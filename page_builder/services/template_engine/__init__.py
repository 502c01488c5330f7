"""
Template Engine

Parses and resolves {{path | formatter:args}} expressions in data-bound
text fields.

    from page_builder.services.template_engine import resolve_template

    resolve_template("Olá {{user.name | uppercase}}!", {"user": {"name": "ana"}})
    # -> "Olá ANA!"
"""

from page_builder.services.template_engine.formatters import (
    FORMATTER_CATEGORIES,
    FormatterContext,
    FormatterInfo,
    get_formatter,
    list_formatters,
    register_formatter,
    stringify,
)
from page_builder.services.template_engine.parser import (
    PipeCall,
    TemplateToken,
    extract_variable_paths,
    has_template_expr,
    parse_template,
)
from page_builder.services.template_engine.resolver import (
    get_display_hint,
    resolve_path,
    resolve_template,
    resolve_template_for_list,
    resolve_template_record,
)
from page_builder.services.template_engine.variables import (
    VariableCategory,
    VariableInfo,
    VariablesSection,
    build_mock_data,
    group_by_category,
    merge_variables,
    search_variables,
)
from page_builder.services.template_engine.visibility import (
    VisibilityRule,
    evaluate_condition,
    evaluate_visibility,
    filter_by_visibility,
)

__all__ = [
    "FORMATTER_CATEGORIES",
    "FormatterContext",
    "FormatterInfo",
    "PipeCall",
    "TemplateToken",
    "VariableCategory",
    "VariableInfo",
    "VariablesSection",
    "VisibilityRule",
    "build_mock_data",
    "evaluate_condition",
    "evaluate_visibility",
    "extract_variable_paths",
    "filter_by_visibility",
    "get_display_hint",
    "get_formatter",
    "group_by_category",
    "has_template_expr",
    "list_formatters",
    "merge_variables",
    "parse_template",
    "register_formatter",
    "resolve_path",
    "resolve_template",
    "resolve_template_for_list",
    "resolve_template_record",
    "search_variables",
    "stringify",
]
