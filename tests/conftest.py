"""
Pytest fixtures for the page builder engine.

This module provides:
1. A fake monotonic clock for batching-window tests
2. Engine settings isolated from the environment
3. Sample node trees and pages
4. A ready-to-use PageEditorEngine
"""

import pytest

from page_builder.config import Settings
from page_builder.models.contracts.nodes import Node, Page
from page_builder.services.editor_engine import PageEditorEngine
from tests.helpers.factories import FakeClock, make_container, make_leaf, make_page


# ==================== CLOCK ====================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ==================== SETTINGS ====================


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, ignoring any .env file."""
    return Settings(
        _env_file=None,
        environment="testing",
        history_limit=80,
        batch_window_ms=800,
        default_grid_columns=3,
        locale="pt-BR",
    )


# ==================== TREES ====================


@pytest.fixture
def sample_tree() -> Node:
    """
    root (stack)
    ├── h1 (heading)
    ├── row1 (row)
    │   ├── b1 (button)
    │   └── b2 (button)
    └── card1 (card)
        └── t1 (text)
    """
    return make_container(
        "root",
        [
            make_leaf("h1", "heading", content="Title", level=1),
            make_container(
                "row1",
                [make_leaf("b1", "button", label="Save"), make_leaf("b2", "button", label="Cancel")],
                kind="row",
            ),
            make_container("card1", [make_leaf("t1", content="Body")], kind="card", title="Card"),
        ],
        gap="24px",
    )


@pytest.fixture
def sample_page(sample_tree: Node) -> Page:
    return make_page("home", sample_tree, route="/")


@pytest.fixture
def second_page() -> Page:
    return make_page(
        "runs",
        make_container("runs-root", [make_leaf("runs-h1", "heading", content="Runs")]),
        browser_title="Runs",
    )


# ==================== ENGINE ====================


@pytest.fixture
def engine(
    sample_page: Page, second_page: Page, settings: Settings, clock: FakeClock
) -> PageEditorEngine:
    """Engine over two pages; "home" is current."""
    return PageEditorEngine(
        {sample_page.id: sample_page, second_page.id: second_page},
        settings=settings,
        clock=clock,
    )
