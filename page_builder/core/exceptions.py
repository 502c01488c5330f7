"""
Core Exceptions

Exceptions for programmer errors in the page builder engine.

Ordinary editing problems (stale ids, invalid drop targets, malformed
templates, missing data) never raise; they resolve to no-ops. These
exceptions signal misuse of the engine itself.
"""


class PageBuilderError(Exception):
    """Base class for engine errors."""

    def __init__(self, message: str = "Page builder error"):
        self.message = message
        super().__init__(self.message)


class NoCurrentPageError(PageBuilderError):
    """
    Raised when a node-level action is dispatched with no page selected.

    Usage:
        engine.dispatch(UpdateNodeProps(node_id="h1", props={...}))
        # Raises NoCurrentPageError if state.current_page_id is None
    """

    def __init__(self, action_type: str):
        self.action_type = action_type
        super().__init__(f"{action_type} requires a current page")


class UnknownNodeTypeError(PageBuilderError):
    """Raised when the node catalog is asked for a kind it does not know."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unknown node type: {kind}")


class InvalidActionError(PageBuilderError):
    """Raised when dispatch() receives a payload that is not an action."""

    def __init__(self, message: str = "Invalid action"):
        super().__init__(message)
