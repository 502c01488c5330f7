"""
Page Builder Engine

Document and editing engine for a visual page builder: the immutable node
tree, its mutation primitives, the undoable action/history engine, the
tree/grid converter and the template expression resolver.
"""

__version__ = "0.1.0"
