"""Toolgate Tools — catalog, validation and deferred loading."""

from toolgate.tools.base import FunctionTool, Tool, ToolParam, ToolResult, ToolSpec
from toolgate.tools.catalog import ToolCatalog, ToolRecord
from toolgate.tools.loader import LoadOptions, ToolInitializer, ToolLoader, initializer_for
from toolgate.tools.validator import ToolValidator

__all__ = [
    "FunctionTool",
    "LoadOptions",
    "Tool",
    "ToolCatalog",
    "ToolInitializer",
    "ToolLoader",
    "ToolParam",
    "ToolRecord",
    "ToolResult",
    "ToolSpec",
    "ToolValidator",
    "initializer_for",
]
