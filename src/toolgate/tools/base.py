"""
Tool — the base class for everything in the catalog.

name + description + parameters + execute. Tools receive their resolved
credentials as constructor keyword arguments (keyed by primary field name),
so a constructed tool is ready to run; nothing is looked up at execute time.

``FunctionTool`` wraps a tool in the OpenAI function-calling shape for
callers that hand tools straight to a model.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ToolParam:
    """A single parameter for a tool."""

    name: str
    type: str  # "string", "integer", "number", "boolean", "array", "object"
    description: str
    required: bool = True
    default: Any = None
    enum: list[str] | None = None


@dataclass
class ToolResult:
    """The result of executing a tool."""

    output: str
    metadata: dict = field(default_factory=dict)
    error: bool = False

    @classmethod
    def success(cls, output: str, **metadata) -> ToolResult:
        return cls(output=output, metadata=metadata)

    @classmethod
    def fail(cls, error_msg: str, **metadata) -> ToolResult:
        return cls(output=error_msg, metadata=metadata, error=True)


@dataclass(frozen=True)
class ToolSpec:
    """Model-facing description of a tool, attached when ``use_specs`` is set."""

    name: str
    description: str
    parameters: tuple[ToolParam, ...] = ()


class Tool(ABC):
    """
    Base class for catalog tools.

    Subclass, set the class attributes, implement execute(). Subclasses
    that need credentials take them as keyword arguments in ``__init__``
    and pass the rest through to ``super().__init__``.
    """

    name: str = ""
    description: str = ""
    status_text: str = "Working..."
    parameters: list[ToolParam] = []

    def __init__(
        self,
        *,
        user_id: str | None = None,
        spec: ToolSpec | None = None,
        model: Any = None,
        **_: Any,
    ):
        self.user_id = user_id
        self.model = model
        self.spec = spec

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """Run the tool with the given arguments. Return a ToolResult."""
        ...

    def to_openai_schema(self) -> dict:
        """Convert to OpenAI function calling format.

        A ToolSpec, when attached, overrides the class-level description
        and parameters.
        """
        description = self.description
        params = self.parameters
        if self.spec is not None:
            description = self.spec.description or description
            params = list(self.spec.parameters) or params

        properties: dict[str, Any] = {}
        required = []
        for param in params:
            prop: dict[str, Any] = {
                "type": param.type,
                "description": param.description,
            }
            if param.enum:
                prop["enum"] = param.enum
            properties[param.name] = prop
            if param.required:
                required.append(param.name)

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }

    def validate_args(self, args: dict) -> dict:
        """Validate and fill defaults. Returns cleaned args."""
        cleaned = {}
        for param in self.parameters:
            if param.name in args:
                cleaned[param.name] = args[param.name]
            elif param.required:
                raise ValueError(f"Missing required parameter: {param.name}")
            elif param.default is not None:
                cleaned[param.name] = param.default
        return cleaned

    async def safe_execute(self, **kwargs) -> ToolResult:
        """Execute with validation and error handling."""
        try:
            cleaned = self.validate_args(kwargs)
            return await self.execute(**cleaned)
        except ValueError as e:
            return ToolResult.fail(f"Invalid arguments: {e}")
        except Exception as e:
            logger.error(f"Tool '{self.name}' failed: {e}", exc_info=True)
            return ToolResult.fail(f"Tool error: {e}")

    def __repr__(self) -> str:
        return f"<Tool:{self.name}>"


class FunctionTool:
    """Function-calling adapter around a constructed tool.

    Exposes the OpenAI schema and accepts the model's arguments either as a
    dict or as the raw JSON string the API returns.
    """

    def __init__(self, tool: Tool):
        self.tool = tool

    @property
    def name(self) -> str:
        return self.tool.name

    @property
    def schema(self) -> dict:
        return self.tool.to_openai_schema()

    async def __call__(self, arguments: dict | str | None = None) -> ToolResult:
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                return ToolResult.fail(f"Invalid arguments: {e}")
        if not isinstance(arguments, dict):
            arguments = {}
        return await self.tool.safe_execute(**arguments)

    def __repr__(self) -> str:
        return f"<FunctionTool:{self.name}>"
