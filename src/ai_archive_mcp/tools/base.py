"""
Base classes and types for tool providers.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

import mcp.types as types
from pydantic import BaseModel, ConfigDict, Field

ResponseType = List[types.TextContent | types.ImageContent | types.EmbeddedResource]

ToolHandler = Callable[[Dict[str, Any]], Awaitable[ResponseType]]


class ToolDefinition(BaseModel):
    """Immutable description of a tool as advertised to the agent host."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Globally unique tool name")
    description: str = Field(default="", description="Human-readable description of what the tool does")
    input_schema: Dict[str, Any] = Field(
        default_factory=dict,
        alias="inputSchema",
        description="JSON Schema for the tool arguments"
    )

    def to_mcp_tool(self) -> types.Tool:
        """Convert to MCP tool format."""
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema
        )


class ToolInput(BaseModel):
    """Base class for tool input schemas."""
    model_config = ConfigDict(populate_by_name=True)


def define_tool(name: str, description: str, input_model: Type[ToolInput]) -> ToolDefinition:
    """Build a ToolDefinition whose inputSchema is generated from a pydantic model."""
    schema = input_model.model_json_schema(by_alias=True)
    schema.pop("title", None)
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    return ToolDefinition(name=name, description=description, input_schema=schema)


def format_text_response(text: Any) -> ResponseType:
    """Format a text response."""
    return [types.TextContent(type="text", text=str(text))]


def format_error_response(error: str) -> ResponseType:
    """Format an error response."""
    return format_text_response(f"Error: {error}")


def pagination_text(page: int, total_pages: Optional[int]) -> str:
    if total_pages and total_pages > page:
        return f"• Add `page: {page + 1}` to see more results"
    return ""


def format_date(value: Optional[str], with_time: bool = False) -> str:
    """Render an ISO-8601 timestamp from the API, or 'Unknown'."""
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M") if with_time else parsed.strftime("%Y-%m-%d")


def truncate(text: Optional[str], length: int, empty: str = "") -> str:
    if not text:
        return empty
    return text[:length] + "..." if len(text) > length else text


class ToolProvider(ABC):
    """
    Base class for all tool providers.

    A provider supplies a batch of related tools: a list of definitions and a
    name-keyed mapping of async handlers. Providers receive the backend API
    client through their constructor and never reach for process globals.

    Each provider should:
    1. Define its input schemas as ToolInput subclasses
    2. Implement list_definitions() and list_handlers() with matching names
    3. Optionally override setup() for asynchronous initialization
    """

    def __init__(self, client):
        """
        Initialize the provider.

        Args:
            client: ArchiveApiClient used for all outbound backend calls
        """
        self.client = client

    async def setup(self):
        """Asynchronous initialization hook awaited by the loader before reading tools."""
        return None

    @abstractmethod
    def list_definitions(self) -> List[ToolDefinition]:
        """Return the tool definitions offered by this provider, in display order."""

    @abstractmethod
    def list_handlers(self) -> Dict[str, ToolHandler]:
        """Return the handlers offered by this provider, keyed by tool name."""

    @staticmethod
    def bind(input_model: Type[ToolInput], func: Callable[[Any], Awaitable[ResponseType]]) -> ToolHandler:
        """Wrap a typed handler so it accepts the raw arguments mapping."""
        async def handler(arguments: Optional[Dict[str, Any]] = None) -> ResponseType:
            return await func(input_model.model_validate(arguments or {}))
        handler.__name__ = getattr(func, "__name__", "handler")
        return handler
