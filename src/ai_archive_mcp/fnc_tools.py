"""
MCP Tool Functions for the AI-Archive platform

This module is the transport shell between the MCP server and the tool loader.
It lists the merged catalog and dispatches each call to the handler registered
under the tool name, turning handler failures into error responses.
"""

import logging
from typing import Any, List, Optional

import mcp.types as types
from mcp.shared.exceptions import McpError
from pydantic import ValidationError

from .errors import ApiRequestError, AuthenticationRequiredError
from .tools.base import format_error_response, format_text_response
from .tools.loader import ToolLoader

logger = logging.getLogger(__name__)

ResponseType = List[types.TextContent | types.ImageContent | types.EmbeddedResource]

# Global tool loader
_tool_loader: Optional[ToolLoader] = None


def set_tool_loader(loader: Optional[ToolLoader]):
    """Set the global tool loader used to list and dispatch tools."""
    global _tool_loader
    _tool_loader = loader


def get_tool_loader() -> Optional[ToolLoader]:
    """Get the global tool loader instance."""
    return _tool_loader


async def call_tool_impl(name: str, arguments: dict[str, Any]) -> ResponseType:
    """Implementation of tool calling that can be used with FastMCP decorators."""
    return await handle_tool_call(name, arguments)


async def handle_list_tools() -> list[types.Tool]:
    """List every tool in the catalog, in provider load order."""
    if _tool_loader is None:
        logger.warning("Tool loader not initialized")
        return []
    return [tool.to_mcp_tool() for tool in _tool_loader.list_tools()]


def _validation_message(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        problems.append(f"{location}: {item.get('msg')}")
    return "Invalid arguments - " + "; ".join(problems)


async def handle_tool_call(
    name: str, arguments: dict | None
) -> list[types.TextContent | types.ImageContent | types.EmbeddedResource]:
    """
    Handle tool execution requests.

    An unknown tool name is a protocol error; anything raised by the handler is
    reported back to the host as an error text response.
    """
    logger.info(f"Calling tool: {name}")
    logger.debug(f"Tool arguments for {name}: {arguments}")

    handler = _tool_loader.get_handler(name) if _tool_loader is not None else None
    if handler is None:
        raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))

    try:
        return await handler(arguments or {})
    except ValidationError as e:
        logger.warning(f"Invalid arguments for tool {name}: {e}")
        return format_error_response(_validation_message(e))
    except AuthenticationRequiredError as e:
        logger.warning(f"Tool {name} requires authentication")
        return format_error_response(str(e))
    except ApiRequestError as e:
        logger.error(f"API error executing tool {name}: {e}")
        return format_error_response(str(e))
    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        return format_text_response(f"Error executing tool {name}: {e}")
