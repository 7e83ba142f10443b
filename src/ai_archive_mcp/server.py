"""
AI-Archive MCP Server using FastMCP
Supports all transport methods: stdio, SSE, and streamable-http
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import uvicorn
from mcp.server import Server
from mcp.server.fastmcp import FastMCP
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .api_client import ArchiveApiClient
from .fnc_prompts import handle_get_prompt, handle_list_prompts
from .fnc_tools import get_tool_loader, handle_list_tools, handle_tool_call, set_tool_loader
from .prompt import get_platform_alignment_message
from .server_config import ServerSettings
from .tools.loader import ToolLoader

logger = logging.getLogger(__name__)

SERVER_NAME = "ai-archive-mcp"
SERVER_VERSION = "2.0.0"

_settings: Optional[ServerSettings] = None


async def initialize_tools(settings: ServerSettings) -> ToolLoader:
    """
    Build the tool catalog and publish it to the tool handlers.

    Raises:
        ProviderLoadError: A provider failed with strict loading on
        CatalogValidationError: The merged catalog is malformed
    """
    global _settings
    _settings = settings

    client = ArchiveApiClient(settings)
    loader = ToolLoader(
        client=client,
        config_path=settings.tools_config_path,
        strict_loading=settings.strict_loading,
    )
    await loader.load_all_providers()
    loader.validate_all()

    if not settings.quiet:
        loader.print_load_summary()

    set_tool_loader(loader)
    return loader


def get_server_info() -> Dict[str, Any]:
    """Server identity and catalog statistics, as served on /status."""
    loader = get_tool_loader()
    return {
        "name": SERVER_NAME,
        "version": SERVER_VERSION,
        "environment": _settings.environment if _settings else None,
        "stats": loader.get_stats() if loader else None,
        "providers": loader.get_all_provider_info() if loader else [],
    }


# Create FastMCP app
app = FastMCP(SERVER_NAME)

# Set up the handlers using the internal MCP server for the dynamic tool catalog
app._mcp_server.list_tools()(handle_list_tools)
app._mcp_server.call_tool(validate_input=False)(handle_tool_call)
app._mcp_server.list_prompts()(handle_list_prompts)
app._mcp_server.get_prompt()(handle_get_prompt)


def create_starlette_app(mcp_server: Server, *, debug: bool = False) -> Starlette:
    """Create a Starlette application for SSE transport."""
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> None:
        async with sse.connect_sse(
                request.scope,
                request.receive,
                request._send,
        ) as (read_stream, write_stream):
            await mcp_server.run(
                read_stream,
                write_stream,
                mcp_server.create_initialization_options(),
            )

    async def status(request: Request):
        return JSONResponse(content=get_server_info())

    routes = [
        Route("/sse", endpoint=handle_sse),
        Mount("/messages/", app=sse.handle_post_message),
        Route("/status", endpoint=status, methods=["GET"]),
    ]
    return Starlette(debug=debug, routes=routes)


async def main():
    """Main entry point for the server."""
    settings = ServerSettings.from_environment()

    # Configure logging
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    if not settings.quiet:
        logger.info("\n" + get_platform_alignment_message("brief"))
    logger.info(f"Environment: {settings.environment} (strict loading: {settings.strict_loading})")
    logger.info(f"API base URL: {settings.api_base_url}")

    loader = await initialize_tools(settings)

    logger.info(f"MCP_TRANSPORT: {settings.transport}")

    try:
        # Start the MCP server
        if settings.transport == "sse":
            app.settings.host = settings.host or app.settings.host
            app.settings.port = settings.port or app.settings.port
            logger.info(f"Starting MCP server on {app.settings.host}:{app.settings.port}")
            starlette_app = create_starlette_app(app._mcp_server)
            config = uvicorn.Config(
                starlette_app,
                host=app.settings.host,
                port=app.settings.port,
                log_level=settings.log_level.lower(),
            )
            server = uvicorn.Server(config)
            await server.serve()
        elif settings.transport == "streamable-http":
            app.settings.host = settings.host or app.settings.host
            app.settings.port = settings.port or app.settings.port
            app.settings.streamable_http_path = settings.path
            logger.info(f"Starting MCP server on {app.settings.host}:{app.settings.port} with path {app.settings.streamable_http_path}")
            await app.run_streamable_http_async()
        else:
            logger.info("Starting MCP server on stdin/stdout")
            await app.run_stdio_async()
    finally:
        await loader.client.aclose()

if __name__ == "__main__":
    asyncio.run(main())
