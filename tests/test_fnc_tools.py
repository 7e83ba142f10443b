import pytest
import pytest_asyncio
from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND

from ai_archive_mcp import fnc_tools
from ai_archive_mcp.errors import ApiRequestError
from ai_archive_mcp.tools.base import ToolProvider, define_tool, format_text_response
from ai_archive_mcp.tools.search import SearchPapersInput

from conftest import SEARCH_TOOLS


class ScriptedProvider(ToolProvider):
    def list_definitions(self):
        return [
            define_tool("search_papers", "Search", SearchPapersInput),
            define_tool("flaky", "Raises API errors", SearchPapersInput),
            define_tool("broken", "Raises anything", SearchPapersInput),
        ]

    def list_handlers(self):
        async def flaky(arguments):
            raise ApiRequestError("API request failed: backend down", 503)

        async def broken(arguments):
            raise KeyError("boom")

        async def search(args):
            return format_text_response(f"searched {args.query}")

        return {
            "search_papers": self.bind(SearchPapersInput, search),
            "flaky": flaky,
            "broken": broken,
        }


@pytest_asyncio.fixture
async def loaded(make_loader):
    loader = make_loader({"scripted": True}, factories={"scripted": ScriptedProvider})
    await loader.load_all_providers()
    fnc_tools.set_tool_loader(loader)
    yield loader
    fnc_tools.set_tool_loader(None)


@pytest.mark.asyncio
async def test_list_tools_without_loader():
    fnc_tools.set_tool_loader(None)
    assert await fnc_tools.handle_list_tools() == []


@pytest.mark.asyncio
async def test_list_tools_converts_catalog(make_loader):
    loader = make_loader({"search": True})
    await loader.load_all_providers()
    fnc_tools.set_tool_loader(loader)
    try:
        tools = await fnc_tools.handle_list_tools()
    finally:
        fnc_tools.set_tool_loader(None)

    assert [tool.name for tool in tools] == SEARCH_TOOLS
    assert tools[0].inputSchema["type"] == "object"


@pytest.mark.asyncio
async def test_dispatch_by_name(loaded):
    result = await fnc_tools.handle_tool_call("search_papers", {"query": "mcp"})
    assert result[0].text == "searched mcp"


@pytest.mark.asyncio
async def test_unknown_tool_is_protocol_error(loaded):
    with pytest.raises(McpError) as excinfo:
        await fnc_tools.handle_tool_call("submit_paper", {})

    assert excinfo.value.error.code == METHOD_NOT_FOUND
    assert excinfo.value.error.message == "Unknown tool: submit_paper"


@pytest.mark.asyncio
async def test_invalid_arguments_become_error_text(loaded):
    result = await fnc_tools.handle_tool_call("search_papers", None)

    assert result[0].text.startswith("Error: Invalid arguments - query:")


@pytest.mark.asyncio
async def test_api_error_becomes_error_text(loaded):
    result = await fnc_tools.handle_tool_call("flaky", {"query": "x"})
    assert result[0].text == "Error: API request failed: backend down"


@pytest.mark.asyncio
async def test_unexpected_error_becomes_error_text(loaded):
    result = await fnc_tools.handle_tool_call("broken", {"query": "x"})
    assert result[0].text == "Error executing tool broken: 'boom'"
