import pytest
from httpx import ASGITransport, AsyncClient

from ai_archive_mcp import fnc_tools, server
from ai_archive_mcp.errors import ProviderLoadError
from ai_archive_mcp.server_config import ServerSettings


def write_config(tmp_path, body):
    path = tmp_path / "tools-config.yaml"
    path.write_text(body)
    return path


@pytest.mark.asyncio
async def test_initialize_tools_publishes_catalog(tmp_path):
    path = write_config(tmp_path, "enabledModules:\n  platform:\n    enabled: true\n    description: Guidance\n")
    settings = ServerSettings(environment="test", strict_loading=True, quiet=True, tools_config_path=path)

    loader = await server.initialize_tools(settings)
    try:
        assert fnc_tools.get_tool_loader() is loader
        tools = await fnc_tools.handle_list_tools()
        assert [tool.name for tool in tools] == ["get_platform_guidance", "get_submission_checklist"]

        info = server.get_server_info()
        assert info["name"] == "ai-archive-mcp"
        assert info["environment"] == "test"
        assert info["stats"]["total_modules"] == 1
        assert info["providers"][0]["description"] == "Guidance"

        transport = ASGITransport(app=server.create_starlette_app(server.app._mcp_server))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            r = await ac.get("/status")
        assert r.status_code == 200
        assert r.json()["stats"]["total_tools"] == 2
    finally:
        fnc_tools.set_tool_loader(None)
        await loader.client.aclose()


@pytest.mark.asyncio
async def test_initialize_tools_strict_failure(tmp_path):
    path = write_config(tmp_path, "enabledModules:\n  auth:\n    enabled: true\n")
    settings = ServerSettings(environment="development", strict_loading=True, quiet=True, tools_config_path=path)

    with pytest.raises(ProviderLoadError):
        await server.initialize_tools(settings)


@pytest.mark.asyncio
async def test_initialize_tools_production_degrades(tmp_path):
    path = write_config(
        tmp_path,
        "enabledModules:\n  auth:\n    enabled: true\n  platform:\n    enabled: true\n",
    )
    settings = ServerSettings(strict_loading=False, quiet=True, tools_config_path=path)

    loader = await server.initialize_tools(settings)
    try:
        assert loader.get_loaded_providers() == ["platform"]
    finally:
        fnc_tools.set_tool_loader(None)
