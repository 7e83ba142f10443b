import logging

import pytest

from ai_archive_mcp.errors import CatalogValidationError, ProviderLoadError, ToolLoaderError
from ai_archive_mcp.tools import catalog_config
from ai_archive_mcp.tools.base import ToolDefinition, ToolProvider
from ai_archive_mcp.tools.catalog_config import DEFAULT_MODULE_ORDER
from ai_archive_mcp.tools.loader import LoaderState, ToolLoader

from conftest import AGENT_TOOLS, PAPER_TOOLS, SEARCH_TOOLS, BrokenProvider, make_config, make_provider


def names(tools):
    return [tool.name for tool in tools]


@pytest.mark.asyncio
async def test_tools_follow_configured_order(make_loader):
    loader = make_loader(
        {"search": True, "papers": True, "agents": True},
        order=["agents", "search", "papers"],
    )
    tools, handlers = await loader.load_all_providers()

    assert names(tools) == AGENT_TOOLS + SEARCH_TOOLS + PAPER_TOOLS
    assert set(handlers) == set(AGENT_TOOLS + SEARCH_TOOLS + PAPER_TOOLS)
    assert loader.get_loaded_providers() == ["agents", "search", "papers"]
    assert loader.state == LoaderState.LOADED


@pytest.mark.asyncio
async def test_mapping_order_used_without_load_order(make_loader):
    loader = make_loader({"papers": True, "search": True})
    tools, _ = await loader.load_all_providers()

    assert names(tools) == PAPER_TOOLS + SEARCH_TOOLS


@pytest.mark.asyncio
async def test_disabled_provider_contributes_nothing(make_loader):
    all_on = make_loader({"search": True, "papers": True, "agents": True})
    papers_off = make_loader({"search": True, "papers": False, "agents": True})

    full, _ = await all_on.load_all_providers()
    partial, handlers = await papers_off.load_all_providers()

    assert names(partial) == [n for n in names(full) if n not in PAPER_TOOLS]
    assert not set(PAPER_TOOLS) & set(handlers)

    reenabled = make_loader({"search": True, "papers": True, "agents": True})
    restored, _ = await reenabled.load_all_providers()
    assert names(restored) == names(full)


@pytest.mark.asyncio
async def test_search_only_scenario(make_loader):
    loader = make_loader({"search": True, "papers": False}, order=["search", "papers"])
    tools, _ = await loader.load_all_providers()

    assert len(tools) == 4
    assert loader.get_stats()["total_modules"] == 1


@pytest.mark.asyncio
async def test_unknown_name_in_load_order_is_skipped(make_loader, caplog):
    loader = make_loader({"search": True}, order=["ghost", "search"])
    with caplog.at_level(logging.INFO):
        tools, _ = await loader.load_all_providers()

    assert names(tools) == SEARCH_TOOLS
    assert "skipping disabled module: ghost" in caplog.text.lower()


@pytest.mark.asyncio
async def test_failure_isolated_when_not_strict(make_loader, fake_factories, caplog):
    factories = dict(fake_factories, papers=BrokenProvider)
    loader = make_loader(
        {"search": True, "papers": True, "agents": True}, strict_loading=False, factories=factories
    )
    with caplog.at_level(logging.INFO):
        tools, handlers = await loader.load_all_providers()

    assert names(tools) == SEARCH_TOOLS + AGENT_TOOLS
    assert set(handlers) == set(SEARCH_TOOLS + AGENT_TOOLS)
    assert "Failed to load module papers" in caplog.text
    assert "Continuing without papers module" in caplog.text
    assert loader.state == LoaderState.LOADED


@pytest.mark.asyncio
async def test_failure_propagates_when_strict(make_loader, fake_factories):
    factories = dict(fake_factories, papers=BrokenProvider)
    loader = make_loader({"search": True, "papers": True}, strict_loading=True, factories=factories)

    with pytest.raises(ProviderLoadError) as excinfo:
        await loader.load_all_providers()

    assert excinfo.value.provider == "papers"
    assert "provider exploded" in str(excinfo.value)
    assert loader.state == LoaderState.FAILED


@pytest.mark.asyncio
async def test_unregistered_provider_fails(make_loader):
    loader = make_loader({"search": True, "auth": True}, strict_loading=True)

    with pytest.raises(ProviderLoadError, match="No provider registered"):
        await loader.load_all_providers()


@pytest.mark.asyncio
async def test_missing_handler_warns_but_keeps_definition(make_loader, fake_factories, caplog):
    factories = dict(fake_factories, papers=make_provider(PAPER_TOOLS, missing_handlers=["submit_paper"]))
    loader = make_loader({"papers": True}, factories=factories)

    with caplog.at_level(logging.WARNING):
        tools, _ = await loader.load_all_providers()

    assert "submit_paper" in names(tools)
    assert loader.get_handler("submit_paper") is None
    assert "missing handlers for tools: submit_paper" in caplog.text


@pytest.mark.asyncio
async def test_extra_handler_warns(make_loader, fake_factories, caplog):
    factories = dict(fake_factories, agents=make_provider(AGENT_TOOLS, extra_handlers=["delete_agent"]))
    loader = make_loader({"agents": True}, factories=factories)

    with caplog.at_level(logging.WARNING):
        await loader.load_all_providers()

    assert "agents module has extra handlers: delete_agent" in caplog.text
    assert loader.get_handler("delete_agent") is not None


@pytest.mark.asyncio
async def test_loading_is_one_shot(make_loader):
    loader = make_loader({"search": True})
    await loader.load_all_providers()

    with pytest.raises(ToolLoaderError):
        await loader.load_all_providers()


@pytest.mark.asyncio
async def test_setup_hook_awaited(make_loader, fake_factories):
    provider = make_provider(["ping"])
    loader = make_loader({"ping": True}, factories={"ping": provider})
    await loader.load_all_providers()

    assert provider.setup_calls == 1


@pytest.mark.asyncio
async def test_handlers_dispatch_arguments(make_loader):
    loader = make_loader({"search": True})
    await loader.load_all_providers()

    result = await loader.get_handler("search_papers")({"query": "llm"})
    assert result[0].text == "search_papers:['query']"


@pytest.mark.asyncio
async def test_stats_are_stable(make_loader):
    loader = make_loader({"search": True, "papers": False, "agents": True})
    await loader.load_all_providers()

    first = loader.get_stats()
    second = loader.get_stats()
    assert first == second
    assert first["total_tools"] == len(SEARCH_TOOLS) + len(AGENT_TOOLS)
    assert first["total_handlers"] == first["total_tools"]
    assert first["providers"] == {
        "search": {"tool_count": 4, "enabled": True},
        "agents": {"tool_count": 3, "enabled": True},
    }


@pytest.mark.asyncio
async def test_provider_info(make_loader):
    loader = make_loader({"search": True, "papers": False})
    await loader.load_all_providers()

    info = loader.get_provider_info("search")
    assert info["tool_count"] == 4
    assert info["tools"] == SEARCH_TOOLS
    assert info["description"] == "No description available"
    assert loader.get_provider_info("papers") is None
    assert [i["name"] for i in loader.get_all_provider_info()] == ["search"]


@pytest.mark.asyncio
async def test_get_tool_lookup(make_loader):
    loader = make_loader({"agents": True})
    await loader.load_all_providers()

    assert loader.get_tool("create_agent").description == "create_agent tool"
    assert loader.get_tool("nope") is None
    assert loader.get_handler("nope") is None


@pytest.mark.asyncio
async def test_validate_all_accepts_generated_schemas(make_loader):
    loader = make_loader({"search": True, "papers": True, "agents": True})
    await loader.load_all_providers()

    assert loader.validate_all() is True


class MalformedProvider(ToolProvider):
    def list_definitions(self):
        return [
            ToolDefinition(name="good_tool", description="ok", input_schema={"type": "object", "properties": {}}),
            {"name": "bad_tool", "description": "no properties", "inputSchema": {"type": "object"}},
        ]

    def list_handlers(self):
        async def handler(arguments):
            return []
        return {"good_tool": handler, "bad_tool": handler}


@pytest.mark.asyncio
async def test_validate_all_names_malformed_tool(make_loader):
    loader = make_loader({"bad": True}, factories={"bad": MalformedProvider})
    await loader.load_all_providers()

    with pytest.raises(CatalogValidationError) as excinfo:
        loader.validate_all()

    assert "bad_tool" in str(excinfo.value)
    assert "good_tool" not in str(excinfo.value)
    assert len(excinfo.value.errors) == 1


class NamelessProvider(ToolProvider):
    def list_definitions(self):
        return [
            {"description": "no name", "inputSchema": {"type": "object", "properties": {}}},
            {"name": "ok_tool", "description": "fine", "inputSchema": {"type": "object", "properties": {}}},
            {"name": "schema_tool", "description": "schema is a string", "inputSchema": "object"},
        ]

    def list_handlers(self):
        async def handler(arguments):
            return []
        return {"ok_tool": handler}


@pytest.mark.asyncio
async def test_invalid_definition_mappings_reach_validation(make_loader, caplog):
    loader = make_loader({"loose": True}, strict_loading=False, factories={"loose": NamelessProvider})

    with caplog.at_level(logging.WARNING):
        tools, handlers = await loader.load_all_providers()

    assert loader.get_loaded_providers() == ["loose"]
    assert names(tools) == ["ok_tool"]
    assert list(handlers) == ["ok_tool"]
    assert "loose module offered an invalid tool definition" in caplog.text

    with pytest.raises(CatalogValidationError) as excinfo:
        loader.validate_all()

    errors = excinfo.value.errors
    assert len(errors) == 2
    assert errors[0].startswith("<unnamed>: invalid tool definition (name:")
    assert errors[1].startswith("schema_tool: invalid tool definition (inputSchema:")
    assert all(error.endswith("(offered by 'loose' module)") for error in errors)


def test_validate_tool_definition_reports_missing_fields():
    problems = ToolLoader.validate_tool_definition(ToolDefinition(name="x"))

    assert problems == ["missing required fields: description, inputSchema"]


@pytest.mark.asyncio
async def test_collision_overrides_and_fails_validation(make_loader, caplog):
    factories = {
        "first": make_provider(["shared", "only_first"]),
        "second": make_provider(["shared"]),
    }
    loader = make_loader({"first": True, "second": True}, factories=factories)

    with caplog.at_level(logging.WARNING):
        await loader.load_all_providers()

    assert "Tool name collision" in caplog.text
    assert loader.get_handler("shared") is loader._providers["second"].handlers["shared"]

    with pytest.raises(CatalogValidationError) as excinfo:
        loader.validate_all()
    assert "shared: provided by both 'first' and 'second' modules" in excinfo.value.errors


@pytest.mark.asyncio
async def test_invalid_handler_mapping_is_load_failure(make_loader):
    class NotAMapping(ToolProvider):
        def list_definitions(self):
            return []

        def list_handlers(self):
            return ["not", "a", "mapping"]

    loader = make_loader({"odd": True}, strict_loading=True, factories={"odd": NotAMapping})

    with pytest.raises(ProviderLoadError, match="mapping"):
        await loader.load_all_providers()


@pytest.mark.asyncio
async def test_set_provider_enabled_persists(tmp_path, fake_factories):
    path = tmp_path / "tools-config.yaml"
    path.write_text(
        "enabledModules:\n"
        "  search:\n"
        "    enabled: true\n"
        "  papers:\n"
        "    enabled: true\n"
        "moduleLoadOrder: [search, papers]\n"
    )
    loader = ToolLoader(client=None, config_path=path, factories=fake_factories)
    await loader.load_all_providers()

    assert loader.set_provider_enabled("papers", False) is True
    assert loader.set_provider_enabled("ghost", True) is False

    # Live catalog is untouched until the next startup
    assert "get_paper" in names(loader.list_tools())
    assert loader.get_provider_info("papers")["enabled"] is False
    assert loader.get_provider_info("search")["enabled"] is True

    reloaded = ToolLoader(client=None, config_path=path, factories=fake_factories)
    tools, _ = await reloaded.load_all_providers()
    assert names(tools) == SEARCH_TOOLS


def test_set_provider_enabled_without_document_writes_nothing(monkeypatch, tmp_path, fake_factories, caplog):
    target = tmp_path / "packaged-tools-config.yaml"
    monkeypatch.setattr(catalog_config, "DEFAULT_CONFIG_PATH", target)
    loader = ToolLoader(client=None, factories=fake_factories, config=make_config({"search": True}))

    with caplog.at_level(logging.WARNING):
        assert loader.set_provider_enabled("search", False) is False

    assert not target.exists()
    assert loader.config.is_enabled("search")
    assert "configuration was not read from a document" in caplog.text


def test_set_provider_enabled_rolls_back_failed_save(tmp_path, fake_factories):
    path = tmp_path / "no-such-dir" / "tools-config.yaml"
    loader = ToolLoader(client=None, config_path=path, factories=fake_factories)
    assert loader.config.is_enabled("search")

    assert loader.set_provider_enabled("search", False) is False
    assert loader.config.is_enabled("search")
    assert not path.exists()


@pytest.mark.asyncio
async def test_builtin_providers_load_from_shipped_config():
    loader = ToolLoader(client=None, strict_loading=True)
    tools, handlers = await loader.load_all_providers()

    assert loader.get_loaded_providers() == DEFAULT_MODULE_ORDER
    assert len(tools) == 41
    assert set(handlers) == set(names(tools))
    assert {"submit_review", "search_reviewers", "get_credit_balance", "get_user_profile"} <= set(handlers)
    assert loader.validate_all() is True
