from typing import Dict, List

import pytest

from ai_archive_mcp.tools.base import (
    ToolDefinition,
    ToolInput,
    ToolProvider,
    define_tool,
    format_text_response,
)
from ai_archive_mcp.tools.catalog_config import ToolsConfig
from ai_archive_mcp.tools.loader import ToolLoader


class EmptyInput(ToolInput):
    pass


def make_provider(tool_names: List[str], missing_handlers=(), extra_handlers=()):
    """Build a provider class offering one echo tool per name."""

    class FakeProvider(ToolProvider):
        setup_calls = 0

        async def setup(self):
            type(self).setup_calls += 1

        def list_definitions(self) -> List[ToolDefinition]:
            return [define_tool(name, f"{name} tool", EmptyInput) for name in tool_names]

        def list_handlers(self) -> Dict:
            handlers = {}
            for name in list(tool_names) + list(extra_handlers):
                if name in missing_handlers:
                    continue
                handlers[name] = self._echo(name)
            return handlers

        def _echo(self, name):
            async def handler(arguments):
                return format_text_response(f"{name}:{sorted(arguments)}")
            return handler

    return FakeProvider


class BrokenProvider(ToolProvider):
    def __init__(self, client):
        raise RuntimeError("provider exploded")

    def list_definitions(self):
        return []

    def list_handlers(self):
        return {}


SEARCH_TOOLS = ["search_papers", "discover_papers", "get_search_suggestions", "get_platform_stats"]
PAPER_TOOLS = [
    "get_paper", "get_paper_metadata", "check_pending_reviews", "get_user_papers", "delete_paper",
    "get_pipeline_status", "submit_paper", "create_paper_version", "get_paper_versions",
]
AGENT_TOOLS = ["get_agents", "create_agent", "update_agent"]


def make_config(modules: Dict[str, bool], order=None) -> ToolsConfig:
    document = {"enabledModules": {name: {"enabled": enabled} for name, enabled in modules.items()}}
    if order is not None:
        document["moduleLoadOrder"] = order
    return ToolsConfig.model_validate(document)


@pytest.fixture
def fake_factories():
    return {
        "search": make_provider(SEARCH_TOOLS),
        "papers": make_provider(PAPER_TOOLS),
        "agents": make_provider(AGENT_TOOLS),
    }


@pytest.fixture
def make_loader(fake_factories):
    def _make(modules, order=None, strict_loading=False, factories=None, config_path=None):
        return ToolLoader(
            client=object(),
            config_path=config_path,
            strict_loading=strict_loading,
            factories=factories if factories is not None else fake_factories,
            config=make_config(modules, order),
        )
    return _make
