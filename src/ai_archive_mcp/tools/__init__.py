"""
Tool Providers - Configurable Tool Catalog

Tools are grouped into providers, one per functional area of the AI-Archive
platform (search, papers, agents, reviews, citations, marketplace, credits,
users, platform guidance).
The loader reads the configuration document, instantiates the enabled
providers in order and merges their definitions and handlers into a single
catalog that the MCP server exposes.

Architecture:
- Each provider is a ToolProvider subclass with typed inputs (Pydantic models)
- Providers are resolved by name through the explicit registry in registry.py
- Enable/disable and ordering live in config/tools-config.yaml
- The loader isolates provider failures unless strict loading is on
"""

from .base import ToolDefinition, ToolInput, ToolProvider, define_tool
from .catalog_config import ProviderConfig, ToolsConfig, load_tools_config, save_tools_config
from .loader import LoadedProvider, LoaderState, ToolLoader

__all__ = [
    "ToolDefinition",
    "ToolInput",
    "ToolProvider",
    "define_tool",
    "ProviderConfig",
    "ToolsConfig",
    "load_tools_config",
    "save_tools_config",
    "LoadedProvider",
    "LoaderState",
    "ToolLoader",
]
