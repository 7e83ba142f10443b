"""
Tool Loader - Builds the global tool catalog from configured providers.
"""

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..errors import CatalogValidationError, ProviderLoadError, ToolLoaderError
from .base import ToolDefinition, ToolHandler, ToolProvider
from .catalog_config import ToolsConfig, load_tools_config, save_tools_config

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Any], ToolProvider]

REQUIRED_FIELDS = ("name", "description", "input_schema")


class LoaderState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class LoadedProvider:
    """A provider whose definitions and handlers have been read successfully."""
    name: str
    instance: ToolProvider
    tools: Tuple[ToolDefinition, ...]
    handlers: Mapping[str, ToolHandler] = field(default_factory=dict)


class ToolLoader:
    """
    Loads tool providers in configured order and serves the merged catalog.

    Features:
    - Reads the enabled/ordered provider set from the configuration document
    - Resolves providers through an explicit name -> factory registry
    - Isolates per-provider failures when strict loading is off
    - Flags missing/extra handlers per provider and validates the merged catalog
    - Exposes lookup, statistics and enable/disable persistence

    Loading is one-shot: UNLOADED -> LOADING -> LOADED (or FAILED when strict).
    """

    def __init__(
        self,
        client: Any = None,
        config_path: Optional[Path] = None,
        strict_loading: bool = True,
        factories: Optional[Mapping[str, ProviderFactory]] = None,
        config: Optional[ToolsConfig] = None,
    ):
        """
        Initialize the tool loader.

        Args:
            client: API client injected into every provider
            config_path: Configuration document (defaults to the packaged one)
            strict_loading: Abort on the first provider failure instead of skipping it
            factories: Provider registry (defaults to the built-in providers)
            config: Pre-parsed configuration, skipping the document read
        """
        if factories is None:
            from .registry import BUILTIN_PROVIDERS
            factories = BUILTIN_PROVIDERS

        self.client = client
        self.config_path = config_path
        self.strict_loading = strict_loading
        self.factories: Mapping[str, ProviderFactory] = dict(factories)
        self.config: ToolsConfig = config if config is not None else load_tools_config(config_path)
        # A pre-parsed config without a path has no document to write back to
        self._persistable = config is None or config_path is not None
        self.state = LoaderState.UNLOADED

        self._providers: Dict[str, LoadedProvider] = {}
        self._tools: List[ToolDefinition] = []
        self._handlers: Dict[str, ToolHandler] = {}
        self._owners: Dict[str, str] = {}  # tool/handler name -> provider name
        self._collisions: List[str] = []
        self._rejected: List[str] = []

    # --- Loading ---

    async def load_all_providers(self) -> Tuple[List[ToolDefinition], Dict[str, ToolHandler]]:
        """
        Load every enabled provider in configured order.

        Returns:
            Tuple of (ordered tool definitions, handler mapping)

        Raises:
            ProviderLoadError: A provider failed and strict loading is on
        """
        if self.state != LoaderState.UNLOADED:
            raise ToolLoaderError(f"Tool loader already used (state: {self.state.value})")

        self.state = LoaderState.LOADING
        logger.info("Loading MCP tool providers...")

        for name in self.config.load_order():
            entry = self.config.enabled_modules.get(name)
            if entry is None:
                logger.warning(f"Skipping disabled module: {name} (not present in enabledModules)")
                continue
            if not entry.enabled:
                logger.info(f"Skipping disabled module: {name}")
                continue

            try:
                await self.load_provider(name)
                logger.info(f"Loaded module: {name} ({self.get_provider_tool_count(name)} tools)")
            except ProviderLoadError as e:
                logger.error(f"Failed to load module {name}: {e}")
                if self.strict_loading:
                    self.state = LoaderState.FAILED
                    raise
                logger.warning(f"Continuing without {name} module in production mode")

        self.state = LoaderState.LOADED
        logger.info(
            f"MCP server initialized with {len(self._tools)} tools from {len(self._providers)} modules"
        )
        return self.list_tools(), dict(self._handlers)

    async def load_provider(self, name: str) -> LoadedProvider:
        """
        Resolve, instantiate and read a single provider, then merge it into the catalog.

        The catalog is only touched after every step has succeeded, so a failing
        provider contributes nothing. A single malformed definition mapping does
        not fail the provider: it is left out of the catalog and reported by
        validate_all().

        Raises:
            ProviderLoadError: Resolution, instantiation or contract failure
        """
        factory = self.factories.get(name)
        if factory is None:
            raise ProviderLoadError(name, f"No provider registered for module '{name}'")

        try:
            instance = factory(self.client)
            if inspect.isawaitable(instance):
                instance = await instance
            if not isinstance(instance, ToolProvider):
                raise TypeError(f"factory returned {type(instance).__name__}, not a ToolProvider")

            await instance.setup()

            tools, rejected = self._read_definitions(instance.list_definitions())
            handlers = instance.list_handlers()
            if not isinstance(handlers, Mapping):
                raise TypeError("list_handlers() must return a mapping of tool name to handler")
            handlers = dict(handlers)
            for handler_name, handler in handlers.items():
                if not callable(handler):
                    raise TypeError(f"handler for '{handler_name}' is not callable")
        except ProviderLoadError:
            raise
        except Exception as e:
            raise ProviderLoadError(name, str(e) or type(e).__name__) from e

        self._check_handlers(name, tools, handlers)

        loaded = LoadedProvider(
            name=name,
            instance=instance,
            tools=tools,
            handlers=MappingProxyType(handlers),
        )
        self._merge(loaded)
        for problem in rejected:
            logger.warning(f"{name} module offered an invalid tool definition: {problem}")
            self._rejected.append(f"{problem} (offered by '{name}' module)")
        return loaded

    @staticmethod
    def _read_definitions(definitions: Any) -> Tuple[Tuple[ToolDefinition, ...], List[str]]:
        """
        Split a provider's definitions into usable ToolDefinitions and problems.

        Mappings that fail validation become problem strings; anything that is
        neither a ToolDefinition nor a mapping breaks the provider contract.
        """
        tools = []
        rejected = []
        for definition in definitions:
            if isinstance(definition, ToolDefinition):
                tools.append(definition)
            elif isinstance(definition, Mapping):
                try:
                    tools.append(ToolDefinition.model_validate(dict(definition)))
                except ValidationError as e:
                    details = "; ".join(
                        f"{'.'.join(str(part) for part in err['loc']) or 'definition'}: {err['msg']}"
                        for err in e.errors()
                    )
                    rejected.append(f"{definition.get('name') or '<unnamed>'}: invalid tool definition ({details})")
            else:
                raise TypeError(
                    f"tool definitions must be ToolDefinition or mappings, got {type(definition).__name__}"
                )
        return tuple(tools), rejected

    def _check_handlers(self, name: str, tools: Tuple[ToolDefinition, ...], handlers: Mapping[str, ToolHandler]):
        tool_names = [tool.name for tool in tools]
        missing = [n for n in tool_names if n not in handlers]
        extra = [n for n in handlers if n not in tool_names]

        if missing:
            logger.warning(f"{name} module missing handlers for tools: {', '.join(missing)}")
        if extra:
            logger.warning(f"{name} module has extra handlers: {', '.join(extra)}")

    def _merge(self, loaded: LoadedProvider):
        for tool in loaded.tools:
            owner = self._owners.get(tool.name)
            if owner is not None and owner != loaded.name:
                self._record_collision(tool.name, owner, loaded.name)
        for handler_name in loaded.handlers:
            owner = self._owners.get(handler_name)
            if owner is not None and owner != loaded.name:
                self._record_collision(handler_name, owner, loaded.name)

        self._providers[loaded.name] = loaded
        self._tools.extend(loaded.tools)
        self._handlers.update(loaded.handlers)
        for tool_name in [t.name for t in loaded.tools] + list(loaded.handlers):
            self._owners[tool_name] = loaded.name

    def _record_collision(self, tool_name: str, previous: str, current: str):
        message = f"{tool_name}: provided by both '{previous}' and '{current}' modules"
        if message not in self._collisions:
            self._collisions.append(message)
            logger.warning(f"Tool name collision: {message}; '{current}' overrides")

    # --- Lookup ---

    def list_tools(self) -> List[ToolDefinition]:
        """All tool definitions in provider load order."""
        return list(self._tools)

    def get_tool(self, tool_name: str) -> Optional[ToolDefinition]:
        for tool in self._tools:
            if tool.name == tool_name:
                return tool
        return None

    def get_handler(self, tool_name: str) -> Optional[ToolHandler]:
        """Handler for a tool name, or None if no provider registered one."""
        return self._handlers.get(tool_name)

    def get_loaded_providers(self) -> List[str]:
        return list(self._providers.keys())

    def get_provider_tool_count(self, name: str) -> int:
        loaded = self._providers.get(name)
        return len(loaded.tools) if loaded else 0

    def get_provider_info(self, name: str) -> Optional[Dict[str, Any]]:
        """Diagnostic summary of a loaded provider, or None if it was not loaded."""
        loaded = self._providers.get(name)
        if loaded is None:
            return None

        entry = self.config.enabled_modules.get(name)
        return {
            "name": name,
            "enabled": self.config.is_enabled(name),
            "tool_count": len(loaded.tools),
            "handler_count": len(loaded.handlers),
            "tools": [tool.name for tool in loaded.tools],
            "description": (entry.description if entry and entry.description else "No description available"),
        }

    def get_all_provider_info(self) -> List[Dict[str, Any]]:
        return [self.get_provider_info(name) for name in self.get_loaded_providers()]

    def get_stats(self) -> Dict[str, Any]:
        """Aggregate catalog counts with a per-provider breakdown."""
        providers = {
            name: {
                "tool_count": len(loaded.tools),
                "enabled": self.config.is_enabled(name),
            }
            for name, loaded in self._providers.items()
        }
        return {
            "total_modules": len(self._providers),
            "total_tools": len(self._tools),
            "total_handlers": len(self._handlers),
            "providers": providers,
        }

    # --- Configuration management ---

    def set_provider_enabled(self, name: str, enabled: bool) -> bool:
        """
        Toggle a provider in the configuration document.

        Takes effect on the next startup; the live catalog is not reloaded.

        Only the document the configuration was read from is ever written. A
        loader built from a pre-parsed config without a config_path has nowhere
        to persist to and refuses the change.

        Returns:
            True if the provider is known and the document was written
        """
        entry = self.config.enabled_modules.get(name)
        if entry is None:
            logger.warning(f"Cannot update unknown module: {name}")
            return False
        if not self._persistable:
            logger.warning(f"Cannot update module {name}: configuration was not read from a document")
            return False

        previous = entry.enabled
        entry.enabled = bool(enabled)
        saved = save_tools_config(self.config, self.config_path)
        if not saved:
            entry.enabled = previous
            return False

        logger.info(f"Module {name} {'enabled' if enabled else 'disabled'} (applies on next startup)")
        return True

    # --- Validation ---

    @staticmethod
    def validate_tool_definition(tool: ToolDefinition) -> List[str]:
        """Return the contract violations of a single definition (empty if valid)."""
        problems = []
        missing = [f for f in REQUIRED_FIELDS if not getattr(tool, f, None)]
        if missing:
            names = ["inputSchema" if f == "input_schema" else f for f in missing]
            problems.append(f"missing required fields: {', '.join(names)}")

        schema = tool.input_schema or {}
        if schema and (not schema.get("type") or not isinstance(schema.get("properties"), dict)):
            problems.append("invalid inputSchema (requires 'type' and a 'properties' mapping)")
        return problems

    def validate_all(self) -> bool:
        """
        Validate every definition in the merged catalog.

        Raises:
            CatalogValidationError: Listing every malformed or conflicting tool
        """
        errors = []
        seen = set()
        for tool in self._tools:
            for problem in self.validate_tool_definition(tool):
                errors.append(f"{tool.name or '<unnamed>'}: {problem}")
            if tool.name in seen:
                errors.append(f"{tool.name}: duplicate tool name in catalog")
            seen.add(tool.name)

        errors.extend(self._rejected)
        errors.extend(self._collisions)

        if errors:
            raise CatalogValidationError(errors)
        return True

    # --- Reporting ---

    def print_load_summary(self):
        stats = self.get_stats()
        logger.info("MCP Server Load Summary:")
        logger.info("=" * 50)
        logger.info(f"Total Modules Loaded: {stats['total_modules']}")
        logger.info(f"Total Tools Available: {stats['total_tools']}")
        logger.info(f"Total Handlers Registered: {stats['total_handlers']}")
        logger.info("Module Breakdown:")
        for name, provider_stats in stats["providers"].items():
            status = "enabled" if provider_stats["enabled"] else "disabled"
            logger.info(f"  [{status}] {name}: {provider_stats['tool_count']} tools")
        logger.info("=" * 50)
