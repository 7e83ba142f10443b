"""
Tool catalog configuration: which providers are enabled and in what order.

The configuration document is YAML (JSON is accepted as well):

    enabledModules:
      search:
        enabled: true
        description: Paper search and discovery
      papers:
        enabled: false
    moduleLoadOrder: [search, papers]
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "tools-config.yaml"

DEFAULT_MODULE_ORDER = [
    "search", "papers", "agents", "reviews", "citations", "marketplace", "credits", "users", "platform",
]


class ProviderConfig(BaseModel):
    """Per-provider switch as stored in the configuration document."""
    model_config = ConfigDict(extra="allow")

    name: str = ""
    enabled: bool = False
    description: Optional[str] = None

    @field_validator("enabled", mode="before")
    @classmethod
    def _truthy(cls, value: Any) -> bool:
        return bool(value)


class ToolsConfig(BaseModel):
    """Mapping of provider name to ProviderConfig plus an optional load order."""
    model_config = ConfigDict(populate_by_name=True)

    enabled_modules: Dict[str, ProviderConfig] = Field(default_factory=dict, alias="enabledModules")
    module_load_order: Optional[List[str]] = Field(default=None, alias="moduleLoadOrder")

    @field_validator("enabled_modules", mode="before")
    @classmethod
    def _coerce_entries(cls, value: Any) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("enabledModules must be a mapping")
        entries = {}
        for name, entry in value.items():
            # Entries that are not mappings carry no 'enabled' flag and count as disabled
            entry = dict(entry) if isinstance(entry, dict) else {}
            entry.setdefault("name", str(name))
            entries[str(name)] = entry
        return entries

    def load_order(self) -> List[str]:
        """Configured load order, falling back to the mapping's key order."""
        if self.module_load_order is not None:
            return list(self.module_load_order)
        return list(self.enabled_modules.keys())

    def is_enabled(self, name: str) -> bool:
        entry = self.enabled_modules.get(name)
        return bool(entry and entry.enabled)

    def to_document(self) -> Dict[str, Any]:
        """Serialize back to the on-disk document shape."""
        modules = {}
        for name, entry in self.enabled_modules.items():
            data = entry.model_dump(exclude={"name"}, exclude_none=True)
            modules[name] = data
        document: Dict[str, Any] = {"enabledModules": modules}
        if self.module_load_order is not None:
            document["moduleLoadOrder"] = list(self.module_load_order)
        return document


def default_tools_config() -> ToolsConfig:
    """Built-in configuration used when the document cannot be read."""
    return ToolsConfig(
        enabled_modules={name: {"enabled": True} for name in DEFAULT_MODULE_ORDER},
        module_load_order=list(DEFAULT_MODULE_ORDER),
    )


def load_tools_config(path: Optional[Path] = None) -> ToolsConfig:
    """
    Read the tool configuration document.

    Never raises: a missing, unreadable or malformed document is logged as a
    warning and replaced by default_tools_config().

    Args:
        path: Document location (defaults to the packaged config/tools-config.yaml)

    Returns:
        Parsed ToolsConfig
    """
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
        if not isinstance(document, dict):
            raise ValueError("configuration document must be a mapping")
        return ToolsConfig.model_validate(document)
    except (OSError, yaml.YAMLError, ValueError, ValidationError) as e:
        logger.warning(f"Could not load tools config from {path}: {e}. Using defaults.")
        return default_tools_config()


def save_tools_config(config: ToolsConfig, path: Optional[Path] = None) -> bool:
    """
    Persist the configuration document.

    Returns:
        True on success, False if the document could not be written
    """
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    document = config.to_document()
    try:
        with open(path, "w", encoding="utf-8") as f:
            if path.suffix == ".json":
                json.dump(document, f, indent=2)
            else:
                yaml.safe_dump(document, f, sort_keys=False)
        return True
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save tools config to {path}: {e}")
        return False
