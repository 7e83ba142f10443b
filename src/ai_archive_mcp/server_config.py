# src/ai_archive_mcp/server_config.py
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

PRODUCTION_API_URL = "https://ai-archive.io/api/v1"
DEVELOPMENT_API_URL = "http://localhost:3000/api/v1"


def _env_flag(name: str, default: Optional[bool] = None) -> Optional[bool]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ServerSettings:
    """Process-wide settings for the AI-Archive MCP server"""
    environment: str = "production"
    strict_loading: bool = False

    # Backend API settings
    api_base_url: str = PRODUCTION_API_URL
    api_key: Optional[str] = None
    auth_token: Optional[str] = None
    api_timeout: float = 30.0

    # Tool catalog settings
    tools_config_path: Optional[Path] = None
    quiet: bool = False

    # Transport settings
    transport: str = "stdio"
    host: Optional[str] = None
    port: Optional[int] = None
    path: str = "/mcp/"
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_environment(cls) -> "ServerSettings":
        """Build settings from environment variables."""
        environment = os.getenv("MCP_ENVIRONMENT", "production").strip().lower() or "production"

        # Strict loading aborts startup when a provider fails; production degrades instead
        strict_loading = _env_flag("MCP_STRICT_LOADING", environment != "production")

        api_base_url = os.getenv("API_BASE_URL")
        if not api_base_url:
            api_base_url = DEVELOPMENT_API_URL if environment == "development" else PRODUCTION_API_URL

        tools_config = os.getenv("MCP_TOOLS_CONFIG")
        port = os.getenv("MCP_PORT")

        return cls(
            environment=environment,
            strict_loading=strict_loading,
            api_base_url=api_base_url.rstrip("/"),
            api_key=os.getenv("MCP_API_KEY") or os.getenv("API_KEY") or None,
            auth_token=os.getenv("MCP_AUTH_TOKEN") or None,
            api_timeout=float(os.getenv("MCP_API_TIMEOUT", "30")),
            tools_config_path=Path(tools_config) if tools_config else None,
            quiet=_env_flag("MCP_QUIET", False),
            transport=os.getenv("MCP_TRANSPORT", "stdio").lower(),
            host=os.getenv("MCP_HOST"),
            port=int(port) if port else None,
            path=os.getenv("MCP_PATH", "/mcp/"),
            log_level=os.getenv("MCP_LOG_LEVEL", "INFO").upper(),
        )
