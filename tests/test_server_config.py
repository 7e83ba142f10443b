from pathlib import Path

from ai_archive_mcp.server_config import DEVELOPMENT_API_URL, PRODUCTION_API_URL, ServerSettings

ENV_VARS = [
    "MCP_ENVIRONMENT", "MCP_STRICT_LOADING", "API_BASE_URL", "MCP_API_KEY", "API_KEY",
    "MCP_AUTH_TOKEN", "MCP_API_TIMEOUT", "MCP_QUIET", "MCP_TOOLS_CONFIG", "MCP_TRANSPORT",
    "MCP_HOST", "MCP_PORT", "MCP_PATH", "MCP_LOG_LEVEL",
]


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_production_defaults(monkeypatch):
    clear_env(monkeypatch)
    settings = ServerSettings.from_environment()

    assert settings.is_production
    assert settings.strict_loading is False
    assert settings.api_base_url == PRODUCTION_API_URL
    assert settings.api_key is None
    assert settings.transport == "stdio"
    assert settings.tools_config_path is None


def test_development_is_strict(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("MCP_ENVIRONMENT", "development")
    settings = ServerSettings.from_environment()

    assert settings.strict_loading is True
    assert settings.api_base_url == DEVELOPMENT_API_URL


def test_explicit_strict_flag_wins(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("MCP_ENVIRONMENT", "development")
    monkeypatch.setenv("MCP_STRICT_LOADING", "false")

    assert ServerSettings.from_environment().strict_loading is False


def test_overrides(monkeypatch):
    clear_env(monkeypatch)
    monkeypatch.setenv("API_BASE_URL", "https://staging.example/api/v1/")
    monkeypatch.setenv("API_KEY", "legacy")
    monkeypatch.setenv("MCP_TOOLS_CONFIG", "/etc/ai-archive/tools.yaml")
    monkeypatch.setenv("MCP_TRANSPORT", "SSE")
    monkeypatch.setenv("MCP_PORT", "8080")
    monkeypatch.setenv("MCP_QUIET", "1")
    settings = ServerSettings.from_environment()

    assert settings.api_base_url == "https://staging.example/api/v1"
    assert settings.api_key == "legacy"
    assert settings.tools_config_path == Path("/etc/ai-archive/tools.yaml")
    assert settings.transport == "sse"
    assert settings.port == 8080
    assert settings.quiet is True
