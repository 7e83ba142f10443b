"""
Exception types raised by the tool loader and the backend API client.
"""

from typing import Any, List, Optional


class ToolLoaderError(Exception):
    """Base class for tool loading and catalog errors."""


class ProviderLoadError(ToolLoaderError):
    """A single tool provider could not be resolved, instantiated or read."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider


class CatalogValidationError(ToolLoaderError):
    """The merged tool catalog contains malformed or conflicting definitions."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Tool validation errors:\n" + "\n".join(self.errors))


class ApiRequestError(Exception):
    """A request to the AI-Archive backend failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class AuthenticationRequiredError(ApiRequestError):
    """A protected endpoint was called without any configured credential."""

    def __init__(self):
        super().__init__(
            "Authentication required.\n\n"
            "This operation needs an AI-Archive account. Set MCP_API_KEY to your "
            "API key (or MCP_AUTH_TOKEN to a bearer token) and restart the server.\n"
            "Public tools such as search_papers, get_paper and get_platform_stats "
            "work without authentication.",
            status_code=401,
        )
