"""
AI-Archive API Client
Shared HTTP client for the backend REST API, injected into every tool provider.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ApiRequestError, AuthenticationRequiredError
from .server_config import ServerSettings

logger = logging.getLogger(__name__)

PAGINATION_FIELDS = ("totalCount", "totalPages", "currentPage", "hasNextPage", "hasPrevPage")


def _redact_headers(headers: Dict[str, str]) -> Dict[str, str]:
    redacted = dict(headers or {})
    for key in ("X-API-Key", "Authorization"):
        if redacted.get(key):
            redacted[key] = "***"
    return redacted


def normalize_response(payload: Any) -> Any:
    """
    Flatten nested pagination into the data object.

    The backend returns {success, data: {papers: [...], pagination: {...}}};
    callers read totalCount/totalPages directly from data, so those fields are
    copied up while the original pagination object is kept.
    """
    if not isinstance(payload, dict):
        return payload

    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("pagination"), dict):
        pagination = data["pagination"]
        flattened = {k: v for k, v in data.items() if k != "pagination"}
        for field in PAGINATION_FIELDS:
            flattened[field] = pagination.get(field)
        flattened["pagination"] = pagination
        return {**payload, "data": flattened}

    return payload


class ArchiveApiClient:
    """Async client for the AI-Archive backend with lazy connection pooling."""

    def __init__(self, settings: Optional[ServerSettings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the API client.

        Args:
            settings: Server settings (base URL, credentials, timeout)
            transport: Optional httpx transport, used by tests to mock the backend
        """
        self.settings = settings or ServerSettings()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

    @property
    def base_url(self) -> str:
        return self.settings.api_base_url

    @property
    def has_credentials(self) -> bool:
        return bool(self.settings.api_key or self.settings.auth_token)

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self.settings.api_timeout,
                    transport=self._transport,
                )
            return self._client

    def _auth_headers(self, require_auth: bool) -> Dict[str, str]:
        if self.settings.api_key:
            return {"X-API-Key": self.settings.api_key}
        if self.settings.auth_token:
            return {"Authorization": f"Bearer {self.settings.auth_token}"}
        if require_auth:
            raise AuthenticationRequiredError()
        return {}

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        require_auth: bool = True,
    ) -> Any:
        """
        Make a request to the AI-Archive API.

        Args:
            endpoint: API path relative to the base URL (e.g. "/search")
            method: HTTP method
            params: Optional query parameters; None values are dropped
            json: Optional JSON body
            require_auth: Whether the endpoint needs credentials

        Returns:
            Normalized JSON response

        Raises:
            AuthenticationRequiredError: Protected endpoint without credentials
            ApiRequestError: HTTP error status or network failure
        """
        headers = self._auth_headers(require_auth)
        query = {k: v for k, v in (params or {}).items() if v is not None}

        client = await self._get_client()
        logger.debug(
            "AI-Archive request: method=%s endpoint=%s params=%s headers=%s",
            method, endpoint, query, _redact_headers(headers)
        )

        try:
            response = await client.request(method.upper(), endpoint, params=query, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = _error_detail(e.response)
            logger.error(f"API request failed: {method} {endpoint} -> {status}: {detail}")
            raise ApiRequestError(
                f"API request failed: {detail}", status_code=status, body=_error_body(e.response)
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Network error for {method} {endpoint}: {e}")
            raise ApiRequestError(f"Network error: {e}") from e

        if not response.content:
            return {}
        return normalize_response(response.json())

    async def aclose(self):
        """Close the underlying HTTP client."""
        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
