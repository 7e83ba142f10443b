import httpx
import pytest

from ai_archive_mcp.api_client import ArchiveApiClient, normalize_response
from ai_archive_mcp.errors import ApiRequestError, AuthenticationRequiredError
from ai_archive_mcp.server_config import ServerSettings

BASE_URL = "https://archive.test/api/v1"


def make_client(handler, **settings):
    return ArchiveApiClient(
        ServerSettings(api_base_url=BASE_URL, **settings),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_api_key_header_and_params():
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        return httpx.Response(200, json={"success": True, "data": []})

    client = make_client(handler, api_key="secret")
    result = await client.request("/agents", params={"page": 1, "status": None})
    await client.aclose()

    assert result == {"success": True, "data": []}
    assert seen["url"] == f"{BASE_URL}/agents?page=1"
    assert seen["headers"]["X-API-Key"] == "secret"
    assert "Authorization" not in seen["headers"]


@pytest.mark.asyncio
async def test_bearer_token_when_no_key():
    def handler(request: httpx.Request):
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(200, json={"data": {}})

    client = make_client(handler, auth_token="tok")
    await client.request("/users/me/papers")
    await client.aclose()


@pytest.mark.asyncio
async def test_protected_endpoint_without_credentials():
    def handler(request: httpx.Request):
        raise AssertionError("no request expected")

    client = make_client(handler)
    with pytest.raises(AuthenticationRequiredError) as excinfo:
        await client.request("/agents")

    assert excinfo.value.status_code == 401
    assert "MCP_API_KEY" in str(excinfo.value)


@pytest.mark.asyncio
async def test_public_endpoint_without_credentials():
    def handler(request: httpx.Request):
        assert "X-API-Key" not in request.headers
        return httpx.Response(200, json={"data": {"papers": []}})

    client = make_client(handler)
    result = await client.request("/search", params={"q": "x"}, require_auth=False)
    await client.aclose()

    assert result["data"]["papers"] == []


@pytest.mark.asyncio
async def test_http_error_carries_status_and_message():
    def handler(request: httpx.Request):
        return httpx.Response(404, json={"success": False, "message": "Paper not found"})

    client = make_client(handler, api_key="k")
    with pytest.raises(ApiRequestError) as excinfo:
        await client.request("/papers/p1")
    await client.aclose()

    assert excinfo.value.status_code == 404
    assert str(excinfo.value) == "API request failed: Paper not found"
    assert excinfo.value.body == {"success": False, "message": "Paper not found"}


@pytest.mark.asyncio
async def test_network_error():
    def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler, api_key="k")
    with pytest.raises(ApiRequestError, match="Network error") as excinfo:
        await client.request("/agents")
    await client.aclose()

    assert excinfo.value.status_code is None
    assert excinfo.value.body is None


@pytest.mark.asyncio
async def test_empty_body_returns_empty_dict():
    client = make_client(lambda request: httpx.Response(204), api_key="k")
    assert await client.request("/papers/p1", method="DELETE") == {}
    await client.aclose()


def test_normalize_flattens_pagination():
    payload = {
        "success": True,
        "data": {
            "papers": [{"id": "p1"}],
            "pagination": {"totalCount": 41, "totalPages": 3, "currentPage": 1,
                           "hasNextPage": True, "hasPrevPage": False},
        },
    }
    data = normalize_response(payload)["data"]

    assert data["totalCount"] == 41
    assert data["totalPages"] == 3
    assert data["hasNextPage"] is True
    assert data["pagination"]["currentPage"] == 1
    assert data["papers"] == [{"id": "p1"}]


def test_normalize_leaves_other_payloads():
    assert normalize_response({"data": [1, 2]}) == {"data": [1, 2]}
    assert normalize_response([1]) == [1]
