"""Unit tests for the PostgrestCollectionClient."""

import json

import httpx
import pytest

from tripstore.domain.exceptions import RecordNotFoundError, RemoteError, RemoteUnavailableError
from tripstore.infrastructure.remote import PostgrestCollectionClient

BASE_URL = "https://example.supabase.co/rest/v1"


# ── Helpers ──


def _client(handler, api_key: str | None = "anon-key") -> PostgrestCollectionClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return PostgrestCollectionClient(
        "destinations", base_url=BASE_URL, api_key=api_key, http_client=http_client
    )


def _row(record_id: str, **fields) -> dict:
    return {
        "id": record_id,
        **fields,
        "created_at": "2024-05-01T10:00:00+00:00",
        "updated_at": "2024-05-01T10:00:00+00:00",
    }


# ── Tests ──


@pytest.mark.asyncio
async def test_list_requests_newest_first_with_auth_headers():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_row("b"), _row("a")])

    rows = await _client(handler).list_records()

    assert [r["id"] for r in rows] == ["b", "a"]
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/destinations"
    assert request.url.params["order"] == "created_at.desc"
    assert request.headers["apikey"] == "anon-key"
    assert request.headers["authorization"] == "Bearer anon-key"


@pytest.mark.asyncio
async def test_insert_returns_representation():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.headers["prefer"] == "return=representation"
        body = json.loads(request.content)
        return httpx.Response(201, json=[_row(body["id"], name=body["name"])])

    created = await _client(handler).insert({"id": "great-wall", "name": "Great Wall"})

    assert created["id"] == "great-wall"
    assert created["created_at"] == "2024-05-01T10:00:00+00:00"


@pytest.mark.asyncio
async def test_update_filters_by_id():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.params["id"] == "eq.great-wall"
        return httpx.Response(200, json=[_row("great-wall", name="Renamed")])

    updated = await _client(handler).update("great-wall", {"name": "Renamed"})
    assert updated["name"] == "Renamed"


@pytest.mark.asyncio
async def test_update_with_no_matching_row_is_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    with pytest.raises(RecordNotFoundError):
        await _client(handler).update("missing-id", {"name": "Y"})


@pytest.mark.asyncio
async def test_remove_accepts_empty_response():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        return httpx.Response(204)

    assert await _client(handler).remove("great-wall") is None


@pytest.mark.asyncio
async def test_rejection_maps_to_remote_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"code": "23505", "message": "duplicate key value"})

    with pytest.raises(RemoteError) as exc_info:
        await _client(handler).insert({"id": "dup"})

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "duplicate key value"


@pytest.mark.asyncio
async def test_gateway_errors_map_to_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    with pytest.raises(RemoteUnavailableError):
        await _client(handler).list_records()


@pytest.mark.asyncio
async def test_connection_failure_maps_to_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteUnavailableError):
        await _client(handler).list_records()


@pytest.mark.asyncio
async def test_api_key_is_optional():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    await _client(handler, api_key=None).list_records()

    assert "apikey" not in seen[0].headers
    assert "authorization" not in seen[0].headers
