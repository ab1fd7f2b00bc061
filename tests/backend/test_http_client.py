# This test file validates the hosted backend client against the REST and auth endpoint shapes.
# It exists so request building, session persistence, and error normalization stay stable.
# httpx.MockTransport stands in for the network so every request can be inspected.

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from src.backend.client import AUTH_STORAGE_KEY, Filter, QueryArgs, eq
from src.backend.http_client import HostedBackendClient
from src.backend.results import BackendUnavailableError, QueryResult

BASE_URL = "https://backend.test"
ANON_KEY = "anon-key"


def _stored_session(**overrides: Any) -> dict[str, Any]:
    stored = {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "expires_at": 1_900_000_000,
        "user_id": "user-1",
        "email": "lead@example.com",
    }
    stored.update(overrides)
    return stored


def _run(
    handler: Callable[[httpx.Request], httpx.Response],
    action: Callable[[HostedBackendClient], Any],
    *,
    store: dict[str, Any] | None = None,
) -> tuple[Any, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    async def scenario() -> Any:
        async with HostedBackendClient(
            base_url=f"{BASE_URL}/",
            api_key=ANON_KEY,
            session_store=store if store is not None else {},
            transport=httpx.MockTransport(recording_handler),
        ) as client:
            return await action(client)

    return asyncio.run(scenario()), requests


def test_select_sends_filters_ordering_and_auth_headers() -> None:
    rows = [{"id": "a-1", "status": "planning"}]
    store = {AUTH_STORAGE_KEY: _stored_session()}

    result, requests = _run(
        lambda request: httpx.Response(200, json=rows),
        lambda client: client.select(
            "audits",
            columns="id, status",
            filters=[eq("is_deleted", False)],
            order_by="created_at",
            descending=True,
            limit=5,
        ),
        store=store,
    )

    assert result == QueryResult.success(rows)
    request = requests[0]
    assert request.method == "GET"
    assert request.url.path == "/rest/v1/audits"
    assert request.url.params["is_deleted"] == "eq.false"
    assert request.url.params["select"] == "id, status"
    assert request.url.params["order"] == "created_at.desc"
    assert request.url.params["limit"] == "5"
    assert request.headers["apikey"] == ANON_KEY
    assert request.headers["authorization"] == "Bearer access-1"


def test_anonymous_requests_use_the_anon_key() -> None:
    _, requests = _run(
        lambda request: httpx.Response(200, json=[]),
        lambda client: client.select("controls"),
    )

    assert requests[0].headers["authorization"] == f"Bearer {ANON_KEY}"


def test_insert_with_returning_posts_body_and_prefer_header() -> None:
    result, requests = _run(
        lambda request: httpx.Response(201, json=[{"id": "r-9"}]),
        lambda client: client.insert(
            "risks", {"title": "Vendor lock-in", "probability": 3}, returning=True, columns="id"
        ),
    )

    assert result.data == [{"id": "r-9"}]
    request = requests[0]
    assert request.method == "POST"
    assert request.headers["prefer"] == "return=representation"
    assert request.url.params["select"] == "id"
    assert json.loads(request.content) == {"title": "Vendor lock-in", "probability": 3}


def test_update_and_delete_use_patch_and_delete() -> None:
    async def action(client: HostedBackendClient) -> None:
        await client.update("risks", {"status": "closed"}, filters=[eq("id", "r-1")])
        await client.delete("risks", filters=[eq("id", "r-1")])

    _, requests = _run(lambda request: httpx.Response(204), action)

    assert [request.method for request in requests] == ["PATCH", "DELETE"]
    assert all(request.url.params["id"] == "eq.r-1" for request in requests)
    assert "prefer" not in requests[0].headers


def test_empty_success_body_yields_none() -> None:
    result, _ = _run(
        lambda request: httpx.Response(204),
        lambda client: client.delete("risks", filters=[eq("id", "r-1")]),
    )

    assert result.ok
    assert result.data is None


def test_error_response_is_normalized() -> None:
    result, _ = _run(
        lambda request: httpx.Response(
            401, json={"code": "PGRST301", "message": "JWT expired", "hint": None}
        ),
        lambda client: client.select("risks"),
    )

    assert result.data is None
    assert result.error is not None
    assert result.error.message == "JWT expired"
    assert result.error.code == "PGRST301"
    assert result.error.status == 401


def test_error_without_code_falls_back_to_status() -> None:
    result, _ = _run(
        lambda request: httpx.Response(500, text="upstream failure"),
        lambda client: client.select("risks"),
    )

    assert result.error is not None
    assert result.error.message == "upstream failure"
    assert result.error.code == "500"


def test_transport_failure_raises_backend_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendUnavailableError, match="connection refused"):
        _run(handler, lambda client: client.select("risks"))


def test_insert_without_values_is_rejected() -> None:
    with pytest.raises(ValueError, match="requires values"):
        _run(
            lambda request: httpx.Response(201),
            lambda client: client.query("risks", "insert", QueryArgs()),
        )


def test_refresh_without_stored_session_skips_network() -> None:
    result, requests = _run(
        lambda request: httpx.Response(200, json={}),
        lambda client: client.refresh_session(),
    )

    assert requests == []
    assert result.error is not None
    assert result.error.code == "session_missing"


def test_refresh_persists_the_new_session() -> None:
    store = {AUTH_STORAGE_KEY: _stored_session()}
    payload = {
        "access_token": "access-2",
        "refresh_token": "refresh-2",
        "expires_in": 3600,
        "expires_at": 1_900_003_600,
        "user": {"id": "user-1", "email": "lead@example.com"},
    }

    result, requests = _run(
        lambda request: httpx.Response(200, json=payload),
        lambda client: client.refresh_session(),
        store=store,
    )

    request = requests[0]
    assert request.url.path == "/auth/v1/token"
    assert request.url.params["grant_type"] == "refresh_token"
    assert json.loads(request.content) == {"refresh_token": "refresh-1"}
    assert request.headers["authorization"] == f"Bearer {ANON_KEY}"
    assert result.data is not None
    assert result.data.access_token == "access-2"
    assert store[AUTH_STORAGE_KEY]["refresh_token"] == "refresh-2"
    assert store[AUTH_STORAGE_KEY]["expires_at"] == 1_900_003_600


def test_rejected_refresh_keeps_stored_session() -> None:
    store = {AUTH_STORAGE_KEY: _stored_session()}

    result, _ = _run(
        lambda request: httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Invalid Refresh Token: Already Used"},
        ),
        lambda client: client.refresh_session(),
        store=store,
    )

    assert result.error is not None
    assert result.error.message == "Invalid Refresh Token: Already Used"
    assert result.error.code == "400"
    assert store[AUTH_STORAGE_KEY]["access_token"] == "access-1"


def test_sign_in_with_password_stores_session() -> None:
    store: dict[str, Any] = {}
    payload = {
        "access_token": "access-3",
        "refresh_token": "refresh-3",
        "expires_in": 3600,
        "user": {"id": "user-7", "email": "auditor@example.com"},
    }

    result, requests = _run(
        lambda request: httpx.Response(200, json=payload),
        lambda client: client.sign_in_with_password("auditor@example.com", "secret"),
        store=store,
    )

    assert requests[0].url.params["grant_type"] == "password"
    assert result.data is not None
    assert result.data.user_id == "user-7"
    assert result.data.expires_at is not None
    assert store[AUTH_STORAGE_KEY]["email"] == "auditor@example.com"


def test_get_session_reads_the_store() -> None:
    store = {AUTH_STORAGE_KEY: _stored_session()}

    result, requests = _run(
        lambda request: httpx.Response(200),
        lambda client: client.get_session(),
        store=store,
    )

    assert requests == []
    assert result.data is not None
    assert result.data.email == "lead@example.com"


def test_sign_out_clears_store_even_when_logout_fails() -> None:
    store = {AUTH_STORAGE_KEY: _stored_session()}

    result, requests = _run(
        lambda request: httpx.Response(500, json={"message": "logout failed"}),
        lambda client: client.sign_out(),
        store=store,
    )

    assert requests[0].url.path == "/auth/v1/logout"
    assert result.error is not None
    assert AUTH_STORAGE_KEY not in store


def test_in_filter_quotes_and_escapes_each_value() -> None:
    values = ["a,b", 'say "hi"', "x(y)"]

    assert Filter("id", "in", values).to_param() == ("id", 'in.("a,b","say \\"hi\\"","x(y)")')

    _, requests = _run(
        lambda request: httpx.Response(200, json=[]),
        lambda client: client.select("risks", filters=[Filter("status", "in", ["open", "a,b"])]),
    )

    assert requests[0].url.params["status"] == 'in.("open","a,b")'
