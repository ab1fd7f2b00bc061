# This file implements the backend client over the hosted service's REST and auth endpoints.
# It exists so the dashboard can talk to the managed Postgres backend without a vendor SDK.
# Responses are normalized into QueryResult values; only transport failures raise.
# The auth session is persisted in a caller-provided mapping so Streamlit reruns keep the user signed in.

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, MutableMapping
from typing import Any

import httpx

from src.backend.client import (
    AUTH_STORAGE_KEY,
    AuthSession,
    QueryArgs,
    QueryOperation,
    TableOperations,
)
from src.backend.results import BackendUnavailableError, QueryError, QueryResult

LOGGER = logging.getLogger("backend")

_HTTP_METHODS: dict[str, str] = {
    "select": "GET",
    "insert": "POST",
    "update": "PATCH",
    "delete": "DELETE",
}


class HostedBackendClient(TableOperations):
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        session_store: MutableMapping[str, Any],
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session_store = session_store
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout_seconds, transport=transport
        )

    async def __aenter__(self) -> HostedBackendClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self.http_client.aclose()

    async def query(
        self, table: str, operation: QueryOperation, args: QueryArgs | None = None
    ) -> QueryResult[Any]:
        args = args or QueryArgs()
        params: list[tuple[str, str]] = [column_filter.to_param() for column_filter in args.filters]
        headers = self._headers()

        if operation == "select" or args.returning:
            params.append(("select", args.columns))
        if operation == "select":
            if args.order_by:
                direction = "desc" if args.descending else "asc"
                params.append(("order", f"{args.order_by}.{direction}"))
            if args.limit is not None:
                params.append(("limit", str(args.limit)))
        if args.returning:
            headers["Prefer"] = "return=representation"

        body = None
        if operation in ("insert", "update"):
            if args.values is None:
                raise ValueError(f"{operation} on {table!r} requires values")
            if isinstance(args.values, Mapping):
                body = dict(args.values)
            else:
                body = [dict(row) for row in args.values]

        response = await self._send(
            _HTTP_METHODS[operation],
            f"/rest/v1/{table}",
            params=params,
            json=body,
            headers=headers,
        )
        if response.is_error:
            return QueryResult.failure(_error_from_response(response))
        return QueryResult.success(_json_or_none(response))

    async def get_session(self) -> QueryResult[AuthSession]:
        return QueryResult.success(AuthSession.from_storage(self.session_store.get(AUTH_STORAGE_KEY)))

    async def refresh_session(self) -> QueryResult[AuthSession]:
        current = AuthSession.from_storage(self.session_store.get(AUTH_STORAGE_KEY))
        if current is None or not current.refresh_token:
            return QueryResult.failure(
                QueryError(message="Auth session missing!", code="session_missing")
            )

        response = await self._send(
            "POST",
            "/auth/v1/token",
            params=[("grant_type", "refresh_token")],
            json={"refresh_token": current.refresh_token},
            headers=self._headers(anonymous=True),
        )
        return self._store_session_response(response)

    async def sign_in_with_password(self, email: str, password: str) -> QueryResult[AuthSession]:
        response = await self._send(
            "POST",
            "/auth/v1/token",
            params=[("grant_type", "password")],
            json={"email": email, "password": password},
            headers=self._headers(anonymous=True),
        )
        return self._store_session_response(response)

    async def sign_out(self) -> QueryResult[None]:
        error: QueryError | None = None
        if self.session_store.get(AUTH_STORAGE_KEY):
            try:
                response = await self._send("POST", "/auth/v1/logout", headers=self._headers())
            except BackendUnavailableError as exc:
                error = QueryError.from_exception(exc)
            else:
                if response.is_error:
                    error = _error_from_response(response)
        self.session_store.pop(AUTH_STORAGE_KEY, None)
        if error is not None:
            LOGGER.warning("Sign-out request failed: %s", error.message)
        return QueryResult(data=None, error=error)

    def _store_session_response(self, response: httpx.Response) -> QueryResult[AuthSession]:
        if response.is_error:
            return QueryResult.failure(_error_from_response(response))

        payload = _json_or_none(response)
        if not isinstance(payload, dict) or not payload.get("access_token"):
            return QueryResult.success(None)

        session = _session_from_payload(payload)
        self.session_store[AUTH_STORAGE_KEY] = session.to_storage()
        return QueryResult.success(session)

    def _headers(self, *, anonymous: bool = False) -> dict[str, str]:
        token = self.api_key
        if not anonymous:
            stored = AuthSession.from_storage(self.session_store.get(AUTH_STORAGE_KEY))
            if stored is not None:
                token = stored.access_token
        return {"apikey": self.api_key, "Authorization": f"Bearer {token}"}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return await self.http_client.request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.RequestError as exc:
            raise BackendUnavailableError(f"Backend request failed for {url}: {exc}") from exc


def _session_from_payload(payload: dict[str, Any]) -> AuthSession:
    user = payload.get("user") or {}
    expires_at = payload.get("expires_at")
    if expires_at is None and payload.get("expires_in") is not None:
        expires_at = int(time.time()) + int(payload["expires_in"])
    return AuthSession(
        access_token=str(payload["access_token"]),
        refresh_token=payload.get("refresh_token"),
        expires_at=int(expires_at) if expires_at is not None else None,
        user_id=user.get("id"),
        email=user.get("email"),
    )


def _json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _error_from_response(response: httpx.Response) -> QueryError:
    payload = _json_or_none(response)
    if payload is None:
        payload = response.text or response.reason_phrase
    return QueryError.from_payload(payload, status=response.status_code)
