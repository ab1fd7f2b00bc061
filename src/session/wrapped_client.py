# This file provides a backend client whose table queries recover from expired sessions.
# It exists so callers keep the same query()/select()/insert() surface they would use on the raw client.
# Every table operation is delegated through the SessionInterceptor; auth calls pass straight through.
# build_session_client wires one gate, one expiry handler, and one interceptor per backend session.

from __future__ import annotations

from collections.abc import MutableMapping, Sequence
from typing import Any

from src.backend.client import (
    AuthSession,
    BackendClient,
    QueryArgs,
    QueryOperation,
    TableOperations,
)
from src.backend.results import QueryResult
from src.session.expiry import SIGN_IN_PATH, ExpiryHandler, Navigator, Notifier
from src.session.interceptor import RetryConfig, SessionInterceptor
from src.session.refresh_gate import SessionRefreshGate


class SessionRefreshingClient(TableOperations):
    def __init__(
        self,
        backend: BackendClient,
        interceptor: SessionInterceptor,
        *,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.backend = backend
        self.interceptor = interceptor
        self.retry_config = retry_config

    async def query(
        self, table: str, operation: QueryOperation, args: QueryArgs | None = None
    ) -> QueryResult[Any]:
        return await self.interceptor.with_session_refresh(
            lambda: self.backend.query(table, operation, args),
            self.retry_config,
        )

    async def get_session(self) -> QueryResult[AuthSession]:
        return await self.backend.get_session()

    async def refresh_session(self) -> QueryResult[AuthSession]:
        return await self.backend.refresh_session()


def build_session_client(
    backend: BackendClient,
    *,
    notifier: Notifier,
    navigator: Navigator,
    storages: Sequence[MutableMapping[str, Any]],
    retry_config: RetryConfig | None = None,
    sign_in_path: str = SIGN_IN_PATH,
    redirect_delay_seconds: float = 1.0,
) -> SessionRefreshingClient:
    refresh_gate = SessionRefreshGate(backend, notifier=notifier)
    expiry_handler = ExpiryHandler(
        storages=storages,
        notifier=notifier,
        navigator=navigator,
        sign_in_path=sign_in_path,
        redirect_delay_seconds=redirect_delay_seconds,
    )
    interceptor = SessionInterceptor(
        refresh_gate=refresh_gate,
        expiry_handler=expiry_handler,
        config=retry_config,
    )
    return SessionRefreshingClient(backend, interceptor, retry_config=retry_config)
