# This file provides shared fakes for session-layer tests.
# It exists so interceptor, gate, and adapter tests can script backend outcomes without HTTP.
# The fakes record every call so tests can assert counts and ordering.

from __future__ import annotations

import asyncio
from collections.abc import MutableMapping
from typing import Any

from src.backend.client import AuthSession, QueryArgs, QueryOperation, TableOperations
from src.backend.results import QueryError, QueryResult
from src.session.expiry import ExpiryHandler
from src.session.interceptor import RetryConfig, SessionInterceptor
from src.session.refresh_gate import SessionRefreshGate

SESSION = AuthSession(access_token="access-1", refresh_token="refresh-1", user_id="user-1")


def session_error(message: str = "JWT expired", code: str | None = None) -> QueryResult[Any]:
    return QueryResult.failure(QueryError(message=message, code=code))


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class RecordingNavigator:
    def __init__(self) -> None:
        self.redirects: list[tuple[str, float]] = []

    def redirect(self, path: str, *, delay_seconds: float) -> None:
        self.redirects.append((path, delay_seconds))


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeSessionBackend:
    """Backend whose refresh outcomes are scripted in order.

    Each outcome is a QueryResult, an exception to raise, or None for a
    refresh that returns no session. When `release` is set, refresh waits on
    it so tests can hold a refresh in flight.
    """

    def __init__(self, *outcomes: Any, release: asyncio.Event | None = None) -> None:
        self.outcomes = list(outcomes)
        self.release = release
        self.refresh_calls = 0
        self.session: AuthSession | None = SESSION

    async def get_session(self) -> QueryResult[AuthSession]:
        return QueryResult.success(self.session)

    async def refresh_session(self) -> QueryResult[AuthSession]:
        self.refresh_calls += 1
        if self.release is not None:
            await self.release.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else QueryResult.success(SESSION)
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            return QueryResult.success(None)
        return outcome


class FakeTableBackend(FakeSessionBackend, TableOperations):
    """Session backend that also answers table queries from a script."""

    def __init__(self, *query_outcomes: Any, refresh_outcomes: tuple[Any, ...] = ()) -> None:
        super().__init__(*refresh_outcomes)
        self.query_outcomes = list(query_outcomes)
        self.queries: list[tuple[str, QueryOperation, QueryArgs | None]] = []

    async def query(
        self, table: str, operation: QueryOperation, args: QueryArgs | None = None
    ) -> QueryResult[Any]:
        self.queries.append((table, operation, args))
        outcome = self.query_outcomes.pop(0) if self.query_outcomes else QueryResult.success([])
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class ScriptedOperation:
    def __init__(self, *outcomes: Any, repeat_last: bool = False) -> None:
        self.outcomes = list(outcomes)
        self.repeat_last = repeat_last
        self.calls = 0

    async def __call__(self) -> QueryResult[Any]:
        self.calls += 1
        if self.repeat_last and len(self.outcomes) == 1:
            outcome = self.outcomes[0]
        else:
            outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def build_interceptor(
    backend: FakeSessionBackend,
    *,
    config: RetryConfig | None = None,
    storages: list[MutableMapping[str, Any]] | None = None,
) -> tuple[SessionInterceptor, RecordingNotifier, RecordingNavigator, RecordingSleep]:
    notifier = RecordingNotifier()
    navigator = RecordingNavigator()
    sleep = RecordingSleep()
    interceptor = SessionInterceptor(
        refresh_gate=SessionRefreshGate(backend, notifier=notifier),
        expiry_handler=ExpiryHandler(
            storages=storages or [],
            notifier=notifier,
            navigator=navigator,
        ),
        config=config,
        sleep=sleep,
    )
    return interceptor, notifier, navigator, sleep
