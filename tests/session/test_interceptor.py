# This test file verifies the refresh-and-retry policy wrapped around backend operations.
# It exists so expired sessions recover silently while unrelated errors pass straight through.
# The scenarios pin operation counts, refresh counts, and retry delays for each path.
# A recording sleep replaces asyncio.sleep so the tests never wait in real time.

from __future__ import annotations

import asyncio

import pytest

from src.backend.results import QueryError, QueryResult
from src.session.expiry import SESSION_EXPIRED_MESSAGE, SESSION_RENEWED_MESSAGE, SIGN_IN_PATH
from src.session.interceptor import RetryConfig
from tests.session.support import (
    FakeSessionBackend,
    ScriptedOperation,
    build_interceptor,
    session_error,
)


def test_expired_jwt_refreshes_and_returns_retry_result() -> None:
    backend = FakeSessionBackend()
    interceptor, notifier, navigator, sleep = build_interceptor(backend)
    success = QueryResult.success([{"id": 1}])
    operation = ScriptedOperation(session_error("JWT expired"), success)

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result == success
    assert operation.calls == 2
    assert backend.refresh_calls == 1
    assert sleep.delays == [1.0]
    assert notifier.successes == [SESSION_RENEWED_MESSAGE]
    assert navigator.redirects == []


def test_persistent_session_error_exhausts_retries_then_expires() -> None:
    backend = FakeSessionBackend()
    storage = {"auth-store": {"access_token": "stale"}, "other": 1}
    interceptor, notifier, navigator, _ = build_interceptor(
        backend, config=RetryConfig(max_retries=2), storages=[storage]
    )
    failure = session_error("invalid unauthorized token")
    operation = ScriptedOperation(failure, repeat_last=True)

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result.error == failure.error
    assert result.data is None
    assert operation.calls == 3
    assert backend.refresh_calls == 2
    assert notifier.errors == [SESSION_EXPIRED_MESSAGE]
    assert navigator.redirects == [(SIGN_IN_PATH, 1.0)]
    assert storage == {"other": 1}


def test_non_session_error_is_returned_without_refresh() -> None:
    backend = FakeSessionBackend()
    interceptor, notifier, navigator, sleep = build_interceptor(backend)
    not_found = QueryResult.failure(QueryError(message="row not found", code="PGRST116"))
    operation = ScriptedOperation(not_found)

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result is not_found
    assert operation.calls == 1
    assert backend.refresh_calls == 0
    assert sleep.delays == []
    assert notifier.errors == []
    assert navigator.redirects == []


def test_failed_refresh_runs_expiry_and_returns_original_error() -> None:
    backend = FakeSessionBackend(QueryResult.failure(QueryError(message="Invalid Refresh Token")))
    interceptor, notifier, navigator, sleep = build_interceptor(backend)
    failure = session_error("JWT expired", code="PGRST301")
    operation = ScriptedOperation(failure)

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result.error == failure.error
    assert operation.calls == 1
    assert backend.refresh_calls == 1
    assert sleep.delays == []
    assert notifier.errors == [SESSION_EXPIRED_MESSAGE]
    assert len(navigator.redirects) == 1


def test_refresh_returning_no_session_counts_as_failure() -> None:
    backend = FakeSessionBackend(None)
    interceptor, _, navigator, _ = build_interceptor(backend)
    operation = ScriptedOperation(session_error(code="401"))

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result.error is not None
    assert result.error.code == "401"
    assert operation.calls == 1
    assert navigator.redirects == [(SIGN_IN_PATH, 1.0)]


def test_zero_retries_expires_on_first_session_error() -> None:
    backend = FakeSessionBackend()
    interceptor, _, navigator, _ = build_interceptor(backend, config=RetryConfig(max_retries=0))
    operation = ScriptedOperation(session_error("unauthenticated"))

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result.error is not None
    assert operation.calls == 1
    assert backend.refresh_calls == 0
    assert len(navigator.redirects) == 1


@pytest.mark.parametrize("max_retries", [0, 1, 5])
def test_successful_operation_is_never_retried(max_retries: int) -> None:
    backend = FakeSessionBackend()
    interceptor, _, _, sleep = build_interceptor(backend)
    success = QueryResult.success({"id": "r-1"})
    operation = ScriptedOperation(success)

    result = asyncio.run(
        interceptor.with_session_refresh(operation, RetryConfig(max_retries=max_retries))
    )

    assert result is success
    assert operation.calls == 1
    assert backend.refresh_calls == 0
    assert sleep.delays == []


def test_raised_exception_is_retried_then_folded_into_result() -> None:
    backend = FakeSessionBackend()
    retries: list[int] = []
    config = RetryConfig(max_retries=2, retry_delay_seconds=0.25, on_retry=retries.append)
    interceptor, _, navigator, sleep = build_interceptor(backend, config=config)
    boom = ConnectionError("socket closed")
    operation = ScriptedOperation(boom, repeat_last=True)

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result.data is None
    assert result.error is not None
    assert result.error.message == "socket closed"
    assert result.error.code == "ConnectionError"
    assert result.error.cause is boom
    assert operation.calls == 3
    assert retries == [1, 2]
    assert sleep.delays == [0.25, 0.25]
    assert backend.refresh_calls == 0
    assert navigator.redirects == []


def test_raised_exception_followed_by_success_returns_success() -> None:
    backend = FakeSessionBackend()
    interceptor, _, _, sleep = build_interceptor(backend)
    success = QueryResult.success([])
    operation = ScriptedOperation(RuntimeError("transient"), success)

    result = asyncio.run(interceptor.with_session_refresh(operation))

    assert result is success
    assert operation.calls == 2
    assert sleep.delays == [1.0]


def test_on_retry_receives_attempt_numbers_for_session_retries() -> None:
    backend = FakeSessionBackend()
    retries: list[int] = []
    config = RetryConfig(max_retries=3, retry_delay_seconds=0.5, on_retry=retries.append)
    interceptor, _, _, sleep = build_interceptor(backend)
    operation = ScriptedOperation(
        session_error(), session_error(), QueryResult.success([{"id": 2}])
    )

    result = asyncio.run(interceptor.with_session_refresh(operation, config))

    assert result.ok
    assert retries == [1, 2]
    assert sleep.delays == [0.5, 0.5]
    assert backend.refresh_calls == 2


def test_concurrent_callers_share_one_refresh() -> None:
    async def scenario() -> tuple[list[QueryResult[object]], FakeSessionBackend]:
        release = asyncio.Event()
        backend = FakeSessionBackend(release=release)
        interceptor, _, _, _ = build_interceptor(backend)
        first = ScriptedOperation(session_error(), QueryResult.success(["a"]))
        second = ScriptedOperation(session_error(), QueryResult.success(["b"]))

        pending = asyncio.gather(
            interceptor.with_session_refresh(first),
            interceptor.with_session_refresh(second),
        )
        await asyncio.sleep(0)
        release.set()
        return list(await pending), backend

    results, backend = asyncio.run(scenario())

    assert [result.data for result in results] == [["a"], ["b"]]
    assert backend.refresh_calls == 1


@pytest.mark.parametrize(
    ("max_retries", "retry_delay_seconds"),
    [(-1, 1.0), (1, -0.5)],
)
def test_retry_config_rejects_negative_values(max_retries: int, retry_delay_seconds: float) -> None:
    with pytest.raises(ValueError):
        RetryConfig(max_retries=max_retries, retry_delay_seconds=retry_delay_seconds)
