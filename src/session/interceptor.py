# This file implements the retry policy wrapped around every backend operation.
# It exists so pages and services can issue queries without handling expired sessions themselves.
# Session-class errors trigger a coalesced refresh and a bounded retry; other errors return unchanged.
# Exceptions raised by the operation share the same attempt budget and are folded into QueryResult.

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from src.backend.results import QueryError, QueryResult
from src.session.classification import is_session_error
from src.session.expiry import ExpiryHandler
from src.session.refresh_gate import SessionRefreshGate

LOGGER = logging.getLogger("session")

T = TypeVar("T")

Operation = Callable[[], Awaitable[QueryResult[T]]]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 2
    retry_delay_seconds: float = 1.0
    on_retry: Callable[[int], None] | None = None

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be >= 0")


class SessionInterceptor:
    def __init__(
        self,
        *,
        refresh_gate: SessionRefreshGate,
        expiry_handler: ExpiryHandler,
        config: RetryConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.refresh_gate = refresh_gate
        self.expiry_handler = expiry_handler
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def with_session_refresh(
        self, operation: Operation[T], config: RetryConfig | None = None
    ) -> QueryResult[T]:
        """Run `operation`, refreshing the session and retrying on session-class errors.

        Always resolves to a QueryResult. Attempts are strictly sequential: a retry starts
        only after the previous attempt's refresh and delay have completed.
        """

        config = config or self.config
        attempt = 0

        while True:
            try:
                result = await operation()
            except Exception as exc:
                LOGGER.error("Query execution error on attempt %d: %s", attempt + 1, exc)
                if attempt < config.max_retries:
                    attempt += 1
                    await self._pause_before_retry(config, attempt)
                    continue
                return QueryResult.failure(QueryError.from_exception(exc))

            if result.error is None:
                return result

            if not is_session_error(result.error):
                return result

            LOGGER.info(
                "Session error detected on attempt %d: %s",
                attempt + 1,
                result.error.message or result.error.code,
            )
            if attempt >= config.max_retries:
                self.expiry_handler.handle()
                return QueryResult.failure(result.error)

            if not await self.refresh_gate.refresh():
                self.expiry_handler.handle()
                return QueryResult.failure(result.error)

            attempt += 1
            await self._pause_before_retry(config, attempt)

    async def _pause_before_retry(self, config: RetryConfig, attempt: int) -> None:
        if config.on_retry is not None:
            config.on_retry(attempt)
        await self._sleep(config.retry_delay_seconds)
