# This file coalesces concurrent session refreshes into one backend call.
# It exists because several dashboard queries can hit an expired token in the same tick,
# and issuing parallel refreshes would race on the single refresh token.
# The gate owns its coalescing state; one instance is shared by every caller of a backend session.

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from src.backend.client import SessionBackend
from src.session.expiry import SESSION_RENEWED_MESSAGE, LoggingNotifier, Notifier

LOGGER = logging.getLogger("session")


@dataclass
class RefreshCoalescingState:
    in_flight: bool = False
    pending: asyncio.Future[bool] | None = None


class SessionRefreshGate:
    def __init__(self, backend: SessionBackend, *, notifier: Notifier | None = None) -> None:
        self.backend = backend
        self.notifier = notifier or LoggingNotifier()
        self.state = RefreshCoalescingState()

    @property
    def in_flight(self) -> bool:
        return self.state.in_flight

    async def refresh(self) -> bool:
        """Refresh the backend session, sharing an outstanding refresh when one exists.

        The in-flight check and the state update run before the first await, so two
        callers interleaving on the event loop can never both start a refresh.
        """

        state = self.state
        if state.in_flight and state.pending is not None:
            return await asyncio.shield(state.pending)

        pending = asyncio.ensure_future(self._perform_refresh())
        state.in_flight = True
        state.pending = pending
        pending.add_done_callback(self._release)
        return await asyncio.shield(pending)

    def _release(self, settled: asyncio.Future[bool]) -> None:
        if self.state.pending is settled:
            self.state.in_flight = False
            self.state.pending = None

    async def _perform_refresh(self) -> bool:
        LOGGER.info("Attempting to refresh session")
        try:
            result = await self.backend.refresh_session()
        except Exception as exc:
            LOGGER.error("Session refresh error: %s", exc)
            return False

        if result.error is not None:
            LOGGER.error("Session refresh failed: %s", result.error.message or result.error.code)
            return False

        if result.data is not None:
            LOGGER.info("Session refreshed successfully")
            self.notifier.success(SESSION_RENEWED_MESSAGE)
            return True

        LOGGER.warning("No session returned from refresh")
        return False
