# This file connects the asyncio session layer to Streamlit's rerun-per-interaction model.
# It exists because every script run owns a fresh event loop while auth state must outlive it.
# Backend clients are built per run inside asyncio.run; the session and cache live in st.session_state.
# Redirects requested by the expiry handler are recorded here and honored once the run has finished rendering.

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, Final, TypeVar

import streamlit as st

from src.backend.http_client import HostedBackendClient
from src.dashboard.dashboard_config import DashboardConfig
from src.dashboard.data_access import GrcDashboardService, TTLCache
from src.session.expiry import SIGN_IN_PATH
from src.session.wrapped_client import SessionRefreshingClient, build_session_client

LOGGER = logging.getLogger("dashboard")

T = TypeVar("T")

PENDING_REDIRECT_KEY: Final[str] = "pending-redirect"
ACTIVE_PATH_KEY: Final[str] = "active-path"
CACHE_KEY: Final[str] = "dashboard-cache"
HOME_PATH: Final[str] = "/"


class StreamlitNotifier:
    def success(self, message: str) -> None:
        st.toast(message, icon="✅")

    def error(self, message: str) -> None:
        st.toast(message, icon="⚠️")


class StreamlitNavigator:
    """Records the redirect; honor_pending_redirect() performs it after rendering."""

    def __init__(self, state: MutableMapping[str, Any]) -> None:
        self.state = state

    def redirect(self, path: str, *, delay_seconds: float) -> None:
        self.state[PENDING_REDIRECT_KEY] = {"path": path, "delay_seconds": delay_seconds}


def honor_pending_redirect(
    state: MutableMapping[str, Any],
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    pending = state.pop(PENDING_REDIRECT_KEY, None)
    if not pending:
        return False

    sleep(max(0.0, float(pending.get("delay_seconds", 0.0))))
    state[ACTIVE_PATH_KEY] = pending.get("path", SIGN_IN_PATH)
    cache = state.get(CACHE_KEY)
    if isinstance(cache, TTLCache):
        cache.clear()
    LOGGER.info("Redirecting to %s", state[ACTIVE_PATH_KEY])
    return True


def session_cache(state: MutableMapping[str, Any]) -> TTLCache:
    cache = state.get(CACHE_KEY)
    if not isinstance(cache, TTLCache):
        cache = TTLCache()
        state[CACHE_KEY] = cache
    return cache


@dataclass(frozen=True)
class DashboardContext:
    backend: HostedBackendClient
    client: SessionRefreshingClient
    service: GrcDashboardService


Runner = Callable[[Callable[[DashboardContext], Awaitable[Any]]], Any]


def run_with_backend(
    config: DashboardConfig,
    action: Callable[[DashboardContext], Awaitable[T]],
    *,
    state: MutableMapping[str, Any] | None = None,
) -> T:
    """Run one async dashboard action on a fresh event loop and backend connection."""

    session_state = st.session_state if state is None else state

    async def _run() -> T:
        async with HostedBackendClient(
            base_url=config.backend_url,
            api_key=config.backend_anon_key,
            session_store=session_state,
            timeout_seconds=config.request_timeout_seconds,
        ) as backend:
            client = build_session_client(
                backend,
                notifier=StreamlitNotifier(),
                navigator=StreamlitNavigator(session_state),
                storages=[session_state],
                retry_config=config.retry_config(),
                redirect_delay_seconds=config.redirect_delay_seconds,
            )
            service = GrcDashboardService(
                client,
                cache=session_cache(session_state),
                cache_ttl_seconds=config.snapshot_cache_ttl_seconds,
                recent_activity_limit=config.recent_activity_limit,
                upcoming_horizon_days=config.upcoming_horizon_days,
            )
            return await action(DashboardContext(backend=backend, client=client, service=service))

    return asyncio.run(_run())
