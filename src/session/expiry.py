# This file implements the terminal path taken when an auth session cannot be recovered.
# It exists so every caller clears the same client-held auth state and sends the user to sign in.
# Notification and navigation are injected so the same handler serves Streamlit and headless callers.
# The handler never retries and never returns a value; the caller still receives the original error.

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, MutableMapping, Sequence
from typing import Any, Final, Protocol

from src.backend.client import AUTH_STORAGE_KEY

LOGGER = logging.getLogger("session")

SIGN_IN_PATH: Final[str] = "/auth/sign-in"
SESSION_EXPIRED_MESSAGE: Final[str] = "Session expired. Please log in again."
SESSION_RENEWED_MESSAGE: Final[str] = "Session renewed automatically"


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class Navigator(Protocol):
    def redirect(self, path: str, *, delay_seconds: float) -> None: ...


class LoggingNotifier:
    """Notifier for contexts without a UI; messages only reach the log."""

    def success(self, message: str) -> None:
        LOGGER.info(message)

    def error(self, message: str) -> None:
        LOGGER.error(message)


class CallbackNavigator:
    """Runs a callback with the target path once the redirect delay has elapsed."""

    def __init__(self, callback: Callable[[str], None]) -> None:
        self.callback = callback

    def redirect(self, path: str, *, delay_seconds: float) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.callback(path)
            return
        loop.call_later(max(0.0, delay_seconds), self.callback, path)


class ExpiryHandler:
    def __init__(
        self,
        *,
        storages: Sequence[MutableMapping[str, Any]],
        notifier: Notifier,
        navigator: Navigator,
        sign_in_path: str = SIGN_IN_PATH,
        storage_keys: Sequence[str] = (AUTH_STORAGE_KEY,),
        redirect_delay_seconds: float = 1.0,
    ) -> None:
        self.storages = list(storages)
        self.notifier = notifier
        self.navigator = navigator
        self.sign_in_path = sign_in_path
        self.storage_keys = tuple(storage_keys)
        self.redirect_delay_seconds = redirect_delay_seconds

    def handle(self) -> None:
        LOGGER.warning("Session expired, redirecting to %s", self.sign_in_path)
        self.notifier.error(SESSION_EXPIRED_MESSAGE)

        for storage in self.storages:
            for key in self.storage_keys:
                storage.pop(key, None)

        self.navigator.redirect(self.sign_in_path, delay_seconds=self.redirect_delay_seconds)
