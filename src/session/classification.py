# This file decides whether a backend error means the auth session is no longer valid.
# Only session-class errors are worth a refresh-and-retry; everything else goes straight back to the caller.

from __future__ import annotations

from typing import Final

from src.backend.results import QueryError

SESSION_MESSAGE_MARKERS: Final[tuple[str, ...]] = ("jwt", "token", "unauthorized", "unauthenticated")
SESSION_CODE_MARKERS: Final[tuple[str, ...]] = ("401", "jwt", "token")


def is_session_error(error: QueryError | None) -> bool:
    if error is None:
        return False

    message = (error.message or "").lower()
    code = (error.code or "").lower()

    return any(marker in message for marker in SESSION_MESSAGE_MARKERS) or any(
        marker in code for marker in SESSION_CODE_MARKERS
    )
