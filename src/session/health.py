# This file reports whether the stored auth session still looks usable.
# It exists so the dashboard sidebar can show session status before a query fails.
# The check only inspects the stored session and its expiry; it never calls refresh.

from __future__ import annotations

import time
from dataclasses import dataclass, field

from src.backend.client import SessionBackend


@dataclass(frozen=True)
class SessionHealth:
    healthy: bool
    issues: list[str] = field(default_factory=list)
    expires_at: int | None = None
    email: str | None = None


async def check_session_health(backend: SessionBackend, *, now: float | None = None) -> SessionHealth:
    current_time = time.time() if now is None else now

    result = await backend.get_session()
    if result.error is not None:
        return SessionHealth(
            healthy=False,
            issues=[f"Session error: {result.error.message or result.error.code}"],
        )

    session = result.data
    if session is None:
        return SessionHealth(healthy=False, issues=["No active session"])

    issues: list[str] = []
    if session.expires_at is not None and session.expires_at < current_time:
        issues.append("Session is expired")

    return SessionHealth(
        healthy=not issues,
        issues=issues,
        expires_at=session.expires_at,
        email=session.email,
    )
