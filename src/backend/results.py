# This file defines the value types every backend call resolves to.
# It exists so callers branch on an explicit error shape instead of probing arbitrary objects.
# A query either carries data or a QueryError; raised exceptions can be folded into the same shape.
# The session layer classifies errors using only the message and code fields defined here.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
NETWORK_ERROR_MESSAGE = "Network connection error. Please check your internet connection."
TIMEOUT_ERROR_MESSAGE = "Request timed out. Please try again."


@dataclass(frozen=True)
class QueryError:
    """Error reported by the backend or folded from a raised exception."""

    message: str | None = None
    code: str | None = None
    details: str | None = None
    hint: str | None = None
    status: int | None = None
    cause: BaseException | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> QueryError:
        return cls(message=str(exc) or type(exc).__name__, code=type(exc).__name__, cause=exc)

    @classmethod
    def from_payload(cls, payload: Any, *, status: int | None = None) -> QueryError:
        """Build an error from a backend error body (REST or auth flavoured)."""

        status_code = str(status) if status is not None else None
        if not isinstance(payload, dict):
            message = str(payload) if payload else None
            return cls(message=message, code=status_code, status=status)

        message = (
            payload.get("message")
            or payload.get("error_description")
            or payload.get("msg")
            or payload.get("error")
        )
        code = payload.get("code") or payload.get("error_code") or status_code
        if code is not None and not isinstance(code, str):
            code = str(code)
        return cls(
            message=str(message) if message is not None else None,
            code=code,
            details=_optional_text(payload.get("details")),
            hint=_optional_text(payload.get("hint")),
            status=status,
        )


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Result of one backend operation: data on success, error otherwise."""

    data: T | None = None
    error: QueryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None) -> QueryResult[T]:
        return cls(data=data, error=None)

    @classmethod
    def failure(cls, error: QueryError) -> QueryResult[T]:
        return cls(data=None, error=error)


class BackendUnavailableError(RuntimeError):
    """Raised when the backend cannot be reached at the transport level."""


def describe_error(error: QueryError | None) -> str:
    """Return a message suitable for showing to dashboard users."""

    if error is None:
        return "An unknown error occurred"
    cause = error.cause
    if isinstance(cause, httpx.TimeoutException) or isinstance(
        getattr(cause, "__cause__", None), httpx.TimeoutException
    ):
        return TIMEOUT_ERROR_MESSAGE
    if isinstance(cause, (httpx.NetworkError, BackendUnavailableError)):
        return NETWORK_ERROR_MESSAGE
    if error.message:
        return error.message
    if error.code:
        return f"Request failed ({error.code})"
    return GENERIC_ERROR_MESSAGE


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
