# This file describes the hosted backend at the interface the rest of the app depends on.
# It exists so the session layer and dashboard can target any implementation, real or fake.
# Table queries are expressed as a table name, an operation, and a QueryArgs value.
# The TableOperations mixin adds keyword helpers for select/insert/update/delete on top of query().

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Protocol, Sequence

from src.backend.results import QueryResult

QueryOperation = Literal["select", "insert", "update", "delete"]
FilterOperator = Literal["eq", "neq", "gt", "gte", "lt", "lte", "ilike", "in", "is"]

AUTH_STORAGE_KEY = "auth-store"


@dataclass(frozen=True)
class Filter:
    column: str
    operator: FilterOperator
    value: Any

    def to_param(self) -> tuple[str, str]:
        if self.operator == "in":
            values = ",".join(_quote(item) for item in self.value)
            return self.column, f"in.({values})"
        if isinstance(self.value, bool):
            return self.column, f"{self.operator}.{str(self.value).lower()}"
        if self.value is None:
            return self.column, f"{self.operator}.null"
        return self.column, f"{self.operator}.{self.value}"


def _quote(value: Any) -> str:
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


@dataclass(frozen=True)
class QueryArgs:
    columns: str = "*"
    filters: tuple[Filter, ...] = ()
    values: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None
    returning: bool = False


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None
    user_id: str | None = None
    email: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_storage(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "user_id": self.user_id,
            "email": self.email,
        }

    @classmethod
    def from_storage(cls, stored: Mapping[str, Any] | None) -> AuthSession | None:
        if not stored or not stored.get("access_token"):
            return None
        expires_at = stored.get("expires_at")
        return cls(
            access_token=str(stored["access_token"]),
            refresh_token=stored.get("refresh_token"),
            expires_at=int(expires_at) if expires_at is not None else None,
            user_id=stored.get("user_id"),
            email=stored.get("email"),
        )


class SessionBackend(Protocol):
    async def get_session(self) -> QueryResult[AuthSession]: ...

    async def refresh_session(self) -> QueryResult[AuthSession]: ...


class BackendClient(SessionBackend, Protocol):
    async def query(
        self, table: str, operation: QueryOperation, args: QueryArgs | None = None
    ) -> QueryResult[Any]: ...


class TableOperations:
    """Keyword helpers shared by every client exposing query()."""

    async def query(
        self, table: str, operation: QueryOperation, args: QueryArgs | None = None
    ) -> QueryResult[Any]:
        raise NotImplementedError

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> QueryResult[Any]:
        args = QueryArgs(
            columns=columns,
            filters=tuple(filters),
            order_by=order_by,
            descending=descending,
            limit=limit,
        )
        return await self.query(table, "select", args)

    async def insert(
        self,
        table: str,
        values: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        *,
        returning: bool = False,
        columns: str = "*",
    ) -> QueryResult[Any]:
        args = QueryArgs(columns=columns, values=values, returning=returning)
        return await self.query(table, "insert", args)

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Sequence[Filter],
        returning: bool = False,
    ) -> QueryResult[Any]:
        args = QueryArgs(filters=tuple(filters), values=values, returning=returning)
        return await self.query(table, "update", args)

    async def delete(self, table: str, *, filters: Sequence[Filter]) -> QueryResult[Any]:
        return await self.query(table, "delete", QueryArgs(filters=tuple(filters)))
