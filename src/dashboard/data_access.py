# This file is the single data interface for the Streamlit GRC dashboard.
# It exists so pages can request business-ready datasets without caring how backend sessions are kept alive.
# Reads go through the session-refreshing client concurrently and degrade to empty frames with a warning.
# Writes raise DashboardQueryError so forms can show the backend's message to the user.

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Final

import pandas as pd

from src.backend.client import Filter, eq
from src.backend.results import QueryError, QueryResult, describe_error
from src.dashboard import aggregations
from src.dashboard.aggregations import HeadlineMetrics
from src.dashboard.risk_wizard import RiskDraft
from src.session.wrapped_client import SessionRefreshingClient

LOGGER = logging.getLogger("dashboard")

RISKS_TABLE: Final[str] = "risks"

# (display name, table, columns, filters)
SNAPSHOT_SOURCES: Final[tuple[tuple[str, str, str, tuple[Filter, ...]], ...]] = (
    (
        "Audits",
        "audits",
        "id, title, status, created_at, start_date, lead_auditor_id",
        (eq("is_deleted", False),),
    ),
    ("Risks", "risks", "id, title, status, probability, impact, category, created_at", ()),
    ("Controls", "controls", "id, status, created_at", ()),
    ("Findings", "findings", "id, title, severity, created_at", ()),
    ("Compliance", "compliance_frameworks", "id, name, created_at", ()),
    ("Documents", "documents", "id", ()),
)


class DashboardQueryError(RuntimeError):
    """Raised when a dashboard write or lookup cannot be completed."""

    def __init__(self, message: str, *, error: QueryError | None = None) -> None:
        super().__init__(message)
        self.error = error


class TTLCache:
    def __init__(self) -> None:
        self._store: dict[tuple[Any, ...], tuple[float, Any]] = {}

    def get(self, key: tuple[Any, ...]) -> Any | None:
        cached = self._store.get(key)
        if not cached:
            return None
        expires_at, value = cached
        if time.time() > expires_at:
            self._store.pop(key, None)
            return None
        return value

    def set(self, key: tuple[Any, ...], *, value: Any, ttl_seconds: int) -> None:
        self._store[key] = (time.time() + ttl_seconds, value)

    def clear(self) -> None:
        self._store.clear()


@dataclass(frozen=True)
class DashboardSnapshot:
    metrics: HeadlineMetrics
    audit_status: pd.DataFrame
    risk_heatmap: pd.DataFrame
    recent_activity: pd.DataFrame
    upcoming_tasks: pd.DataFrame
    module_overview: pd.DataFrame
    warnings: list[str] = field(default_factory=list)


class GrcDashboardService:
    def __init__(
        self,
        client: SessionRefreshingClient,
        *,
        cache: TTLCache | None = None,
        cache_ttl_seconds: int = 60,
        recent_activity_limit: int = 10,
        upcoming_horizon_days: int = 30,
    ) -> None:
        self.client = client
        self.cache = cache if cache is not None else TTLCache()
        self.cache_ttl_seconds = cache_ttl_seconds
        self.recent_activity_limit = recent_activity_limit
        self.upcoming_horizon_days = upcoming_horizon_days

    async def load_snapshot(self, *, today: date | None = None) -> DashboardSnapshot:
        snapshot_day = today or date.today()
        cache_key = ("snapshot", snapshot_day.isoformat())
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        results = await asyncio.gather(
            *(
                self.client.select(table, columns=columns, filters=filters)
                for _, table, columns, filters in SNAPSHOT_SOURCES
            )
        )

        frames: dict[str, pd.DataFrame] = {}
        warnings: list[str] = []
        for (name, table, _, _), result in zip(SNAPSHOT_SOURCES, results, strict=True):
            frame, warning = self._frame_from_result(table, result)
            frames[name] = frame
            if warning:
                warnings.append(f"{name}: {warning}")

        snapshot = DashboardSnapshot(
            metrics=aggregations.headline_metrics(
                frames["Audits"], frames["Risks"], frames["Controls"]
            ),
            audit_status=aggregations.count_audit_statuses(frames["Audits"]),
            risk_heatmap=aggregations.risk_heatmap(frames["Risks"]),
            recent_activity=aggregations.recent_activity(
                frames["Audits"],
                frames["Risks"],
                frames["Findings"],
                limit=self.recent_activity_limit,
            ),
            upcoming_tasks=aggregations.upcoming_tasks(
                frames["Audits"],
                today=snapshot_day,
                horizon_days=self.upcoming_horizon_days,
            ),
            module_overview=aggregations.module_overview(
                {name: len(frame) for name, frame in frames.items()}
            ),
            warnings=warnings,
        )
        if not warnings:
            self.cache.set(cache_key, value=snapshot, ttl_seconds=self.cache_ttl_seconds)
        return snapshot

    async def list_risks(
        self,
        *,
        search: str | None = None,
        status: str | None = None,
        limit: int = 200,
    ) -> pd.DataFrame:
        filters: list[Filter] = []
        if status:
            filters.append(eq("status", status))

        result = await self.client.select(
            RISKS_TABLE,
            filters=filters,
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        if result.error is not None:
            raise DashboardQueryError(describe_error(result.error), error=result.error)

        risks = pd.DataFrame(result.data or [])
        if search and not risks.empty:
            needle = search.strip().lower()
            searchable = [
                column for column in ("title", "description", "category") if column in risks.columns
            ]
            mask = pd.Series(False, index=risks.index)
            for column in searchable:
                mask |= risks[column].fillna("").astype(str).str.lower().str.contains(
                    needle, regex=False
                )
            risks = risks[mask]
        return risks.reset_index(drop=True)

    async def create_risk(self, draft: RiskDraft) -> str:
        session = await self.client.get_session()
        if session.error is not None or session.data is None or not session.data.user_id:
            raise DashboardQueryError("User not authenticated", error=session.error)

        payload = {**draft.to_payload(), "created_by": session.data.user_id}
        result = await self.client.insert(RISKS_TABLE, payload, returning=True, columns="id")
        if result.error is not None:
            raise DashboardQueryError(describe_error(result.error), error=result.error)

        rows = result.data if isinstance(result.data, list) else [result.data]
        if not rows or not isinstance(rows[0], dict) or not rows[0].get("id"):
            raise DashboardQueryError("Backend did not return the new risk id")

        self.cache.clear()
        risk_id = str(rows[0]["id"])
        LOGGER.info("Created risk id=%s", risk_id)
        return risk_id

    async def delete_risk(self, risk_id: str) -> None:
        session = await self.client.get_session()
        if session.error is not None or session.data is None or not session.data.user_id:
            raise DashboardQueryError("User not authenticated", error=session.error)

        existing = await self.client.select(
            RISKS_TABLE, columns="id, title, created_by", filters=[eq("id", risk_id)], limit=1
        )
        if existing.error is not None or not existing.data:
            raise DashboardQueryError("Risk not found", error=existing.error)

        result = await self.client.delete(RISKS_TABLE, filters=[eq("id", risk_id)])
        if result.error is not None:
            raise DashboardQueryError(
                f"Failed to delete risk: {describe_error(result.error)}", error=result.error
            )

        self.cache.clear()
        LOGGER.info("Deleted risk id=%s", risk_id)

    @staticmethod
    def _frame_from_result(table: str, result: QueryResult[Any]) -> tuple[pd.DataFrame, str | None]:
        if result.error is not None:
            LOGGER.warning("Query on %s failed: %s", table, result.error.message or result.error.code)
            return pd.DataFrame(), describe_error(result.error)
        rows = result.data or []
        if not isinstance(rows, list):
            rows = [rows]
        return pd.DataFrame(rows), None
