# This file turns raw backend rows into the counts shown on dashboard tiles and charts.
# It exists so bucket counting lives in pure functions that tests can exercise without Streamlit.
# Every function accepts DataFrames that may be empty or missing columns and still returns a usable frame.
# None of these helpers talk to the backend; data_access.py feeds them.

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Final

import pandas as pd

AUDIT_STATUS_BUCKETS: Final[tuple[tuple[str, str, str], ...]] = (
    ("planning", "Planning", "#fbbf24"),
    ("in_progress", "In Progress", "#3b82f6"),
    ("review", "Review", "#8b5cf6"),
    ("completed", "Completed", "#10b981"),
    ("cancelled", "Cancelled", "#ef4444"),
)

RECENT_PER_TYPE: Final[int] = 5


@dataclass(frozen=True)
class HeadlineMetrics:
    active_audits: int
    open_risks: int
    active_controls: int


def _column(dataframe: pd.DataFrame, name: str) -> pd.Series:
    if name in dataframe.columns:
        return dataframe[name]
    return pd.Series([None] * len(dataframe), index=dataframe.index, dtype="object")


def _count_status(dataframe: pd.DataFrame, status: str) -> int:
    if dataframe.empty:
        return 0
    return int((_column(dataframe, "status") == status).sum())


def count_audit_statuses(audits: pd.DataFrame) -> pd.DataFrame:
    counts = _column(audits, "status").value_counts() if not audits.empty else pd.Series(dtype=int)
    rows = [
        {"status": status, "name": name, "value": int(counts.get(status, 0)), "color": color}
        for status, name, color in AUDIT_STATUS_BUCKETS
    ]
    return pd.DataFrame(rows, columns=["status", "name", "value", "color"])


def headline_metrics(
    audits: pd.DataFrame, risks: pd.DataFrame, controls: pd.DataFrame
) -> HeadlineMetrics:
    return HeadlineMetrics(
        active_audits=_count_status(audits, "in_progress"),
        open_risks=_count_status(risks, "identified"),
        active_controls=_count_status(controls, "active"),
    )


def risk_heatmap(risks: pd.DataFrame) -> pd.DataFrame:
    columns = ["probability", "impact", "count", "category"]
    if risks.empty:
        return pd.DataFrame(columns=columns)

    frame = pd.DataFrame(
        {
            "probability": pd.to_numeric(_column(risks, "probability"), errors="coerce").fillna(1),
            "impact": pd.to_numeric(_column(risks, "impact"), errors="coerce").fillna(1),
            "category": _column(risks, "category"),
        }
    )
    frame["probability"] = frame["probability"].astype(int)
    frame["impact"] = frame["impact"].astype(int)

    grouped = (
        frame.groupby(["probability", "impact"], sort=True)
        .agg(count=("category", "size"), category=("category", "first"))
        .reset_index()
    )
    grouped["category"] = grouped["category"].fillna("Unknown")
    return grouped[columns]


def _newest(dataframe: pd.DataFrame, count: int) -> pd.DataFrame:
    if dataframe.empty:
        return dataframe
    frame = dataframe.copy()
    frame["created_at"] = pd.to_datetime(_column(frame, "created_at"), utc=True, errors="coerce")
    return frame.sort_values("created_at", ascending=False, na_position="last").head(count)


def recent_activity(
    audits: pd.DataFrame,
    risks: pd.DataFrame,
    findings: pd.DataFrame,
    *,
    limit: int = 10,
) -> pd.DataFrame:
    columns = ["id", "type", "description", "timestamp", "link"]
    rows: list[dict[str, object]] = []

    for _, audit in _newest(audits, RECENT_PER_TYPE).iterrows():
        rows.append(
            {
                "id": audit.get("id"),
                "type": "audit",
                "description": f'Audit "{audit.get("title")}" status changed to {audit.get("status")}',
                "timestamp": audit.get("created_at"),
                "link": f"/audits/{audit.get('id')}",
            }
        )
    for _, risk in _newest(risks, RECENT_PER_TYPE).iterrows():
        rows.append(
            {
                "id": risk.get("id"),
                "type": "risk",
                "description": f'Risk "{risk.get("title")}" was identified',
                "timestamp": risk.get("created_at"),
                "link": f"/risks/{risk.get('id')}",
            }
        )
    for _, finding in _newest(findings, RECENT_PER_TYPE).iterrows():
        rows.append(
            {
                "id": finding.get("id"),
                "type": "finding",
                "description": (
                    f'Finding "{finding.get("title")}" was created ({finding.get("severity")})'
                ),
                "timestamp": finding.get("created_at"),
                "link": f"/findings/{finding.get('id')}",
            }
        )

    if not rows:
        return pd.DataFrame(columns=columns)

    activity = pd.DataFrame(rows, columns=columns)
    activity["timestamp"] = pd.to_datetime(activity["timestamp"], utc=True, errors="coerce")
    return (
        activity.sort_values("timestamp", ascending=False, na_position="last")
        .head(limit)
        .reset_index(drop=True)
    )


def upcoming_tasks(
    audits: pd.DataFrame,
    *,
    today: date,
    horizon_days: int = 30,
    limit: int = 10,
) -> pd.DataFrame:
    columns = ["id", "title", "type", "due_date", "priority", "assigned_to"]
    if audits.empty:
        return pd.DataFrame(columns=columns)

    start_ts = pd.to_datetime(
        _column(audits, "start_date"), utc=True, errors="coerce"
    ).dt.tz_convert(None).dt.normalize()
    window_start = pd.Timestamp(today)
    window_end = pd.Timestamp(today + timedelta(days=horizon_days))
    in_window = start_ts.notna() & (start_ts >= window_start) & (start_ts <= window_end)
    if not in_window.any():
        return pd.DataFrame(columns=columns)

    window = audits[in_window].copy()
    window["start_ts"] = start_ts[in_window]
    window = window.sort_values("start_ts", ascending=True).head(limit)
    window["due_date"] = window["start_ts"].dt.date

    tasks = pd.DataFrame(
        {
            "id": _column(window, "id"),
            "title": _column(window, "title"),
            "type": "audit",
            "due_date": window["due_date"],
            "priority": "medium",
            "assigned_to": _column(window, "lead_auditor_id").fillna("Unassigned"),
        }
    )
    return tasks[columns].reset_index(drop=True)


def module_overview(counts: dict[str, int]) -> pd.DataFrame:
    rows = [
        {"name": name, "count": int(count), "status": "active" if count > 0 else "inactive"}
        for name, count in counts.items()
    ]
    return pd.DataFrame(rows, columns=["name", "count", "status"])
