# This file renders the overview tab: headline cards, charts, and activity tables.
# It exists so users can assess audit progress and risk exposure at a glance.
# The page only presents a DashboardSnapshot; all aggregation happens in data_access.py.
# Partial loads are surfaced as a warning instead of failing the page.

from __future__ import annotations

import pandas as pd
import streamlit as st

from src.dashboard.components.charts import (
    render_audit_status_chart,
    render_module_overview,
    render_risk_heatmap,
)
from src.dashboard.components.summary_cards import render_overview_cards
from src.dashboard.components.tables import render_table
from src.dashboard.data_access import DashboardSnapshot
from src.dashboard.formatting import format_date, format_label
from src.dashboard.ui_text import EMPTY_ACTIVITY, EMPTY_TASKS, PARTIAL_SNAPSHOT


def _activity_rows(activity: pd.DataFrame) -> pd.DataFrame:
    if activity.empty:
        return activity
    return pd.DataFrame(
        {
            "Type": activity["type"].map(format_label),
            "Description": activity["description"],
            "When": activity["timestamp"].map(format_date),
        }
    )


def _task_rows(tasks: pd.DataFrame) -> pd.DataFrame:
    if tasks.empty:
        return tasks
    return pd.DataFrame(
        {
            "Title": tasks["title"],
            "Starts": tasks["due_date"].map(format_date),
            "Priority": tasks["priority"].map(format_label),
            "Assigned To": tasks["assigned_to"],
        }
    )


def render(*, snapshot: DashboardSnapshot, tooltips: dict[str, str]) -> None:
    st.header("Overview")

    if snapshot.warnings:
        st.warning("\n".join([PARTIAL_SNAPSHOT, *(f"- {item}" for item in snapshot.warnings)]))

    render_overview_cards(metrics=snapshot.metrics, tooltips=tooltips)

    left, right = st.columns(2)
    with left:
        render_audit_status_chart(snapshot.audit_status, help_text=tooltips["audit_status_chart"])
    with right:
        render_risk_heatmap(snapshot.risk_heatmap, help_text=tooltips["risk_heatmap_chart"])

    render_module_overview(snapshot.module_overview, help_text=tooltips["module_overview_chart"])

    left, right = st.columns(2)
    with left:
        render_table(
            _activity_rows(snapshot.recent_activity),
            title="Recent Activity",
            empty_message=EMPTY_ACTIVITY,
            help_text=tooltips["recent_activity_table"],
        )
    with right:
        render_table(
            _task_rows(snapshot.upcoming_tasks),
            title="Upcoming Tasks",
            empty_message=EMPTY_TASKS,
            help_text=tooltips["upcoming_tasks_table"],
        )
