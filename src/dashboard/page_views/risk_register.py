# This file renders the risk register tab with search, status filter, and delete action.
# It exists so users can review and prune risks without leaving the dashboard.
# Backend failures are shown inline; the list itself always comes from GrcDashboardService.

from __future__ import annotations

import pandas as pd
import streamlit as st

from src.dashboard.components.tables import render_table
from src.dashboard.data_access import DashboardQueryError
from src.dashboard.formatting import format_date, format_label, risk_score
from src.dashboard.risk_wizard import RISK_STATUSES
from src.dashboard.streamlit_bridge import Runner
from src.dashboard.ui_text import EMPTY_RISKS, RISK_DELETED

ALL_STATUSES = "all"


def register_rows(risks: pd.DataFrame) -> pd.DataFrame:
    if risks.empty:
        return risks

    def column(name: str) -> pd.Series:
        if name in risks.columns:
            return risks[name]
        return pd.Series([None] * len(risks), index=risks.index, dtype="object")

    return pd.DataFrame(
        {
            "Title": column("title"),
            "Category": column("category"),
            "Status": column("status").map(format_label),
            "Level": column("risk_level").map(format_label),
            "Score": [
                risk_score(probability, impact)
                for probability, impact in zip(column("probability"), column("impact"))
            ],
            "Created": column("created_at").map(format_date),
        }
    )


def render(*, run: Runner, tooltips: dict[str, str], page_size: int) -> None:
    st.header("Risk Register")

    search_col, status_col = st.columns([3, 1])
    search = search_col.text_input("Search", key="risk-register-search")
    status = status_col.selectbox(
        "Status",
        [ALL_STATUSES, *RISK_STATUSES],
        format_func=format_label,
        key="risk-register-status",
    )

    try:
        risks = run(
            lambda ctx: ctx.service.list_risks(
                search=search or None,
                status=None if status == ALL_STATUSES else status,
                limit=page_size,
            )
        )
    except DashboardQueryError as exc:
        st.error(str(exc))
        return

    render_table(
        register_rows(risks),
        title="Risks",
        empty_message=EMPTY_RISKS,
        help_text=tooltips["risk_register_table"],
        height=420,
    )
    if risks.empty or "id" not in risks.columns:
        return

    with st.expander("Delete a risk"):
        titles = dict(zip(risks["id"].astype(str), risks.get("title", risks["id"]).astype(str)))
        selected = st.selectbox("Risk", list(titles), format_func=titles.get, key="risk-delete-id")
        confirmed = st.checkbox("I understand this cannot be undone", key="risk-delete-confirm")
        if st.button("Delete risk", type="primary", disabled=not confirmed):
            try:
                run(lambda ctx: ctx.service.delete_risk(selected))
            except DashboardQueryError as exc:
                st.error(str(exc))
            else:
                st.toast(RISK_DELETED)
                st.rerun()
