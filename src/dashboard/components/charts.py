# This file contains reusable chart renderers for the overview tab.
# It exists so chart logic is shared and consistently handles empty datasets.
# The charts use Altair because it integrates cleanly with Streamlit and supports explicit color scales.

from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st


def render_audit_status_chart(dataframe: pd.DataFrame, *, help_text: str) -> None:
    st.subheader("Audit Status", help=help_text)
    if dataframe.empty or int(dataframe["value"].sum()) == 0:
        st.info("No audits recorded yet.")
        return

    chart = (
        alt.Chart(dataframe)
        .mark_bar()
        .encode(
            x=alt.X("name:N", sort=list(dataframe["name"]), title="Status"),
            y=alt.Y("value:Q", title="Audits"),
            color=alt.Color("color:N", scale=None, legend=None),
            tooltip=[alt.Tooltip("name:N", title="Status"), alt.Tooltip("value:Q", title="Audits")],
        )
        .properties(height=280)
    )
    st.altair_chart(chart, use_container_width=True)


def render_risk_heatmap(dataframe: pd.DataFrame, *, help_text: str) -> None:
    st.subheader("Risk Heatmap", help=help_text)
    if dataframe.empty:
        st.info("No risks recorded yet.")
        return

    axis_values = list(range(1, 6))
    chart = (
        alt.Chart(dataframe)
        .mark_rect()
        .encode(
            x=alt.X("probability:O", sort=axis_values, title="Probability"),
            y=alt.Y("impact:O", sort=list(reversed(axis_values)), title="Impact"),
            color=alt.Color("count:Q", scale=alt.Scale(scheme="orangered"), title="Risks"),
            tooltip=["probability:O", "impact:O", "count:Q", "category:N"],
        )
        .properties(height=280)
    )
    st.altair_chart(chart, use_container_width=True)


def render_module_overview(dataframe: pd.DataFrame, *, help_text: str) -> None:
    st.subheader("Module Overview", help=help_text)
    if dataframe.empty:
        st.info("No module data available.")
        return

    chart = (
        alt.Chart(dataframe)
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Records"),
            y=alt.Y("name:N", sort="-x", title="Module"),
            color=alt.Color(
                "status:N",
                scale=alt.Scale(domain=["active", "inactive"], range=["#10b981", "#9ca3af"]),
                title="Status",
            ),
            tooltip=["name:N", "count:Q", "status:N"],
        )
        .properties(height=260)
    )
    st.altair_chart(chart, use_container_width=True)
