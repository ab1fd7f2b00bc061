# This file renders the headline KPI cards at the top of the overview tab.
# It exists so key counts share one consistent visual and tooltip pattern.
# The function expects already-computed metrics and does no aggregation itself.

from __future__ import annotations

import streamlit as st

from src.dashboard.aggregations import HeadlineMetrics
from src.dashboard.formatting import format_count


def render_overview_cards(*, metrics: HeadlineMetrics, tooltips: dict[str, str]) -> None:
    col1, col2, col3 = st.columns(3)

    col1.metric(
        "Active Audits",
        format_count(metrics.active_audits),
        help=tooltips["active_audits_card"],
    )
    col2.metric(
        "Open Risks",
        format_count(metrics.open_risks),
        help=tooltips["open_risks_card"],
    )
    col3.metric(
        "Active Controls",
        format_count(metrics.active_controls),
        help=tooltips["active_controls_card"],
    )
