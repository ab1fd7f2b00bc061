# This file renders the record tables on the overview and risk register tabs.
# Every GRC table shows a row-count caption and an info box instead of an empty grid.

from __future__ import annotations

import pandas as pd
import streamlit as st


def render_table(
    records: pd.DataFrame,
    *,
    title: str,
    empty_message: str,
    help_text: str | None = None,
    height: int = 320,
) -> None:
    """Show prepared records under a subheader; no column reshaping happens here."""

    st.subheader(title, help=help_text)
    if records.empty:
        st.info(empty_message)
        return

    noun = "record" if len(records) == 1 else "records"
    st.caption(f"{len(records):,} {noun}")
    st.dataframe(
        records,
        use_container_width=True,
        hide_index=True,
        height=min(height, 38 + 35 * len(records)),
    )
