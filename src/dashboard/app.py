# This file is the Streamlit entrypoint for the GRC dashboard.
# It exists to gate the app behind sign-in and combine the overview, register, and wizard tabs.
# Every backend call runs through run_with_backend so expired sessions refresh transparently.
# A redirect requested by the expiry handler is honored after the page has rendered its toast.

from __future__ import annotations

from functools import partial

import streamlit as st

from src.backend.client import AUTH_STORAGE_KEY, AuthSession
from src.common.logging import configure_logging
from src.dashboard.dashboard_config import load_dashboard_config
from src.dashboard.formatting import format_epoch
from src.dashboard.page_views import create_risk, overview, risk_register, sign_in
from src.dashboard.streamlit_bridge import (
    ACTIVE_PATH_KEY,
    HOME_PATH,
    Runner,
    honor_pending_redirect,
    run_with_backend,
    session_cache,
)
from src.dashboard.tooltips import TOOLTIPS
from src.dashboard.ui_text import APP_SUBTITLE, APP_TITLE, SIGNED_OUT
from src.session.expiry import SIGN_IN_PATH
from src.session.health import check_session_health


def _needs_sign_in() -> bool:
    stored = AuthSession.from_storage(st.session_state.get(AUTH_STORAGE_KEY))
    return stored is None or st.session_state.get(ACTIVE_PATH_KEY) == SIGN_IN_PATH


def _render_sidebar(run: Runner) -> None:
    health = run(lambda ctx: check_session_health(ctx.backend))

    st.sidebar.subheader("Session", help=TOOLTIPS["session_health"])
    if health.email:
        st.sidebar.caption(f"Signed in as {health.email}")
    if health.healthy:
        st.sidebar.success("Session active")
    for issue in health.issues:
        st.sidebar.warning(issue)
    if health.expires_at is not None:
        st.sidebar.caption(f"Token expires {format_epoch(health.expires_at)}")

    if st.sidebar.button("Sign out"):
        run(lambda ctx: ctx.backend.sign_out())
        session_cache(st.session_state).clear()
        st.session_state[ACTIVE_PATH_KEY] = SIGN_IN_PATH
        st.toast(SIGNED_OUT)
        st.rerun()


def main() -> None:
    configure_logging()
    st.set_page_config(page_title=APP_TITLE, layout="wide")

    config = load_dashboard_config()
    run: Runner = partial(run_with_backend, config)

    if _needs_sign_in():
        if sign_in.render(run=run):
            st.session_state[ACTIVE_PATH_KEY] = HOME_PATH
            st.rerun()
        return

    _render_sidebar(run)

    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    tabs = st.tabs(["Overview", "Risk Register", "Create Risk"])

    with tabs[0]:
        snapshot = run(lambda ctx: ctx.service.load_snapshot())
        overview.render(snapshot=snapshot, tooltips=TOOLTIPS)

    with tabs[1]:
        risk_register.render(run=run, tooltips=TOOLTIPS, page_size=config.risk_page_size)

    with tabs[2]:
        create_risk.render(run=run, tooltips=TOOLTIPS)

    if honor_pending_redirect(st.session_state):
        st.rerun()


if __name__ == "__main__":
    main()
