# This file renders the email/password sign-in form shown when no session is stored.
# It exists so an expired or missing session always lands the user somewhere they can recover from.

from __future__ import annotations

import streamlit as st

from src.backend.results import BackendUnavailableError, QueryError, describe_error
from src.dashboard.streamlit_bridge import Runner
from src.dashboard.ui_text import APP_TITLE, SIGN_IN_CAPTION, SIGN_IN_FAILED, SIGN_IN_TITLE


def render(*, run: Runner) -> bool:
    """Render the form; returns True once a session has been stored."""

    st.title(APP_TITLE)
    st.subheader(SIGN_IN_TITLE)
    st.caption(SIGN_IN_CAPTION)

    with st.form("sign-in"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if not submitted:
        return False
    if not email or not password:
        st.error("Email and password are required.")
        return False

    try:
        result = run(lambda ctx: ctx.backend.sign_in_with_password(email.strip(), password))
    except BackendUnavailableError as exc:
        st.error(describe_error(QueryError.from_exception(exc)))
        return False

    if result.error is not None:
        st.error(describe_error(result.error))
        return False
    if result.data is None:
        st.error(SIGN_IN_FAILED)
        return False
    return True
