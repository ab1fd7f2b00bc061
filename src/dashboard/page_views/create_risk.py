# This file renders the three-step create-risk wizard.
# It exists so new risks are captured with the same required fields every time.
# Step gating and validation live in RiskWizardState; this page only maps widgets onto it.
# The wizard survives reruns by living in st.session_state until the risk is created.

from __future__ import annotations

import streamlit as st

from src.dashboard.data_access import DashboardQueryError
from src.dashboard.formatting import format_label, risk_score
from src.dashboard.risk_wizard import (
    RISK_LEVELS,
    RISK_STATUSES,
    SCORE_RANGE,
    WIZARD_STEPS,
    RiskWizardState,
)
from src.dashboard.streamlit_bridge import Runner
from src.dashboard.ui_text import RISK_CREATED

WIZARD_STATE_KEY = "risk-wizard"
FIELD_KEY_PREFIX = "risk-field-"

_OPTIONAL_SCORES: list[int | None] = [None, *SCORE_RANGE]


def _wizard_state() -> RiskWizardState:
    wizard = st.session_state.get(WIZARD_STATE_KEY)
    if not isinstance(wizard, RiskWizardState):
        wizard = RiskWizardState()
        st.session_state[WIZARD_STATE_KEY] = wizard
    return wizard


def _reset_wizard(wizard: RiskWizardState) -> None:
    wizard.reset()
    for key in [key for key in st.session_state if str(key).startswith(FIELD_KEY_PREFIX)]:
        del st.session_state[key]


def _score_label(value: int | None) -> str:
    return "Not set" if value is None else str(value)


def _render_basics(wizard: RiskWizardState) -> None:
    draft = wizard.draft
    wizard.update(
        title=st.text_input("Title", value=draft.title, key=f"{FIELD_KEY_PREFIX}title"),
        category=st.text_input("Category", value=draft.category, key=f"{FIELD_KEY_PREFIX}category"),
        description=st.text_area(
            "Description", value=draft.description, key=f"{FIELD_KEY_PREFIX}description"
        ),
    )


def _render_assessment(wizard: RiskWizardState, tooltips: dict[str, str]) -> None:
    draft = wizard.draft
    wizard.update(
        probability=st.slider(
            "Probability", 1, 5, value=draft.probability or 3, key=f"{FIELD_KEY_PREFIX}probability"
        ),
        impact=st.slider("Impact", 1, 5, value=draft.impact or 3, key=f"{FIELD_KEY_PREFIX}impact"),
        risk_level=st.selectbox(
            "Risk level",
            RISK_LEVELS,
            index=RISK_LEVELS.index(draft.risk_level),
            format_func=format_label,
            key=f"{FIELD_KEY_PREFIX}risk_level",
        ),
        status=st.selectbox(
            "Status",
            RISK_STATUSES,
            index=RISK_STATUSES.index(draft.status),
            format_func=format_label,
            key=f"{FIELD_KEY_PREFIX}status",
        ),
    )
    st.metric(
        "Risk score",
        risk_score(wizard.draft.probability, wizard.draft.impact) or "-",
        help=tooltips["risk_score"],
    )


def _render_targets(wizard: RiskWizardState) -> None:
    draft = wizard.draft
    wizard.update(
        mitigation_strategy=st.text_area(
            "Mitigation strategy",
            value=draft.mitigation_strategy,
            key=f"{FIELD_KEY_PREFIX}mitigation_strategy",
        ),
        target_probability=st.selectbox(
            "Target probability",
            _OPTIONAL_SCORES,
            index=_OPTIONAL_SCORES.index(draft.target_probability),
            format_func=_score_label,
            key=f"{FIELD_KEY_PREFIX}target_probability",
        ),
        target_impact=st.selectbox(
            "Target impact",
            _OPTIONAL_SCORES,
            index=_OPTIONAL_SCORES.index(draft.target_impact),
            format_func=_score_label,
            key=f"{FIELD_KEY_PREFIX}target_impact",
        ),
        target_date=st.date_input(
            "Target date", value=draft.target_date, key=f"{FIELD_KEY_PREFIX}target_date"
        ),
    )


def render(*, run: Runner, tooltips: dict[str, str]) -> None:
    st.header("Create Risk")
    wizard = _wizard_state()

    st.progress(
        wizard.step / len(WIZARD_STEPS),
        text=f"Step {wizard.step} of {len(WIZARD_STEPS)}: {wizard.step_label}",
    )

    if wizard.step == 1:
        _render_basics(wizard)
    elif wizard.step == 2:
        _render_assessment(wizard, tooltips)
    else:
        _render_targets(wizard)

    missing = wizard.missing_fields()
    if missing:
        st.caption("Required: " + ", ".join(format_label(name) for name in missing))

    back_col, next_col = st.columns(2)
    if back_col.button("Back", disabled=wizard.step == 1, key="risk-wizard-back"):
        wizard.back()
        st.rerun()

    if not wizard.is_final_step:
        if next_col.button("Next", disabled=not wizard.can_continue(), key="risk-wizard-next"):
            wizard.advance()
            st.rerun()
        return

    if next_col.button("Create risk", type="primary", key="risk-wizard-submit"):
        try:
            risk_id = run(lambda ctx: ctx.service.create_risk(wizard.draft))
        except DashboardQueryError as exc:
            st.error(str(exc))
            return
        _reset_wizard(wizard)
        st.success(f"{RISK_CREATED} (id {risk_id})")
