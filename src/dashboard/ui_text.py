# This file stores copy blocks for headings, section descriptions, and empty-state messages.
# It exists so wording stays consistent across the dashboard pages.
# Centralizing text also makes future wording reviews easier without touching rendering logic.

from __future__ import annotations

APP_TITLE = "GRC Dashboard"
APP_SUBTITLE = "Audit, risk, and compliance activity across your organization."

SIGN_IN_TITLE = "Sign in"
SIGN_IN_CAPTION = "Use your organization account to continue."
SIGN_IN_FAILED = "Invalid email or password."

EMPTY_ACTIVITY = "No recent activity yet."
EMPTY_TASKS = "No audits start within the upcoming window."
EMPTY_RISKS = "No risks match the current filters."
PARTIAL_SNAPSHOT = "Some dashboard data could not be loaded:"

RISK_CREATED = "Risk created successfully"
RISK_DELETED = "Risk deleted successfully"
SIGNED_OUT = "Signed out"
