# This file defines tooltip text for metric cards, charts, and tables.
# It exists so dashboard users can interpret GRC counts without reading the underlying tables.
# A single dictionary keeps explanations consistent between pages and tests.

from __future__ import annotations

TOOLTIPS: dict[str, str] = {
    "active_audits_card": "Audits currently in progress.",
    "open_risks_card": "Risks that have been identified but not yet assessed or treated.",
    "active_controls_card": "Controls whose status is active.",
    "audit_status_chart": "Number of non-deleted audits in each lifecycle status.",
    "risk_heatmap_chart": "Risks plotted by probability and impact; darker cells hold more risks.",
    "module_overview_chart": "Record counts per module; a module with no records is shown as inactive.",
    "recent_activity_table": "The newest audits, risks, and findings merged into one timeline.",
    "upcoming_tasks_table": "Audits whose start date falls within the upcoming window.",
    "risk_register_table": "All risks visible to you, newest first.",
    "risk_score": "Risk score is probability multiplied by impact, each on a 1 to 5 scale.",
    "session_health": "Whether the stored sign-in session is present and not yet expired.",
}
