# This file holds the state machine behind the three-step create-risk form.
# It exists so step gating and field validation can be tested without rendering Streamlit widgets.
# The draft serializes to the row shape the risks table expects.
# Page code stores one RiskWizardState in session state and mutates it through update().

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, Final

RISK_LEVELS: Final[tuple[str, ...]] = ("low", "medium", "high", "critical")
RISK_STATUSES: Final[tuple[str, ...]] = (
    "identified",
    "assessed",
    "treating",
    "monitoring",
    "accepted",
    "transferred",
    "avoided",
    "closed",
)
WIZARD_STEPS: Final[tuple[tuple[int, str], ...]] = (
    (1, "Basics"),
    (2, "Assessment"),
    (3, "Targets"),
)
SCORE_RANGE: Final[range] = range(1, 6)

_SCORE_FIELDS = ("probability", "impact", "target_probability", "target_impact")
_OPTIONAL_FIELDS = (
    "description",
    "mitigation_strategy",
    "target_probability",
    "target_impact",
    "target_date",
)


@dataclass
class RiskDraft:
    title: str = ""
    description: str = ""
    category: str = ""
    probability: int | None = 3
    impact: int | None = 3
    risk_level: str = "medium"
    status: str = "identified"
    mitigation_strategy: str = ""
    target_probability: int | None = None
    target_impact: int | None = None
    target_date: date | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title.strip(),
            "category": self.category.strip(),
            "probability": self.probability,
            "impact": self.impact,
            "risk_level": self.risk_level,
            "status": self.status,
        }
        for name in _OPTIONAL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                value = value.strip()
            if value is None or value == "":
                continue
            payload[name] = value.isoformat() if isinstance(value, date) else value
        return payload


@dataclass
class RiskWizardState:
    """Tracks the current step and the draft being edited.

    Steps are 1-based and bounded by WIZARD_STEPS. advance() refuses to move
    past a step whose required fields are missing, so the page can simply
    disable its Next button on can_continue().
    """

    step: int = 1
    draft: RiskDraft = field(default_factory=RiskDraft)

    @property
    def is_final_step(self) -> bool:
        return self.step == len(WIZARD_STEPS)

    @property
    def step_label(self) -> str:
        return dict(WIZARD_STEPS)[self.step]

    def missing_fields(self) -> list[str]:
        if self.step == 1:
            return [name for name in ("title", "category") if not getattr(self.draft, name).strip()]
        if self.step == 2:
            return [name for name in ("probability", "impact") if getattr(self.draft, name) is None]
        return []

    def can_continue(self) -> bool:
        return not self.missing_fields()

    def advance(self) -> bool:
        if self.is_final_step or not self.can_continue():
            return False
        self.step += 1
        return True

    def back(self) -> bool:
        if self.step <= 1:
            return False
        self.step -= 1
        return True

    def update(self, **values: Any) -> None:
        known = {item.name for item in fields(RiskDraft)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown risk fields: {', '.join(unknown)}")

        for name, value in values.items():
            if name in _SCORE_FIELDS and value is not None and value not in SCORE_RANGE:
                raise ValueError(f"{name} must be between 1 and 5, got {value!r}")
            if name == "risk_level" and value not in RISK_LEVELS:
                raise ValueError(f"Unknown risk level: {value!r}")
            if name == "status" and value not in RISK_STATUSES:
                raise ValueError(f"Unknown risk status: {value!r}")

        for name, value in values.items():
            setattr(self.draft, name, value)

    def reset(self) -> None:
        self.step = 1
        self.draft = RiskDraft()
