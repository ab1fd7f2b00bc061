# This test file covers the display helpers used by dashboard tables and cards.

from __future__ import annotations

from datetime import date

import pandas as pd

from src.dashboard.formatting import format_count, format_date, format_epoch, format_label, risk_score


def test_format_count() -> None:
    assert format_count(None) == "0"
    assert format_count(1234) == "1,234"


def test_format_date_accepts_strings_dates_and_missing_values() -> None:
    assert format_date("2026-03-10T08:00:00Z") == "Mar 10, 2026"
    assert format_date(date(2026, 1, 2)) == "Jan 02, 2026"
    assert format_date(None) == "-"
    assert format_date(pd.NaT) == "-"
    assert format_date("not a date") == "-"


def test_format_label_and_epoch() -> None:
    assert format_label("in_progress") == "In Progress"
    assert format_label(None) == "-"
    assert format_epoch(0) == "Jan 01, 1970 00:00 UTC"


def test_risk_score() -> None:
    assert risk_score(4, 5) == 20
    assert risk_score(None, 5) is None
    assert risk_score(float("nan"), 2) is None
