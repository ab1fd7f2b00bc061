# This file collects small formatting helpers used across dashboard pages.
# It exists so metric cards and tables present counts, dates, and labels consistently.
# The functions return plain strings that Streamlit can display directly.

from __future__ import annotations

from datetime import date, datetime, timezone

import pandas as pd


def format_count(value: int | float | None) -> str:
    if value is None or pd.isna(value):
        return "0"
    return f"{int(value):,}"


def format_date(value: date | datetime | str | None) -> str:
    if value is None:
        return "-"
    timestamp = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(timestamp):
        return "-"
    return timestamp.strftime("%b %d, %Y")


def format_label(value: str | None) -> str:
    if not value:
        return "-"
    return str(value).replace("_", " ").title()


def risk_score(probability: int | float | None, impact: int | float | None) -> int | None:
    if probability is None or impact is None or pd.isna(probability) or pd.isna(impact):
        return None
    return int(probability) * int(impact)


def format_epoch(value: int | float | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(float(value), tz=timezone.utc).strftime("%b %d, %Y %H:%M UTC")
