# This file defines runtime configuration for the GRC dashboard.
# It exists so the backend endpoint, retry policy, and cache policy can be tuned through environment variables.
# Keeping these values centralized avoids hard-coded behavior scattered across the app.
# The retry fields convert directly into the session interceptor's RetryConfig.

from __future__ import annotations

import os
from dataclasses import dataclass

from src.common.settings import load_settings
from src.session.interceptor import RetryConfig


@dataclass(frozen=True)
class DashboardConfig:
    backend_url: str
    backend_anon_key: str
    request_timeout_seconds: float
    max_retries: int
    retry_delay_seconds: float
    redirect_delay_seconds: float
    snapshot_cache_ttl_seconds: int
    recent_activity_limit: int
    upcoming_horizon_days: int
    risk_page_size: int

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_retries=self.max_retries,
            retry_delay_seconds=self.retry_delay_seconds,
        )


def load_dashboard_config(*, load_env: bool = True) -> DashboardConfig:
    settings = load_settings(load_env=load_env)

    return DashboardConfig(
        backend_url=settings.BACKEND_URL.rstrip("/"),
        backend_anon_key=settings.BACKEND_ANON_KEY,
        request_timeout_seconds=float(os.getenv("DASHBOARD_REQUEST_TIMEOUT_SECONDS", "10")),
        max_retries=int(os.getenv("DASHBOARD_MAX_RETRIES", "2")),
        retry_delay_seconds=float(os.getenv("DASHBOARD_RETRY_DELAY_SECONDS", "1.0")),
        redirect_delay_seconds=float(os.getenv("DASHBOARD_REDIRECT_DELAY_SECONDS", "1.0")),
        snapshot_cache_ttl_seconds=int(os.getenv("DASHBOARD_SNAPSHOT_CACHE_TTL_SECONDS", "60")),
        recent_activity_limit=int(os.getenv("DASHBOARD_RECENT_ACTIVITY_LIMIT", "10")),
        upcoming_horizon_days=int(os.getenv("DASHBOARD_UPCOMING_HORIZON_DAYS", "30")),
        risk_page_size=int(os.getenv("DASHBOARD_RISK_PAGE_SIZE", "200")),
    )
