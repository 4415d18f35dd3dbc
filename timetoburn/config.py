"""Application configuration loaded from environment variables."""

from __future__ import annotations

from datetime import time
from typing import Optional

from pydantic_settings import BaseSettings

from timetoburn.domain.enums import RiskLevel


class Settings(BaseSettings):
    app_name: str = "time-to-burn"
    debug: bool = False
    log_level: str = "INFO"

    # Exposure timer
    tick_interval_seconds: float = 1.0
    sunscreen_reapply_interval_seconds: int = 7200
    uv_change_notice_seconds: int = 5
    approaching_limit_fraction: float = 0.8

    # Background reassessment
    reassessment_interval_minutes: int = 30
    # Fixed reading polled in the background when no weather provider is attached
    static_uv_index: Optional[float] = None

    # Notification policy
    notifications_enabled: bool = True
    uv_change_threshold: int = 2
    minimum_risk_level: RiskLevel = RiskLevel.MODERATE
    educational_frequency: float = 0.2
    max_notifications_per_hour: int = 3
    repeat_cooldown_minutes: int = 60

    # Quiet hours (local wall clock in quiet_hours_timezone)
    quiet_hours_enabled: bool = False
    quiet_hours_start: time = time(22, 0)
    quiet_hours_end: time = time(7, 0)
    quiet_hours_timezone: str = "UTC"

    # Persistence
    notification_history_size: int = 50
    snapshot_path: str = "ttb_snapshot.json"

    model_config = {"env_prefix": "TTB_"}


settings = Settings()
