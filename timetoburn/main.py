"""time-to-burn — exposure risk, burn-budget timer and notification policy.

This is the application entry point.  It wires the RiskCalculator,
ExposureTimer, NotificationPolicy, dispatcher and snapshot store into a
single ExposureSession and drives it from stdin.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from timetoburn.config import Settings, settings
from timetoburn.console.commands import run_console
from timetoburn.core.notification_policy import (
    NotificationPolicy,
    NotificationPolicyConfig,
    QuietHours,
)
from timetoburn.core.providers import StaticUVProvider
from timetoburn.core.risk_calculator import RiskCalculator
from timetoburn.core.session import ExposureSession
from timetoburn.dispatch.log_dispatcher import LoggingDispatcher
from timetoburn.domain.timer import ExposureTimer
from timetoburn.store.notification_history import NotificationHistory
from timetoburn.store.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

# ── Wiring ───────────────────────────────────────────────────────────────────


def build_policy_config(cfg: Settings) -> NotificationPolicyConfig:
    quiet_hours = None
    if cfg.quiet_hours_enabled:
        quiet_hours = QuietHours(
            start=cfg.quiet_hours_start,
            end=cfg.quiet_hours_end,
            tz=ZoneInfo(cfg.quiet_hours_timezone),
        )
    return NotificationPolicyConfig(
        enabled=cfg.notifications_enabled,
        uv_change_threshold=cfg.uv_change_threshold,
        minimum_risk_level=cfg.minimum_risk_level,
        educational_frequency=cfg.educational_frequency,
        max_per_hour=cfg.max_notifications_per_hour,
        repeat_cooldown=timedelta(minutes=cfg.repeat_cooldown_minutes),
        sunscreen_reapply_interval=timedelta(seconds=cfg.sunscreen_reapply_interval_seconds),
        quiet_hours=quiet_hours,
    )


def build_session(cfg: Settings, session_id: UUID | None = None) -> ExposureSession:
    timer = ExposureTimer(
        reapply_interval=timedelta(seconds=cfg.sunscreen_reapply_interval_seconds),
        notice_duration=timedelta(seconds=cfg.uv_change_notice_seconds),
        approaching_fraction=cfg.approaching_limit_fraction,
    )
    return ExposureSession(
        timer=timer,
        policy=NotificationPolicy(build_policy_config(cfg)),
        calculator=RiskCalculator(),
        dispatcher=LoggingDispatcher(),
        snapshot_store=SnapshotStore(cfg.snapshot_path),
        history=NotificationHistory(cfg.notification_history_size),
        tick_interval=timedelta(seconds=cfg.tick_interval_seconds),
        reassessment_interval=timedelta(minutes=cfg.reassessment_interval_minutes),
        session_id=session_id,
    )


# ── Entry point ──────────────────────────────────────────────────────────────


def _write_line(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


def run() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
    logger.info("%s starting (debug=%s)", settings.app_name, settings.debug)
    session = build_session(settings)
    try:
        asyncio.run(_serve(session))
    except KeyboardInterrupt:
        logger.info("Interrupted")


async def _serve(session: ExposureSession) -> None:
    if settings.static_uv_index is not None:
        session.start_background_reassessment(StaticUVProvider(settings.static_uv_index))
    await run_console(session, sys.stdin, _write_line)


if __name__ == "__main__":
    run()
