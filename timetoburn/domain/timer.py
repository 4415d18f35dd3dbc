"""ExposureTimer — time-at-risk accounting across UV changes and sunscreen.

The timer measures wall-clock time while the user is exposed and
compares it against the burn budget for the current UV index.

State machine:

    not_started ──start()──▶ running ──pause()──▶ paused ──resume()──▶ running
                                │                    ▲
                     apply_sunscreen()               │ expiry / cancel
                                ▼                    │
                         sunscreen_applied ──────────┘

    any ──(total + elapsed ≥ budget)──▶ exceeded      (terminal until reset())
    any ──(UV drops to 0)──▶ not_started              (total retained)
    any ──reset()──▶ not_started                      (everything cleared)

Accounting:
    - ``elapsed_seconds`` is the current running segment, measured from the
      wall clock, so a late tick self-corrects.
    - Leaving ``running`` flushes the segment into ``total_exposure_seconds``.
    - A UV change while running converts the segment into the new budget:
      ``total += elapsed / ttb(old) × ttb(new)`` and a fresh segment starts.

Thread-safety note:
    An ExposureTimer is mutated *only* while the owning ExposureSession
    holds its lock.  The timer itself is not locked.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from pydantic import BaseModel

from timetoburn.domain.burn import (
    INFINITE_BURN_SECONDS,
    format_duration,
    is_infinite,
    normalize_uv,
    time_to_burn,
)
from timetoburn.domain.enums import ExposureStatus, TimerEvent, TimerState
from timetoburn.foundation.clock import utc_now


class SunscreenStatus(BaseModel):
    applied_at: datetime
    reapply_at: datetime
    active: bool = True

    model_config = {"frozen": True}


class ExposureTimer:
    """Mutable burn-budget timer owned by exactly one session."""

    __slots__ = (
        "state",
        "current_uv_index",
        "time_to_burn_seconds",
        "total_exposure_seconds",
        "sunscreen_status",
        "_segment_started_at",
        "_reapply_interval",
        "_notice_duration",
        "_approaching_fraction",
        "_notice",
        "_notice_expires_at",
        "_approach_signalled",
        "_events",
    )

    def __init__(
        self,
        uv_index: float = 0,
        reapply_interval: timedelta = timedelta(hours=2),
        notice_duration: timedelta = timedelta(seconds=5),
        approaching_fraction: float = 0.8,
    ) -> None:
        self.state: TimerState = TimerState.NOT_STARTED
        self.current_uv_index: int = normalize_uv(uv_index)
        self.time_to_burn_seconds: int = time_to_burn(self.current_uv_index)
        self.total_exposure_seconds: float = 0.0
        self.sunscreen_status: SunscreenStatus | None = None
        self._segment_started_at: datetime | None = None
        self._reapply_interval = reapply_interval
        self._notice_duration = notice_duration
        self._approaching_fraction = approaching_fraction
        self._notice: str | None = None
        self._notice_expires_at: datetime | None = None
        self._approach_signalled = False
        self._events: list[TimerEvent] = []

    # ── User actions ─────────────────────────────────────────────────────

    def start(self) -> bool:
        """Begin exposure.  No-op unless not_started with UV above zero."""
        if self.state != TimerState.NOT_STARTED or self.current_uv_index <= 0:
            return False
        self._begin_segment()
        self._check_thresholds()
        return True

    def pause(self) -> bool:
        if self.state != TimerState.RUNNING:
            return False
        self._flush_segment()
        self.state = TimerState.PAUSED
        return True

    def resume(self) -> bool:
        if self.state != TimerState.PAUSED or self.current_uv_index <= 0:
            return False
        self._begin_segment()
        self._check_thresholds()
        return True

    def reset(self) -> None:
        """Back to not_started with every accumulator cleared."""
        self.state = TimerState.NOT_STARTED
        self.total_exposure_seconds = 0.0
        self.sunscreen_status = None
        self._segment_started_at = None
        self._notice = None
        self._notice_expires_at = None
        self._approach_signalled = False
        self._events.clear()

    def apply_sunscreen(self) -> bool:
        """Record an application; stops the UV clock only while running.

        Returns True when the state changed.
        """
        now = utc_now()
        self.sunscreen_status = SunscreenStatus(
            applied_at=now,
            reapply_at=now + self._reapply_interval,
        )
        if self.state != TimerState.RUNNING:
            return False
        self._flush_segment()
        self.state = TimerState.SUNSCREEN_APPLIED
        return True

    def cancel_sunscreen_timer(self) -> bool:
        self.sunscreen_status = None
        if self.state != TimerState.SUNSCREEN_APPLIED:
            return False
        self.state = TimerState.PAUSED
        return True

    # ── Environment input ────────────────────────────────────────────────

    def update_uv_index(self, uv_index: float) -> None:
        """Switch to a new UV reading, converting any running segment."""
        new_uv = normalize_uv(uv_index)
        old_uv = self.current_uv_index
        if new_uv == old_uv:
            return

        if new_uv == 0:
            self._flush_segment()
            self.current_uv_index = 0
            self.time_to_burn_seconds = INFINITE_BURN_SECONDS
            self.state = TimerState.NOT_STARTED
            self._approach_signalled = False
            return

        new_budget = time_to_burn(new_uv)
        if self.state == TimerState.RUNNING:
            now = utc_now()
            segment = self._segment_seconds(now)
            self.total_exposure_seconds += segment / self.time_to_burn_seconds * new_budget
            self._segment_started_at = now

        self.current_uv_index = new_uv
        self.time_to_burn_seconds = new_budget

        if self.state == TimerState.RUNNING:
            direction = "increased" if new_uv > old_uv else "decreased"
            self._publish_notice(
                f"UV {direction} to {new_uv} - Time remaining: "
                f"{format_duration(self.remaining_seconds)}"
            )
        self._check_thresholds()

    # ── Clock ────────────────────────────────────────────────────────────

    def tick(self) -> None:
        """Advance time-driven transitions; safe to call at any rate."""
        now = utc_now()
        if self._notice_expires_at is not None and now >= self._notice_expires_at:
            self._notice = None
            self._notice_expires_at = None

        status = self.sunscreen_status
        if status is not None and status.active and now >= status.reapply_at:
            self.sunscreen_status = status.model_copy(update={"active": False})
            self._events.append(TimerEvent.SUNSCREEN_EXPIRED)
            if self.state == TimerState.SUNSCREEN_APPLIED:
                self.state = TimerState.PAUSED

        self._check_thresholds()

    def drain_events(self) -> list[TimerEvent]:
        """Return and forget the transitions recorded since the last drain."""
        events, self._events = self._events, []
        return events

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def elapsed_seconds(self) -> float:
        """Length of the current running segment (0 when not running)."""
        return self._segment_seconds(utc_now())

    @property
    def exposure_seconds(self) -> float:
        return self.total_exposure_seconds + self.elapsed_seconds

    @property
    def remaining_seconds(self) -> float:
        if is_infinite(self.time_to_burn_seconds):
            return math.inf
        return max(self.time_to_burn_seconds - self.exposure_seconds, 0.0)

    @property
    def exposure_progress(self) -> float:
        if is_infinite(self.time_to_burn_seconds):
            return 0.0
        return min(self.exposure_seconds / self.time_to_burn_seconds, 1.0)

    @property
    def exposure_status(self) -> ExposureStatus:
        if self.state == TimerState.EXCEEDED:
            return ExposureStatus.EXCEEDED
        if self.current_uv_index <= 0:
            return ExposureStatus.NO_UV
        progress = self.exposure_progress
        if progress >= 1.0:
            return ExposureStatus.EXCEEDED
        if progress >= self._approaching_fraction:
            return ExposureStatus.WARNING
        return ExposureStatus.SAFE

    @property
    def sunscreen_remaining_seconds(self) -> float:
        status = self.sunscreen_status
        if status is None or not status.active:
            return 0.0
        return max((status.reapply_at - utc_now()).total_seconds(), 0.0)

    @property
    def uv_change_notice(self) -> str | None:
        if self._notice_expires_at is None or utc_now() >= self._notice_expires_at:
            return None
        return self._notice

    # ── Internals ────────────────────────────────────────────────────────

    def _segment_seconds(self, now: datetime) -> float:
        if self.state != TimerState.RUNNING or self._segment_started_at is None:
            return 0.0
        return max((now - self._segment_started_at).total_seconds(), 0.0)

    def _begin_segment(self) -> None:
        self.state = TimerState.RUNNING
        self._segment_started_at = utc_now()

    def _flush_segment(self) -> None:
        if self.state == TimerState.RUNNING:
            self.total_exposure_seconds += self._segment_seconds(utc_now())
        self._segment_started_at = None

    def _publish_notice(self, text: str) -> None:
        self._notice = text
        self._notice_expires_at = utc_now() + self._notice_duration

    def _check_thresholds(self) -> None:
        if self.state == TimerState.EXCEEDED or is_infinite(self.time_to_burn_seconds):
            return

        exposure = self.exposure_seconds
        if exposure >= self.time_to_burn_seconds:
            self._flush_segment()
            self.state = TimerState.EXCEEDED
            self._notice = None
            self._notice_expires_at = None
            self._events.append(TimerEvent.EXCEEDED)
            return

        if self.state != TimerState.RUNNING:
            return
        approaching = exposure / self.time_to_burn_seconds >= self._approaching_fraction
        if approaching and not self._approach_signalled:
            self._approach_signalled = True
            self._events.append(TimerEvent.APPROACHING_LIMIT)
        elif not approaching:
            self._approach_signalled = False
