"""ExposureSession — single-writer owner of one timer and one policy.

Design notes:
    - An asyncio.Lock guards every mutation (UV observation, user action,
      tick, reassessment) so the timer and the policy's "last observed"
      fields always move together.
    - Readings carry their observation time.  A reading older than the
      last accepted one is dropped.
    - The tick loop uses wall-clock deltas inside the timer, so a late or
      skipped tick self-corrects.
    - Dispatch is fire-and-forget.  A failed delivery is logged, marked in
      the history and dropped; the session never waits on the dispatcher
      while holding its lock.
    - Snapshot files are written by a single background writer through
      asyncio.to_thread; only the newest pending snapshot is written.
    - Configuration is injected at construction.  Nothing here reads the
      global settings object.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from uuid import UUID

from timetoburn.core.notification_policy import NotificationPolicy
from timetoburn.core.providers import UVReadingProvider
from timetoburn.core.risk_calculator import RiskCalculator
from timetoburn.dispatch.base import DispatchRejectedError, DispatchStats, NotificationDispatcher
from timetoburn.dispatch.log_dispatcher import LoggingDispatcher
from timetoburn.domain.assessment import RiskAssessment
from timetoburn.domain.environment import EnvironmentalModel
from timetoburn.domain.notification import SmartNotification
from timetoburn.domain.timer import ExposureTimer
from timetoburn.foundation.clock import ensure_aware, utc_now
from timetoburn.foundation.identifiers import new_id
from timetoburn.models.snapshot import ExposureSnapshot
from timetoburn.store.notification_history import NotificationHistory
from timetoburn.store.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class ExposureSession:
    """Async-safe facade over an ExposureTimer and a NotificationPolicy.

    Args:
        timer: The timer this session owns.
        policy: Notification policy; its state is private to this session.
        calculator: Risk calculator used for every UV observation.
        dispatcher: Delivery collaborator for notification requests.
        snapshot_store: Optional cross-process snapshot writer.
        history: Record of attempted deliveries.
        environment: Situational factors applied until a new one arrives.
        tick_interval: Period of the background tick loop.
        reassessment_interval: Period of the background provider poll.
    """

    def __init__(
        self,
        timer: ExposureTimer | None = None,
        policy: NotificationPolicy | None = None,
        calculator: RiskCalculator | None = None,
        dispatcher: NotificationDispatcher | None = None,
        snapshot_store: SnapshotStore | None = None,
        history: NotificationHistory | None = None,
        environment: EnvironmentalModel | None = None,
        tick_interval: timedelta = timedelta(seconds=1),
        reassessment_interval: timedelta = timedelta(minutes=30),
        session_id: UUID | None = None,
    ) -> None:
        self.session_id: UUID = session_id or new_id()
        self._timer = timer or ExposureTimer()
        self._policy = policy or NotificationPolicy()
        self._calculator = calculator or RiskCalculator()
        self._dispatcher = dispatcher or LoggingDispatcher()
        self._snapshot_store = snapshot_store
        self._history = history or NotificationHistory()
        self._environment = environment or EnvironmentalModel()
        self._tick_interval = tick_interval
        self._reassessment_interval = reassessment_interval

        self._lock = asyncio.Lock()
        self._assessment: RiskAssessment | None = None
        self._last_base_uv: float | None = None
        self._last_reading_at: datetime | None = None
        self._tick_task: asyncio.Task | None = None
        self._reassess_task: asyncio.Task | None = None
        self._deliveries: set[asyncio.Task] = set()
        self._stats = DispatchStats(self._dispatcher.name)
        self._pending_snapshot: ExposureSnapshot | None = None
        self._writer_task: asyncio.Task | None = None

    # ── Environment input ────────────────────────────────────────────────

    async def observe_uv(
        self,
        uv_index: float,
        at: datetime | None = None,
        environment: EnvironmentalModel | None = None,
    ) -> RiskAssessment | None:
        """Assess a new UV reading and feed it to the timer and the policy.

        Returns the assessment, or None when the reading was out of order.
        """
        async with self._lock:
            at = ensure_aware(at) if at is not None else utc_now()
            if self._last_reading_at is not None and at < self._last_reading_at:
                logger.warning(
                    "Session %s dropped out-of-order reading (uv=%s at %s < %s)",
                    self.session_id,
                    uv_index,
                    at.isoformat(),
                    self._last_reading_at.isoformat(),
                )
                return None
            self._last_reading_at = at
            if environment is not None:
                self._environment = environment
            self._last_base_uv = uv_index
            return self._reassess(at)

    async def set_environment(self, environment: EnvironmentalModel) -> RiskAssessment | None:
        """Replace the environment; reassess against the last reading if any."""
        async with self._lock:
            self._environment = environment
            if self._last_base_uv is None:
                return None
            return self._reassess(utc_now())

    # ── User actions ─────────────────────────────────────────────────────

    async def start(self) -> bool:
        async with self._lock:
            return self._apply(self._timer.start(), "start")

    async def pause(self) -> bool:
        async with self._lock:
            return self._apply(self._timer.pause(), "pause")

    async def resume(self) -> bool:
        async with self._lock:
            return self._apply(self._timer.resume(), "resume")

    async def reset(self) -> None:
        async with self._lock:
            self._timer.reset()
            self._apply(True, "reset")

    async def apply_sunscreen(self) -> bool:
        async with self._lock:
            return self._apply(self._timer.apply_sunscreen(), "apply_sunscreen")

    async def cancel_sunscreen_timer(self) -> bool:
        async with self._lock:
            return self._apply(self._timer.cancel_sunscreen_timer(), "cancel_sunscreen_timer")

    async def tick(self) -> None:
        async with self._lock:
            self._timer.tick()
            self._settle()

    # ── Queries ──────────────────────────────────────────────────────────

    async def snapshot(self) -> ExposureSnapshot:
        async with self._lock:
            return self._capture()

    @property
    def last_assessment(self) -> RiskAssessment | None:
        return self._assessment

    @property
    def history(self) -> NotificationHistory:
        return self._history

    @property
    def dispatch_stats(self) -> DispatchStats:
        return self._stats

    @property
    def is_ticking(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    # ── Background work ──────────────────────────────────────────────────

    def start_ticking(self) -> asyncio.Task:
        """Start the periodic tick loop (idempotent)."""
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.create_task(self._tick_loop())
        return self._tick_task

    def start_background_reassessment(self, provider: UVReadingProvider) -> asyncio.Task:
        """Poll *provider* periodically and observe each reading (idempotent)."""
        if self._reassess_task is None or self._reassess_task.done():
            self._reassess_task = asyncio.create_task(self._reassess_loop(provider))
        return self._reassess_task

    async def stop(self) -> ExposureSnapshot:
        """Cancel background loops, end any sunscreen countdown and publish a final snapshot.

        The tick loop and the countdown are invalidated under the same lock
        acquisition, so no later tick can fire a sunscreen reminder.
        """
        async with self._lock:
            tasks = [t for t in (self._tick_task, self._reassess_task) if t is not None]
            for task in tasks:
                task.cancel()
            self._tick_task = None
            self._reassess_task = None
            self._timer.pause()
            self._timer.cancel_sunscreen_timer()
            self._settle()
            final = self._capture()
        await asyncio.gather(*tasks, return_exceptions=True)
        await self.wait_for_deliveries()
        await self.flush_snapshots()
        logger.info(
            "Session %s stopped (total exposure %.1fs, dispatch %s)",
            self.session_id,
            final.total_exposure_seconds,
            self._stats.to_dict(),
        )
        return final

    async def wait_for_deliveries(self) -> None:
        """Wait until every in-flight dispatch has finished."""
        while self._deliveries:
            await asyncio.gather(*list(self._deliveries), return_exceptions=True)

    async def flush_snapshots(self) -> None:
        """Wait until the latest published snapshot has been written."""
        while self._writer_task is not None and not self._writer_task.done():
            await asyncio.gather(self._writer_task, return_exceptions=True)

    # ── Internals ────────────────────────────────────────────────────────

    def _reassess(self, at: datetime) -> RiskAssessment:
        """Must be called while holding self._lock."""
        assessment = self._calculator.assess(self._last_base_uv or 0, self._environment, at)
        self._assessment = assessment
        self._timer.update_uv_index(assessment.adjusted_uv_index)
        notifications = self._policy.evaluate(assessment)
        logger.debug(
            "Session %s assessed uv=%d→%d score=%.2f level=%s",
            self.session_id,
            assessment.base_uv_index,
            assessment.adjusted_uv_index,
            assessment.risk_score,
            assessment.risk_level.value,
        )
        self._settle(notifications)
        return assessment

    def _apply(self, changed: bool, action: str) -> bool:
        """Must be called while holding self._lock."""
        if changed:
            logger.info("Session %s: %s → %s", self.session_id, action, self._timer.state.value)
        else:
            logger.debug("Session %s: %s ignored in state %s", self.session_id, action, self._timer.state.value)
        self._settle()
        return changed

    def _settle(self, notifications: list[SmartNotification] | None = None) -> None:
        """Turn pending timer events into notifications, dispatch, publish.

        Must be called while holding self._lock.
        """
        pending = list(notifications or [])
        events = self._timer.drain_events()
        if events:
            pending.extend(self._policy.timer_notifications(events, self._assessment))
        for notification in pending:
            self._dispatch(notification)
        if self._snapshot_store is not None:
            self._publish(self._capture())

    def _publish(self, snapshot: ExposureSnapshot) -> None:
        """Queue *snapshot* for the writer; only the newest pending one is written."""
        self._pending_snapshot = snapshot
        if self._writer_task is None or self._writer_task.done():
            self._writer_task = asyncio.create_task(self._write_snapshots())

    async def _write_snapshots(self) -> None:
        while self._pending_snapshot is not None:
            snapshot, self._pending_snapshot = self._pending_snapshot, None
            await asyncio.to_thread(self._snapshot_store.save, snapshot)

    def _capture(self) -> ExposureSnapshot:
        level = self._assessment.risk_level if self._assessment else None
        return ExposureSnapshot.capture(self._timer, level)

    def _dispatch(self, notification: SmartNotification) -> None:
        self._history.record(notification)
        task = asyncio.create_task(self._deliver(notification))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)

    async def _deliver(self, notification: SmartNotification) -> None:
        try:
            await self._dispatcher.dispatch(notification.to_request())
        except DispatchRejectedError as exc:
            self._stats.rejected_count += 1
            logger.warning("Dropped notification %r: %s", notification.title, exc.reason)
            self._history.mark(notification.notification_id, delivered=False, reason=exc.reason)
        except Exception as exc:
            self._stats.failed_count += 1
            logger.error("Dispatcher failed for %r", notification.title, exc_info=True)
            self._history.mark(notification.notification_id, delivered=False, reason=str(exc))
        else:
            self._stats.delivered_count += 1
            self._history.mark(notification.notification_id, delivered=True)

    async def _tick_loop(self) -> None:
        interval = self._tick_interval.total_seconds()
        while True:
            await asyncio.sleep(interval)
            try:
                await self.tick()
            except Exception:
                logger.error("Tick failed for session %s", self.session_id, exc_info=True)

    async def _reassess_loop(self, provider: UVReadingProvider) -> None:
        interval = self._reassessment_interval.total_seconds()
        while True:
            try:
                reading = await provider.current_reading()
                if reading is not None:
                    await self.observe_uv(reading.uv_index, reading.observed_at, reading.environment)
            except Exception:
                logger.error("Background reassessment failed for session %s", self.session_id, exc_info=True)
            await asyncio.sleep(interval)
