"""NotificationPolicy — decides which alerts a risk assessment deserves.

Rules, evaluated in order for every assessment:
    1. Risk-level change: the level differs from the previous evaluation,
       is at least ``minimum_risk_level`` and the adjusted UV moved by at
       least ``uv_change_threshold``.  The first evaluation always counts
       as a change.
    2. Environmental-factor alerts: one per factor of high/extreme severity.
    3. Recommendation alerts: the first ``max_recommendations`` with
       high/critical priority.
    4. Educational tip: drawn with probability ``educational_frequency``
       when rules 1–3 produced nothing.

Gates applied after the rules:
    - global ``enabled`` switch and the quiet-hours window;
    - repeat cooldown for factor / recommendation alerts with the same subject;
    - hourly cap, keeping the highest-priority candidates.

``last_risk_level`` and ``last_adjusted_uv`` are updated on every
evaluation, including ones that emit nothing.

The policy is not locked; the owning ExposureSession serialises calls.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Iterable

from timetoburn.domain.assessment import RiskAssessment
from timetoburn.domain.enums import (
    NotificationPriority,
    NotificationType,
    RecommendationPriority,
    RiskLevel,
    RiskSeverity,
    TimerEvent,
)
from timetoburn.domain.notification import SmartNotification
from timetoburn.foundation.clock import utc_now

logger = logging.getLogger(__name__)

_HOUR = timedelta(hours=1)

_RECOMMENDATION_PRIORITY = {
    RecommendationPriority.LOW: NotificationPriority.LOW,
    RecommendationPriority.MEDIUM: NotificationPriority.MEDIUM,
    RecommendationPriority.HIGH: NotificationPriority.HIGH,
    RecommendationPriority.CRITICAL: NotificationPriority.CRITICAL,
}

_EDUCATIONAL_CONTENT = {
    RiskLevel.VERY_LOW: (
        "Did you know? Even on cloudy days, up to 80% of UV rays can penetrate "
        "clouds. Always protect your skin!"
    ),
    RiskLevel.MODERATE: (
        "UV rays are strongest between 10 AM and 4 PM. Seek shade during these "
        "hours for better protection."
    ),
    RiskLevel.HIGH: (
        "High UV conditions require extra protection. Remember: sunscreen, "
        "protective clothing, and shade are your best friends!"
    ),
    RiskLevel.VERY_HIGH: (
        "Extreme UV conditions! The sun's rays are at their most intense. "
        "Consider postponing outdoor activities if possible."
    ),
}
_EDUCATIONAL_CONTENT[RiskLevel.LOW] = _EDUCATIONAL_CONTENT[RiskLevel.VERY_LOW]
_EDUCATIONAL_CONTENT[RiskLevel.EXTREME] = _EDUCATIONAL_CONTENT[RiskLevel.VERY_HIGH]


@dataclass(frozen=True)
class QuietHours:
    """Local wall-clock window ``[start, end)``; wraps midnight when start > end."""

    start: time = time(22, 0)
    end: time = time(7, 0)
    tz: tzinfo = timezone.utc

    def contains(self, moment: datetime) -> bool:
        local = moment.astimezone(self.tz).time().replace(tzinfo=None)
        if self.start == self.end:
            return False
        if self.start < self.end:
            return self.start <= local < self.end
        return local >= self.start or local < self.end


@dataclass(frozen=True)
class NotificationPolicyConfig:
    enabled: bool = True
    uv_change_threshold: int = 2
    minimum_risk_level: RiskLevel = RiskLevel.MODERATE
    educational_frequency: float = 0.2
    max_recommendations: int = 2
    max_per_hour: int = 3
    repeat_cooldown: timedelta = timedelta(minutes=60)
    sunscreen_reapply_interval: timedelta = timedelta(hours=2)
    quiet_hours: QuietHours | None = None


@dataclass
class _Candidate:
    notification: SmartNotification
    order: int = 0


class NotificationPolicy:
    """Stateful alert throttle for one exposure session."""

    def __init__(
        self,
        config: NotificationPolicyConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or NotificationPolicyConfig()
        self._rng = rng or random.Random()
        self.last_risk_level: RiskLevel | None = None
        self.last_adjusted_uv: int | None = None
        self._sent_at: deque[datetime] = deque()
        self._subject_sent_at: dict[str, datetime] = {}

    @property
    def config(self) -> NotificationPolicyConfig:
        return self._config

    # ── Public API ───────────────────────────────────────────────────────

    def evaluate(
        self,
        assessment: RiskAssessment,
        now: datetime | None = None,
    ) -> list[SmartNotification]:
        """Apply the rules to *assessment* and return what should be sent."""
        now = now or utc_now()
        candidates = self._rule_candidates(assessment, now)

        self.last_risk_level = assessment.risk_level
        self.last_adjusted_uv = assessment.adjusted_uv_index

        if not self._delivery_open(now):
            return []

        candidates = [c for c in candidates if not self._cooling_down(c.notification, now)]
        if not candidates and self._rng.random() < self._config.educational_frequency:
            candidates.append(_Candidate(self._educational(assessment, now), order=len(candidates)))

        admitted = self._apply_hourly_cap(candidates, now)
        for notification in admitted:
            self._sent_at.append(now)
            if notification.subject:
                self._subject_sent_at[notification.subject] = now

        if admitted:
            logger.info(
                "Policy admitted %d notification(s) for %s (uv=%d)",
                len(admitted),
                assessment.risk_level.value,
                assessment.adjusted_uv_index,
            )
        return admitted

    def timer_notifications(
        self,
        events: Iterable[TimerEvent],
        assessment: RiskAssessment | None = None,
        now: datetime | None = None,
    ) -> list[SmartNotification]:
        """Alerts for timer transitions.  Exempt from the hourly cap."""
        now = now or utc_now()
        events = list(events)
        if not events or not self._delivery_open(now):
            return []
        return [self._timer_notification(event, assessment, now) for event in events]

    def is_quiet(self, now: datetime | None = None) -> bool:
        quiet = self._config.quiet_hours
        return quiet is not None and quiet.contains(now or utc_now())

    def sent_in_last_hour(self, now: datetime | None = None) -> int:
        self._prune(now or utc_now())
        return len(self._sent_at)

    # ── Rules ────────────────────────────────────────────────────────────

    def _rule_candidates(self, assessment: RiskAssessment, now: datetime) -> list[_Candidate]:
        cfg = self._config
        out: list[SmartNotification] = []

        if self._risk_level_changed(assessment):
            level = assessment.risk_level
            out.append(SmartNotification(
                type=NotificationType.RISK_LEVEL_CHANGE,
                title="UV Risk Level Changed",
                body=f"Current UV risk is {level.value.replace('_', ' ')}. {level.description}",
                priority=(
                    NotificationPriority.CRITICAL
                    if level is RiskLevel.EXTREME
                    else NotificationPriority.HIGH
                ),
                source_assessment=assessment,
                scheduled_at=now,
            ))

        for factor in assessment.risk_factors:
            if factor.severity not in (RiskSeverity.HIGH, RiskSeverity.EXTREME):
                continue
            out.append(SmartNotification(
                type=NotificationType.ENVIRONMENTAL_FACTOR,
                title="Environmental UV Risk",
                body=f"{factor.description}. {factor.mitigation}",
                priority=(
                    NotificationPriority.CRITICAL
                    if factor.severity is RiskSeverity.EXTREME
                    else NotificationPriority.HIGH
                ),
                source_assessment=assessment,
                scheduled_at=now,
                subject=f"factor:{factor.type.value}",
            ))

        urgent = [
            rec for rec in assessment.recommendations
            if rec.priority in (RecommendationPriority.HIGH, RecommendationPriority.CRITICAL)
        ]
        for rec in urgent[: cfg.max_recommendations]:
            out.append(SmartNotification(
                type=NotificationType.RECOMMENDATION,
                title=rec.title,
                body=rec.description,
                priority=_RECOMMENDATION_PRIORITY[rec.priority],
                source_assessment=assessment,
                scheduled_at=now,
                subject=f"recommendation:{rec.title}",
            ))

        return [_Candidate(n, order=i) for i, n in enumerate(out)]

    def _risk_level_changed(self, assessment: RiskAssessment) -> bool:
        cfg = self._config
        if assessment.risk_level == self.last_risk_level:
            return False
        if assessment.risk_level.rank < cfg.minimum_risk_level.rank:
            return False
        if self.last_adjusted_uv is None:
            return True
        return abs(assessment.adjusted_uv_index - self.last_adjusted_uv) >= cfg.uv_change_threshold

    def _educational(self, assessment: RiskAssessment, now: datetime) -> SmartNotification:
        return SmartNotification(
            type=NotificationType.EDUCATIONAL,
            title="UV Safety Tip",
            body=_EDUCATIONAL_CONTENT[assessment.risk_level],
            priority=NotificationPriority.MEDIUM,
            source_assessment=assessment,
            scheduled_at=now,
        )

    def _timer_notification(
        self,
        event: TimerEvent,
        assessment: RiskAssessment | None,
        now: datetime,
    ) -> SmartNotification:
        if event is TimerEvent.APPROACHING_LIMIT:
            return SmartNotification(
                type=NotificationType.WARNING,
                title="⚠️ Sun Exposure Warning",
                body="You're approaching your safe exposure limit. Consider seeking shade soon.",
                priority=NotificationPriority.HIGH,
                source_assessment=assessment,
                scheduled_at=now,
            )
        if event is TimerEvent.EXCEEDED:
            return SmartNotification(
                type=NotificationType.ALERT,
                title="🚨 Sun Exposure Exceeded!",
                body=(
                    "You've exceeded your safe exposure time. Seek shade immediately "
                    "and avoid further sun exposure."
                ),
                priority=NotificationPriority.CRITICAL,
                source_assessment=assessment,
                scheduled_at=now,
            )
        return SmartNotification(
            type=NotificationType.SUNSCREEN_REMINDER,
            title="Time to Reapply Sunscreen! ☀️",
            body=(
                f"It's been {_describe_interval(self._config.sunscreen_reapply_interval)} "
                "since your last application. Reapply sunscreen for continued protection."
            ),
            priority=NotificationPriority.MEDIUM,
            source_assessment=assessment,
            scheduled_at=now,
        )

    # ── Gates ────────────────────────────────────────────────────────────

    def _delivery_open(self, now: datetime) -> bool:
        if not self._config.enabled:
            logger.debug("Notifications disabled; suppressing")
            return False
        if self.is_quiet(now):
            logger.debug("Quiet hours at %s; suppressing", now.isoformat())
            return False
        return True

    def _cooling_down(self, notification: SmartNotification, now: datetime) -> bool:
        if not notification.subject:
            return False
        last = self._subject_sent_at.get(notification.subject)
        return last is not None and now - last < self._config.repeat_cooldown

    def _apply_hourly_cap(self, candidates: list[_Candidate], now: datetime) -> list[SmartNotification]:
        self._prune(now)
        budget = max(self._config.max_per_hour - len(self._sent_at), 0)
        if len(candidates) > budget:
            dropped = len(candidates) - budget
            ranked = sorted(
                candidates,
                key=lambda c: (-c.notification.priority.rank, c.order),
            )
            candidates = sorted(ranked[:budget], key=lambda c: c.order)
            logger.info("Hourly cap reached; dropped %d notification(s)", dropped)
        return [c.notification for c in candidates]

    def _prune(self, now: datetime) -> None:
        while self._sent_at and now - self._sent_at[0] >= _HOUR:
            self._sent_at.popleft()


def _describe_interval(interval: timedelta) -> str:
    seconds = int(interval.total_seconds())
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    minutes = max(seconds // 60, 1)
    return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"
