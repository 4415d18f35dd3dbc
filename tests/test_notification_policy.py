"""Tests for the NotificationPolicy rules and gates."""

from datetime import datetime, time, timedelta, timezone

import pytest

from timetoburn.core.notification_policy import (
    NotificationPolicy,
    NotificationPolicyConfig,
    QuietHours,
)
from timetoburn.domain.assessment import Recommendation, RiskAssessment, RiskFactor
from timetoburn.domain.enums import (
    NotificationPriority,
    NotificationType,
    RecommendationPriority,
    RecommendationType,
    RiskFactorType,
    RiskLevel,
    RiskSeverity,
    TimerEvent,
)

_BASE = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class _FixedRandom:
    """Deterministic stand-in for random.Random."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        return self.value


_NEVER = 0.99
_ALWAYS = 0.0


def _assessment(
    level: RiskLevel,
    adjusted_uv: int,
    factors: tuple[RiskFactor, ...] = (),
    recommendations: tuple[Recommendation, ...] = (),
) -> RiskAssessment:
    return RiskAssessment(
        timestamp=_BASE,
        base_uv_index=adjusted_uv,
        adjusted_uv_index=adjusted_uv,
        risk_score=0.5,
        risk_level=level,
        risk_factors=factors,
        recommendations=recommendations,
    )


def _factor(kind: RiskFactorType, severity: RiskSeverity) -> RiskFactor:
    return RiskFactor(
        type=kind,
        severity=severity,
        description=f"{kind.value} is dangerous",
        impact=0.5,
        mitigation="Cover up",
    )


def _rec(title: str, priority: RecommendationPriority) -> Recommendation:
    return Recommendation(
        type=RecommendationType.AVOIDANCE,
        priority=priority,
        title=title,
        description=f"{title} advice",
    )


def _policy(value: float = _NEVER, **config) -> NotificationPolicy:
    config.setdefault("max_per_hour", 100)
    return NotificationPolicy(NotificationPolicyConfig(**config), rng=_FixedRandom(value))


class TestRiskLevelChange:
    def test_first_evaluation_counts_as_change(self) -> None:
        policy = _policy()
        out = policy.evaluate(_assessment(RiskLevel.MODERATE, 5), now=_BASE)
        assert len(out) == 1
        assert out[0].type is NotificationType.RISK_LEVEL_CHANGE
        assert out[0].title == "UV Risk Level Changed"
        assert out[0].body == "Current UV risk is moderate. Moderate UV risk - seek shade during peak hours"
        assert out[0].priority is NotificationPriority.HIGH

    def test_identical_assessment_fires_at_most_once(self) -> None:
        policy = _policy()
        assessment = _assessment(RiskLevel.HIGH, 8)
        first = policy.evaluate(assessment, now=_BASE)
        second = policy.evaluate(assessment, now=_BASE + timedelta(minutes=1))
        assert [n.type for n in first] == [NotificationType.RISK_LEVEL_CHANGE]
        assert second == []
        assert policy.last_risk_level is RiskLevel.HIGH

    def test_below_minimum_level_is_silent(self) -> None:
        policy = _policy()
        assert policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE) == []
        assert policy.last_risk_level is RiskLevel.LOW
        assert policy.last_adjusted_uv == 2

    def test_small_uv_delta_suppresses_change(self) -> None:
        policy = _policy()
        policy.evaluate(_assessment(RiskLevel.MODERATE, 5), now=_BASE)
        assert policy.evaluate(_assessment(RiskLevel.HIGH, 6), now=_BASE) == []
        # Hysteresis is measured against the last observed value (6), not the last alerted one (5)
        assert policy.last_adjusted_uv == 6
        assert policy.evaluate(_assessment(RiskLevel.VERY_HIGH, 7), now=_BASE) == []
        out = policy.evaluate(_assessment(RiskLevel.EXTREME, 9), now=_BASE)
        assert [n.type for n in out] == [NotificationType.RISK_LEVEL_CHANGE]

    def test_extreme_is_critical(self) -> None:
        out = _policy().evaluate(_assessment(RiskLevel.EXTREME, 11), now=_BASE)
        assert out[0].priority is NotificationPriority.CRITICAL

    def test_custom_minimum_level(self) -> None:
        policy = _policy(minimum_risk_level=RiskLevel.HIGH)
        assert policy.evaluate(_assessment(RiskLevel.MODERATE, 5), now=_BASE) == []


class TestFactorAndRecommendationAlerts:
    def test_only_high_severity_factors_alert(self) -> None:
        policy = _policy()
        policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE)
        out = policy.evaluate(
            _assessment(
                RiskLevel.LOW,
                2,
                factors=(
                    _factor(RiskFactorType.ALTITUDE, RiskSeverity.MODERATE),
                    _factor(RiskFactorType.SNOW_REFLECTION, RiskSeverity.HIGH),
                    _factor(RiskFactorType.TERRAIN, RiskSeverity.EXTREME),
                ),
            ),
            now=_BASE,
        )
        assert [n.type for n in out] == [NotificationType.ENVIRONMENTAL_FACTOR] * 2
        assert out[0].title == "Environmental UV Risk"
        assert out[0].body == "snow_reflection is dangerous. Cover up"
        assert out[0].priority is NotificationPriority.HIGH
        assert out[1].priority is NotificationPriority.CRITICAL

    def test_top_two_urgent_recommendations(self) -> None:
        policy = _policy()
        policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE)
        out = policy.evaluate(
            _assessment(
                RiskLevel.LOW,
                2,
                recommendations=(
                    _rec("Medium", RecommendationPriority.MEDIUM),
                    _rec("First", RecommendationPriority.HIGH),
                    _rec("Second", RecommendationPriority.CRITICAL),
                    _rec("Third", RecommendationPriority.HIGH),
                ),
            ),
            now=_BASE,
        )
        assert [n.title for n in out] == ["First", "Second"]
        assert out[1].priority is NotificationPriority.CRITICAL
        assert out[0].body == "First advice"

    def test_repeat_cooldown_per_subject(self) -> None:
        policy = _policy()
        policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE)
        factor = _factor(RiskFactorType.ALTITUDE, RiskSeverity.HIGH)
        assessment = _assessment(RiskLevel.LOW, 2, factors=(factor,))
        assert len(policy.evaluate(assessment, now=_BASE)) == 1
        assert policy.evaluate(assessment, now=_BASE + timedelta(minutes=10)) == []
        assert len(policy.evaluate(assessment, now=_BASE + timedelta(minutes=61))) == 1


class TestEducationalTip:
    def test_emitted_when_nothing_else_fires(self) -> None:
        policy = _policy(value=0.1)
        policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE)
        out = policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE)
        assert len(out) == 1
        assert out[0].type is NotificationType.EDUCATIONAL
        assert out[0].title == "UV Safety Tip"
        assert out[0].priority is NotificationPriority.MEDIUM
        assert out[0].body.startswith("Did you know?")

    def test_not_emitted_above_frequency(self) -> None:
        policy = _policy(value=0.2)
        assert policy.evaluate(_assessment(RiskLevel.LOW, 2), now=_BASE) == []

    def test_not_drawn_when_higher_priority_fired(self) -> None:
        rng = _FixedRandom(_ALWAYS)
        policy = NotificationPolicy(NotificationPolicyConfig(), rng=rng)
        out = policy.evaluate(_assessment(RiskLevel.HIGH, 8), now=_BASE)
        assert [n.type for n in out] == [NotificationType.RISK_LEVEL_CHANGE]
        assert rng.calls == 0

    def test_content_follows_risk_level(self) -> None:
        policy = _policy(value=_ALWAYS, minimum_risk_level=RiskLevel.EXTREME)
        out = policy.evaluate(_assessment(RiskLevel.VERY_HIGH, 9), now=_BASE)
        assert out[0].body.startswith("Extreme UV conditions!")


class TestGates:
    def test_disabled_emits_nothing_but_tracks_state(self) -> None:
        policy = _policy(value=_ALWAYS, enabled=False)
        assert policy.evaluate(_assessment(RiskLevel.HIGH, 8), now=_BASE) == []
        assert policy.last_risk_level is RiskLevel.HIGH
        assert policy.last_adjusted_uv == 8

    def test_quiet_hours_suppress(self) -> None:
        quiet = QuietHours(start=time(22, 0), end=time(7, 0), tz=timezone.utc)
        policy = _policy(quiet_hours=quiet)
        night = datetime(2026, 1, 1, 23, 30, tzinfo=timezone.utc)
        assert policy.evaluate(_assessment(RiskLevel.HIGH, 8), now=night) == []
        # The change was observed during quiet hours, so it does not replay afterwards
        assert policy.evaluate(_assessment(RiskLevel.HIGH, 8), now=_BASE) == []

    def test_quiet_window_wraps_midnight(self) -> None:
        quiet = QuietHours(start=time(22, 0), end=time(7, 0))
        assert quiet.contains(datetime(2026, 1, 1, 22, 0, tzinfo=timezone.utc))
        assert quiet.contains(datetime(2026, 1, 2, 6, 59, tzinfo=timezone.utc))
        assert not quiet.contains(datetime(2026, 1, 2, 7, 0, tzinfo=timezone.utc))
        assert not quiet.contains(_BASE)

    def test_quiet_window_same_day(self) -> None:
        quiet = QuietHours(start=time(13, 0), end=time(15, 0))
        assert quiet.contains(datetime(2026, 1, 1, 14, 0, tzinfo=timezone.utc))
        assert not quiet.contains(_BASE)

    def test_quiet_window_uses_its_timezone(self) -> None:
        plus_ten = timezone(timedelta(hours=10))
        quiet = QuietHours(start=time(22, 0), end=time(7, 0), tz=plus_ten)
        # 12:00 UTC is 22:00 at UTC+10
        assert quiet.contains(_BASE)

    def test_empty_window_never_quiet(self) -> None:
        quiet = QuietHours(start=time(8, 0), end=time(8, 0))
        assert not quiet.contains(datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc))


class TestHourlyCap:
    def _busy_assessment(self) -> RiskAssessment:
        return _assessment(
            RiskLevel.HIGH,
            8,
            factors=(
                _factor(RiskFactorType.ALTITUDE, RiskSeverity.HIGH),
                _factor(RiskFactorType.SNOW_REFLECTION, RiskSeverity.EXTREME),
            ),
            recommendations=(
                _rec("Critical advice", RecommendationPriority.CRITICAL),
                _rec("High advice", RecommendationPriority.HIGH),
            ),
        )

    def test_keeps_highest_priority_in_rule_order(self) -> None:
        policy = _policy(max_per_hour=3)
        out = policy.evaluate(self._busy_assessment(), now=_BASE)
        assert [(n.type, n.priority) for n in out] == [
            (NotificationType.RISK_LEVEL_CHANGE, NotificationPriority.HIGH),
            (NotificationType.ENVIRONMENTAL_FACTOR, NotificationPriority.CRITICAL),
            (NotificationType.RECOMMENDATION, NotificationPriority.CRITICAL),
        ]
        assert policy.sent_in_last_hour(_BASE) == 3

    def test_budget_recovers_after_an_hour(self) -> None:
        policy = _policy(max_per_hour=3, repeat_cooldown=timedelta(0))
        policy.evaluate(self._busy_assessment(), now=_BASE)
        assert policy.evaluate(self._busy_assessment(), now=_BASE + timedelta(minutes=30)) == []
        later = policy.evaluate(self._busy_assessment(), now=_BASE + timedelta(minutes=61))
        assert len(later) == 3


class TestTimerNotifications:
    def test_event_mapping(self) -> None:
        policy = _policy()
        out = policy.timer_notifications(
            [TimerEvent.APPROACHING_LIMIT, TimerEvent.EXCEEDED, TimerEvent.SUNSCREEN_EXPIRED],
            now=_BASE,
        )
        assert [(n.type, n.priority) for n in out] == [
            (NotificationType.WARNING, NotificationPriority.HIGH),
            (NotificationType.ALERT, NotificationPriority.CRITICAL),
            (NotificationType.SUNSCREEN_REMINDER, NotificationPriority.MEDIUM),
        ]
        assert out[1].title == "🚨 Sun Exposure Exceeded!"
        assert out[2].body.startswith("It's been 2 hours since your last application.")

    def test_exempt_from_hourly_cap(self) -> None:
        policy = _policy(max_per_hour=0)
        assert len(policy.timer_notifications([TimerEvent.EXCEEDED], now=_BASE)) == 1

    def test_respects_enabled_switch(self) -> None:
        policy = _policy(enabled=False)
        assert policy.timer_notifications([TimerEvent.EXCEEDED], now=_BASE) == []

    def test_reminder_mentions_configured_interval(self) -> None:
        policy = _policy(sunscreen_reapply_interval=timedelta(minutes=90))
        out = policy.timer_notifications([TimerEvent.SUNSCREEN_EXPIRED], now=_BASE)
        assert out[0].body.startswith("It's been 90 minutes")


class TestNotificationRequest:
    def test_request_carries_user_info(self) -> None:
        out = _policy().evaluate(_assessment(RiskLevel.HIGH, 8), now=_BASE)
        request = out[0].to_request()
        assert request.identifier.startswith(f"smart_notification_{int(_BASE.timestamp())}_")
        assert request.category == "risk_level_change"
        assert request.user_info == {
            "notificationType": "risk_level_change",
            "riskLevel": "high",
            "adjustedUV": 8,
        }

    def test_timer_request_without_assessment(self) -> None:
        out = _policy().timer_notifications([TimerEvent.EXCEEDED], now=_BASE)
        assert out[0].to_request().user_info["riskLevel"] is None
