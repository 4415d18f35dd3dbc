"""Controlled enumerations for the time-to-burn domain.

Every categorical field in the domain MUST reference an enum defined here.
Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class RiskLevel(str, Enum):
    """Overall risk band derived from a 0–1 risk score."""

    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"
    EXTREME = "extreme"

    @property
    def rank(self) -> int:
        return _RISK_LEVEL_ORDER.index(self)

    @property
    def description(self) -> str:
        return _RISK_LEVEL_DESCRIPTIONS[self]

    @classmethod
    def from_score(cls, score: float) -> RiskLevel:
        if score < 0.2:
            return cls.VERY_LOW
        if score < 0.4:
            return cls.LOW
        if score < 0.6:
            return cls.MODERATE
        if score < 0.8:
            return cls.HIGH
        if score < 0.9:
            return cls.VERY_HIGH
        return cls.EXTREME


_RISK_LEVEL_ORDER = list(RiskLevel)

_RISK_LEVEL_DESCRIPTIONS = {
    RiskLevel.VERY_LOW: "Very low UV risk - minimal protection needed",
    RiskLevel.LOW: "Low UV risk - basic protection recommended",
    RiskLevel.MODERATE: "Moderate UV risk - seek shade during peak hours",
    RiskLevel.HIGH: "High UV risk - extra protection required",
    RiskLevel.VERY_HIGH: "Very high UV risk - avoid sun exposure",
    RiskLevel.EXTREME: "Extreme UV risk - stay indoors if possible",
}


class RiskSeverity(str, Enum):
    """How strongly a single environmental factor contributes to risk."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


class RiskFactorType(str, Enum):
    ALTITUDE = "altitude"
    SNOW_REFLECTION = "snow_reflection"
    WATER_REFLECTION = "water_reflection"
    TERRAIN = "terrain"
    CLOUD_COVER = "cloud_cover"


class RecommendationType(str, Enum):
    SUNSCREEN = "sunscreen"
    CLOTHING = "clothing"
    TIMING = "timing"
    AVOIDANCE = "avoidance"
    EDUCATION = "education"


class RecommendationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationType(str, Enum):
    """Kinds of notification the policy can emit."""

    RISK_LEVEL_CHANGE = "risk_level_change"
    ENVIRONMENTAL_FACTOR = "environmental_factor"
    RECOMMENDATION = "recommendation"
    EDUCATIONAL = "educational"
    WARNING = "warning"
    ALERT = "alert"
    SUNSCREEN_REMINDER = "sunscreen_reminder"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(NotificationPriority).index(self)


class TimerState(str, Enum):
    """Exposure timer lifecycle."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PAUSED = "paused"
    SUNSCREEN_APPLIED = "sunscreen_applied"
    EXCEEDED = "exceeded"


class ExposureStatus(str, Enum):
    """Coarse exposure status read by presentation surfaces."""

    SAFE = "safe"
    WARNING = "warning"
    EXCEEDED = "exceeded"
    NO_UV = "no_uv"


class TimerEvent(str, Enum):
    """Transitions the timer reports to the notification policy."""

    APPROACHING_LIMIT = "approaching_limit"
    EXCEEDED = "exceeded"
    SUNSCREEN_EXPIRED = "sunscreen_expired"
