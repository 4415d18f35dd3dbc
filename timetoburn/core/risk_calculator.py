"""RiskCalculator — deterministic UV risk assessment.

Design principles:
    1. Pure function: accepts a base UV index and an EnvironmentalModel,
       returns a RiskAssessment.
    2. No side effects, no state, no I/O.  Time only enters through the
       assessment timestamp.
    3. Never raises on numeric input; out-of-range values are clamped.

Adjusted UV:
    adjusted = round(
        base_uv
      × (1 + altitude_km × 0.1)
      × cloud_band(cloud_cover_pct)
      × (1 + snow_reflection × coverage/100 × 0.8)          if coverage > 0
      × (1 + water_reflection × size × proximity × 0.25)    if distance < 1000 m
      × terrain_multiplier
      × season_multiplier
    )

Risk score:
    score = min(
        min(adjusted / 11, 0.6)
      + min(altitude + snow + water + terrain, 0.4)
    , 1.0)
"""

from __future__ import annotations

import math
from datetime import datetime

from timetoburn.domain.assessment import Recommendation, RiskAssessment, RiskFactor
from timetoburn.domain.burn import normalize_uv, round_half_up
from timetoburn.domain.enums import (
    RecommendationPriority,
    RecommendationType,
    RiskFactorType,
    RiskLevel,
    RiskSeverity,
)
from timetoburn.domain.environment import EnvironmentalModel, SnowType, WaterBodyType
from timetoburn.foundation.clock import utc_now

WATER_INFLUENCE_METERS = 1000.0
WATER_RECOMMENDATION_METERS = 500.0

# (upper bound exclusive, multiplier); 100 % falls into the last band
CLOUD_BANDS: tuple[tuple[float, float], ...] = (
    (10.0, 1.0),
    (25.0, 0.95),
    (50.0, 0.85),
    (75.0, 0.70),
    (90.0, 0.50),
)
CLOUD_FULL_COVER_MULTIPLIER = 0.30

UV_SCORE_CAP = 0.6
ENVIRONMENT_SCORE_CAP = 0.4


# ── Adjusted UV ──────────────────────────────────────────────────────────────

def cloud_multiplier(cloud_cover_pct: float) -> float:
    for upper, multiplier in CLOUD_BANDS:
        if cloud_cover_pct < upper:
            return multiplier
    return CLOUD_FULL_COVER_MULTIPLIER


def snow_multiplier(env: EnvironmentalModel) -> float:
    coverage = env.snow.coverage_pct
    if coverage <= 0:
        return 1.0
    return 1.0 + env.snow.type.reflection_factor * (coverage / 100.0) * 0.8


def water_multiplier(env: EnvironmentalModel) -> float:
    water = env.water
    if water.distance_meters >= WATER_INFLUENCE_METERS:
        return 1.0
    proximity = max(0.1, 1.0 - water.distance_meters / WATER_INFLUENCE_METERS)
    return 1.0 + water.body_type.reflection_factor * water.size.multiplier * proximity * 0.25


def adjusted_uv_index(base_uv: float, env: EnvironmentalModel) -> int:
    """Environment-adjusted UV index, rounded and never negative."""
    uv = float(normalize_uv(base_uv))
    uv *= 1.0 + (env.altitude_meters / 1000.0) * 0.1
    uv *= cloud_multiplier(env.cloud_cover_pct)
    uv *= snow_multiplier(env)
    uv *= water_multiplier(env)
    uv *= env.terrain.uv_multiplier
    uv *= env.season.uv_multiplier
    if math.isnan(uv) or uv <= 0:
        return 0
    return round_half_up(uv)


# ── Risk score ───────────────────────────────────────────────────────────────

def environmental_risk_score(env: EnvironmentalModel) -> float:
    score = min(env.altitude_meters / 5000.0, 0.1)
    score += (env.snow.coverage_pct / 100.0) * 0.15
    if env.water.distance_meters < WATER_INFLUENCE_METERS:
        score += (WATER_INFLUENCE_METERS - env.water.distance_meters) / WATER_INFLUENCE_METERS * 0.1
    score += max(0.0, (env.terrain.uv_multiplier - 1.0) * 0.25)
    return min(score, ENVIRONMENT_SCORE_CAP)


def risk_score(adjusted_uv: int, env: EnvironmentalModel) -> float:
    uv_component = min(max(adjusted_uv, 0) / 11.0, UV_SCORE_CAP)
    return min(uv_component + environmental_risk_score(env), 1.0)


# ── Factors & recommendations ────────────────────────────────────────────────

def generate_risk_factors(env: EnvironmentalModel) -> list[RiskFactor]:
    factors: list[RiskFactor] = []

    if env.altitude_meters > 1000:
        factors.append(RiskFactor(
            type=RiskFactorType.ALTITUDE,
            severity=RiskSeverity.HIGH if env.altitude_meters > 3000 else RiskSeverity.MODERATE,
            description=f"Elevation of {int(env.altitude_meters)}m increases UV exposure",
            impact=min(env.altitude_meters / 5000.0, 1.0),
            mitigation="Take extra precautions at high altitudes",
        ))

    snow = env.snow
    if snow.coverage_pct > 0:
        if snow.type is SnowType.NONE:
            description = "Snow cover reflects UV"
        else:
            reflect_pct = int(snow.type.reflection_factor * 100)
            description = f"{snow.type.value.capitalize()} snow reflects up to {reflect_pct}% of UV"
        factors.append(RiskFactor(
            type=RiskFactorType.SNOW_REFLECTION,
            severity=RiskSeverity.HIGH if snow.type is SnowType.FRESH else RiskSeverity.MODERATE,
            description=description,
            impact=snow.coverage_pct / 100.0,
            mitigation="Wear UV-protective eyewear and apply sunscreen to exposed areas",
        ))

    if env.has_water_nearby:
        body = "water" if env.water.body_type is WaterBodyType.NONE else env.water.body_type.value
        factors.append(RiskFactor(
            type=RiskFactorType.WATER_REFLECTION,
            severity=RiskSeverity.MODERATE,
            description=f"Nearby {body} reflects UV",
            impact=0.3,
            mitigation="Apply sunscreen more frequently when near water",
        ))

    terrain_multiplier = env.terrain.uv_multiplier
    if terrain_multiplier >= 1.10:
        factors.append(RiskFactor(
            type=RiskFactorType.TERRAIN,
            severity=RiskSeverity.MODERATE,
            description=f"{env.terrain.value.capitalize()} terrain intensifies UV exposure",
            impact=min((terrain_multiplier - 1.0) * 5.0, 1.0),
            mitigation="Plan shade breaks and cover exposed skin",
        ))

    if env.cloud_cover_pct > 50:
        factors.append(RiskFactor(
            type=RiskFactorType.CLOUD_COVER,
            severity=RiskSeverity.LOW,
            description="Clouds don't block all UV rays - protection still needed",
            impact=0.1,
            mitigation="Don't rely on clouds for UV protection",
        ))

    return factors


def _level_recommendation(level: RiskLevel) -> Recommendation:
    if level in (RiskLevel.VERY_LOW, RiskLevel.LOW):
        return Recommendation(
            type=RecommendationType.SUNSCREEN,
            priority=RecommendationPriority.LOW,
            title="Basic Sun Protection",
            description="Apply SPF 30+ sunscreen for extended outdoor activities",
            action_items=(
                "Apply sunscreen 15 minutes before going outside",
                "Reapply every 2 hours",
                "Use water-resistant formula if swimming",
            ),
        )
    if level is RiskLevel.MODERATE:
        return Recommendation(
            type=RecommendationType.TIMING,
            priority=RecommendationPriority.MEDIUM,
            title="Avoid Peak Hours",
            description="Limit outdoor activities during peak UV hours (10 AM - 4 PM)",
            action_items=(
                "Seek shade during peak hours",
                "Wear protective clothing",
                "Apply SPF 50+ sunscreen",
            ),
        )
    if level is RiskLevel.HIGH:
        return Recommendation(
            type=RecommendationType.AVOIDANCE,
            priority=RecommendationPriority.HIGH,
            title="Minimize Sun Exposure",
            description="High UV risk - take extra precautions",
            action_items=(
                "Stay in shade when possible",
                "Wear wide-brimmed hat",
                "Use SPF 50+ sunscreen",
                "Wear UV-protective clothing",
            ),
        )
    return Recommendation(
        type=RecommendationType.AVOIDANCE,
        priority=RecommendationPriority.CRITICAL,
        title="Extreme UV Risk",
        description="Avoid outdoor activities during peak hours",
        action_items=(
            "Stay indoors during peak hours",
            "If outside, seek shade constantly",
            "Wear maximum protection",
            "Monitor for sunburn symptoms",
        ),
    )


def generate_recommendations(level: RiskLevel, env: EnvironmentalModel) -> list[Recommendation]:
    recommendations = [_level_recommendation(level)]

    if env.altitude_meters > 2000:
        recommendations.append(Recommendation(
            type=RecommendationType.EDUCATION,
            priority=RecommendationPriority.HIGH,
            title="High Altitude Warning",
            description="UV intensity increases significantly at high altitudes",
            action_items=(
                "Use higher SPF sunscreen",
                "Apply more frequently",
                "Wear UV-protective eyewear",
                "Stay hydrated",
            ),
        ))

    if env.snow.coverage_pct > 0:
        recommendations.append(Recommendation(
            type=RecommendationType.CLOTHING,
            priority=RecommendationPriority.HIGH,
            title="Snow Reflection Protection",
            description="Snow reflects UV rays, increasing exposure",
            action_items=(
                "Wear UV-protective sunglasses",
                "Apply sunscreen to face and neck",
                "Cover exposed skin",
                "Use lip balm with SPF",
            ),
        ))

    if env.water.distance_meters < WATER_RECOMMENDATION_METERS:
        recommendations.append(Recommendation(
            type=RecommendationType.SUNSCREEN,
            priority=RecommendationPriority.MEDIUM,
            title="Water Reflection Protection",
            description="Water reflects UV rays, requiring extra protection",
            action_items=(
                "Use water-resistant sunscreen",
                "Reapply after swimming",
                "Wear protective clothing",
                "Seek shade when possible",
            ),
        ))

    return recommendations


# ── Calculator ───────────────────────────────────────────────────────────────

class RiskCalculator:
    """Stateless facade that bundles the functions above into one assessment."""

    def assess(
        self,
        base_uv: float,
        env: EnvironmentalModel | None = None,
        at: datetime | None = None,
    ) -> RiskAssessment:
        env = env or EnvironmentalModel()
        base = normalize_uv(base_uv)
        adjusted = adjusted_uv_index(base, env)
        score = risk_score(adjusted, env)
        level = RiskLevel.from_score(score)
        return RiskAssessment(
            timestamp=at or utc_now(),
            base_uv_index=base,
            adjusted_uv_index=adjusted,
            risk_score=score,
            risk_level=level,
            risk_factors=tuple(generate_risk_factors(env)),
            recommendations=tuple(generate_recommendations(level, env)),
            environment=env,
        )
