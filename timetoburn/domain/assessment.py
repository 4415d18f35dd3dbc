"""RiskAssessment — the immutable output of one risk evaluation."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from timetoburn.domain.enums import (
    RecommendationPriority,
    RecommendationType,
    RiskFactorType,
    RiskLevel,
    RiskSeverity,
)
from timetoburn.domain.environment import EnvironmentalModel
from timetoburn.foundation.clock import utc_now


class RiskFactor(BaseModel):
    """One environmental contributor to the overall risk."""

    type: RiskFactorType
    severity: RiskSeverity
    description: str
    impact: float = Field(..., ge=0.0, le=1.0)
    mitigation: str

    model_config = {"frozen": True}


class Recommendation(BaseModel):
    type: RecommendationType
    priority: RecommendationPriority
    title: str
    description: str
    action_items: tuple[str, ...] = ()

    model_config = {"frozen": True}


class RiskAssessment(BaseModel):
    """Adjusted UV, risk score and the reasoning that produced them.

    Produced fresh per evaluation and never mutated; the notification
    policy compares successive assessments, it does not edit them.
    """

    timestamp: datetime = Field(default_factory=utc_now)
    base_uv_index: int = Field(..., ge=0)
    adjusted_uv_index: int = Field(..., ge=0)
    risk_score: float = Field(..., ge=0.0, le=1.0)
    risk_level: RiskLevel
    risk_factors: tuple[RiskFactor, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()
    environment: EnvironmentalModel = Field(default_factory=EnvironmentalModel)

    model_config = {"frozen": True}
