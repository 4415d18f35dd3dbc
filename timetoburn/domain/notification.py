"""SmartNotification — a decision to alert the user, not yet delivered."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from timetoburn.domain.assessment import RiskAssessment
from timetoburn.domain.enums import NotificationPriority, NotificationType
from timetoburn.foundation.clock import utc_now
from timetoburn.foundation.identifiers import new_id, notification_identifier
from timetoburn.models.notification import NotificationRequest


class SmartNotification(BaseModel):
    notification_id: UUID = Field(default_factory=new_id)
    type: NotificationType
    title: str
    body: str
    priority: NotificationPriority
    source_assessment: Optional[RiskAssessment] = None
    scheduled_at: datetime = Field(default_factory=utc_now)
    # Identifies the thing being alerted about, for repeat suppression.
    subject: str = ""

    model_config = {"frozen": True}

    def to_request(self) -> NotificationRequest:
        assessment = self.source_assessment
        return NotificationRequest(
            identifier=notification_identifier(self.scheduled_at, self.notification_id),
            title=self.title,
            body=self.body,
            category=self.type.value,
            user_info={
                "notificationType": self.type.value,
                "riskLevel": assessment.risk_level.value if assessment else None,
                "adjustedUV": assessment.adjusted_uv_index if assessment else None,
            },
        )
