"""Read-only exposure snapshot shared with presentation surfaces and other processes."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from timetoburn.domain.burn import INFINITE_BURN_SECONDS
from timetoburn.domain.enums import ExposureStatus, RiskLevel, TimerState
from timetoburn.domain.timer import ExposureTimer
from timetoburn.foundation.clock import utc_now


class ExposureSnapshot(BaseModel):
    """Point-in-time copy of timer and risk state.  Safe to serialise."""

    uv_index: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
    total_exposure_seconds: float = Field(default=0.0, ge=0.0)
    time_to_burn_seconds: int = Field(default=INFINITE_BURN_SECONDS, ge=0)
    remaining_seconds: Optional[float] = Field(
        default=None,
        description="Seconds left in the burn budget; None while there is no UV",
    )
    state: TimerState = TimerState.NOT_STARTED
    sunscreen_remaining_seconds: float = Field(default=0.0, ge=0.0)
    risk_level: Optional[RiskLevel] = None
    exposure_progress: float = Field(default=0.0, ge=0.0, le=1.0)
    exposure_status: ExposureStatus = ExposureStatus.SAFE
    uv_change_notice: Optional[str] = None
    captured_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}

    @classmethod
    def capture(cls, timer: ExposureTimer, risk_level: RiskLevel | None = None) -> ExposureSnapshot:
        remaining = timer.remaining_seconds
        return cls(
            uv_index=timer.current_uv_index,
            elapsed_seconds=timer.elapsed_seconds,
            total_exposure_seconds=timer.total_exposure_seconds,
            time_to_burn_seconds=timer.time_to_burn_seconds,
            remaining_seconds=None if math.isinf(remaining) else remaining,
            state=timer.state,
            sunscreen_remaining_seconds=timer.sunscreen_remaining_seconds,
            risk_level=risk_level,
            exposure_progress=timer.exposure_progress,
            exposure_status=timer.exposure_status,
            uv_change_notice=timer.uv_change_notice,
        )

    @classmethod
    def placeholder(cls) -> ExposureSnapshot:
        """Safe default rendered when no snapshot can be read."""
        return cls(state=TimerState.NOT_STARTED, exposure_status=ExposureStatus.SAFE)
