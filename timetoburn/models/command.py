"""Pydantic model for commands read by the console driver."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from timetoburn.domain.environment import EnvironmentalModel


class SessionAction(str, Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"
    APPLY_SUNSCREEN = "apply_sunscreen"
    CANCEL_SUNSCREEN = "cancel_sunscreen"
    OBSERVE_UV = "observe_uv"
    SNAPSHOT = "snapshot"
    QUIT = "quit"


class SessionCommand(BaseModel):
    """One line of input: ``{"action": "observe_uv", "uv_index": 7}``."""

    action: SessionAction
    uv_index: Optional[float] = Field(default=None, description="Required for observe_uv")
    observed_at: Optional[datetime] = None
    environment: Optional[EnvironmentalModel] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def uv_required_for_observation(self) -> SessionCommand:
        if self.action is SessionAction.OBSERVE_UV and self.uv_index is None:
            raise ValueError("observe_uv requires uv_index")
        return self
