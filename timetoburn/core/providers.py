"""Sources of UV readings for background reassessment.

The engine never fetches weather itself.  A provider hands back an
already-resolved reading; fetching, caching and retries are the
provider's business.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from pydantic import BaseModel, Field

from timetoburn.domain.environment import EnvironmentalModel
from timetoburn.foundation.clock import utc_now


class UVReading(BaseModel):
    uv_index: float = Field(..., description="Raw UV index as reported by the provider")
    observed_at: datetime = Field(default_factory=utc_now)
    environment: Optional[EnvironmentalModel] = None

    model_config = {"frozen": True}


class UVReadingProvider(Protocol):
    """Anything that can produce the current UV reading."""

    async def current_reading(self) -> UVReading | None:
        ...


class StaticUVProvider:
    """Returns a fixed reading, re-stamped with the current time."""

    def __init__(self, uv_index: float, environment: EnvironmentalModel | None = None) -> None:
        self.uv_index = uv_index
        self.environment = environment

    async def current_reading(self) -> UVReading | None:
        return UVReading(uv_index=self.uv_index, environment=self.environment)
