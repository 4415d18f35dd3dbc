"""Pydantic model for the payload handed to the local-notification dispatcher."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, Field


class NotificationRequest(BaseModel):
    """A single delivery request.  The dispatcher owns everything after this."""

    identifier: str = Field(..., min_length=1)
    title: str
    body: str
    category: str
    user_info: dict[str, Optional[Union[int, str]]] = Field(default_factory=dict)

    model_config = {"frozen": True}
