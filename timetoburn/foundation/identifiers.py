"""ID generation for domain objects and notification requests."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4


def new_id() -> UUID:
    """Generate a new random UUID v4 for domain objects."""
    return uuid4()


def notification_identifier(at: datetime, notification_id: UUID | None = None) -> str:
    """Identifier handed to the dispatcher, unique per scheduled request."""
    nid = notification_id or new_id()
    return f"smart_notification_{int(at.timestamp())}_{nid}"
