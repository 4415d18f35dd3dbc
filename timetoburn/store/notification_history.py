"""Bounded in-memory record of notifications the session tried to deliver."""

from __future__ import annotations

from collections import deque
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from timetoburn.domain.enums import NotificationPriority, NotificationType
from timetoburn.domain.notification import SmartNotification


class HistoryEntry(BaseModel):
    notification_id: UUID
    type: NotificationType
    title: str
    priority: NotificationPriority
    scheduled_at: datetime
    delivered: Optional[bool] = None
    failure_reason: Optional[str] = None


class NotificationHistory:
    """Oldest entries fall off once ``max_entries`` is reached."""

    def __init__(self, max_entries: int = 50) -> None:
        self._entries: deque[HistoryEntry] = deque(maxlen=max_entries)
        self._index: dict[UUID, HistoryEntry] = {}

    def record(self, notification: SmartNotification) -> HistoryEntry:
        if len(self._entries) == self._entries.maxlen:
            oldest = self._entries[0]
            self._index.pop(oldest.notification_id, None)
        entry = HistoryEntry(
            notification_id=notification.notification_id,
            type=notification.type,
            title=notification.title,
            priority=notification.priority,
            scheduled_at=notification.scheduled_at,
        )
        self._entries.append(entry)
        self._index[entry.notification_id] = entry
        return entry

    def mark(self, notification_id: UUID, delivered: bool, reason: str | None = None) -> None:
        entry = self._index.get(notification_id)
        if entry is None:
            return
        entry.delivered = delivered
        entry.failure_reason = reason

    def recent(self, limit: int | None = None) -> list[HistoryEntry]:
        """Newest first."""
        entries = list(reversed(self._entries))
        return entries if limit is None else entries[:limit]

    def __len__(self) -> int:
        return len(self._entries)
