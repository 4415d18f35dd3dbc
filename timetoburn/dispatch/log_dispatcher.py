"""Dispatcher that writes notification requests to the log.

Used by the console driver, where there is no OS notification centre.
The ``authorized`` flag mirrors a revoked notification permission.  Only
the most recent ``keep_recent`` requests are kept in ``delivered``.
"""

from __future__ import annotations

import logging
from collections import deque

from timetoburn.dispatch.base import DispatchRejectedError, NotificationDispatcher
from timetoburn.models.notification import NotificationRequest

logger = logging.getLogger(__name__)


class LoggingDispatcher(NotificationDispatcher):

    def __init__(self, authorized: bool = True, keep_recent: int = 50) -> None:
        self.authorized = authorized
        self.delivered: deque[NotificationRequest] = deque(maxlen=keep_recent)

    @property
    def name(self) -> str:
        return "log"

    async def dispatch(self, request: NotificationRequest) -> None:
        if not self.authorized:
            raise DispatchRejectedError(self.name, "notifications not authorized")
        self.delivered.append(request)
        logger.info("NOTIFY [%s] %s | %s", request.category, request.title, request.body)
