"""Abstract base for notification dispatchers.

A dispatcher delivers NotificationRequests to whatever surface the host
application owns (OS notification centre, a log, a test double).

Architectural rules:
    1. Dispatchers must NOT mutate the request.
    2. A refused delivery raises DispatchRejectedError; the session logs
       and drops it.  Nothing is retried.
    3. No dispatcher may call back into the ExposureSession.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from timetoburn.models.notification import NotificationRequest


class DispatchRejectedError(Exception):
    """Raised when a dispatcher refuses a notification request."""

    def __init__(self, dispatcher_name: str, reason: str) -> None:
        self.dispatcher_name = dispatcher_name
        self.reason = reason
        super().__init__(f"Dispatcher '{dispatcher_name}' rejected request: {reason}")


class DispatchStats:
    """Delivery outcomes seen by one session for one dispatcher.

    A rejection is a refusal reported through DispatchRejectedError; a
    failure is any other exception raised by the dispatcher.
    """

    __slots__ = ("dispatcher_name", "delivered_count", "rejected_count", "failed_count")

    def __init__(self, dispatcher_name: str) -> None:
        self.dispatcher_name = dispatcher_name
        self.delivered_count: int = 0
        self.rejected_count: int = 0
        self.failed_count: int = 0

    def to_dict(self) -> dict:
        return {
            "dispatcher_name": self.dispatcher_name,
            "delivered_count": self.delivered_count,
            "rejected_count": self.rejected_count,
            "failed_count": self.failed_count,
        }


class NotificationDispatcher(ABC):
    """Base class for delivering notification requests."""

    @abstractmethod
    async def dispatch(self, request: NotificationRequest) -> None:
        """Deliver *request*.

        Raises:
            DispatchRejectedError: If delivery is refused (e.g. permission revoked).
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the delivery surface."""
        ...
