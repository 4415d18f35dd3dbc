from timetoburn.models.command import SessionAction, SessionCommand
from timetoburn.models.notification import NotificationRequest
from timetoburn.models.snapshot import ExposureSnapshot

__all__ = ["SessionAction", "SessionCommand", "NotificationRequest", "ExposureSnapshot"]
