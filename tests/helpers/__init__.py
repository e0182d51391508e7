from .notification_helper import NotificationHistory
from .transport_helper import FakeResponse, FakeSocketTransport, FakeTransport

__all__ = (
    "FakeResponse",
    "FakeSocketTransport",
    "FakeTransport",
    "NotificationHistory",
)
