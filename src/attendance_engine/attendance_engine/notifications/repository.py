from __future__ import annotations

from typing import Protocol

from .model import Notification


class NotificationSink(Protocol):
    def queue_notification(self, notification: Notification) -> None:
        raise NotImplementedError
