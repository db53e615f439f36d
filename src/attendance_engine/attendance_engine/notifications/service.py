from __future__ import annotations

import logging
from typing import Any, Optional

from .model import Notification
from .repository import NotificationSink

logger = logging.getLogger(__name__)


class NotificationService:
    """Fire-and-forget front of the notification sink.

    Callers invoke it after their transaction committed, so a failing sink
    is logged and never undoes the operation.
    """

    def __init__(self, sink: NotificationSink):
        self._sink = sink

    def notify(
        self,
        *,
        employee_id: int,
        title: str,
        message: str,
        category: str,
        type: str = "info",
        related_id: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        notification = Notification(
            employee_id=int(employee_id),
            title=title,
            message=message,
            category=category,
            type=type,
            related_id=related_id,
            metadata=dict(metadata or {}),
        )
        try:
            self._sink.queue_notification(notification)
        except Exception:
            logger.exception("Failed to queue notification %r for employee %s", title, employee_id)
