from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json
from .model import Notification
from .repository import NotificationSink


class MySQLNotificationSink(NotificationSink):
    """Outbox table; the delivery worker (push/email) lives elsewhere."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def queue_notification(self, notification: Notification) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(employee_id, title, message, category, type, related_id, metadata, is_read)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    int(notification.employee_id),
                    notification.title,
                    notification.message,
                    notification.category,
                    notification.type,
                    notification.related_id,
                    dump_json(notification.metadata),
                ),
            )
