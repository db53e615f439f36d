from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json
from .model import AuditEntry
from .repository import AuditSink


class MySQLAuditSink(AuditSink):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record_audit_log(self, entry: AuditEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(
                    action, resource, resource_id, status, performed_by, reason,
                    old_values, new_values, metadata
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.action,
                    entry.resource,
                    entry.resource_id,
                    entry.status,
                    entry.performed_by,
                    entry.reason,
                    dump_json(entry.old_values),
                    dump_json(entry.new_values),
                    dump_json(entry.metadata),
                ),
            )
