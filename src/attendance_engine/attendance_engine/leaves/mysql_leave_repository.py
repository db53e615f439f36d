from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime, to_db_datetime
from ..database.transaction import Transaction
from .model import LeaveRequest
from .repository import LeaveRequestRepository

_SELECT = """
    SELECT request_id, employee_id, leave_type, start_date, end_date, total_days, reason,
           status, reviewed_by, reviewer_notes, reviewed_at, cancelled_at
    FROM leave_requests
    WHERE request_id=%s
"""


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=r["leave_type"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=Decimal(str(r["total_days"])),
        status=RequestStatus(r["status"]),
        reason=r.get("reason"),
        reviewed_by=int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None,
        reviewer_notes=r.get("reviewer_notes"),
        reviewed_at=from_db_datetime(r.get("reviewed_at")),
        cancelled_at=from_db_datetime(r.get("cancelled_at")),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT, (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def get_for_update(self, tx: Transaction, request_id: int) -> Optional[LeaveRequest]:
        r = tx.fetchone(f"{_SELECT} FOR UPDATE", (int(request_id),))
        return _row_to_request(r) if r else None

    def has_overlap(self, tx: Transaction, *, employee_id: int, start_date: date, end_date: date) -> bool:
        r = tx.fetchone(
            """
            SELECT COUNT(*) AS n
            FROM leave_requests
            WHERE employee_id=%s AND status IN (%s, %s) AND start_date <= %s AND end_date >= %s
            FOR UPDATE
            """,
            (int(employee_id), RequestStatus.PENDING.value, RequestStatus.APPROVED.value, end_date, start_date),
        )
        return bool(r and int(r["n"]))

    def create(
        self,
        tx: Transaction,
        *,
        employee_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        total_days: Decimal,
        reason: str,
    ) -> LeaveRequest:
        request_id = tx.insert(
            """
            INSERT INTO leave_requests(employee_id, leave_type, start_date, end_date, total_days, reason, status)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (int(employee_id), leave_type, start_date, end_date, total_days, reason, RequestStatus.PENDING.value),
        )
        return LeaveRequest(
            request_id=request_id,
            employee_id=int(employee_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            status=RequestStatus.PENDING,
            reason=reason,
        )

    def decide(
        self,
        tx: Transaction,
        *,
        request_id: int,
        status: RequestStatus,
        reviewed_by: int,
        reviewer_notes: Optional[str],
        reviewed_at: datetime,
    ) -> None:
        tx.execute(
            """
            UPDATE leave_requests
            SET status=%s, reviewed_by=%s, reviewer_notes=%s, reviewed_at=%s, updated_at=CURRENT_TIMESTAMP
            WHERE request_id=%s
            """,
            (status.value, int(reviewed_by), reviewer_notes, to_db_datetime(reviewed_at), int(request_id)),
        )

    def cancel(self, tx: Transaction, *, request_id: int, cancelled_at: datetime) -> None:
        tx.execute(
            """
            UPDATE leave_requests
            SET status=%s, cancelled_at=%s, updated_at=CURRENT_TIMESTAMP
            WHERE request_id=%s
            """,
            (RequestStatus.CANCELLED.value, to_db_datetime(cancelled_at), int(request_id)),
        )
