from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import SLOT_ORDER, DailyStatus, SlotStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_db_datetime, to_db_datetime
from ..database.transaction import Transaction
from ..geofence.model import Coordinate
from .model import AttendanceRecord, SlotRecord
from .repository import AttendanceRepository


def _slot_columns() -> list[str]:
    cols: list[str] = []
    for slot in SLOT_ORDER:
        cols += [f"{slot.value}_status", f"{slot.value}_timestamp", f"{slot.value}_latitude", f"{slot.value}_longitude"]
    return cols


_SLOT_COLUMNS = _slot_columns()
_COLUMNS = [
    "record_key",
    "employee_id",
    "work_date",
    "daily_status",
    *_SLOT_COLUMNS,
    "is_manual_entry",
    "manual_reason",
    "notes",
    "leave_request_id",
    "updated_by",
]
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM attendance_records"


def _row_to_slot(r: dict, prefix: str) -> Optional[SlotRecord]:
    status = r.get(f"{prefix}_status")
    if not status:
        return None
    lat = r.get(f"{prefix}_latitude")
    lng = r.get(f"{prefix}_longitude")
    location = Coordinate(latitude=float(lat), longitude=float(lng)) if lat is not None and lng is not None else None
    return SlotRecord(
        status=SlotStatus(status),
        timestamp=from_db_datetime(r.get(f"{prefix}_timestamp")),
        location=location,
    )


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        daily_status=DailyStatus(r["daily_status"]),
        morning=_row_to_slot(r, "morning"),
        midday=_row_to_slot(r, "midday"),
        evening=_row_to_slot(r, "evening"),
        is_manual_entry=bool(r.get("is_manual_entry")),
        manual_reason=r.get("manual_reason"),
        notes=r.get("notes"),
        leave_request_id=int(r["leave_request_id"]) if r.get("leave_request_id") is not None else None,
        updated_by=int(r["updated_by"]) if r.get("updated_by") is not None else None,
    )


def _record_to_params(record: AttendanceRecord) -> tuple[Any, ...]:
    slot_values: list[Any] = []
    for slot in SLOT_ORDER:
        s = record.slot(slot)
        slot_values += [
            s.status.value if s else None,
            to_db_datetime(s.timestamp) if s else None,
            s.location.latitude if s and s.location else None,
            s.location.longitude if s and s.location else None,
        ]
    return (
        record.key,
        record.employee_id,
        record.work_date,
        record.daily_status.value,
        *slot_values,
        int(record.is_manual_entry),
        record.manual_reason,
        record.notes,
        record.leave_request_id,
        record.updated_by,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_update(self, tx: Transaction, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        r = tx.fetchone(f"{_SELECT} WHERE employee_id=%s AND work_date=%s FOR UPDATE", (int(employee_id), work_date))
        return _row_to_record(r) if r else None

    def save(self, tx: Transaction, record: AttendanceRecord) -> None:
        placeholders = ", ".join(["%s"] * len(_COLUMNS))
        updates = ", ".join(f"{c}=VALUES({c})" for c in _COLUMNS if c != "record_key")
        tx.execute(
            f"""
            INSERT INTO attendance_records({', '.join(_COLUMNS)})
            VALUES({placeholders})
            ON DUPLICATE KEY UPDATE {updates}, updated_at=CURRENT_TIMESTAMP
            """,
            _record_to_params(record),
        )

    def delete(self, tx: Transaction, employee_id: int, work_date: date) -> None:
        tx.execute("DELETE FROM attendance_records WHERE employee_id=%s AND work_date=%s", (int(employee_id), work_date))

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date >= %s", "work_date < %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY employee_id ASC, work_date ASC",
                tuple(params),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE employee_id=%s ORDER BY work_date DESC LIMIT %s",
                (int(employee_id), int(limit)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
