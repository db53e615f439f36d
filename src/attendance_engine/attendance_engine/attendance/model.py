from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import date_key
from ..core.enums import SLOT_ORDER, DailyStatus, SlotName, SlotStatus
from ..geofence.model import Coordinate


def attendance_key(employee_id: int, work_date: date) -> str:
    """Document key of the per-day record, e.g. '42_2026-02-03'."""
    return f"{employee_id}_{date_key(work_date)}"


@dataclass(frozen=True)
class SlotOutcome:
    """Classifier result for one clock-in."""

    slot: SlotName
    status: SlotStatus
    late_by_minutes: Optional[int] = None


@dataclass(frozen=True)
class SlotRecord:
    """What is stored for one slot of one day."""

    status: SlotStatus
    timestamp: Optional[datetime] = None
    location: Optional[Coordinate] = None

    @classmethod
    def missed(cls) -> "SlotRecord":
        return cls(status=SlotStatus.MISSED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "location": self.location.to_dict() if self.location else None,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    employee_id: int
    work_date: date
    daily_status: DailyStatus
    morning: Optional[SlotRecord] = None
    midday: Optional[SlotRecord] = None
    evening: Optional[SlotRecord] = None
    is_manual_entry: bool = False
    manual_reason: Optional[str] = None
    notes: Optional[str] = None
    leave_request_id: Optional[int] = None
    updated_by: Optional[int] = None

    @classmethod
    def empty(cls, employee_id: int, work_date: date) -> "AttendanceRecord":
        return cls(employee_id=employee_id, work_date=work_date, daily_status=DailyStatus.IN_PROGRESS)

    @property
    def key(self) -> str:
        return attendance_key(self.employee_id, self.work_date)

    def slot(self, slot: SlotName) -> Optional[SlotRecord]:
        return getattr(self, slot.value)

    def slot_status(self, slot: SlotName) -> Optional[SlotStatus]:
        record = self.slot(slot)
        return record.status if record else None

    def slot_statuses(self) -> dict[SlotName, Optional[SlotStatus]]:
        return {slot: self.slot_status(slot) for slot in SLOT_ORDER}

    def with_slot(self, slot: SlotName, record: SlotRecord) -> "AttendanceRecord":
        return replace(self, **{slot.value: record})

    def to_dict(self) -> dict[str, Any]:
        """Snapshot used for audit old/new values."""
        out: dict[str, Any] = {
            "employee_id": self.employee_id,
            "work_date": date_key(self.work_date),
            "daily_status": self.daily_status.value,
            "is_manual_entry": self.is_manual_entry,
            "manual_reason": self.manual_reason,
            "notes": self.notes,
            "leave_request_id": self.leave_request_id,
            "updated_by": self.updated_by,
        }
        for slot in SLOT_ORDER:
            record = self.slot(slot)
            out[slot.value] = record.to_dict() if record else None
        return out


@dataclass(frozen=True)
class ClockInResult:
    slot: SlotName
    slot_status: SlotStatus
    daily_status: DailyStatus
    message: str
    late_by_minutes: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "slot": self.slot.value,
            "slot_status": self.slot_status.value,
            "daily_status": self.daily_status.value,
            "late_by_minutes": self.late_by_minutes,
        }


@dataclass(frozen=True)
class FinalizationResult:
    processed: int
    absent_records_created: int
    records_updated: int

    def to_dict(self) -> dict[str, int]:
        return {
            "processed": self.processed,
            "absent_records_created": self.absent_records_created,
            "records_updated": self.records_updated,
        }
