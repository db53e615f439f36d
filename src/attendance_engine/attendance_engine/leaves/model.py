from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import DailyStatus, LeaveType, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    total_days: Decimal
    status: RequestStatus
    reason: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewer_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @property
    def supported_leave_type(self) -> Optional[LeaveType]:
        """Raw leave_type is kept as stored so unknown values can be rejected at review time."""
        try:
            return LeaveType(self.leave_type)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "employee_id": self.employee_id,
            "leave_type": self.leave_type,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_days": str(self.total_days),
            "status": self.status.value,
            "reason": self.reason,
            "reviewed_by": self.reviewed_by,
            "reviewer_notes": self.reviewer_notes,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
        }


@dataclass(frozen=True)
class BackfilledDay:
    """Before/after pair for one day touched by a leave backfill."""

    work_date: date
    previous: Optional[AttendanceRecord]
    current: AttendanceRecord

    @property
    def overrides_attendance(self) -> bool:
        """True when an existing non-leave record was replaced."""
        return self.previous is not None and self.previous.daily_status != DailyStatus.ON_LEAVE


@dataclass(frozen=True)
class BackfillResult:
    days: tuple[BackfilledDay, ...]

    @property
    def overridden(self) -> tuple[BackfilledDay, ...]:
        return tuple(d for d in self.days if d.overrides_attendance)

    def to_dict(self) -> dict[str, Any]:
        return {
            "days_backfilled": len(self.days),
            "records_overridden": len(self.overridden),
            "overridden_dates": [d.work_date.isoformat() for d in self.overridden],
        }
