from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Mapping, Optional

from ..audit.service import AuditService
from ..common.datetime_utils import ensure_aware, local_date, now_utc
from ..common.validators import require_non_empty
from ..core.constants import MAX_CLOCK_SKEW_MINUTES
from ..core.enums import DailyStatus, SlotName, SlotStatus
from ..core.exceptions import (
    MockLocationError,
    NoActiveWindowError,
    NonWorkingDayError,
    PreconditionError,
    SlotAlreadyRecordedError,
    StaleTimestampError,
    ValidationError,
)
from ..database.transaction import Transaction, TransactionManager
from ..geofence.model import Coordinate
from ..geofence.validator import validate_geofence
from ..notifications.service import NotificationService
from ..settings.model import CompanySettings
from ..settings.repository import SettingsProvider
from .classifier import resolve_slot_outcome
from .model import AttendanceRecord, ClockInResult, SlotOutcome, SlotRecord, attendance_key
from .repository import AttendanceRepository
from .status_resolver import compute_daily_status, count_completed

logger = logging.getLogger(__name__)

ATTENDANCE_RESOURCE = "attendance_records"


def _clock_in_message(outcome: SlotOutcome) -> str:
    if outcome.status == SlotStatus.LATE:
        return f"Clock-in recorded ({outcome.slot.value}). Late by {outcome.late_by_minutes} minutes."
    if outcome.status == SlotStatus.EARLY_LEAVE:
        return f"Clock-in recorded ({outcome.slot.value}). Left {outcome.late_by_minutes} minutes early."
    return f"Clock-in recorded ({outcome.slot.value})."


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        settings: SettingsProvider,
        transactions: TransactionManager,
        notifications: NotificationService,
        audit: AuditService,
        *,
        clock: Callable[[], datetime] = now_utc,
        max_clock_skew_minutes: int = MAX_CLOCK_SKEW_MINUTES,
    ):
        self._attendance = attendance
        self._settings = settings
        self._transactions = transactions
        self._notifications = notifications
        self._audit = audit
        self._clock = clock
        self._max_skew = timedelta(minutes=int(max_clock_skew_minutes))

    def _ensure_working_day(self, settings: CompanySettings, work_date: date) -> None:
        if work_date.isoweekday() not in settings.working_days:
            raise NonWorkingDayError("Clock-ins are not allowed on weekends.")
        if settings.is_holiday(work_date):
            raise NonWorkingDayError("Clock-ins are not allowed on company holidays.")

    def handle_clock_in(
        self,
        employee_id: int,
        instant: Optional[datetime],
        coordinate: Optional[Coordinate],
        mock_location: bool = False,
    ) -> ClockInResult:
        if instant is None or coordinate is None:
            raise ValidationError("timestamp and location are required.")
        instant = ensure_aware(instant)

        if mock_location:
            raise MockLocationError("Clock-in rejected. Mock location detected.")

        if abs(instant - self._clock()) > self._max_skew:
            raise StaleTimestampError("Clock-in rejected. Device time differs from server time.")

        settings = self._settings.get_company_settings()
        tz = settings.tz
        work_date = local_date(instant, tz)
        self._ensure_working_day(settings, work_date)

        validate_geofence(
            coordinate,
            settings.workplace_center,
            settings.workplace_radius,
            enabled=settings.geofencing_enabled,
        )

        def record_outcome(tx: Transaction) -> tuple[SlotOutcome, DailyStatus]:
            outcome = resolve_slot_outcome(instant, settings, tz)
            if outcome is None:
                raise NoActiveWindowError()

            current = self._attendance.get_for_update(tx, employee_id, work_date)
            if current is None:
                current = AttendanceRecord.empty(employee_id, work_date)
            elif current.daily_status != DailyStatus.IN_PROGRESS:
                raise PreconditionError(
                    f"Attendance for {work_date.isoformat()} is already {current.daily_status.value}."
                )

            existing = current.slot_status(outcome.slot)
            if existing is not None and existing != SlotStatus.MISSED:
                raise SlotAlreadyRecordedError(outcome.slot)

            updated = current.with_slot(
                outcome.slot,
                SlotRecord(status=outcome.status, timestamp=instant, location=coordinate),
            )
            updated = replace(updated, daily_status=compute_daily_status(updated.slot_statuses(), finalizing=False))
            self._attendance.save(tx, updated)
            return outcome, updated.daily_status

        outcome, daily_status = self._transactions.run(record_outcome)
        key = attendance_key(employee_id, work_date)
        logger.info("Clock-in %s: slot=%s status=%s", key, outcome.slot.value, outcome.status.value)

        self._audit.record(
            action="clock_in",
            resource=ATTENDANCE_RESOURCE,
            resource_id=key,
            performed_by=employee_id,
            metadata={
                "slot": outcome.slot.value,
                "status": outcome.status.value,
                "late_by_minutes": outcome.late_by_minutes,
            },
        )

        message = _clock_in_message(outcome)
        self._notifications.notify(
            employee_id=employee_id,
            title="Clock-In Recorded",
            message=message,
            category="attendance",
            related_id=key,
        )

        return ClockInResult(
            slot=outcome.slot,
            slot_status=outcome.status,
            daily_status=daily_status,
            message=message,
            late_by_minutes=outcome.late_by_minutes,
        )

    def set_manual_attendance(
        self,
        *,
        employee_id: int,
        work_date: date,
        daily_status: DailyStatus,
        reason: str,
        performed_by: int,
        slots: Optional[Mapping[SlotName, SlotRecord]] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin override of one day's record."""
        reason = require_non_empty(reason, "reason")

        def override(tx: Transaction) -> tuple[Optional[AttendanceRecord], AttendanceRecord]:
            current = self._attendance.get_for_update(tx, employee_id, work_date)
            updated = current or AttendanceRecord.empty(employee_id, work_date)
            for slot, slot_record in (slots or {}).items():
                updated = updated.with_slot(slot, slot_record)

            if daily_status == DailyStatus.HALF_DAY_ABSENT:
                completed = count_completed(updated.slot_statuses())
                if completed != 2:
                    raise PreconditionError(
                        f"Cannot set half-day absent: {completed} completed checks (requires exactly 2)."
                    )

            updated = replace(
                updated,
                daily_status=daily_status,
                is_manual_entry=True,
                manual_reason=reason,
                notes=notes if notes else updated.notes,
                updated_by=performed_by,
            )
            self._attendance.save(tx, updated)
            return current, updated

        previous, updated = self._transactions.run(override)
        logger.info("Manual attendance override %s -> %s by %s", updated.key, daily_status.value, performed_by)

        self._audit.record(
            action="manual_attendance_override",
            resource=ATTENDANCE_RESOURCE,
            resource_id=updated.key,
            performed_by=performed_by,
            reason=reason,
            old_values=previous.to_dict() if previous else None,
            new_values=updated.to_dict(),
        )
        return updated

    def get_history(self, employee_id: int, *, limit: int = 30) -> list[dict]:
        return [r.to_dict() for r in self._attendance.get_recent_for_employee(employee_id, limit)]
