"""Overwrites attendance with on_leave for the days an approved leave covers."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.service import ATTENDANCE_RESOURCE
from ..attendance.status_resolver import compute_daily_status
from ..audit.service import AuditService
from ..common.datetime_utils import iter_dates
from ..core.enums import SLOT_ORDER, DailyStatus
from ..core.exceptions import ValidationError
from ..database.transaction import Transaction, TransactionManager
from .model import BackfilledDay, BackfillResult

logger = logging.getLogger(__name__)


class LeaveBackfillReconciler:
    def __init__(self, attendance: AttendanceRepository, transactions: TransactionManager, audit: AuditService):
        self._attendance = attendance
        self._transactions = transactions
        self._audit = audit

    def backfill(
        self,
        tx: Transaction,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        leave_request_id: int,
        reviewer_id: int,
        notes: Optional[str] = None,
    ) -> BackfillResult:
        """Mark every day of [start_date, end_date] on_leave inside the caller's transaction.

        Slot data already on a record is kept; notes are kept unless new ones are given.
        """
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date.")

        days: list[BackfilledDay] = []
        for work_date in iter_dates(start_date, end_date):
            previous = self._attendance.get_for_update(tx, employee_id, work_date)
            base = previous or AttendanceRecord.empty(employee_id, work_date)
            current = replace(
                base,
                daily_status=DailyStatus.ON_LEAVE,
                leave_request_id=int(leave_request_id),
                notes=notes if notes else base.notes,
                updated_by=reviewer_id,
            )
            self._attendance.save(tx, current)
            days.append(BackfilledDay(work_date=work_date, previous=previous, current=current))
        return BackfillResult(days=tuple(days))

    def revert(
        self,
        tx: Transaction,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        leave_request_id: int,
        today: date,
    ) -> list[date]:
        """Undo this request's on_leave marks inside the caller's transaction.

        Days that carry slot data get their status back from the slots; days
        with nothing recorded are removed. Returns the dates touched.
        """
        reverted: list[date] = []
        for work_date in iter_dates(start_date, end_date):
            record = self._attendance.get_for_update(tx, employee_id, work_date)
            if record is None or record.leave_request_id != leave_request_id:
                continue
            if record.daily_status != DailyStatus.ON_LEAVE:
                continue

            if all(record.slot(slot) is None for slot in SLOT_ORDER):
                self._attendance.delete(tx, employee_id, work_date)
            else:
                status = compute_daily_status(record.slot_statuses(), finalizing=work_date < today)
                self._attendance.save(tx, replace(record, daily_status=status, leave_request_id=None))
            reverted.append(work_date)
        return reverted

    def record_overrides(self, result: BackfillResult, *, reviewer_id: int) -> None:
        """Audit each day whose existing non-leave record was replaced. Call after commit."""
        for day in result.overridden:
            self._audit.record(
                action="leave_backfill_attendance",
                resource=ATTENDANCE_RESOURCE,
                resource_id=day.current.key,
                performed_by=reviewer_id,
                old_values=day.previous.to_dict() if day.previous else None,
                new_values={
                    "daily_status": day.current.daily_status.value,
                    "leave_request_id": day.current.leave_request_id,
                },
            )

    def apply_leave_approval_backfill(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        leave_request_id: int,
        reviewer_id: int,
        notes: Optional[str] = None,
    ) -> BackfillResult:
        if end_date < start_date:
            raise ValidationError("end_date must not be before start_date.")

        result = self._transactions.run(
            lambda tx: self.backfill(
                tx,
                employee_id=employee_id,
                start_date=start_date,
                end_date=end_date,
                leave_request_id=leave_request_id,
                reviewer_id=reviewer_id,
                notes=notes,
            )
        )
        logger.info(
            "Leave %s backfilled %d day(s) for employee %s (%d overridden)",
            leave_request_id,
            len(result.days),
            employee_id,
            len(result.overridden),
        )
        self.record_overrides(result, reviewer_id=reviewer_id)
        return result
