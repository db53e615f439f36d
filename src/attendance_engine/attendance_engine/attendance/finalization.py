"""End-of-day sweep that closes out every active employee's record."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from enum import Enum
from typing import Optional

from ..core.enums import SLOT_ORDER, DailyStatus
from ..database.transaction import Transaction, TransactionManager
from ..employees.repository import EmployeeDirectory
from ..settings.repository import SettingsProvider
from .model import AttendanceRecord, FinalizationResult, SlotRecord
from .repository import AttendanceRepository
from .status_resolver import compute_daily_status

logger = logging.getLogger(__name__)


class _Change(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def finalize_record(record: Optional[AttendanceRecord], employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
    """Terminal version of the day's record, or None when nothing changes."""
    if record is None:
        return AttendanceRecord(
            employee_id=employee_id,
            work_date=work_date,
            daily_status=DailyStatus.ABSENT,
            morning=SlotRecord.missed(),
            midday=SlotRecord.missed(),
            evening=SlotRecord.missed(),
        )

    if record.daily_status == DailyStatus.ON_LEAVE or record.is_manual_entry:
        return None

    updated = record
    newly_missed = False
    for slot in SLOT_ORDER:
        if updated.slot(slot) is None:
            updated = updated.with_slot(slot, SlotRecord.missed())
            newly_missed = True

    status = compute_daily_status(updated.slot_statuses(), finalizing=True)
    if not newly_missed and status == record.daily_status:
        return None
    return replace(updated, daily_status=status)


class DayFinalizationJob:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        settings: SettingsProvider,
        transactions: TransactionManager,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._transactions = transactions

    def _finalize_employee(self, employee_id: int, work_date: date) -> _Change:
        def finalize(tx: Transaction) -> _Change:
            current = self._attendance.get_for_update(tx, employee_id, work_date)
            finalized = finalize_record(current, employee_id, work_date)
            if finalized is None:
                return _Change.UNCHANGED
            self._attendance.save(tx, finalized)
            return _Change.CREATED if current is None else _Change.UPDATED

        return self._transactions.run(finalize)

    def finalize_attendance(self, work_date: date) -> FinalizationResult:
        settings = self._settings.get_company_settings()
        if not settings.is_working_day(work_date):
            logger.info("Skipping attendance finalization for non-working day %s", work_date.isoformat())
            return FinalizationResult(processed=0, absent_records_created=0, records_updated=0)

        employee_ids = self._employees.list_active_employee_ids()
        logger.info("Finalizing attendance for %s (%d active employees)", work_date.isoformat(), len(employee_ids))

        processed = created = updated = 0
        for employee_id in employee_ids:
            try:
                change = self._finalize_employee(employee_id, work_date)
            except Exception:
                logger.exception("Failed to finalize attendance for employee %s on %s", employee_id, work_date)
                continue

            processed += 1
            if change == _Change.CREATED:
                created += 1
            elif change == _Change.UPDATED:
                updated += 1

        result = FinalizationResult(processed=processed, absent_records_created=created, records_updated=updated)
        logger.info("Finalized %s: %s", work_date.isoformat(), result)
        return result
