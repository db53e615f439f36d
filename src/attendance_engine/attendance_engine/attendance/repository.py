from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..database.transaction import Transaction
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Store of per-(employee, date) attendance records.

    Writes always go through a Transaction handed in by the caller.
    """

    def get_for_update(self, tx: Transaction, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        """Read and lock the record for the rest of the transaction."""

        raise NotImplementedError

    def save(self, tx: Transaction, record: AttendanceRecord) -> None:
        """Create or fully replace the record."""

        raise NotImplementedError

    def delete(self, tx: Transaction, employee_id: int, work_date: date) -> None:
        raise NotImplementedError

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start_date <= work_date < end_date."""

        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
