from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol

from ..core.enums import RequestStatus
from ..database.transaction import Transaction
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def get_for_update(self, tx: Transaction, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def has_overlap(self, tx: Transaction, *, employee_id: int, start_date: date, end_date: date) -> bool:
        """True when a pending or approved request of the employee intersects [start_date, end_date]."""

        raise NotImplementedError

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
        raise NotImplementedError

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
        raise NotImplementedError

    def cancel(self, tx: Transaction, *, request_id: int, cancelled_at: datetime) -> None:
        raise NotImplementedError
