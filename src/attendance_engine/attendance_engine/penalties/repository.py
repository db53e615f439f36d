from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import PenaltyStatus
from ..database.transaction import Transaction
from .model import Penalty, ViolationHistoryRecord


class PenaltyRepository(Protocol):
    def create_if_absent(self, tx: Transaction, penalty: Penalty) -> tuple[Penalty, bool]:
        """Insert unless (employee, type, month) exists. Returns (stored, created)."""

        raise NotImplementedError

    def get_for_update(self, tx: Transaction, penalty_id: int) -> Optional[Penalty]:
        raise NotImplementedError

    def update(self, tx: Transaction, penalty: Penalty) -> None:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[PenaltyStatus] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Penalty]:
        """Newest first."""

        raise NotImplementedError


class ViolationHistoryRepository(Protocol):
    def upsert(self, tx: Transaction, record: ViolationHistoryRecord) -> None:
        raise NotImplementedError

    def get(self, employee_id: int, month: str) -> Optional[ViolationHistoryRecord]:
        raise NotImplementedError
