from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveType
from ..database.transaction import Transaction
from .model import Employee


class EmployeeDirectory(Protocol):
    """Read side used by the sweeps and the leave workflow.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def list_active_employee_ids(self) -> Sequence[int]:
        raise NotImplementedError

    def get_for_update(self, tx: Transaction, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def set_leave_balance(self, tx: Transaction, employee_id: int, leave_type: LeaveType, balance: Decimal) -> None:
        raise NotImplementedError
