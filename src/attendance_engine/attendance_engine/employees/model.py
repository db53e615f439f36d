from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from ..core.enums import LeaveType


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by the attendance engine.

    Note: Profile data lives in the employee directory; only what the engine
    needs is mirrored here.
    """

    employee_id: int
    full_name: str
    is_active: bool = True
    leave_balances: Mapping[LeaveType, Decimal] = field(default_factory=dict)

    def leave_balance(self, leave_type: LeaveType) -> Decimal:
        return self.leave_balances.get(leave_type, Decimal("0"))
