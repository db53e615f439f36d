from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..database.transaction import Transaction
from .model import Employee
from .repository import EmployeeDirectory

BALANCE_COLUMNS: dict[LeaveType, str] = {
    LeaveType.FULL: "full_leave_balance",
    LeaveType.MEDICAL: "medical_leave_balance",
    LeaveType.MATERNITY: "maternity_leave_balance",
}

_SELECT = f"""
    SELECT employee_id, full_name, is_active, {', '.join(BALANCE_COLUMNS.values())}
    FROM employees
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        full_name=r["full_name"],
        is_active=bool(r.get("is_active", 1)),
        leave_balances={lt: Decimal(str(r.get(col) or 0)) for lt, col in BALANCE_COLUMNS.items()},
    )


class MySQLEmployeeRepository(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_employee_ids(self) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE is_active=1 ORDER BY employee_id")
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def get_for_update(self, tx: Transaction, employee_id: int) -> Optional[Employee]:
        r = tx.fetchone(f"{_SELECT} WHERE employee_id=%s FOR UPDATE", (int(employee_id),))
        return _row_to_employee(r) if r else None

    def set_leave_balance(self, tx: Transaction, employee_id: int, leave_type: LeaveType, balance: Decimal) -> None:
        column = BALANCE_COLUMNS[leave_type]
        tx.execute(
            f"UPDATE employees SET {column}=%s, updated_at=CURRENT_TIMESTAMP WHERE employee_id=%s",
            (balance, int(employee_id)),
        )
