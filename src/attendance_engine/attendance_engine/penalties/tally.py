from __future__ import annotations

from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import SLOT_ORDER, VIOLATION_PRECEDENCE, ViolationType
from .model import ViolationTally

_VIOLATION_VALUES = {v.value: v for v in ViolationType}


def as_violation(status) -> Optional[ViolationType]:
    """Map a daily or slot status onto the violation it counts as, if any."""
    if status is None:
        return None
    return _VIOLATION_VALUES.get(getattr(status, "value", status))


def primary_violation(types: Iterable[ViolationType]) -> Optional[ViolationType]:
    present = set(types)
    for candidate in VIOLATION_PRECEDENCE:
        if candidate in present:
            return candidate
    return None


def tally_violations(records: Iterable[AttendanceRecord]) -> dict[int, ViolationTally]:
    """Count every violating field of every record, per employee.

    Each tracked field counts on its own: a late morning and an early evening
    on the same day are two increments.
    """
    tallies: dict[int, ViolationTally] = {}
    for record in records:
        tally = tallies.setdefault(record.employee_id, ViolationTally(employee_id=record.employee_id))

        daily = as_violation(record.daily_status)
        if daily is not None:
            tally.add(record.work_date, "daily_status", daily)

        for slot in SLOT_ORDER:
            violation = as_violation(record.slot_status(slot))
            if violation is not None:
                tally.add(record.work_date, slot.value, violation)
    return tallies
