from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role claim forwarded by the auth gateway."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class SlotName(str, Enum):
    """The three fixed daily check points."""

    MORNING = "morning"
    MIDDAY = "midday"
    EVENING = "evening"


# Order in which slots are tried for a clock-in.
SLOT_ORDER: tuple[SlotName, ...] = (SlotName.MORNING, SlotName.MIDDAY, SlotName.EVENING)


class SlotRole(str, Enum):
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class SlotStatus(str, Enum):
    """Outcome recorded for one slot of one day."""

    ON_TIME = "on_time"
    LATE = "late"
    EARLY_LEAVE = "early_leave"
    MISSED = "missed"
    ABSENT = "absent"


class DailyStatus(str, Enum):
    """Aggregate status of one employee's calendar day."""

    IN_PROGRESS = "in_progress"
    PRESENT = "present"
    HALF_DAY_ABSENT = "half_day_absent"
    ABSENT = "absent"
    ON_LEAVE = "on_leave"


class ViolationType(str, Enum):
    LATE = "late"
    EARLY_LEAVE = "early_leave"
    ABSENT = "absent"
    HALF_DAY_ABSENT = "half_day_absent"
    MISSED = "missed"


# Highest first; used to label a mixed set of violations.
VIOLATION_PRECEDENCE: tuple[ViolationType, ...] = (
    ViolationType.ABSENT,
    ViolationType.HALF_DAY_ABSENT,
    ViolationType.LATE,
    ViolationType.EARLY_LEAVE,
    ViolationType.MISSED,
)


class PenaltyStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    WAIVED = "waived"
    PAID = "paid"


class RequestStatus(str, Enum):
    """Leave request approval flow."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LeaveType(str, Enum):
    FULL = "full"
    MEDICAL = "medical"
    MATERNITY = "maternity"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
