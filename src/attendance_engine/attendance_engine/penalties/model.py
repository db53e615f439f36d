from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..core.enums import PenaltyStatus, ViolationType


@dataclass(frozen=True)
class ViolationOccurrence:
    work_date: date
    field: str
    violation_type: ViolationType

    def to_dict(self) -> dict[str, str]:
        return {
            "work_date": self.work_date.isoformat(),
            "field": self.field,
            "violation_type": self.violation_type.value,
        }


@dataclass
class ViolationTally:
    """Ephemeral per-run violation counts for one employee."""

    employee_id: int
    counts: dict[ViolationType, int] = field(default_factory=dict)
    occurrences: list[ViolationOccurrence] = field(default_factory=list)

    def add(self, work_date: date, field_name: str, violation_type: ViolationType) -> None:
        self.counts[violation_type] = self.counts.get(violation_type, 0) + 1
        self.occurrences.append(ViolationOccurrence(work_date=work_date, field=field_name, violation_type=violation_type))

    @property
    def total(self) -> int:
        return len(self.occurrences)


@dataclass(frozen=True)
class Penalty:
    employee_id: int
    violation_type: ViolationType
    month: str
    amount: Decimal
    violation_count: int
    date_incurred: datetime
    status: PenaltyStatus = PenaltyStatus.ACTIVE
    penalty_id: Optional[int] = None
    acknowledgement_note: Optional[str] = None
    acknowledged_at: Optional[datetime] = None
    waived_reason: Optional[str] = None
    waived_by: Optional[int] = None
    waived_at: Optional[datetime] = None
    paid_by: Optional[int] = None
    paid_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        def iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "penalty_id": self.penalty_id,
            "employee_id": self.employee_id,
            "violation_type": self.violation_type.value,
            "month": self.month,
            "amount": str(self.amount),
            "violation_count": self.violation_count,
            "status": self.status.value,
            "date_incurred": iso(self.date_incurred),
            "acknowledgement_note": self.acknowledgement_note,
            "acknowledged_at": iso(self.acknowledged_at),
            "waived_reason": self.waived_reason,
            "waived_by": self.waived_by,
            "waived_at": iso(self.waived_at),
            "paid_by": self.paid_by,
            "paid_at": iso(self.paid_at),
        }


@dataclass(frozen=True)
class PenaltyReference:
    penalty_id: Optional[int]
    violation_type: ViolationType
    amount: Decimal
    violation_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "penalty_id": self.penalty_id,
            "violation_type": self.violation_type.value,
            "amount": str(self.amount),
            "violation_count": self.violation_count,
        }


@dataclass(frozen=True)
class ViolationHistoryRecord:
    """Monthly summary per employee, written whether or not a penalty fired."""

    employee_id: int
    month: str
    counts: dict[ViolationType, int]
    occurrences: tuple[ViolationOccurrence, ...]
    primary_violation: Optional[ViolationType]
    penalties: tuple[PenaltyReference, ...] = ()

    @property
    def total_count(self) -> int:
        return len(self.occurrences)

    @property
    def penalty_triggered(self) -> bool:
        return bool(self.penalties)

    def to_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "month": self.month,
            "counts": {t.value: c for t, c in self.counts.items()},
            "total_count": self.total_count,
            "occurrences": [o.to_dict() for o in self.occurrences],
            "primary_violation": self.primary_violation.value if self.primary_violation else None,
            "penalty_triggered": self.penalty_triggered,
            "penalties": [p.to_dict() for p in self.penalties],
        }


@dataclass(frozen=True)
class MonthlyViolationResult:
    processed: int
    penalties_created: int

    def to_dict(self) -> dict[str, int]:
        return {"processed": self.processed, "penalties_created": self.penalties_created}


@dataclass
class PenaltyBucket:
    count: int = 0
    amount: Decimal = Decimal("0")


@dataclass
class PenaltySummary:
    active_count: int = 0
    total_amount: Decimal = Decimal("0")
    by_status: dict[PenaltyStatus, PenaltyBucket] = field(
        default_factory=lambda: {status: PenaltyBucket() for status in PenaltyStatus}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_count": self.active_count,
            "total_amount": str(self.total_amount),
            "by_status": {
                status.value: {"count": bucket.count, "amount": str(bucket.amount)}
                for status, bucket in self.by_status.items()
            },
        }
