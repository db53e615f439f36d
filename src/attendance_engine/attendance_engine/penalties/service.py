from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditService
from ..common.datetime_utils import now_utc, parse_month_key
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_PENALTY_PAGE_SIZE, MAX_PENALTY_PAGE_SIZE
from ..core.enums import VIOLATION_PRECEDENCE, PenaltyStatus
from ..core.exceptions import AuthorizationError, NotFoundError, PreconditionError, ValidationError
from ..database.transaction import Transaction, TransactionManager
from ..notifications.service import NotificationService
from ..settings.model import CompanySettings
from ..settings.repository import SettingsProvider
from .model import (
    MonthlyViolationResult,
    Penalty,
    PenaltyReference,
    PenaltySummary,
    ViolationHistoryRecord,
    ViolationTally,
)
from .repository import PenaltyRepository, ViolationHistoryRepository
from .tally import primary_violation, tally_violations

logger = logging.getLogger(__name__)

PENALTY_RESOURCE = "penalties"

_OPEN_STATUSES = (PenaltyStatus.ACTIVE, PenaltyStatus.ACKNOWLEDGED)


def _label(value: str) -> str:
    return value.replace("_", " ")


class PenaltyService:
    """Monthly violation tally plus the penalty lifecycle."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        penalties: PenaltyRepository,
        history: ViolationHistoryRepository,
        settings: SettingsProvider,
        transactions: TransactionManager,
        notifications: NotificationService,
        audit: AuditService,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._penalties = penalties
        self._history = history
        self._settings = settings
        self._transactions = transactions
        self._notifications = notifications
        self._audit = audit
        self._clock = clock

    # ---- monthly calculation ----

    def _apply_tally(
        self, month: str, tally: ViolationTally, settings: CompanySettings
    ) -> list[Penalty]:
        """Create missing penalties and rewrite the month's history. Returns newly created penalties."""

        def apply(tx: Transaction) -> list[Penalty]:
            created: list[Penalty] = []
            references: list[PenaltyReference] = []
            for violation_type in VIOLATION_PRECEDENCE:
                count = tally.counts.get(violation_type, 0)
                threshold = settings.threshold_for(violation_type)
                if count <= 0 or threshold is None or count < threshold:
                    continue

                stored, is_new = self._penalties.create_if_absent(
                    tx,
                    Penalty(
                        employee_id=tally.employee_id,
                        violation_type=violation_type,
                        month=month,
                        amount=settings.amount_for(violation_type),
                        violation_count=count,
                        date_incurred=self._clock(),
                    ),
                )
                references.append(
                    PenaltyReference(
                        penalty_id=stored.penalty_id,
                        violation_type=stored.violation_type,
                        amount=stored.amount,
                        violation_count=stored.violation_count,
                    )
                )
                if is_new:
                    created.append(stored)

            self._history.upsert(
                tx,
                ViolationHistoryRecord(
                    employee_id=tally.employee_id,
                    month=month,
                    counts=dict(tally.counts),
                    occurrences=tuple(tally.occurrences),
                    primary_violation=primary_violation(tally.counts),
                    penalties=tuple(references),
                ),
            )
            return created

        return self._transactions.run(apply)

    def _notify_penalties(self, tally: ViolationTally, created: list[Penalty]) -> None:
        label = primary_violation(p.violation_type for p in created)
        total = sum((p.amount for p in created), Decimal("0"))
        kinds = ", ".join(_label(p.violation_type.value) for p in created)
        self._notifications.notify(
            employee_id=tally.employee_id,
            title="Penalty Issued",
            message=f"You have been issued {len(created)} penalt{'y' if len(created) == 1 else 'ies'} "
            f"({kinds}) totalling {total} for {created[0].month}.",
            category="penalty",
            type="warning",
            related_id=str(created[0].penalty_id) if created[0].penalty_id is not None else None,
            metadata={"primary_violation": label.value if label else None, "month": created[0].month},
        )

    def calculate_monthly_violations(self, month: str, employee_id: Optional[int] = None) -> MonthlyViolationResult:
        month = require_non_empty(month, "month")
        start, end = parse_month_key(month)
        settings = self._settings.get_company_settings()

        records = self._attendance.list_between(start_date=start, end_date=end, employee_id=employee_id)
        tallies = tally_violations(records)
        logger.info(
            "Calculating violations for %s (%d employees, employee filter=%s)",
            month,
            len(tallies),
            employee_id if employee_id is not None else "all",
        )

        processed = penalties_created = 0
        for emp_id, tally in sorted(tallies.items()):
            try:
                created = self._apply_tally(month, tally, settings)
            except Exception:
                logger.exception("Failed to calculate violations for employee %s in %s", emp_id, month)
                continue

            processed += 1
            penalties_created += len(created)
            if created:
                self._notify_penalties(tally, created)

        result = MonthlyViolationResult(processed=processed, penalties_created=penalties_created)
        logger.info("Violation calculation for %s finished: %s", month, result)
        return result

    # ---- lifecycle ----

    def _locked(self, tx: Transaction, penalty_id: int) -> Penalty:
        penalty = self._penalties.get_for_update(tx, penalty_id)
        if penalty is None:
            raise NotFoundError("Penalty not found.")
        return penalty

    def acknowledge_penalty(self, employee_id: int, penalty_id: int, note: Optional[str] = None) -> Penalty:
        def acknowledge(tx: Transaction) -> Penalty:
            penalty = self._locked(tx, penalty_id)
            if penalty.employee_id != int(employee_id):
                raise AuthorizationError("Cannot acknowledge another employee's penalty.")
            if penalty.status != PenaltyStatus.ACTIVE:
                raise PreconditionError(f"Penalty is {penalty.status.value}; only active penalties can be acknowledged.")

            updated = replace(
                penalty,
                status=PenaltyStatus.ACKNOWLEDGED,
                acknowledgement_note=(note or "").strip() or None,
                acknowledged_at=self._clock(),
            )
            self._penalties.update(tx, updated)
            return updated

        updated = self._transactions.run(acknowledge)
        self._audit.record(
            action="acknowledge_penalty",
            resource=PENALTY_RESOURCE,
            resource_id=str(penalty_id),
            performed_by=employee_id,
            new_values={"status": updated.status.value, "acknowledgement_note": updated.acknowledgement_note},
        )
        return updated

    def waive_penalty(self, penalty_id: int, reason: str, performed_by: int) -> Penalty:
        reason = require_non_empty(reason, "reason")

        def waive(tx: Transaction) -> tuple[Penalty, Penalty]:
            penalty = self._locked(tx, penalty_id)
            if penalty.status not in _OPEN_STATUSES:
                raise PreconditionError(f"Penalty is already {penalty.status.value}.")

            updated = replace(
                penalty,
                status=PenaltyStatus.WAIVED,
                waived_reason=reason,
                waived_by=performed_by,
                waived_at=self._clock(),
            )
            self._penalties.update(tx, updated)
            return penalty, updated

        previous, updated = self._transactions.run(waive)
        logger.info("Penalty %s waived by %s", penalty_id, performed_by)
        self._audit.record(
            action="waive_penalty",
            resource=PENALTY_RESOURCE,
            resource_id=str(penalty_id),
            performed_by=performed_by,
            reason=reason,
            old_values={"status": previous.status.value},
            new_values={"status": updated.status.value},
        )
        self._notifications.notify(
            employee_id=updated.employee_id,
            title="Penalty Waived",
            message=f"Your {_label(updated.violation_type.value)} penalty for {updated.month} was waived.",
            category="penalty",
            related_id=str(penalty_id),
        )
        return updated

    def mark_penalty_paid(self, penalty_id: int, performed_by: int) -> Penalty:
        def pay(tx: Transaction) -> tuple[Penalty, Penalty]:
            penalty = self._locked(tx, penalty_id)
            if penalty.status not in _OPEN_STATUSES:
                raise PreconditionError(f"Penalty is already {penalty.status.value}.")

            updated = replace(penalty, status=PenaltyStatus.PAID, paid_by=performed_by, paid_at=self._clock())
            self._penalties.update(tx, updated)
            return penalty, updated

        previous, updated = self._transactions.run(pay)
        logger.info("Penalty %s marked paid by %s", penalty_id, performed_by)
        self._audit.record(
            action="mark_penalty_paid",
            resource=PENALTY_RESOURCE,
            resource_id=str(penalty_id),
            performed_by=performed_by,
            old_values={"status": previous.status.value},
            new_values={"status": updated.status.value},
        )
        return updated

    # ---- queries ----

    def list_employee_penalties(
        self,
        employee_id: int,
        status: Optional[PenaltyStatus] = None,
        limit: int = DEFAULT_PENALTY_PAGE_SIZE,
    ) -> list[Penalty]:
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_PENALTY_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PENALTY_PAGE_SIZE}.")
        return list(self._penalties.list_for_employee(employee_id, status=status, limit=limit))

    def get_penalty_summary(self, employee_id: int) -> PenaltySummary:
        summary = PenaltySummary()
        for penalty in self._penalties.list_for_employee(employee_id):
            bucket = summary.by_status[penalty.status]
            bucket.count += 1
            bucket.amount += penalty.amount
            if penalty.status == PenaltyStatus.ACTIVE:
                summary.active_count += 1
                summary.total_amount += penalty.amount
        return summary

    def get_violation_history(self, employee_id: int, month: str) -> ViolationHistoryRecord:
        parse_month_key(require_non_empty(month, "month"))
        record = self._history.get(employee_id, month)
        if record is None:
            raise NotFoundError(f"No violation history for {month}.")
        return record
