from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional

from ..audit.service import AuditService
from ..common.datetime_utils import local_date, now_utc
from ..common.validators import require_non_empty
from ..core.constants import LEAVE_REASON_MAX_LENGTH, LEAVE_REASON_MIN_LENGTH
from ..core.enums import LeaveType, RequestStatus, ReviewAction
from ..core.exceptions import AuthorizationError, NotFoundError, PreconditionError, ValidationError
from ..database.transaction import Transaction, TransactionManager
from ..employees.repository import EmployeeDirectory
from ..notifications.service import NotificationService
from ..settings.repository import SettingsProvider
from .backfill import LeaveBackfillReconciler
from .model import BackfillResult, LeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)

LEAVE_RESOURCE = "leave_requests"


def _days_label(total_days: Decimal) -> str:
    return f"{total_days.normalize():f} day{'s' if total_days > 1 else ''}"


def _amount(days: Decimal) -> str:
    return f"{days.normalize():f}"


class LeaveService:
    """Use cases: employee submission and cancellation, admin review."""

    def __init__(
        self,
        leaves: LeaveRequestRepository,
        employees: EmployeeDirectory,
        settings: SettingsProvider,
        backfill: LeaveBackfillReconciler,
        transactions: TransactionManager,
        notifications: NotificationService,
        audit: AuditService,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._leaves = leaves
        self._employees = employees
        self._settings = settings
        self._backfill = backfill
        self._transactions = transactions
        self._notifications = notifications
        self._audit = audit
        self._clock = clock

    def get_leave_request(self, request_id: int) -> LeaveRequest:
        request = self._leaves.get(request_id)
        if request is None:
            raise NotFoundError("Leave request not found.")
        return request

    def _approve(self, tx: Transaction, request: LeaveRequest, reviewer_id: int, notes: Optional[str]) -> BackfillResult:
        leave_type = request.supported_leave_type
        if leave_type is None:
            raise ValidationError(f"Unsupported leave type: {request.leave_type or 'unknown'}")

        employee = self._employees.get_for_update(tx, request.employee_id)
        if employee is None:
            raise NotFoundError("Employee not found for leave request.")

        balance = max(employee.leave_balance(leave_type) - request.total_days, Decimal("0"))
        self._employees.set_leave_balance(tx, employee.employee_id, leave_type, balance)

        return self._backfill.backfill(
            tx,
            employee_id=request.employee_id,
            start_date=request.start_date,
            end_date=request.end_date,
            leave_request_id=request.request_id,
            reviewer_id=reviewer_id,
            notes=notes,
        )

    def review_leave(
        self,
        request_id: int,
        action: ReviewAction,
        reviewer_id: int,
        notes: Optional[str] = None,
    ) -> tuple[LeaveRequest, Optional[BackfillResult]]:
        try:
            action = ReviewAction(action)
        except ValueError:
            raise ValidationError("action must be approve or reject.")
        notes = (notes or "").strip() or None
        status = RequestStatus.APPROVED if action == ReviewAction.APPROVE else RequestStatus.REJECTED

        def review(tx: Transaction) -> tuple[LeaveRequest, Optional[BackfillResult]]:
            request = self._leaves.get_for_update(tx, request_id)
            if request is None:
                raise NotFoundError("Leave request not found.")
            if request.status != RequestStatus.PENDING:
                raise PreconditionError("Leave request no longer pending.")

            result = self._approve(tx, request, reviewer_id, notes) if action == ReviewAction.APPROVE else None

            reviewed_at = self._clock()
            self._leaves.decide(
                tx,
                request_id=request.request_id,
                status=status,
                reviewed_by=reviewer_id,
                reviewer_notes=notes,
                reviewed_at=reviewed_at,
            )
            decided = replace(
                request, status=status, reviewed_by=reviewer_id, reviewer_notes=notes, reviewed_at=reviewed_at
            )
            return decided, result

        decided, result = self._transactions.run(review)
        logger.info("Leave request %s %s by %s", request_id, status.value, reviewer_id)

        if result is not None:
            self._backfill.record_overrides(result, reviewer_id=reviewer_id)

        self._audit.record(
            action=f"{action.value}_leave",
            resource=LEAVE_RESOURCE,
            resource_id=str(request_id),
            performed_by=reviewer_id,
            reason=notes,
            old_values={"status": RequestStatus.PENDING.value},
            new_values={"status": status.value},
        )

        span = f"from {decided.start_date.isoformat()} to {decided.end_date.isoformat()}"
        summary = f"Your {decided.leave_type} leave ({_days_label(decided.total_days)}) {span}"
        if action == ReviewAction.APPROVE:
            title, message = "Leave Approved", f"{summary} has been approved."
        else:
            title = "Leave Rejected"
            message = f"{summary} was rejected." + (f" Reason: {notes}" if notes else "")

        self._notifications.notify(
            employee_id=decided.employee_id,
            title=title,
            message=message,
            category="leave",
            related_id=str(request_id),
            metadata={
                "start_date": decided.start_date.isoformat(),
                "end_date": decided.end_date.isoformat(),
                "leave_type": decided.leave_type,
            },
        )
        return decided, result

    def _today(self) -> date:
        return local_date(self._clock(), self._settings.get_company_settings().tz)

    def submit_leave_request(
        self,
        employee_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        raw_type = require_non_empty(leave_type, "leave_type").lower()
        try:
            kind = LeaveType(raw_type)
        except ValueError:
            raise ValidationError(f"Unsupported leave type: {leave_type}")
        if end_date < start_date:
            raise ValidationError("start_date must be before or equal to end_date.")
        if start_date < self._today():
            raise ValidationError("start_date cannot be in the past.")
        reason = (reason or "").strip()
        if not LEAVE_REASON_MIN_LENGTH <= len(reason) <= LEAVE_REASON_MAX_LENGTH:
            raise ValidationError(
                f"reason must be between {LEAVE_REASON_MIN_LENGTH} and {LEAVE_REASON_MAX_LENGTH} characters."
            )
        total_days = Decimal((end_date - start_date).days + 1)

        def submit(tx: Transaction) -> LeaveRequest:
            employee = self._employees.get_for_update(tx, employee_id)
            if employee is None:
                raise NotFoundError("Employee not found.")
            if self._leaves.has_overlap(tx, employee_id=employee_id, start_date=start_date, end_date=end_date):
                raise PreconditionError("You already have a pending or approved leave request for overlapping dates.")

            available = employee.leave_balance(kind)
            if total_days > available:
                raise PreconditionError(
                    f"Insufficient leave balance. Requested: {_amount(total_days)} days, "
                    f"Available: {_amount(available)} days."
                )
            return self._leaves.create(
                tx,
                employee_id=employee_id,
                leave_type=kind.value,
                start_date=start_date,
                end_date=end_date,
                total_days=total_days,
                reason=reason,
            )

        created = self._transactions.run(submit)
        logger.info("Leave request %s submitted by employee %s", created.request_id, employee_id)

        self._audit.record(
            action="submit_leave",
            resource=LEAVE_RESOURCE,
            resource_id=str(created.request_id),
            performed_by=employee_id,
            new_values=created.to_dict(),
        )
        self._notifications.notify(
            employee_id=employee_id,
            title="Leave Request Submitted",
            message=(
                f"Your {created.leave_type} leave from {start_date.isoformat()} to {end_date.isoformat()} "
                "was submitted for review."
            ),
            category="leave",
            related_id=str(created.request_id),
        )
        return created

    def cancel_leave_request(self, employee_id: int, request_id: int) -> LeaveRequest:
        """Cancel a pending or approved request; an approved one gets its balance and attendance back."""
        today = self._today()

        def cancel(tx: Transaction) -> tuple[LeaveRequest, LeaveRequest, list[date]]:
            request = self._leaves.get_for_update(tx, request_id)
            if request is None:
                raise NotFoundError("Leave request not found.")
            if request.employee_id != employee_id:
                raise AuthorizationError("Cannot cancel another employee's leave request.")
            if request.status not in (RequestStatus.PENDING, RequestStatus.APPROVED):
                raise PreconditionError("Only pending or approved requests can be cancelled.")

            cancelled_at = self._clock()
            self._leaves.cancel(tx, request_id=request_id, cancelled_at=cancelled_at)

            reverted: list[date] = []
            if request.status == RequestStatus.APPROVED:
                kind = request.supported_leave_type
                if kind is not None and request.total_days > 0:
                    employee = self._employees.get_for_update(tx, employee_id)
                    if employee is None:
                        raise NotFoundError("Employee not found.")
                    self._employees.set_leave_balance(
                        tx, employee_id, kind, employee.leave_balance(kind) + request.total_days
                    )
                reverted = self._backfill.revert(
                    tx,
                    employee_id=employee_id,
                    start_date=request.start_date,
                    end_date=request.end_date,
                    leave_request_id=request_id,
                    today=today,
                )
            cancelled = replace(request, status=RequestStatus.CANCELLED, cancelled_at=cancelled_at)
            return request, cancelled, reverted

        previous, cancelled, reverted = self._transactions.run(cancel)
        was_approved = previous.status == RequestStatus.APPROVED
        logger.info(
            "Leave request %s cancelled by employee %s (%d day(s) reverted)", request_id, employee_id, len(reverted)
        )

        self._audit.record(
            action="cancel_leave",
            resource=LEAVE_RESOURCE,
            resource_id=str(request_id),
            performed_by=employee_id,
            old_values={"status": previous.status.value},
            new_values={
                "status": RequestStatus.CANCELLED.value,
                "reverted_dates": [d.isoformat() for d in reverted],
            },
        )
        message = f"Your {cancelled.leave_type} leave request has been cancelled."
        if was_approved:
            message += " Your leave balance has been restored."
        self._notifications.notify(
            employee_id=employee_id,
            title="Leave Request Cancelled",
            message=message,
            category="leave",
            related_id=str(request_id),
        )
        return cancelled
