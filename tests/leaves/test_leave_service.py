from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from src.attendance_engine.attendance_engine.attendance.model import AttendanceRecord, SlotRecord
from src.attendance_engine.attendance_engine.core.enums import (
    DailyStatus,
    LeaveType,
    RequestStatus,
    ReviewAction,
    SlotStatus,
)
from src.attendance_engine.attendance_engine.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)


def test_approval_decrements_balance_and_backfills(world, pending_leave):
    world.leaves.add(pending_leave)

    decided, backfill = world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1, "Get well")

    assert decided.status == RequestStatus.APPROVED
    assert decided.reviewed_by == 1
    assert world.leaves.get(10).status == RequestStatus.APPROVED
    assert world.employees.get_by_id(2).leave_balance(LeaveType.MEDICAL) == Decimal("5")
    assert len(backfill.days) == 2
    for day in (date(2026, 2, 2), date(2026, 2, 3)):
        record = world.attendance.get(2, day)
        assert record.daily_status == DailyStatus.ON_LEAVE
        assert record.leave_request_id == 10
        assert record.updated_by == 1


def test_backfill_keeps_slot_data_and_audits_overrides(world, pending_leave):
    morning = SlotRecord(status=SlotStatus.ON_TIME)
    world.attendance.add(
        AttendanceRecord(
            employee_id=2,
            work_date=date(2026, 2, 3),
            daily_status=DailyStatus.IN_PROGRESS,
            morning=morning,
            notes="arrived by bus",
        )
    )
    world.leaves.add(pending_leave)

    world.container.leave_service.review_leave(10, "approve", 1)

    record = world.attendance.get(2, date(2026, 2, 3))
    assert record.daily_status == DailyStatus.ON_LEAVE
    assert record.morning == morning
    assert record.notes == "arrived by bus"

    backfill_audits = [e for e in world.audit.entries if e.action == "leave_backfill_attendance"]
    assert [e.resource_id for e in backfill_audits] == ["2_2026-02-03"]
    assert backfill_audits[0].old_values["daily_status"] == "in_progress"
    assert backfill_audits[0].new_values == {"daily_status": "on_leave", "leave_request_id": 10}
    assert "approve_leave" in world.audit.actions()


def test_approval_notifies_employee(world, pending_leave):
    world.leaves.add(pending_leave)

    world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1)

    [notification] = world.notifications.sent
    assert notification.title == "Leave Approved"
    assert notification.category == "leave"
    assert notification.message == "Your medical leave (2 days) from 2026-02-02 to 2026-02-03 has been approved."


def test_rejection_leaves_attendance_and_balance_alone(world, pending_leave):
    world.leaves.add(pending_leave)

    decided, backfill = world.container.leave_service.review_leave(10, ReviewAction.REJECT, 1, "Busy week")

    assert decided.status == RequestStatus.REJECTED
    assert backfill is None
    assert world.attendance.get(2, date(2026, 2, 2)) is None
    assert world.employees.get_by_id(2).leave_balance(LeaveType.MEDICAL) == Decimal("7")
    [notification] = world.notifications.sent
    assert notification.title == "Leave Rejected"
    assert notification.message.endswith("was rejected. Reason: Busy week")


def test_balance_is_floored_at_zero(world, pending_leave):
    world.leaves.add(replace(pending_leave, total_days=Decimal("10")))

    world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1)

    assert world.employees.get_by_id(2).leave_balance(LeaveType.MEDICAL) == Decimal("0")


def test_request_must_be_pending(world, pending_leave):
    world.leaves.add(replace(pending_leave, status=RequestStatus.APPROVED))

    with pytest.raises(PreconditionError, match="no longer pending"):
        world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1)


def test_missing_request(world):
    with pytest.raises(NotFoundError):
        world.container.leave_service.review_leave(404, ReviewAction.APPROVE, 1)


def test_unknown_action(world, pending_leave):
    world.leaves.add(pending_leave)

    with pytest.raises(ValidationError):
        world.container.leave_service.review_leave(10, "postpone", 1)


def test_unsupported_leave_type_rolls_back(world, pending_leave):
    world.leaves.add(replace(pending_leave, leave_type="sabbatical"))

    with pytest.raises(ValidationError, match="Unsupported leave type: sabbatical"):
        world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1)

    assert world.leaves.get(10).status == RequestStatus.PENDING
    assert world.attendance.get(2, date(2026, 2, 2)) is None
    assert world.transactions.rollbacks == 1


def test_direct_backfill_rejects_inverted_range(world):
    with pytest.raises(ValidationError):
        world.container.leave_backfill.apply_leave_approval_backfill(2, date(2026, 2, 5), date(2026, 2, 3), 10, 1)


def test_direct_backfill_overrides_finalized_days(world):
    world.attendance.add(
        AttendanceRecord(employee_id=2, work_date=date(2026, 2, 2), daily_status=DailyStatus.ABSENT)
    )
    world.attendance.add(
        AttendanceRecord(employee_id=2, work_date=date(2026, 2, 3), daily_status=DailyStatus.ON_LEAVE, leave_request_id=9)
    )

    result = world.container.leave_backfill.apply_leave_approval_backfill(
        2, date(2026, 2, 2), date(2026, 2, 4), 10, 1, notes="Approved late"
    )

    assert result.to_dict() == {
        "days_backfilled": 3,
        "records_overridden": 1,
        "overridden_dates": ["2026-02-02"],
    }
    assert world.attendance.get(2, date(2026, 2, 3)).leave_request_id == 10
    assert world.attendance.get(2, date(2026, 2, 4)).notes == "Approved late"
    assert world.audit.actions() == ["leave_backfill_attendance"]


def test_clock_in_on_leave_day_is_rejected(world, pending_leave, fixed_now, office):
    world.leaves.add(pending_leave)
    world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1)

    with pytest.raises(PreconditionError, match="on_leave"):
        world.container.attendance_service.handle_clock_in(2, fixed_now, office)


def test_submit_creates_pending_request(world):
    created = world.container.leave_service.submit_leave_request(
        3, "Medical", date(2026, 2, 5), date(2026, 2, 6), "  Dental surgery  "
    )

    assert created.status == RequestStatus.PENDING
    assert created.leave_type == "medical"
    assert created.total_days == Decimal("2")
    assert created.reason == "Dental surgery"
    assert world.leaves.get(created.request_id) == created
    # balance only moves on approval
    assert world.employees.get_by_id(3).leave_balance(LeaveType.MEDICAL) == Decimal("7")
    assert world.audit.actions() == ["submit_leave"]
    [notification] = world.notifications.sent
    assert notification.title == "Leave Request Submitted"
    assert notification.message == "Your medical leave from 2026-02-05 to 2026-02-06 was submitted for review."


def test_submit_rejects_insufficient_balance(world):
    with pytest.raises(PreconditionError, match="Insufficient leave balance. Requested: 1 days, Available: 0 days."):
        world.container.leave_service.submit_leave_request(
            3, "maternity", date(2026, 2, 5), date(2026, 2, 5), "Prenatal appointment"
        )

    with pytest.raises(PreconditionError, match="Requested: 16 days, Available: 14 days"):
        world.container.leave_service.submit_leave_request(
            3, "full", date(2026, 2, 5), date(2026, 2, 20), "Family trip abroad"
        )
    assert world.notifications.sent == []


def test_submit_rejects_overlapping_request(world, pending_leave):
    world.leaves.add(pending_leave)

    with pytest.raises(PreconditionError, match="overlapping"):
        world.container.leave_service.submit_leave_request(
            2, "full", date(2026, 2, 3), date(2026, 2, 4), "Moving house"
        )


def test_cancelled_request_does_not_block_new_one(world, pending_leave):
    world.leaves.add(replace(pending_leave, status=RequestStatus.CANCELLED))

    created = world.container.leave_service.submit_leave_request(
        2, "full", date(2026, 2, 3), date(2026, 2, 4), "Moving house"
    )

    assert created.status == RequestStatus.PENDING


@pytest.mark.parametrize(
    "leave_type, start, end, reason",
    [
        ("sabbatical", date(2026, 2, 5), date(2026, 2, 6), "Long break"),
        ("", date(2026, 2, 5), date(2026, 2, 6), "Long break"),
        ("full", date(2026, 2, 6), date(2026, 2, 5), "Long break"),
        ("full", date(2026, 2, 2), date(2026, 2, 5), "Long break"),
        ("full", date(2026, 2, 5), date(2026, 2, 6), " ok "),
        ("full", date(2026, 2, 5), date(2026, 2, 6), "x" * 501),
    ],
)
def test_submit_validation(world, leave_type, start, end, reason):
    with pytest.raises(ValidationError):
        world.container.leave_service.submit_leave_request(2, leave_type, start, end, reason)
    assert world.transactions.runs == 0


def test_cancel_pending_request(world, pending_leave):
    world.leaves.add(pending_leave)

    cancelled = world.container.leave_service.cancel_leave_request(2, 10)

    assert cancelled.status == RequestStatus.CANCELLED
    assert cancelled.cancelled_at == world.clock.now
    assert world.leaves.get(10).status == RequestStatus.CANCELLED
    assert world.employees.get_by_id(2).leave_balance(LeaveType.MEDICAL) == Decimal("7")
    [notification] = world.notifications.sent
    assert notification.message == "Your medical leave request has been cancelled."


def test_cancel_approved_request_restores_balance_and_attendance(world, pending_leave):
    morning = SlotRecord(status=SlotStatus.ON_TIME)
    world.attendance.add(
        AttendanceRecord(employee_id=2, work_date=date(2026, 2, 3), daily_status=DailyStatus.IN_PROGRESS, morning=morning)
    )
    world.leaves.add(pending_leave)
    world.container.leave_service.review_leave(10, ReviewAction.APPROVE, 1)
    assert world.employees.get_by_id(2).leave_balance(LeaveType.MEDICAL) == Decimal("5")

    world.container.leave_service.cancel_leave_request(2, 10)

    assert world.employees.get_by_id(2).leave_balance(LeaveType.MEDICAL) == Decimal("7")
    assert world.attendance.get(2, date(2026, 2, 2)) is None
    restored = world.attendance.get(2, date(2026, 2, 3))
    assert restored.daily_status == DailyStatus.IN_PROGRESS
    assert restored.leave_request_id is None
    assert restored.morning == morning

    [entry] = [e for e in world.audit.entries if e.action == "cancel_leave"]
    assert entry.old_values == {"status": "approved"}
    assert entry.new_values["reverted_dates"] == ["2026-02-02", "2026-02-03"]
    assert world.notifications.sent[-1].message.endswith("Your leave balance has been restored.")


def test_cancel_leaves_days_claimed_by_another_request(world, pending_leave):
    world.leaves.add(replace(pending_leave, status=RequestStatus.APPROVED))
    other = AttendanceRecord(
        employee_id=2, work_date=date(2026, 2, 2), daily_status=DailyStatus.ON_LEAVE, leave_request_id=9
    )
    world.attendance.add(other)

    world.container.leave_service.cancel_leave_request(2, 10)

    assert world.attendance.get(2, date(2026, 2, 2)) == other


def test_cancel_guards(world, pending_leave):
    world.leaves.add(pending_leave)

    with pytest.raises(AuthorizationError):
        world.container.leave_service.cancel_leave_request(3, 10)
    with pytest.raises(NotFoundError):
        world.container.leave_service.cancel_leave_request(2, 404)

    world.container.leave_service.review_leave(10, ReviewAction.REJECT, 1)
    with pytest.raises(PreconditionError, match="Only pending or approved"):
        world.container.leave_service.cancel_leave_request(2, 10)
    assert world.leaves.get(10).status == RequestStatus.REJECTED
