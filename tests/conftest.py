from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

import pytest

from src.attendance_engine.attendance_engine.attendance.model import AttendanceRecord
from src.attendance_engine.attendance_engine.audit.model import AuditEntry
from src.attendance_engine.attendance_engine.audit.service import AuditService
from src.attendance_engine.attendance_engine.container import Container, wire_services
from src.attendance_engine.attendance_engine.core.enums import LeaveType, PenaltyStatus, RequestStatus, ViolationType
from src.attendance_engine.attendance_engine.database.transaction import Transaction
from src.attendance_engine.attendance_engine.employees.model import Employee
from src.attendance_engine.attendance_engine.geofence.model import Coordinate
from src.attendance_engine.attendance_engine.leaves.model import LeaveRequest
from src.attendance_engine.attendance_engine.notifications.model import Notification
from src.attendance_engine.attendance_engine.notifications.service import NotificationService
from src.attendance_engine.attendance_engine.penalties.model import Penalty, ViolationHistoryRecord
from src.attendance_engine.attendance_engine.settings.model import CompanySettings
from src.attendance_engine.attendance_engine.settings.parser import parse_company_settings

COLOMBO = ZoneInfo("Asia/Colombo")
OFFICE = Coordinate(latitude=6.9271, longitude=79.8612)

SETTINGS_PAYLOAD: dict[str, Any] = {
    "timezone": "Asia/Colombo",
    "workplaceCenter": {"latitude": 6.9271, "longitude": 79.8612},
    "workplaceRadius": 100,
    "geoFencingEnabled": True,
    "timeWindows": {
        "morning": {"start": "08:30", "end": "09:15"},
        "midday": {"start": "13:00", "end": "14:00"},
        "evening": {"start": "16:45", "end": "17:30"},
    },
    "gracePeriods": {"morning": 30, "midday": 30, "evening": 30},
    "penaltyRules": {
        "violationThresholds": {"absent": 4, "half_day_absent": 4, "late": 4, "early_leave": 4},
        "amounts": {"absent": 20, "half_day_absent": 15, "late": 10, "early_leave": 10},
    },
    "workingDays": [1, 2, 3, 4, 5],
    "holidays": ["2026-02-04"],
}


def local(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    """Aware instant in the company time zone."""
    return datetime(year, month, day, hour, minute, tzinfo=COLOMBO)


# ---- in-memory collaborators ----


class _Snapshotting:
    """Repos expose their state so the fake transaction runner can roll back."""

    def snapshot(self) -> Any:
        return dict(self._data)

    def restore(self, state: Any) -> None:
        self._data = state


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeSettingsProvider:
    def __init__(self, settings: CompanySettings):
        self.settings = settings

    def get_company_settings(self) -> CompanySettings:
        return self.settings


class InMemoryAttendance(_Snapshotting):
    def __init__(self):
        self._data: dict[tuple[int, date], AttendanceRecord] = {}
        self.saves = 0

    def add(self, record: AttendanceRecord) -> None:
        self._data[(record.employee_id, record.work_date)] = record

    def get(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._data.get((employee_id, work_date))

    def get_for_update(self, tx: Transaction, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._data.get((employee_id, work_date))

    def save(self, tx: Transaction, record: AttendanceRecord) -> None:
        self.saves += 1
        self._data[(record.employee_id, record.work_date)] = record

    def delete(self, tx: Transaction, employee_id: int, work_date: date) -> None:
        self._data.pop((employee_id, work_date), None)

    def list_between(self, *, start_date: date, end_date: date, employee_id: Optional[int] = None):
        items = [
            r
            for r in self._data.values()
            if start_date <= r.work_date < end_date and (employee_id is None or r.employee_id == employee_id)
        ]
        return sorted(items, key=lambda r: (r.employee_id, r.work_date))

    def get_recent_for_employee(self, employee_id: int, limit: int):
        items = [r for r in self._data.values() if r.employee_id == employee_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]


class InMemoryEmployees(_Snapshotting):
    def __init__(self, employees: list[Employee]):
        self._data: dict[int, Employee] = {e.employee_id: e for e in employees}

    def list_active_employee_ids(self):
        return sorted(e.employee_id for e in self._data.values() if e.is_active)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._data.get(employee_id)

    def get_for_update(self, tx: Transaction, employee_id: int) -> Optional[Employee]:
        return self._data.get(employee_id)

    def set_leave_balance(self, tx: Transaction, employee_id: int, leave_type: LeaveType, balance: Decimal) -> None:
        employee = self._data[employee_id]
        balances = dict(employee.leave_balances)
        balances[leave_type] = balance
        self._data[employee_id] = replace(employee, leave_balances=balances)


class InMemoryPenalties(_Snapshotting):
    def __init__(self):
        self._data: dict[int, Penalty] = {}
        self._next_id = 1

    def snapshot(self) -> Any:
        return dict(self._data), self._next_id

    def restore(self, state: Any) -> None:
        self._data, self._next_id = state

    def all(self) -> list[Penalty]:
        return list(self._data.values())

    def add(self, penalty: Penalty) -> Penalty:
        stored = replace(penalty, penalty_id=self._next_id)
        self._next_id += 1
        self._data[stored.penalty_id] = stored
        return stored

    def create_if_absent(self, tx: Transaction, penalty: Penalty) -> tuple[Penalty, bool]:
        existing = self.find(penalty.employee_id, penalty.violation_type, penalty.month)
        if existing is not None:
            return existing, False
        return self.add(penalty), True

    def find(self, employee_id: int, violation_type: ViolationType, month: str) -> Optional[Penalty]:
        for p in self._data.values():
            if (p.employee_id, p.violation_type, p.month) == (employee_id, violation_type, month):
                return p
        return None

    def get_for_update(self, tx: Transaction, penalty_id: int) -> Optional[Penalty]:
        return self._data.get(penalty_id)

    def update(self, tx: Transaction, penalty: Penalty) -> None:
        self._data[penalty.penalty_id] = penalty

    def list_for_employee(self, employee_id: int, *, status: Optional[PenaltyStatus] = None, limit: Optional[int] = None):
        items = [p for p in self._data.values() if p.employee_id == employee_id and (status is None or p.status == status)]
        items.sort(key=lambda p: (p.date_incurred, p.penalty_id), reverse=True)
        return items[:limit] if limit is not None else items


class InMemoryViolationHistory(_Snapshotting):
    def __init__(self):
        self._data: dict[tuple[int, str], ViolationHistoryRecord] = {}

    def upsert(self, tx: Transaction, record: ViolationHistoryRecord) -> None:
        self._data[(record.employee_id, record.month)] = record

    def get(self, employee_id: int, month: str) -> Optional[ViolationHistoryRecord]:
        return self._data.get((employee_id, month))


class InMemoryLeaves(_Snapshotting):
    def __init__(self):
        self._data: dict[int, LeaveRequest] = {}
        self._next_id = 100

    def snapshot(self) -> Any:
        return dict(self._data), self._next_id

    def restore(self, state: Any) -> None:
        self._data, self._next_id = state

    def add(self, request: LeaveRequest) -> None:
        self._data[request.request_id] = request

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        return self._data.get(request_id)

    def get_for_update(self, tx: Transaction, request_id: int) -> Optional[LeaveRequest]:
        return self._data.get(request_id)

    def has_overlap(self, tx: Transaction, *, employee_id: int, start_date: date, end_date: date) -> bool:
        return any(
            r.employee_id == employee_id
            and r.status in (RequestStatus.PENDING, RequestStatus.APPROVED)
            and r.start_date <= end_date
            and r.end_date >= start_date
            for r in self._data.values()
        )

    def create(self, tx: Transaction, *, employee_id, leave_type, start_date, end_date, total_days, reason) -> LeaveRequest:
        request = LeaveRequest(
            request_id=self._next_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            status=RequestStatus.PENDING,
            reason=reason,
        )
        self._next_id += 1
        self._data[request.request_id] = request
        return request

    def cancel(self, tx: Transaction, *, request_id, cancelled_at) -> None:
        self._data[request_id] = replace(self._data[request_id], status=RequestStatus.CANCELLED, cancelled_at=cancelled_at)

    def decide(self, tx: Transaction, *, request_id, status, reviewed_by, reviewer_notes, reviewed_at) -> None:
        self._data[request_id] = replace(
            self._data[request_id],
            status=status,
            reviewed_by=reviewed_by,
            reviewer_notes=reviewer_notes,
            reviewed_at=reviewed_at,
        )


@dataclass
class RecordingNotificationSink:
    sent: list[Notification] = field(default_factory=list)
    fail: bool = False

    def queue_notification(self, notification: Notification) -> None:
        if self.fail:
            raise RuntimeError("notification outbox unavailable")
        self.sent.append(notification)


@dataclass
class RecordingAuditSink:
    entries: list[AuditEntry] = field(default_factory=list)
    fail: bool = False

    def record_audit_log(self, entry: AuditEntry) -> None:
        if self.fail:
            raise RuntimeError("audit store unavailable")
        self.entries.append(entry)

    def actions(self) -> list[str]:
        return [e.action for e in self.entries]


class InMemoryTransactionRunner:
    """Runs the unit of work directly; restores every store if it raises."""

    def __init__(self, stores: list[_Snapshotting]):
        self._stores = stores
        self.runs = 0
        self.rollbacks = 0

    def run(self, work: Callable[[Transaction], Any]) -> Any:
        self.runs += 1
        saved = [s.snapshot() for s in self._stores]
        try:
            return work(Transaction(connection=None, cursor=None))
        except Exception:
            self.rollbacks += 1
            for store, state in zip(self._stores, saved):
                store.restore(state)
            raise


@dataclass
class World:
    clock: FakeClock
    settings: FakeSettingsProvider
    attendance: InMemoryAttendance
    employees: InMemoryEmployees
    penalties: InMemoryPenalties
    history: InMemoryViolationHistory
    leaves: InMemoryLeaves
    notifications: RecordingNotificationSink
    audit: RecordingAuditSink
    transactions: InMemoryTransactionRunner
    container: Container


# ---- fixtures ----


@pytest.fixture
def fixed_now() -> datetime:
    # Tuesday, inside the morning window.
    return local(2026, 2, 3, 8, 45)


@pytest.fixture
def company_settings() -> CompanySettings:
    return parse_company_settings(SETTINGS_PAYLOAD)


@pytest.fixture
def employees() -> list[Employee]:
    balances = {LeaveType.FULL: Decimal("14"), LeaveType.MEDICAL: Decimal("7"), LeaveType.MATERNITY: Decimal("0")}
    return [
        Employee(employee_id=1, full_name="Admin User", leave_balances=balances),
        Employee(employee_id=2, full_name="Nimal Perera", leave_balances=balances),
        Employee(employee_id=3, full_name="Kavya Fernando", leave_balances=balances),
        Employee(employee_id=4, full_name="Ruwan Silva", is_active=False, leave_balances=balances),
    ]


@pytest.fixture
def world(fixed_now, company_settings, employees) -> World:
    clock = FakeClock(fixed_now)
    settings = FakeSettingsProvider(company_settings)
    attendance = InMemoryAttendance()
    employee_repo = InMemoryEmployees(employees)
    penalties = InMemoryPenalties()
    history = InMemoryViolationHistory()
    leaves = InMemoryLeaves()
    notification_sink = RecordingNotificationSink()
    audit_sink = RecordingAuditSink()
    transactions = InMemoryTransactionRunner([attendance, employee_repo, penalties, history, leaves])

    container = wire_services(
        conn=None,
        transactions=transactions,
        settings_provider=settings,
        attendance_repo=attendance,
        employees_repo=employee_repo,
        penalties_repo=penalties,
        history_repo=history,
        leaves_repo=leaves,
        notifications=NotificationService(notification_sink),
        audit=AuditService(audit_sink),
        clock=clock,
    )
    return World(
        clock=clock,
        settings=settings,
        attendance=attendance,
        employees=employee_repo,
        penalties=penalties,
        history=history,
        leaves=leaves,
        notifications=notification_sink,
        audit=audit_sink,
        transactions=transactions,
        container=container,
    )


@pytest.fixture
def pending_leave() -> LeaveRequest:
    return LeaveRequest(
        request_id=10,
        employee_id=2,
        leave_type="medical",
        start_date=date(2026, 2, 2),
        end_date=date(2026, 2, 3),
        total_days=Decimal("2"),
        status=RequestStatus.PENDING,
        reason="Flu",
    )


@pytest.fixture
def office() -> Coordinate:
    return OFFICE


@pytest.fixture
def at() -> Callable[..., datetime]:
    return local
