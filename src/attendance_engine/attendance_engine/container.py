from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.finalization import DayFinalizationJob
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditSink
from .audit.service import AuditService
from .core.constants import DEFAULT_TRANSACTION_ATTEMPTS, MAX_CLOCK_SKEW_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import TransactionManager, TransactionRunner
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeDirectory
from .leaves.backfill import LeaveBackfillReconciler
from .leaves.mysql_leave_repository import MySQLLeaveRequestRepository
from .leaves.repository import LeaveRequestRepository
from .leaves.service import LeaveService
from .notifications.mysql_notification_repository import MySQLNotificationSink
from .notifications.service import NotificationService
from .penalties.mysql_penalty_repository import MySQLPenaltyRepository, MySQLViolationHistoryRepository
from .penalties.repository import PenaltyRepository, ViolationHistoryRepository
from .penalties.service import PenaltyService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsProvider


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    transactions: TransactionManager

    settings_provider: SettingsProvider
    attendance_repo: AttendanceRepository
    employees_repo: EmployeeDirectory
    penalties_repo: PenaltyRepository
    history_repo: ViolationHistoryRepository
    leaves_repo: LeaveRequestRepository

    notifications: NotificationService
    audit: AuditService
    attendance_service: AttendanceService
    finalization_job: DayFinalizationJob
    penalty_service: PenaltyService
    leave_backfill: LeaveBackfillReconciler
    leave_service: LeaveService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    transactions: TransactionManager,
    settings_provider: SettingsProvider,
    attendance_repo: AttendanceRepository,
    employees_repo: EmployeeDirectory,
    penalties_repo: PenaltyRepository,
    history_repo: ViolationHistoryRepository,
    leaves_repo: LeaveRequestRepository,
    notifications: NotificationService,
    audit: AuditService,
    max_clock_skew_minutes: int = MAX_CLOCK_SKEW_MINUTES,
    clock=None,
) -> Container:
    """Build every use case on top of the given collaborators."""
    clock_kwargs = {"clock": clock} if clock is not None else {}

    attendance_service = AttendanceService(
        attendance_repo,
        settings_provider,
        transactions,
        notifications,
        audit,
        max_clock_skew_minutes=max_clock_skew_minutes,
        **clock_kwargs,
    )
    finalization_job = DayFinalizationJob(attendance_repo, employees_repo, settings_provider, transactions)
    penalty_service = PenaltyService(
        attendance_repo,
        penalties_repo,
        history_repo,
        settings_provider,
        transactions,
        notifications,
        audit,
        **clock_kwargs,
    )
    leave_backfill = LeaveBackfillReconciler(attendance_repo, transactions, audit)
    leave_service = LeaveService(
        leaves_repo,
        employees_repo,
        settings_provider,
        leave_backfill,
        transactions,
        notifications,
        audit,
        **clock_kwargs,
    )

    return Container(
        conn=conn,
        transactions=transactions,
        settings_provider=settings_provider,
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        penalties_repo=penalties_repo,
        history_repo=history_repo,
        leaves_repo=leaves_repo,
        notifications=notifications,
        audit=audit,
        attendance_service=attendance_service,
        finalization_job=finalization_job,
        penalty_service=penalty_service,
        leave_backfill=leave_backfill,
        leave_service=leave_service,
    )


def build_container(
    *,
    db_config: dict,
    transaction_max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
    max_clock_skew_minutes: int = MAX_CLOCK_SKEW_MINUTES,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return wire_services(
        conn=conn,
        transactions=TransactionRunner(conn, max_attempts=transaction_max_attempts),
        settings_provider=MySQLSettingsRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        employees_repo=MySQLEmployeeRepository(conn),
        penalties_repo=MySQLPenaltyRepository(conn),
        history_repo=MySQLViolationHistoryRepository(conn),
        leaves_repo=MySQLLeaveRequestRepository(conn),
        notifications=NotificationService(MySQLNotificationSink(conn)),
        audit=AuditService(MySQLAuditSink(conn)),
        max_clock_skew_minutes=max_clock_skew_minutes,
    )
