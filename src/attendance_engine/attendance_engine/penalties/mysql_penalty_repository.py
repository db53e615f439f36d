from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PenaltyStatus, ViolationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, from_db_datetime, load_json, to_db_datetime
from ..database.transaction import Transaction
from .model import Penalty, PenaltyReference, ViolationHistoryRecord, ViolationOccurrence
from .repository import PenaltyRepository, ViolationHistoryRepository

_PENALTY_SELECT = """
    SELECT penalty_id, employee_id, violation_type, penalty_month, amount, status, violation_count,
           date_incurred, acknowledgement_note, acknowledged_at, waived_reason, waived_by, waived_at,
           paid_by, paid_at
    FROM penalties
"""


def _row_to_penalty(r: dict) -> Penalty:
    return Penalty(
        penalty_id=int(r["penalty_id"]),
        employee_id=int(r["employee_id"]),
        violation_type=ViolationType(r["violation_type"]),
        month=r["penalty_month"],
        amount=Decimal(str(r["amount"])),
        status=PenaltyStatus(r["status"]),
        violation_count=int(r["violation_count"]),
        date_incurred=from_db_datetime(r["date_incurred"]),
        acknowledgement_note=r.get("acknowledgement_note"),
        acknowledged_at=from_db_datetime(r.get("acknowledged_at")),
        waived_reason=r.get("waived_reason"),
        waived_by=int(r["waived_by"]) if r.get("waived_by") is not None else None,
        waived_at=from_db_datetime(r.get("waived_at")),
        paid_by=int(r["paid_by"]) if r.get("paid_by") is not None else None,
        paid_at=from_db_datetime(r.get("paid_at")),
    )


class MySQLPenaltyRepository(PenaltyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_if_absent(self, tx: Transaction, penalty: Penalty) -> tuple[Penalty, bool]:
        inserted = tx.execute(
            """
            INSERT IGNORE INTO penalties(
                employee_id, violation_type, penalty_month, amount, status, violation_count, date_incurred
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(penalty.employee_id),
                penalty.violation_type.value,
                penalty.month,
                penalty.amount,
                penalty.status.value,
                int(penalty.violation_count),
                to_db_datetime(penalty.date_incurred),
            ),
        )
        r = tx.fetchone(
            f"{_PENALTY_SELECT} WHERE employee_id=%s AND violation_type=%s AND penalty_month=%s",
            (int(penalty.employee_id), penalty.violation_type.value, penalty.month),
        )
        return _row_to_penalty(r), inserted > 0

    def get_for_update(self, tx: Transaction, penalty_id: int) -> Optional[Penalty]:
        r = tx.fetchone(f"{_PENALTY_SELECT} WHERE penalty_id=%s FOR UPDATE", (int(penalty_id),))
        return _row_to_penalty(r) if r else None

    def update(self, tx: Transaction, penalty: Penalty) -> None:
        tx.execute(
            """
            UPDATE penalties
            SET status=%s, acknowledgement_note=%s, acknowledged_at=%s,
                waived_reason=%s, waived_by=%s, waived_at=%s,
                paid_by=%s, paid_at=%s, updated_at=CURRENT_TIMESTAMP
            WHERE penalty_id=%s
            """,
            (
                penalty.status.value,
                penalty.acknowledgement_note,
                to_db_datetime(penalty.acknowledged_at),
                penalty.waived_reason,
                penalty.waived_by,
                to_db_datetime(penalty.waived_at),
                penalty.paid_by,
                to_db_datetime(penalty.paid_at),
                int(penalty.penalty_id),
            ),
        )

    def list_for_employee(
        self,
        employee_id: int,
        *,
        status: Optional[PenaltyStatus] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Penalty]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        sql = f"{_PENALTY_SELECT} WHERE {' AND '.join(clauses)} ORDER BY date_incurred DESC, penalty_id DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_penalty(r) for r in fetchall(cur)]


class MySQLViolationHistoryRepository(ViolationHistoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, tx: Transaction, record: ViolationHistoryRecord) -> None:
        tx.execute(
            """
            INSERT INTO violation_history(
                employee_id, history_month, counts, total_count, occurrences,
                primary_violation, penalty_triggered, penalties
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                counts=VALUES(counts), total_count=VALUES(total_count), occurrences=VALUES(occurrences),
                primary_violation=VALUES(primary_violation), penalty_triggered=VALUES(penalty_triggered),
                penalties=VALUES(penalties), updated_at=CURRENT_TIMESTAMP
            """,
            (
                int(record.employee_id),
                record.month,
                dump_json({vt.value: n for vt, n in record.counts.items()}),
                record.total_count,
                dump_json([o.to_dict() for o in record.occurrences]),
                record.primary_violation.value if record.primary_violation else None,
                int(record.penalty_triggered),
                dump_json([p.to_dict() for p in record.penalties]),
            ),
        )

    def get(self, employee_id: int, month: str) -> Optional[ViolationHistoryRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, history_month, counts, occurrences, primary_violation, penalties
                FROM violation_history
                WHERE employee_id=%s AND history_month=%s
                """,
                (int(employee_id), month),
            )
            r = fetchone(cur)
        if not r:
            return None

        occurrences = tuple(
            ViolationOccurrence(
                work_date=date.fromisoformat(o["work_date"]),
                field=o["field"],
                violation_type=ViolationType(o["violation_type"]),
            )
            for o in load_json(r["occurrences"]) or []
        )
        penalties = tuple(
            PenaltyReference(
                penalty_id=p.get("penalty_id"),
                violation_type=ViolationType(p["violation_type"]),
                amount=Decimal(p["amount"]),
                violation_count=int(p["violation_count"]),
            )
            for p in load_json(r["penalties"]) or []
        )
        return ViolationHistoryRecord(
            employee_id=int(r["employee_id"]),
            month=r["history_month"],
            counts={ViolationType(k): int(v) for k, v in (load_json(r["counts"]) or {}).items()},
            occurrences=occurrences,
            primary_violation=ViolationType(r["primary_violation"]) if r.get("primary_violation") else None,
            penalties=penalties,
        )
