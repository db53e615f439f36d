from __future__ import annotations

import pytest
from mysql.connector.errors import DatabaseError

from src.attendance_engine.attendance_engine.core.exceptions import ConflictError, ValidationError
from src.attendance_engine.attendance_engine.database.transaction import TransactionRunner


class FakeCursor:
    def __init__(self):
        self.closed = False
        self.executed: list[tuple[str, tuple]] = []
        self.rowcount = 1

    def execute(self, sql, params=()):
        self.executed.append((sql, params))

    def fetchone(self):
        return {"value": 1}

    def fetchall(self):
        return [{"value": 1}]

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self):
        self.started = self.committed = self.rolled_back = self.closed = 0
        self.cursors: list[FakeCursor] = []

    def cursor(self, dictionary=False):
        cur = FakeCursor()
        self.cursors.append(cur)
        return cur

    def start_transaction(self):
        self.started += 1

    def commit(self):
        self.committed += 1

    def rollback(self):
        self.rolled_back += 1

    def close(self):
        self.closed += 1


class FakeConnectionFactory:
    def __init__(self):
        self.connections: list[FakeConnection] = []

    def connect(self) -> FakeConnection:
        conn = FakeConnection()
        self.connections.append(conn)
        return conn


def _deadlocking(times: int, errno: int = 1213):
    calls = {"n": 0}

    def work(tx):
        calls["n"] += 1
        if calls["n"] <= times:
            raise DatabaseError(msg="Deadlock found when trying to get lock", errno=errno)
        return tx.fetchone("SELECT 1 AS value")

    return work


def test_commits_and_closes_on_success():
    factory = FakeConnectionFactory()
    runner = TransactionRunner(factory)

    assert runner.run(lambda tx: tx.execute("UPDATE t SET x=1")) == 1

    [conn] = factory.connections
    assert (conn.started, conn.committed, conn.rolled_back, conn.closed) == (1, 1, 0, 1)
    assert conn.cursors[0].closed


def test_deadlock_is_retried_with_linear_backoff():
    factory = FakeConnectionFactory()
    sleeps: list[float] = []
    runner = TransactionRunner(factory, max_attempts=3, backoff_seconds=0.01, sleep=sleeps.append)

    assert runner.run(_deadlocking(times=2)) == {"value": 1}

    assert len(factory.connections) == 3
    assert [c.rolled_back for c in factory.connections] == [1, 1, 0]
    assert sleeps == [pytest.approx(0.01), pytest.approx(0.02)]


def test_lock_wait_timeout_is_retried():
    factory = FakeConnectionFactory()
    runner = TransactionRunner(factory, max_attempts=2, sleep=lambda s: None)

    assert runner.run(_deadlocking(times=1, errno=1205)) == {"value": 1}


def test_exhausted_retries_raise_conflict():
    factory = FakeConnectionFactory()
    runner = TransactionRunner(factory, max_attempts=3, sleep=lambda s: None)

    with pytest.raises(ConflictError):
        runner.run(_deadlocking(times=10))

    assert len(factory.connections) == 3
    assert all(c.closed == 1 for c in factory.connections)


def test_domain_errors_are_not_retried():
    factory = FakeConnectionFactory()
    runner = TransactionRunner(factory, max_attempts=5, sleep=lambda s: None)

    def work(tx):
        raise ValidationError("bad input")

    with pytest.raises(ValidationError):
        runner.run(work)

    [conn] = factory.connections
    assert (conn.committed, conn.rolled_back, conn.closed) == (0, 1, 1)


def test_other_database_errors_propagate():
    factory = FakeConnectionFactory()
    runner = TransactionRunner(factory, max_attempts=5, sleep=lambda s: None)

    with pytest.raises(DatabaseError):
        runner.run(_deadlocking(times=1, errno=1062))

    assert len(factory.connections) == 1
