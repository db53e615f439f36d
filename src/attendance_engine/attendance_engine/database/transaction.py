"""Explicit unit-of-work objects for read-modify-write paths.

Repositories never open their own connection for transactional work; the
orchestrating service asks a TransactionRunner for a Transaction and passes it
down. The runner retries the whole unit when InnoDB reports a deadlock or a
lock wait timeout.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, TypeVar

import mysql.connector

from ..core.constants import (
    DEFAULT_TRANSACTION_ATTEMPTS,
    DEFAULT_TRANSACTION_BACKOFF_SECONDS,
    RETRYABLE_MYSQL_ERRNOS,
)
from ..core.exceptions import ConflictError
from .connection import DatabaseConnection
from .mysql_base import fetchall, fetchone

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Transaction:
    """One open connection + cursor. Valid only inside TransactionRunner.run."""

    connection: Any
    cursor: Any

    def execute(self, sql: str, params: tuple = ()) -> int:
        self.cursor.execute(sql, params)
        return self.cursor.rowcount

    def insert(self, sql: str, params: tuple = ()) -> int:
        """Run an INSERT and return the new AUTO_INCREMENT id."""
        self.cursor.execute(sql, params)
        return int(self.cursor.lastrowid)

    def fetchone(self, sql: str, params: tuple = ()) -> Optional[dict]:
        self.cursor.execute(sql, params)
        return fetchone(self.cursor)

    def fetchall(self, sql: str, params: tuple = ()) -> list[dict]:
        self.cursor.execute(sql, params)
        return fetchall(self.cursor)


class TransactionManager(Protocol):
    def run(self, work: Callable[[Transaction], T]) -> T:
        raise NotImplementedError


class TransactionRunner(TransactionManager):
    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        max_attempts: int = DEFAULT_TRANSACTION_ATTEMPTS,
        backoff_seconds: float = DEFAULT_TRANSACTION_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._conn_factory = conn_factory
        self._max_attempts = max(1, int(max_attempts))
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    def run(self, work: Callable[[Transaction], T]) -> T:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return self._run_once(work)
            except mysql.connector.errors.DatabaseError as exc:
                if exc.errno not in RETRYABLE_MYSQL_ERRNOS:
                    raise
                logger.warning(
                    "Transaction conflict (errno=%s), attempt %d/%d", exc.errno, attempt, self._max_attempts
                )
                if attempt < self._max_attempts:
                    self._sleep(self._backoff_seconds * attempt)

        raise ConflictError(f"Transaction aborted after {self._max_attempts} conflicting attempts")

    def _run_once(self, work: Callable[[Transaction], T]) -> T:
        conn = self._conn_factory.connect()
        try:
            cur = conn.cursor(dictionary=True)
            try:
                conn.start_transaction()
                result = work(Transaction(connection=conn, cursor=cur))
                conn.commit()
                return result
            finally:
                cur.close()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
