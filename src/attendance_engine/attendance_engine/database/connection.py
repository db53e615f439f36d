from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import mysql.connector

DEFAULT_DATABASE = "attendance_engine"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings DB_CONFIG dict, filling local-dev defaults."""
        return cls(
            host=str(raw.get("host", "localhost")),
            port=int(raw.get("port", 3306)),
            user=str(raw.get("user", "root")),
            password=str(raw.get("password", "")),
            database=str(raw.get("database", DEFAULT_DATABASE)),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Connection factory shared by the repositories and the TransactionRunner.

    Every call opens a fresh connection; callers close it when their statement
    or unit of work ends. Sessions run in UTC so CURRENT_TIMESTAMP defaults
    line up with the naive-UTC DATETIME values the repositories write.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    def connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
            time_zone="+00:00",
        )
