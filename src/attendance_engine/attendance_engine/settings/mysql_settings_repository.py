from __future__ import annotations

import json

from ..core.exceptions import PreconditionError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import CompanySettings
from .parser import parse_company_settings
from .repository import SettingsProvider

SETTINGS_ROW_ID = "main"


class MySQLSettingsRepository(SettingsProvider):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_company_settings(self) -> CompanySettings:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT payload FROM company_settings WHERE settings_id=%s", (SETTINGS_ROW_ID,))
            r = fetchone(cur)
        if not r:
            raise PreconditionError("Company settings not configured.")

        payload = r["payload"]
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8")
        if isinstance(payload, str):
            payload = json.loads(payload)
        return parse_company_settings(payload)
