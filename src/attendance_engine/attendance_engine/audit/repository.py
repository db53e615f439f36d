from __future__ import annotations

from typing import Protocol

from .model import AuditEntry


class AuditSink(Protocol):
    def record_audit_log(self, entry: AuditEntry) -> None:
        raise NotImplementedError
