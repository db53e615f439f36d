from __future__ import annotations

import logging
from typing import Any, Optional

from .model import AuditEntry
from .repository import AuditSink

logger = logging.getLogger(__name__)


class AuditService:
    """Fire-and-forget audit trail, used after the audited change committed."""

    def __init__(self, sink: AuditSink):
        self._sink = sink

    def record(
        self,
        *,
        action: str,
        resource: str,
        resource_id: str,
        performed_by: Optional[int],
        reason: Optional[str] = None,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        entry = AuditEntry(
            action=action,
            resource=resource,
            resource_id=resource_id,
            performed_by=performed_by,
            reason=reason,
            old_values=old_values,
            new_values=new_values,
            metadata=metadata,
        )
        try:
            self._sink.record_audit_log(entry)
        except Exception:
            logger.exception("Failed to record audit log %s for %s/%s", action, resource, resource_id)
