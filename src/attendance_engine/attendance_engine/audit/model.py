from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class AuditEntry:
    action: str
    resource: str
    resource_id: str
    performed_by: Optional[int]
    status: str = "success"
    reason: Optional[str] = None
    old_values: Optional[dict[str, Any]] = None
    new_values: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None
