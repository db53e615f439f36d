from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class Notification:
    employee_id: int
    title: str
    message: str
    category: str
    type: str = "info"
    related_id: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
