from __future__ import annotations

from typing import Optional

from ...core.enums import SlotName, SlotStatus
from ...settings.model import TimeWindow
from ..model import SlotOutcome
from .base import SlotStrategy


class ArrivalStrategy(SlotStrategy):
    """Arrival check: on time inside the window, late within grace after it."""

    def classify(self, *, slot: SlotName, actual: int, window: TimeWindow, grace_minutes: int) -> Optional[SlotOutcome]:
        if actual < window.start:
            return None
        if actual <= window.end:
            return SlotOutcome(slot=slot, status=SlotStatus.ON_TIME)
        if actual <= window.end + grace_minutes:
            return SlotOutcome(slot=slot, status=SlotStatus.LATE, late_by_minutes=actual - window.end)
        return None
