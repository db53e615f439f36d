from __future__ import annotations

from typing import Optional

from ...core.enums import SlotName, SlotStatus
from ...settings.model import TimeWindow
from ..model import SlotOutcome
from .base import SlotStrategy


class DepartureStrategy(SlotStrategy):
    """Check-out: early leave within grace before the window, late within grace after."""

    def classify(self, *, slot: SlotName, actual: int, window: TimeWindow, grace_minutes: int) -> Optional[SlotOutcome]:
        if actual < window.start - grace_minutes:
            return None
        if actual < window.start:
            return SlotOutcome(slot=slot, status=SlotStatus.EARLY_LEAVE, late_by_minutes=window.start - actual)
        if actual <= window.end:
            return SlotOutcome(slot=slot, status=SlotStatus.ON_TIME)
        if actual <= window.end + grace_minutes:
            return SlotOutcome(slot=slot, status=SlotStatus.LATE, late_by_minutes=actual - window.end)
        return None
