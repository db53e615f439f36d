from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ...core.enums import SlotName
from ...settings.model import TimeWindow
from ..model import SlotOutcome


class SlotStrategy(ABC):
    """Strategy Pattern: how a minute-of-day maps to a slot outcome.

    Returning None means the instant does not belong to this slot; the caller
    then tries the next configured slot.
    """

    @abstractmethod
    def classify(self, *, slot: SlotName, actual: int, window: TimeWindow, grace_minutes: int) -> Optional[SlotOutcome]:
        raise NotImplementedError
