from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import SlotName, SlotRole
from .strategies.arrival_strategy import ArrivalStrategy
from .strategies.base import SlotStrategy
from .strategies.departure_strategy import DepartureStrategy

SLOT_ROLES: dict[SlotName, SlotRole] = {
    SlotName.MORNING: SlotRole.ARRIVAL,
    SlotName.MIDDAY: SlotRole.ARRIVAL,
    SlotName.EVENING: SlotRole.DEPARTURE,
}


@dataclass
class SlotStrategyFactory:
    """Factory Pattern: pick the classification strategy for a slot's role."""

    def for_role(self, role: SlotRole) -> SlotStrategy:
        if role == SlotRole.DEPARTURE:
            return DepartureStrategy()
        return ArrivalStrategy()

    def for_slot(self, slot: SlotName) -> SlotStrategy:
        return self.for_role(SLOT_ROLES[slot])
