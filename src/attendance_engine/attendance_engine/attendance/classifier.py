"""Time-window classification of a single clock-in instant."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import minute_of_day
from ..core.enums import SLOT_ORDER, SlotName
from ..settings.model import CompanySettings, TimeWindow
from .factory import SlotStrategyFactory
from .model import SlotOutcome

_default_factory = SlotStrategyFactory()


def classify_instant(
    instant: datetime,
    slot: SlotName,
    window: TimeWindow,
    grace_minutes: int,
    tz: ZoneInfo,
    *,
    factory: SlotStrategyFactory = _default_factory,
) -> Optional[SlotOutcome]:
    actual = minute_of_day(instant, tz)
    strategy = factory.for_slot(slot)
    return strategy.classify(slot=slot, actual=actual, window=window, grace_minutes=int(grace_minutes))


def resolve_slot_outcome(
    instant: datetime,
    settings: CompanySettings,
    tz: ZoneInfo,
    *,
    factory: SlotStrategyFactory = _default_factory,
) -> Optional[SlotOutcome]:
    """First slot, in fixed order, that accepts the instant."""
    for slot in SLOT_ORDER:
        window = settings.window_for(slot)
        if window is None:
            continue
        outcome = classify_instant(instant, slot, window, settings.grace_for(slot), tz, factory=factory)
        if outcome is not None:
            return outcome
    return None
