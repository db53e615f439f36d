from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import resolve_timezone
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import SlotName, ViolationType
from ..geofence.model import Coordinate


@dataclass(frozen=True)
class TimeWindow:
    """Slot window in minutes since midnight, company time zone."""

    start: int
    end: int
    label: Optional[str] = None


@dataclass(frozen=True)
class CompanySettings:
    """Company-wide rules the engine reads once per request or job."""

    timezone: str = DEFAULT_TIMEZONE
    workplace_center: Optional[Coordinate] = None
    workplace_radius: Optional[float] = None
    geofencing_enabled: bool = True
    time_windows: Mapping[SlotName, TimeWindow] = field(default_factory=dict)
    grace_periods: Mapping[SlotName, int] = field(default_factory=dict)
    violation_thresholds: Mapping[ViolationType, int] = field(default_factory=dict)
    penalty_amounts: Mapping[ViolationType, Decimal] = field(default_factory=dict)
    # ISO weekday numbers, Monday=1.
    working_days: frozenset[int] = frozenset({1, 2, 3, 4, 5})
    holidays: frozenset[date] = frozenset()

    @property
    def tz(self) -> ZoneInfo:
        return resolve_timezone(self.timezone)

    def window_for(self, slot: SlotName) -> Optional[TimeWindow]:
        return self.time_windows.get(slot)

    def grace_for(self, slot: SlotName) -> int:
        return int(self.grace_periods.get(slot, 0))

    def threshold_for(self, violation: ViolationType) -> Optional[int]:
        return self.violation_thresholds.get(violation)

    def amount_for(self, violation: ViolationType) -> Decimal:
        return self.penalty_amounts.get(violation, Decimal("0"))

    def is_holiday(self, day: date) -> bool:
        return day in self.holidays

    def is_working_day(self, day: date) -> bool:
        return day.isoweekday() in self.working_days and not self.is_holiday(day)
