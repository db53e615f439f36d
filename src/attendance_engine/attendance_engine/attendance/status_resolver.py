from __future__ import annotations

from typing import Mapping, Optional

from ..core.enums import SLOT_ORDER, DailyStatus, SlotName, SlotStatus

# Late arrivals and early departures still count as attended.
_NOT_COMPLETED = frozenset({SlotStatus.MISSED})


def count_completed(statuses: Mapping[SlotName, Optional[SlotStatus]]) -> int:
    return sum(1 for slot in SLOT_ORDER if statuses.get(slot) is not None and statuses[slot] not in _NOT_COMPLETED)


def compute_daily_status(statuses: Mapping[SlotName, Optional[SlotStatus]], *, finalizing: bool) -> DailyStatus:
    """Aggregate the day's slot outcomes.

    While clock-ins are still possible the day stays in progress. At
    finalization a single completed slot still counts as absent.
    """
    if not finalizing:
        return DailyStatus.IN_PROGRESS

    completed = count_completed(statuses)
    if completed == 3:
        return DailyStatus.PRESENT
    if completed == 2:
        return DailyStatus.HALF_DAY_ABSENT
    return DailyStatus.ABSENT
