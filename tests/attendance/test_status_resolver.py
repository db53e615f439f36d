import pytest

from src.attendance_engine.attendance_engine.attendance.status_resolver import compute_daily_status, count_completed
from src.attendance_engine.attendance_engine.core.enums import DailyStatus, SlotName, SlotStatus

M, D, E = SlotName.MORNING, SlotName.MIDDAY, SlotName.EVENING


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ({M: SlotStatus.ON_TIME, D: SlotStatus.LATE, E: SlotStatus.EARLY_LEAVE}, DailyStatus.PRESENT),
        ({M: SlotStatus.ON_TIME, D: SlotStatus.ON_TIME, E: SlotStatus.MISSED}, DailyStatus.HALF_DAY_ABSENT),
        ({M: SlotStatus.LATE, D: None, E: SlotStatus.ON_TIME}, DailyStatus.HALF_DAY_ABSENT),
        ({M: SlotStatus.ON_TIME, D: SlotStatus.MISSED, E: SlotStatus.MISSED}, DailyStatus.ABSENT),
        ({M: SlotStatus.MISSED, D: SlotStatus.MISSED, E: SlotStatus.MISSED}, DailyStatus.ABSENT),
        ({M: SlotStatus.ABSENT, D: SlotStatus.ON_TIME, E: SlotStatus.ON_TIME}, DailyStatus.PRESENT),
        ({}, DailyStatus.ABSENT),
    ],
)
def test_finalizing_status(statuses, expected):
    assert compute_daily_status(statuses, finalizing=True) == expected


def test_not_finalizing_is_always_in_progress():
    statuses = {M: SlotStatus.ON_TIME, D: SlotStatus.ON_TIME, E: SlotStatus.ON_TIME}

    assert compute_daily_status(statuses, finalizing=False) == DailyStatus.IN_PROGRESS
    assert compute_daily_status({}, finalizing=False) == DailyStatus.IN_PROGRESS


def test_count_completed_ignores_missed_and_unset():
    assert count_completed({M: SlotStatus.LATE, D: SlotStatus.MISSED, E: None}) == 1
    assert count_completed({M: SlotStatus.ABSENT, D: SlotStatus.EARLY_LEAVE, E: None}) == 2
