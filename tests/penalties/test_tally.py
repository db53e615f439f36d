from datetime import date

from src.attendance_engine.attendance_engine.attendance.model import AttendanceRecord, SlotRecord
from src.attendance_engine.attendance_engine.core.enums import DailyStatus, SlotStatus, ViolationType
from src.attendance_engine.attendance_engine.penalties.tally import as_violation, primary_violation, tally_violations


def test_each_field_counts_independently():
    record = AttendanceRecord(
        employee_id=2,
        work_date=date(2026, 2, 3),
        daily_status=DailyStatus.HALF_DAY_ABSENT,
        morning=SlotRecord(status=SlotStatus.LATE),
        midday=SlotRecord.missed(),
        evening=SlotRecord(status=SlotStatus.EARLY_LEAVE),
    )

    tally = tally_violations([record])[2]

    assert tally.counts == {
        ViolationType.HALF_DAY_ABSENT: 1,
        ViolationType.LATE: 1,
        ViolationType.MISSED: 1,
        ViolationType.EARLY_LEAVE: 1,
    }
    assert tally.total == 4
    assert [o.field for o in tally.occurrences] == ["daily_status", "morning", "midday", "evening"]


def test_clean_days_produce_empty_tally():
    record = AttendanceRecord(
        employee_id=3,
        work_date=date(2026, 2, 3),
        daily_status=DailyStatus.PRESENT,
        morning=SlotRecord(status=SlotStatus.ON_TIME),
        midday=SlotRecord(status=SlotStatus.ON_TIME),
        evening=SlotRecord(status=SlotStatus.ON_TIME),
    )

    tally = tally_violations([record])[3]

    assert tally.counts == {}
    assert tally.total == 0


def test_status_mapping():
    assert as_violation(DailyStatus.ABSENT) == ViolationType.ABSENT
    assert as_violation(SlotStatus.ABSENT) == ViolationType.ABSENT
    assert as_violation(DailyStatus.ON_LEAVE) is None
    assert as_violation(DailyStatus.IN_PROGRESS) is None
    assert as_violation(None) is None


def test_primary_violation_precedence():
    assert primary_violation([ViolationType.LATE, ViolationType.ABSENT]) == ViolationType.ABSENT
    assert primary_violation([ViolationType.MISSED, ViolationType.EARLY_LEAVE]) == ViolationType.EARLY_LEAVE
    assert primary_violation([ViolationType.LATE, ViolationType.HALF_DAY_ABSENT]) == ViolationType.HALF_DAY_ABSENT
    assert primary_violation([]) is None
