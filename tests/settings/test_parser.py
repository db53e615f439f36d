from datetime import date
from decimal import Decimal

import pytest

from src.attendance_engine.attendance_engine.core.enums import SlotName, ViolationType
from src.attendance_engine.attendance_engine.core.exceptions import ValidationError
from src.attendance_engine.attendance_engine.settings.model import TimeWindow
from src.attendance_engine.attendance_engine.settings.parser import parse_company_settings, parse_working_days


def test_full_payload(company_settings):
    assert company_settings.timezone == "Asia/Colombo"
    assert company_settings.workplace_radius == 100
    assert company_settings.window_for(SlotName.MORNING) == TimeWindow(start=510, end=555)
    assert company_settings.grace_for(SlotName.EVENING) == 30
    assert company_settings.threshold_for(ViolationType.ABSENT) == 4
    assert company_settings.threshold_for(ViolationType.MISSED) is None
    assert company_settings.amount_for(ViolationType.HALF_DAY_ABSENT) == Decimal("15")
    assert company_settings.amount_for(ViolationType.MISSED) == Decimal("0")
    assert company_settings.is_holiday(date(2026, 2, 4))
    assert not company_settings.is_working_day(date(2026, 2, 7))


def test_legacy_check_keys_map_to_slots():
    settings = parse_company_settings(
        {
            "geoFencingEnabled": False,
            "timeWindows": {"check1": {"start": "08:30", "end": "09:15", "name": "Morning"}},
            "gracePeriods": {"check1": 10},
        }
    )

    assert settings.window_for(SlotName.MORNING).label == "Morning"
    assert settings.grace_for(SlotName.MORNING) == 10
    assert settings.grace_for(SlotName.MIDDAY) == 0
    assert settings.timezone == "UTC"


def test_working_days_by_name():
    assert parse_working_days({"monday": True, "saturday": True, "sunday": False}) == frozenset({1, 6})


@pytest.mark.parametrize(
    "payload",
    [
        {"timezone": "Mars/Olympus_Mons"},
        {"timeWindows": {"morning": {"start": "9:75", "end": "10:00"}}},
        {"timeWindows": {"morning": {"start": "10:00", "end": "09:00"}}},
        {"timeWindows": {"lunch": {"start": "12:00", "end": "13:00"}}},
        {"gracePeriods": {"morning": -1}},
        {"penaltyRules": {"amounts": {"tardy": 5}}},
        {"workingDays": [0, 8]},
        {"workplaceRadius": "100"},
        {"geoFencingEnabled": "yes"},
        {"holidays": ["2026-02-30"]},
    ],
)
def test_invalid_payloads_are_rejected(payload):
    with pytest.raises(ValidationError):
        parse_company_settings(payload)
