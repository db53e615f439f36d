from src.attendance_engine.attendance_engine.attendance.factory import SlotStrategyFactory
from src.attendance_engine.attendance_engine.attendance.strategies.arrival_strategy import ArrivalStrategy
from src.attendance_engine.attendance_engine.attendance.strategies.departure_strategy import DepartureStrategy
from src.attendance_engine.attendance_engine.core.enums import SlotName, SlotStatus
from src.attendance_engine.attendance_engine.settings.model import TimeWindow


def test_factory_picks_arrival_for_morning_and_midday():
    factory = SlotStrategyFactory()

    assert isinstance(factory.for_slot(SlotName.MORNING), ArrivalStrategy)
    assert isinstance(factory.for_slot(SlotName.MIDDAY), ArrivalStrategy)


def test_factory_picks_departure_for_evening():
    factory = SlotStrategyFactory()

    assert isinstance(factory.for_slot(SlotName.EVENING), DepartureStrategy)


def test_arrival_rejects_before_window_start():
    window = TimeWindow(start=510, end=555)

    outcome = ArrivalStrategy().classify(slot=SlotName.MORNING, actual=509, window=window, grace_minutes=30)

    assert outcome is None


def test_departure_early_leave_measures_minutes_before_start():
    window = TimeWindow(start=1005, end=1050)

    outcome = DepartureStrategy().classify(slot=SlotName.EVENING, actual=990, window=window, grace_minutes=30)

    assert outcome is not None
    assert outcome.status == SlotStatus.EARLY_LEAVE
    assert outcome.late_by_minutes == 15
