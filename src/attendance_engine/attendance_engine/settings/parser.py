"""Turn the stored settings payload into a CompanySettings value.

The payload is the JSON document administrators maintain from the dashboard,
so keys follow its camelCase naming.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from ..common.datetime_utils import parse_hhmm, parse_iso_date, resolve_timezone
from ..common.validators import require_number
from ..core.constants import DEFAULT_TIMEZONE
from ..core.enums import SlotName, ViolationType
from ..core.exceptions import ValidationError
from ..geofence.model import Coordinate
from .model import CompanySettings, TimeWindow

# Older payloads named the slots by position.
_LEGACY_SLOT_KEYS = {
    "check1": SlotName.MORNING,
    "check2": SlotName.MIDDAY,
    "check3": SlotName.EVENING,
}

_WEEKDAY_NAMES = {
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
    "sunday": 7,
}


def _as_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"{field_name} must be an object")
    return value


def _slot(key: str, field_name: str) -> SlotName:
    if key in _LEGACY_SLOT_KEYS:
        return _LEGACY_SLOT_KEYS[key]
    try:
        return SlotName(key)
    except ValueError:
        raise ValidationError(f"{field_name}.{key} is not a known slot")


def _violation(key: str, field_name: str) -> ViolationType:
    try:
        return ViolationType(key)
    except ValueError:
        raise ValidationError(f"{field_name}.{key} is not a known violation type")


def _non_negative(value: Any, field_name: str) -> float:
    number = require_number(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} must be greater than or equal to 0")
    return number


def parse_time_windows(raw: Any) -> dict[SlotName, TimeWindow]:
    windows: dict[SlotName, TimeWindow] = {}
    for key, value in _as_mapping(raw, "timeWindows").items():
        slot = _slot(key, "timeWindows")
        window = _as_mapping(value, f"timeWindows.{key}")
        start = parse_hhmm(window.get("start"))
        end = parse_hhmm(window.get("end"))
        if end < start:
            raise ValidationError(f"timeWindows.{key}.end must not be before start")
        label = window.get("label") or window.get("name")
        windows[slot] = TimeWindow(start=start, end=end, label=label)
    return windows


def parse_grace_periods(raw: Any) -> dict[SlotName, int]:
    return {
        _slot(key, "gracePeriods"): int(_non_negative(value, f"gracePeriods.{key}"))
        for key, value in _as_mapping(raw, "gracePeriods").items()
    }


def parse_working_days(raw: Any) -> frozenset[int]:
    if raw is None:
        return CompanySettings.working_days
    if isinstance(raw, Mapping):
        days = set()
        for name, enabled in raw.items():
            number = _WEEKDAY_NAMES.get(str(name).lower())
            if number is None:
                raise ValidationError(f"workingDays.{name} is not a weekday")
            if enabled:
                days.add(number)
        return frozenset(days)
    if isinstance(raw, (list, tuple)):
        days = set()
        for value in raw:
            if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 7:
                raise ValidationError("workingDays must contain ISO weekday numbers 1-7")
            days.add(value)
        return frozenset(days)
    raise ValidationError("workingDays must be a list or an object")


def parse_penalty_rules(raw: Any) -> tuple[dict[ViolationType, int], dict[ViolationType, Decimal]]:
    rules = _as_mapping(raw, "penaltyRules")
    thresholds = {
        _violation(key, "penaltyRules.violationThresholds"): int(
            _non_negative(value, f"penaltyRules.violationThresholds.{key}")
        )
        for key, value in _as_mapping(rules.get("violationThresholds"), "penaltyRules.violationThresholds").items()
    }

    amounts: dict[ViolationType, Decimal] = {}
    for key, value in _as_mapping(rules.get("amounts"), "penaltyRules.amounts").items():
        _non_negative(value, f"penaltyRules.amounts.{key}")
        try:
            amounts[_violation(key, "penaltyRules.amounts")] = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"penaltyRules.amounts.{key} must be a valid number")
    return thresholds, amounts


def parse_company_settings(raw: Mapping[str, Any]) -> CompanySettings:
    raw = _as_mapping(raw, "settings")
    timezone_name = raw.get("timezone") or DEFAULT_TIMEZONE
    resolve_timezone(timezone_name)

    center_raw = raw.get("workplaceCenter", raw.get("workplace_center"))
    center = Coordinate.from_mapping(center_raw, "workplaceCenter") if center_raw is not None else None

    radius_raw = raw.get("workplaceRadius", raw.get("workplace_radius"))
    radius = _non_negative(radius_raw, "workplaceRadius") if radius_raw is not None else None

    enabled = raw.get("geoFencingEnabled", True)
    if not isinstance(enabled, bool):
        raise ValidationError("geoFencingEnabled must be a boolean")

    thresholds, amounts = parse_penalty_rules(raw.get("penaltyRules"))

    return CompanySettings(
        timezone=timezone_name,
        workplace_center=center,
        workplace_radius=radius,
        geofencing_enabled=enabled,
        time_windows=parse_time_windows(raw.get("timeWindows")),
        grace_periods=parse_grace_periods(raw.get("gracePeriods")),
        violation_thresholds=thresholds,
        penalty_amounts=amounts,
        working_days=parse_working_days(raw.get("workingDays")),
        holidays=frozenset(parse_iso_date(value) for value in raw.get("holidays") or []),
    )
