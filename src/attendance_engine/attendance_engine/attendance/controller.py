from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..common.datetime_utils import local_date, now_utc, parse_instant, parse_iso_date
from ..common.validators import require_bool
from ..common.web import admin_required, current_identity, json_body, login_required
from ..container import Container
from ..core.enums import DailyStatus, SlotName, SlotStatus
from ..core.exceptions import ValidationError
from ..geofence.model import Coordinate
from .model import SlotRecord


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def _parse_slots(raw: Any) -> dict[SlotName, SlotRecord]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError("slots must be an object keyed by slot name")

    slots: dict[SlotName, SlotRecord] = {}
    for name, value in raw.items():
        slot = _parse_enum(SlotName, name, "slot")
        if not isinstance(value, dict):
            raise ValidationError(f"slots.{name} must be an object")
        timestamp = value.get("timestamp")
        location = value.get("location")
        slots[slot] = SlotRecord(
            status=_parse_enum(SlotStatus, value.get("status"), f"slots.{name}.status"),
            timestamp=parse_instant(timestamp) if timestamp else None,
            location=Coordinate.from_mapping(location, f"slots.{name}.location") if location else None,
        )
    return slots


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="api_clock_in")
    @login_required
    def api_clock_in():
        data = json_body()
        timestamp: Optional[str] = data.get("timestamp")
        location = data.get("location")
        result = container.attendance_service.handle_clock_in(
            current_identity().employee_id,
            parse_instant(timestamp) if timestamp else None,
            Coordinate.from_mapping(location) if location is not None else None,
            mock_location=require_bool(data.get("is_mock_location", False), "is_mock_location"),
        )
        return jsonify(result.to_dict())

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @login_required
    def api_attendance_history():
        limit = request.args.get("limit", default=30, type=int)
        if limit is None or not 1 <= limit <= 100:
            raise ValidationError("limit must be between 1 and 100")
        items = container.attendance_service.get_history(current_identity().employee_id, limit=limit)
        return jsonify({"success": True, "items": items})

    @app.route("/api/admin/attendance/manual", methods=["POST"], endpoint="api_admin_manual_attendance")
    @admin_required
    def api_admin_manual_attendance():
        data = json_body()
        employee_id = data.get("employee_id")
        if not isinstance(employee_id, int) or isinstance(employee_id, bool):
            raise ValidationError("employee_id must be an integer")

        record = container.attendance_service.set_manual_attendance(
            employee_id=employee_id,
            work_date=parse_iso_date(data.get("date")),
            daily_status=_parse_enum(DailyStatus, data.get("status"), "status"),
            reason=str(data.get("reason") or ""),
            performed_by=current_identity().employee_id,
            slots=_parse_slots(data.get("slots")),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "record": record.to_dict()})

    @app.route("/api/admin/attendance/finalize", methods=["POST"], endpoint="api_admin_finalize")
    @admin_required
    def api_admin_finalize():
        data = json_body()
        if data.get("date"):
            work_date = parse_iso_date(data["date"])
        else:
            tz = container.settings_provider.get_company_settings().tz
            work_date = local_date(now_utc(), tz) - timedelta(days=1)

        result = container.finalization_job.finalize_attendance(work_date)
        return jsonify({"success": True, "date": work_date.isoformat(), **result.to_dict()})
