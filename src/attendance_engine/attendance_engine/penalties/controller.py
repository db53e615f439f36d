from __future__ import annotations

from typing import Any

from flask import Flask, jsonify, request

from ..common.datetime_utils import local_date, now_utc, previous_month_key
from ..common.web import admin_required, current_identity, json_body, login_required
from ..container import Container
from ..core.constants import DEFAULT_PENALTY_PAGE_SIZE
from ..core.enums import PenaltyStatus
from ..core.exceptions import ValidationError


def _optional_employee_id(value: Any):
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("employee_id must be an integer")
    return value


def register(app: Flask, container: Container) -> None:
    @app.route("/api/penalties", methods=["GET"], endpoint="api_penalties")
    @login_required
    def api_penalties():
        raw_status = request.args.get("status")
        status = None
        if raw_status:
            try:
                status = PenaltyStatus(raw_status)
            except ValueError:
                raise ValidationError(f"Unknown penalty status {raw_status!r}")

        try:
            limit = int(request.args.get("limit", DEFAULT_PENALTY_PAGE_SIZE))
        except ValueError:
            raise ValidationError("limit must be an integer")

        items = container.penalty_service.list_employee_penalties(
            current_identity().employee_id, status=status, limit=limit
        )
        return jsonify({"success": True, "items": [p.to_dict() for p in items]})

    @app.route("/api/penalties/summary", methods=["GET"], endpoint="api_penalty_summary")
    @login_required
    def api_penalty_summary():
        summary = container.penalty_service.get_penalty_summary(current_identity().employee_id)
        return jsonify({"success": True, **summary.to_dict()})

    @app.route("/api/penalties/history", methods=["GET"], endpoint="api_violation_history")
    @login_required
    def api_violation_history():
        month = request.args.get("month")
        if not month:
            tz = container.settings_provider.get_company_settings().tz
            month = previous_month_key(local_date(now_utc(), tz))
        record = container.penalty_service.get_violation_history(current_identity().employee_id, month)
        return jsonify({"success": True, "history": record.to_dict()})

    @app.route("/api/penalties/<int:penalty_id>/acknowledge", methods=["POST"], endpoint="api_acknowledge_penalty")
    @login_required
    def api_acknowledge_penalty(penalty_id: int):
        data = json_body()
        penalty = container.penalty_service.acknowledge_penalty(
            current_identity().employee_id, penalty_id, data.get("note")
        )
        return jsonify({"success": True, "penalty": penalty.to_dict()})

    @app.route("/api/admin/penalties/calculate", methods=["POST"], endpoint="api_admin_calculate_penalties")
    @admin_required
    def api_admin_calculate_penalties():
        data = json_body()
        month = data.get("month")
        if not month:
            tz = container.settings_provider.get_company_settings().tz
            month = previous_month_key(local_date(now_utc(), tz))

        result = container.penalty_service.calculate_monthly_violations(
            str(month), _optional_employee_id(data.get("employee_id"))
        )
        return jsonify({"success": True, "month": month, **result.to_dict()})

    @app.route("/api/admin/penalties/<int:penalty_id>/waive", methods=["POST"], endpoint="api_admin_waive_penalty")
    @admin_required
    def api_admin_waive_penalty(penalty_id: int):
        data = json_body()
        penalty = container.penalty_service.waive_penalty(
            penalty_id, str(data.get("reason") or ""), current_identity().employee_id
        )
        return jsonify({"success": True, "penalty": penalty.to_dict()})

    @app.route("/api/admin/penalties/<int:penalty_id>/paid", methods=["POST"], endpoint="api_admin_penalty_paid")
    @admin_required
    def api_admin_penalty_paid(penalty_id: int):
        penalty = container.penalty_service.mark_penalty_paid(penalty_id, current_identity().employee_id)
        return jsonify({"success": True, "penalty": penalty.to_dict()})
