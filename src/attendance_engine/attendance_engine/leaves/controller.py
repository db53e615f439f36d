from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_positive_int
from ..common.web import admin_required, current_identity, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves", methods=["POST"], endpoint="api_submit_leave")
    @login_required
    def api_submit_leave():
        data = json_body()
        leave_type = data.get("leave_type")
        created = container.leave_service.submit_leave_request(
            current_identity().employee_id,
            str(leave_type) if leave_type is not None else "",
            parse_iso_date(data.get("start_date")),
            parse_iso_date(data.get("end_date")),
            str(data.get("reason") or ""),
        )
        return jsonify({"success": True, "request": created.to_dict()}), 201

    @app.route("/api/leaves/<int:request_id>/cancel", methods=["POST"], endpoint="api_cancel_leave")
    @login_required
    def api_cancel_leave(request_id: int):
        cancelled = container.leave_service.cancel_leave_request(current_identity().employee_id, request_id)
        return jsonify({"success": True, "request": cancelled.to_dict()})

    @app.route("/api/admin/leaves/<int:request_id>", methods=["GET"], endpoint="api_admin_get_leave")
    @admin_required
    def api_admin_get_leave(request_id: int):
        leave = container.leave_service.get_leave_request(request_id)
        return jsonify({"success": True, "request": leave.to_dict()})

    @app.route("/api/admin/leaves/<int:request_id>/review", methods=["POST"], endpoint="api_admin_review_leave")
    @admin_required
    def api_admin_review_leave(request_id: int):
        data = json_body()
        decided, backfill = container.leave_service.review_leave(
            request_id,
            data.get("action"),
            current_identity().employee_id,
            data.get("notes"),
        )
        payload = {"success": True, "request": decided.to_dict()}
        if backfill is not None:
            payload["backfill"] = backfill.to_dict()
        return jsonify(payload)

    @app.route("/api/admin/leaves/backfill", methods=["POST"], endpoint="api_admin_leave_backfill")
    @admin_required
    def api_admin_leave_backfill():
        data = json_body()
        result = container.leave_backfill.apply_leave_approval_backfill(
            require_positive_int(data.get("employee_id"), "employee_id"),
            parse_iso_date(data.get("start_date")),
            parse_iso_date(data.get("end_date")),
            require_positive_int(data.get("leave_request_id"), "leave_request_id"),
            current_identity().employee_id,
            notes=data.get("notes"),
        )
        return jsonify({"success": True, **result.to_dict()})
