"""Request identity, role guards and JSON error mapping shared by the controllers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import Flask, g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    GeofenceError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

EMPLOYEE_HEADER = "X-Employee-Id"
ROLE_HEADER = "X-Role"

# Most specific first.
STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PreconditionError, 422),
)


@dataclass(frozen=True)
class Identity:
    """Caller as asserted by the gateway in front of the API."""

    employee_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _identity_from_headers() -> Identity:
    raw_id = (request.headers.get(EMPLOYEE_HEADER) or "").strip()
    if not raw_id:
        raise AuthorizationError("Authentication required.")
    try:
        employee_id = int(raw_id)
    except ValueError:
        raise AuthorizationError("Authentication required.")

    try:
        role = Role((request.headers.get(ROLE_HEADER) or Role.EMPLOYEE.value).strip().lower())
    except ValueError:
        raise AuthorizationError("Unknown role.")
    return Identity(employee_id=employee_id, role=role)


def current_identity() -> Identity:
    return g.identity


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.identity = _identity_from_headers()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        identity = _identity_from_headers()
        if not identity.is_admin:
            raise AuthorizationError("Admin role required.")
        g.identity = identity
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def status_for(exc: DomainError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        logger.info("%s %s -> %s %s: %s", request.method, request.path, status, exc.code, exc)
        payload: dict[str, Any] = {"success": False, "code": exc.code, "message": str(exc)}
        if isinstance(exc, GeofenceError):
            payload["distance_meters"] = round(exc.distance_meters, 2)
        return jsonify(payload), status
