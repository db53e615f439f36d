from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is malformed or missing."""

    code = "invalid_argument"


class PreconditionError(DomainError):
    """Raised when the request is well formed but the system state forbids it."""

    code = "failed_precondition"


class MockLocationError(PreconditionError):
    code = "mock_location"


class StaleTimestampError(PreconditionError):
    code = "stale_timestamp"


class NonWorkingDayError(PreconditionError):
    code = "non_working_day"


class GeofenceError(PreconditionError):
    """Reporter is outside the workplace radius."""

    code = "outside_geofence"

    def __init__(self, distance_meters: float, radius_meters: Optional[float] = None):
        self.distance_meters = distance_meters
        self.radius_meters = radius_meters
        super().__init__(f"Outside allowed geofence. Distance: {round(distance_meters)}m.")


class NoActiveWindowError(PreconditionError):
    code = "no_active_window"

    def __init__(self, message: str = "No active clock-in window."):
        super().__init__(message)


class SlotAlreadyRecordedError(PreconditionError):
    code = "slot_already_recorded"

    def __init__(self, slot):
        self.slot = slot
        super().__init__(f"Clock-in already recorded for {getattr(slot, 'value', slot)}.")


class NotFoundError(DomainError):
    code = "not_found"


class ConflictError(DomainError):
    """Raised when a transaction keeps losing write conflicts."""

    code = "conflict"


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    code = "permission_denied"
