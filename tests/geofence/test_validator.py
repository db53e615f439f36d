import pytest

from src.attendance_engine.attendance_engine.core.exceptions import GeofenceError, PreconditionError, ValidationError
from src.attendance_engine.attendance_engine.geofence.model import Coordinate
from src.attendance_engine.attendance_engine.geofence.validator import haversine_distance_meters, validate_geofence

CENTER = Coordinate(latitude=6.9271, longitude=79.8612)


def test_distance_of_one_hundredth_degree_latitude():
    target = Coordinate(latitude=6.9371, longitude=79.8612)

    assert haversine_distance_meters(CENTER, target) == pytest.approx(1111.95, abs=0.1)


def test_inside_radius_returns_distance():
    nearby = Coordinate(latitude=6.9275, longitude=79.8612)

    distance = validate_geofence(nearby, CENTER, 100, enabled=True)

    assert distance == pytest.approx(44.5, abs=0.5)


def test_outside_radius_raises_with_distance():
    far = Coordinate(latitude=6.9290, longitude=79.8612)

    with pytest.raises(GeofenceError) as exc:
        validate_geofence(far, CENTER, 100, enabled=True)

    assert isinstance(exc.value, PreconditionError)
    assert exc.value.distance_meters == pytest.approx(211.3, abs=0.5)
    assert "Distance: 211m" in str(exc.value)


def test_disabled_geofence_accepts_anything():
    assert validate_geofence(Coordinate(latitude=0, longitude=0), None, None, enabled=False) is None


def test_enabled_without_center_is_not_configured():
    with pytest.raises(PreconditionError, match="Workplace geofence not configured."):
        validate_geofence(CENTER, None, 100, enabled=True)


@pytest.mark.parametrize(
    "raw",
    [
        {"latitude": 91, "longitude": 0},
        {"latitude": 0, "longitude": -180.5},
        {"latitude": "6.9", "longitude": 79.8},
        {"latitude": True, "longitude": 79.8},
        {"latitude": float("nan"), "longitude": 79.8},
        [6.9, 79.8],
    ],
)
def test_invalid_coordinates(raw):
    with pytest.raises(ValidationError):
        Coordinate.from_mapping(raw)
