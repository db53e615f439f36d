from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..common.validators import require_in_range, require_number
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    @classmethod
    def from_mapping(cls, raw: Any, field_name: str = "location") -> "Coordinate":
        if not isinstance(raw, Mapping):
            raise ValidationError(f"{field_name} must be an object with latitude and longitude")
        lat = require_in_range(require_number(raw.get("latitude"), f"{field_name}.latitude"), f"{field_name}.latitude", -90, 90)
        lng = require_in_range(
            require_number(raw.get("longitude"), f"{field_name}.longitude"), f"{field_name}.longitude", -180, 180
        )
        return cls(latitude=lat, longitude=lng)

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}
