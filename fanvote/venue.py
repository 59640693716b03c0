"""Venue coordinates and the location-based presence check.

Stored venue locations reach us in two shapes: geopoints exposing
``latitude``/``longitude`` and serialized geopoints exposing ``_lat``/``_long``
(either as attributes or dict keys). :meth:`Coordinate.from_geopoint` is the
single place that knows about both; everything downstream works with
:class:`Coordinate`.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Self

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3959
YARDS_PER_MILE = 1760
DEFAULT_RADIUS_YARDS = 200


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    @classmethod
    def from_geopoint(cls, point: Any) -> Self:
        """Normalize a stored geopoint into a Coordinate.

        Raises:
            ValueError: If neither coordinate shape is present
        """
        if isinstance(point, cls):
            return point

        def read(*names: str) -> float | None:
            for name in names:
                if isinstance(point, dict):
                    value = point.get(name)
                else:
                    value = getattr(point, name, None)
                if value is not None:
                    return float(value)
            return None

        latitude = read("latitude", "_lat")
        longitude = read("longitude", "_long")
        if latitude is None or longitude is None:
            raise ValueError(f"Not a geopoint: {point!r}")
        return cls(latitude=latitude, longitude=longitude)

    def distance_yards(self, other: "Coordinate") -> float:
        """Great-circle (haversine) distance to another coordinate, in yards."""
        d_lat = math.radians(other.latitude - self.latitude)
        d_lon = math.radians(other.longitude - self.longitude)
        a = (
            math.sin(d_lat / 2) ** 2
            + math.cos(math.radians(self.latitude))
            * math.cos(math.radians(other.latitude))
            * math.sin(d_lon / 2) ** 2
        )
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
        return EARTH_RADIUS_MILES * c * YARDS_PER_MILE


@dataclass(frozen=True)
class PresenceResult:
    verified: bool
    distance: float
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"verified": self.verified, "distance": self.distance}
        if self.reason is not None:
            result["reason"] = self.reason
        return result


def verify_presence(
    current: Coordinate, venue: Any, radius_yards: float = DEFAULT_RADIUS_YARDS
) -> PresenceResult:
    """Check whether ``current`` lies within ``radius_yards`` of the venue.

    ``venue`` may be a Coordinate or any stored geopoint shape.
    """
    try:
        venue_point = Coordinate.from_geopoint(venue)
    except ValueError:
        logger.warning("Venue has no usable location: %r", venue)
        return PresenceResult(verified=False, distance=0.0, reason="error")

    distance = current.distance_yards(venue_point)
    logger.debug("Distance to venue: %.2f yards", distance)
    if distance <= radius_yards:
        return PresenceResult(verified=True, distance=distance)
    return PresenceResult(verified=False, distance=distance, reason="outside_radius")
