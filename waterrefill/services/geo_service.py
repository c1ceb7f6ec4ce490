"""Geolocation helpers for radius searches."""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt
from typing import Iterable, List, Optional, Tuple

from ..models.station import Coordinate, Station

EARTH_RADIUS_MILES = 3958.8
MILES_PER_DEGREE = 69.0


@dataclass(frozen=True)
class BoundingBox:
    lat_min: float
    lat_max: float
    lon_min: float
    lon_max: float

    @property
    def lower(self) -> Coordinate:
        return Coordinate(self.lat_min, self.lon_min)

    @property
    def upper(self) -> Coordinate:
        return Coordinate(self.lat_max, self.lon_max)

    def contains(self, point: Coordinate) -> bool:
        return (
            self.lat_min <= point.latitude <= self.lat_max
            and self.lon_min <= point.longitude <= self.lon_max
        )


class GeoService:
    """Service for geolocation calculations."""

    @staticmethod
    def bounding_box(center: Coordinate, radius_miles: float) -> BoundingBox:
        """
        Square box around ``center`` used to pre-filter store queries.

        One degree of latitude is taken as 69 miles and the same delta is
        applied to longitude. The box over-includes away from the equator;
        callers refine with :meth:`distance_miles`.
        """
        delta = radius_miles / MILES_PER_DEGREE
        return BoundingBox(
            lat_min=center.latitude - delta,
            lat_max=center.latitude + delta,
            lon_min=center.longitude - delta,
            lon_max=center.longitude + delta,
        )

    @staticmethod
    def distance_miles(a: Coordinate, b: Coordinate) -> float:
        """
        Great circle distance between two points (haversine).

        Returns distance in miles.
        """
        lat1, lon1, lat2, lon2 = map(radians, [a.latitude, a.longitude, b.latitude, b.longitude])

        dlon = lon2 - lon1
        dlat = lat2 - lat1
        h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
        # Rounding can push h a hair above 1 for antipodal points
        c = 2 * asin(sqrt(min(1.0, h)))

        return c * EARTH_RADIUS_MILES

    @classmethod
    def within_radius(cls, center: Coordinate, point: Coordinate, radius_miles: float) -> bool:
        return cls.distance_miles(center, point) <= radius_miles

    @classmethod
    def find_nearest(
        cls,
        center: Coordinate,
        stations: Iterable[Station],
        max_results: int = 10,
        max_distance_miles: Optional[float] = None,
    ) -> List[Tuple[Station, float]]:
        """
        Find stations nearest to ``center``.

        Args:
            center: Reference point
            stations: Candidate stations; those without a coordinate are ignored
            max_results: Maximum number of results to return
            max_distance_miles: Optional maximum distance filter in miles

        Returns:
            List of tuples (station, distance_miles) sorted by distance
        """
        stations_with_distance = []

        for station in stations:
            if station.coordinate is None:
                continue

            distance = cls.distance_miles(center, station.coordinate)
            if max_distance_miles is None or distance <= max_distance_miles:
                stations_with_distance.append((station, distance))

        stations_with_distance.sort(key=lambda item: item[1])
        return stations_with_distance[:max_results]
