"""
Geographic Bounds Utilities.

Provides the axis-aligned latitude/longitude box used to fit the map viewport
around a set of points. Plain min/max over degrees; no projection logic.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class GeoBounds:
    """
    Minimal box covering a set of coordinates.

    Attributes:
        south: Minimum latitude.
        west: Minimum longitude.
        north: Maximum latitude.
        east: Maximum longitude.
    """

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[Tuple[float, float]]) -> "GeoBounds":
        """
        Builds the minimal bounds covering every point.

        Args:
            points: Iterable of (lat, lng) pairs.

        Returns:
            GeoBounds: Covering box. A single point yields a zero-area box.

        Raises:
            ValueError: If no points are given.
        """
        iterator = iter(points)
        try:
            lat, lng = next(iterator)
        except StopIteration:
            raise ValueError("Cannot build bounds from zero points") from None

        bounds = cls(south=lat, west=lng, north=lat, east=lng)
        for lat, lng in iterator:
            bounds = bounds.extend(lat, lng)
        return bounds

    def extend(self, lat: float, lng: float) -> "GeoBounds":
        """
        Returns new bounds grown to include the given point.

        Args:
            lat: Latitude.
            lng: Longitude.

        Returns:
            GeoBounds: The extended bounds.
        """
        return GeoBounds(
            south=min(self.south, lat),
            west=min(self.west, lng),
            north=max(self.north, lat),
            east=max(self.east, lng),
        )

    def to_leaflet(self) -> List[List[float]]:
        """Corner pair in Leaflet's ``[[south, west], [north, east]]`` form."""
        return [[self.south, self.west], [self.north, self.east]]
