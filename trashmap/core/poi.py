"""
Point of Interest Data Model.

Represents a contributed trash can as returned by the nearby search, and the
viewer's resolved location.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

EntityId = Union[int, str]

# Coordinates cross the map surface boundary as (longitude, latitude)
LngLat = Tuple[float, float]


@dataclass(frozen=True)
class PointOfInterest:
    """
    A geotagged trash can rendered on the map.

    Instances are immutable; a new search result replaces them wholesale.

    Attributes:
        id: Backend identifier.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        address: Optional human-readable address.
        description: Optional free-text description.
        image_url: Optional URL of the contributed photo.
        distance_km: Distance from the search origin, computed by the backend.
        like_count: Number of upvotes.
        dislike_count: Number of downvotes.
    """

    id: EntityId
    latitude: float
    longitude: float
    address: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    distance_km: Optional[float] = None
    like_count: int = 0
    dislike_count: int = 0

    @property
    def lnglat(self) -> LngLat:
        """Position in map surface order."""
        return (self.longitude, self.latitude)

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the point to its wire representation.

        Returns:
            Dict[str, Any]: Dictionary using the backend's key names.
        """
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "description": self.description,
            "image_url": self.image_url,
            "distance": self.distance_km,
            "like_count": self.like_count,
            "dislike_count": self.dislike_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointOfInterest":
        """
        Creates a PointOfInterest from a backend record.

        Empty strings are normalized to None so the popup can skip them.

        Args:
            data: Dictionary from the ``data`` array of a nearby response.

        Returns:
            PointOfInterest: A new instance.

        Raises:
            KeyError: If id, latitude or longitude is missing.
            ValueError: If a coordinate is not numeric.
        """
        distance = data.get("distance", data.get("distance_km"))
        return cls(
            id=data["id"],
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            address=data.get("address") or None,
            description=data.get("description") or None,
            image_url=data.get("image_url") or None,
            distance_km=float(distance) if distance is not None else None,
            like_count=int(data.get("like_count") or 0),
            dislike_count=int(data.get("dislike_count") or 0),
        )


@dataclass(frozen=True)
class UserLocation:
    """
    The viewer's coordinate.

    Attributes:
        lat: Latitude in decimal degrees.
        lng: Longitude in decimal degrees.
        is_fallback: True when the platform could not provide a position.
    """

    lat: float
    lng: float
    is_fallback: bool = False

    @property
    def lnglat(self) -> LngLat:
        return (self.lng, self.lat)
