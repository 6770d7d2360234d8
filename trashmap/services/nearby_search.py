"""
Nearby Search Module.

Queries the backend for trash cans around a location and decodes the result.
The coordinator never touches the marker registry; on failure it raises and
the caller leaves whatever is on the map in place.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from trashmap.app.constants import DEFAULT_SEARCH_LIMIT, DEFAULT_SEARCH_RADIUS_KM
from trashmap.core.errors import ApiError, SearchFailed
from trashmap.core.poi import PointOfInterest, UserLocation
from trashmap.services.api_client import TrashCanApiClient

logger = logging.getLogger(__name__)


class NearbySearchCoordinator:
    """
    Issues bounded-radius searches.

    Results keep the backend's order (nearest first); nothing is re-sorted
    or de-duplicated here.
    """

    def __init__(
        self,
        client: TrashCanApiClient,
        radius_km: float = DEFAULT_SEARCH_RADIUS_KM,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        """
        Args:
            client: Backend client.
            radius_km: Default search radius in kilometres.
            limit: Default maximum number of results.
        """
        self._client = client
        self.radius_km = radius_km
        self.limit = limit

    def search(
        self,
        location: UserLocation,
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[PointOfInterest]:
        """
        Finds trash cans near ``location``.

        Blocking; run it from a worker thread in the GUI.

        Args:
            location: Search origin.
            radius_km: Radius override in kilometres.
            limit: Result count override.

        Returns:
            List[PointOfInterest]: Results in backend order.

        Raises:
            SearchFailed: On transport error, a non-success code, or records
                that cannot be decoded.
        """
        radius_km = self.radius_km if radius_km is None else radius_km
        limit = self.limit if limit is None else limit

        logger.info(
            f"Searching within {radius_km} km of ({location.lat}, {location.lng}), "
            f"limit {limit}"
        )
        try:
            response = self._client.get_nearby(
                location.lat, location.lng, radius_km, limit
            )
        except ApiError as e:
            raise SearchFailed(e.message) from e

        if not response.ok:
            raise SearchFailed(response.msg or "Search failed", code=response.code)

        records = response.data or []
        try:
            results = [self._decode(record) for record in records]
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed search result: {e}")
            raise SearchFailed("Malformed search result") from e

        logger.info(f"Search returned {len(results)} trash cans")
        return results

    def _decode(self, record: dict) -> PointOfInterest:
        poi = PointOfInterest.from_dict(record)
        image_url = self._client.build_image_url(poi.image_url)
        if image_url != poi.image_url:
            poi = replace(poi, image_url=image_url)
        return poi
